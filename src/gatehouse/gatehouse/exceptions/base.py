# ABOUTME: Core exception classes for the access-controlled service core
# ABOUTME: Provides structured error handling with context, error codes and boundary status hints

from typing import Any, ClassVar, Dict, Iterable


class CoreException(Exception):
    """Base exception class for the service core.

    Provides structured error handling with optional error codes and contextual
    details. All custom exceptions in the system inherit from this class so the
    boundary layer (HTTP handler, CLI, worker) can translate any of them into a
    user-facing response from ``category`` and ``status_code`` alone.

    Attributes:
        message: Human-readable error message
        code: Optional error code for programmatic handling
        details: Optional dictionary containing contextual information
        category: Boundary classification (e.g. "unauthenticated", "conflict")
        status_code: HTTP-equivalent status hint for the boundary layer
    """

    category: ClassVar[str] = "internal"
    status_code: ClassVar[int] = 500

    def __init__(self, message: str, code: str | None = None, details: Dict[str, Any] | None = None):
        """Initialize CoreException with message, optional code and details.

        Args:
            message: Human-readable error message
            code: Optional error code for programmatic handling
            details: Optional dictionary containing contextual information
        """
        self.message = message
        self.code = code
        self.details = details.copy() if details else {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the error for the boundary layer."""
        return {
            "error": type(self).__name__,
            "category": self.category,
            "status_code": self.status_code,
            "message": self.message,
            "code": self.code,
            "details": self.details,
        }


class ValidationException(CoreException):
    """Exception raised when caller-supplied data violates entity invariants.

    Used when input data fails validation checks, such as:
    - Invalid data formats (malformed email address)
    - Missing required fields
    - Data outside acceptable ranges

    Raised before any storage is touched.
    """

    category = "bad_request"
    status_code = 400


class DataNotFoundException(CoreException):
    """Exception raised when requested data is not found."""

    category = "not_found"
    status_code = 404


class NotFoundError(DataNotFoundException):
    """Raised by service operations addressing an entity that does not exist."""

    pass


class ConfigurationException(CoreException):
    """Exception raised for configuration errors.

    Used when system configuration is invalid or missing, such as:
    - Missing required configuration values
    - Invalid configuration format
    - Configuration validation failures

    Should include details about the configuration issue.
    """

    pass


class SigningError(ConfigurationException):
    """Raised when a token cannot be signed, typically because no signing secret is available."""

    pass


class AuthenticationException(CoreException):
    """Exception raised for authentication errors.

    Used when authentication fails, such as:
    - Invalid credentials
    - Malformed, tampered or expired tokens

    Surfaced to users as "unauthenticated". Never retried by the core.
    """

    category = "unauthenticated"
    status_code = 401


class MissingCredentialsError(AuthenticationException):
    """Raised when a request carries no usable bearer credential."""

    pass


class InvalidCredentialsError(AuthenticationException):
    """Raised when an identifier/secret pair does not match a stored verifier."""

    pass


class MalformedTokenError(AuthenticationException):
    """Raised when a token does not have the three-segment structure or cannot be decoded."""

    pass


class InvalidSignatureError(AuthenticationException):
    """Raised when a token signature does not match any active signing secret."""

    pass


class ExpiredTokenError(AuthenticationException):
    """Raised when a token is presented after its expiry timestamp."""

    pass


class RevokedTokenError(AuthenticationException):
    """Raised when a token id is present in the configured revocation store."""

    pass


class AuthorizationError(CoreException):
    """Exception raised for authorization errors.

    Used when an authenticated principal lacks what an operation requires.
    Surfaced to users as "forbidden".
    """

    category = "forbidden"
    status_code = 403


class InsufficientScopeError(AuthorizationError):
    """Raised when a principal lacks one or more required scopes.

    Attributes:
        missing_scopes: Sorted list of the scopes the principal is missing.
    """

    def __init__(
        self,
        missing_scopes: Iterable[str],
        message: str | None = None,
        code: str | None = "INSUFFICIENT_SCOPE",
        details: Dict[str, Any] | None = None,
    ):
        self.missing_scopes = sorted(set(missing_scopes))
        merged = {"missing_scopes": self.missing_scopes}
        if details:
            merged.update(details)
        super().__init__(
            message or f"Missing required scopes: {', '.join(self.missing_scopes)}",
            code=code,
            details=merged,
        )


class RateLimitExceededException(CoreException):
    """Exception raised when rate limits are exceeded.

    Rejection is an expected outcome, not a fault: the caller should back off
    until the advertised retry time.
    """

    category = "rate_limited"
    status_code = 429


class RateLimitExceeded(RateLimitExceededException):
    """Raised when a caller key has used up its window.

    Attributes:
        key: The caller key that was rejected.
        retry_at: Unix timestamp of the earliest moment a new request can be admitted.
        retry_after: Seconds from the rejection until ``retry_at``.
    """

    def __init__(self, key: str, retry_at: float, retry_after: float, limit: int | None = None):
        self.key = key
        self.retry_at = retry_at
        self.retry_after = max(0.0, retry_after)
        super().__init__(
            f"Rate limit exceeded for '{key}', retry after {self.retry_after:.3f}s",
            code="RATE_LIMIT_EXCEEDED",
            details={"key": key, "retry_at": retry_at, "retry_after": self.retry_after, "limit": limit},
        )


class DataIntegrityException(CoreException):
    """Exception raised for data integrity violations.

    Used when data integrity constraints are violated, such as:
    - Unique constraints
    - Data consistency checks
    """

    category = "conflict"
    status_code = 409


class ConflictError(DataIntegrityException):
    """Raised when a natural key (e.g. an email address) is already taken."""

    pass


class StorageError(CoreException):
    """Exception raised for storage operation failures.

    Used when storage operations encounter issues, such as:
    - Database connection failures
    - Transaction failures
    - Operating on a closed repository or finished unit of work
    """

    category = "unavailable"
    status_code = 503


class PersistenceError(StorageError):
    """Raised when the storage backend is unavailable or a write cannot be made durable.

    Fatal to the current operation; the caller may retry the whole operation.
    """

    pass
