# ABOUTME: Exceptions package exports
# ABOUTME: Exports the structured error taxonomy of the service core

from gatehouse.exceptions.base import (
    CoreException,
    ValidationException,
    DataNotFoundException,
    NotFoundError,
    ConfigurationException,
    SigningError,
    AuthenticationException,
    MissingCredentialsError,
    InvalidCredentialsError,
    MalformedTokenError,
    InvalidSignatureError,
    ExpiredTokenError,
    RevokedTokenError,
    AuthorizationError,
    InsufficientScopeError,
    RateLimitExceededException,
    RateLimitExceeded,
    DataIntegrityException,
    ConflictError,
    StorageError,
    PersistenceError,
)

__all__ = [
    "CoreException",
    "ValidationException",
    "DataNotFoundException",
    "NotFoundError",
    "ConfigurationException",
    "SigningError",
    "AuthenticationException",
    "MissingCredentialsError",
    "InvalidCredentialsError",
    "MalformedTokenError",
    "InvalidSignatureError",
    "ExpiredTokenError",
    "RevokedTokenError",
    "AuthorizationError",
    "InsufficientScopeError",
    "RateLimitExceededException",
    "RateLimitExceeded",
    "DataIntegrityException",
    "ConflictError",
    "StorageError",
    "PersistenceError",
]
