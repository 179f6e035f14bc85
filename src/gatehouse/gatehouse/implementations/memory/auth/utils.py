# ABOUTME: Credential utilities shared by the authentication implementations
# ABOUTME: Provides salted password verifiers, identifier generation and bearer header helpers

import hashlib
import hmac
import secrets

PASSWORD_HASH_SCHEME = "pbkdf2_sha256"
DEFAULT_HASH_ITERATIONS = 210_000
MIN_PASSWORD_LENGTH = 8


def hash_password(password: str, iterations: int = DEFAULT_HASH_ITERATIONS, salt: str | None = None) -> str:
    """
    Derive a one-way verifier for a password with PBKDF2-HMAC-SHA256.

    Args:
        password: The plain text password to hash.
        iterations: PBKDF2 iteration count.
        salt: Optional salt. If not provided, a random salt is generated.

    Returns:
        The verifier in format "pbkdf2_sha256$iterations$salt$hash".
    """
    if salt is None:
        salt = secrets.token_hex(16)

    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations)
    return f"{PASSWORD_HASH_SCHEME}${iterations}${salt}${digest.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a password against its stored verifier in constant time.

    Args:
        password: The plain text password to verify.
        password_hash: The stored verifier produced by ``hash_password``.

    Returns:
        True if the password matches, False otherwise (including for a
        verifier in an unknown format).
    """
    try:
        scheme, iterations, salt, _ = password_hash.split("$", 3)
        if scheme != PASSWORD_HASH_SCHEME:
            return False
        candidate = hash_password(password, int(iterations), salt)
    except (AttributeError, ValueError):
        return False
    return hmac.compare_digest(candidate.encode("utf-8"), password_hash.encode("utf-8"))


def create_bearer_token(token: str) -> str:
    """
    Create the ``Authorization`` header value for a token.
    """
    return f"Bearer {token}"


def extract_bearer_token(auth_header: str) -> str:
    """
    Extract token from Bearer authorization header.

    Args:
        auth_header: The Authorization header value.

    Returns:
        The extracted token.

    Raises:
        ValueError: If the header is not a valid Bearer token.
    """
    if not auth_header:
        raise ValueError("Invalid Bearer token format")

    parts = auth_header.strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise ValueError("Invalid Bearer token format")

    token = parts[1].strip()
    if not token:
        raise ValueError("Invalid Bearer token format")

    return token


def validate_password(password: str) -> bool:
    """
    Check the minimum password policy: at least eight characters, not only whitespace.
    """
    if not password or not password.strip():
        return False
    return len(password) >= MIN_PASSWORD_LENGTH
