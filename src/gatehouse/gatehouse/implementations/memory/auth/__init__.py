# ABOUTME: In-memory authentication implementations
# ABOUTME: Provides the bearer authenticator, scope authorizer, revocation store and credential utilities

from .authenticator import BearerAuthenticator
from .authorizer import ScopeAuthorizer
from .revocation_store import InMemoryRevocationStore
from .utils import (
    hash_password,
    verify_password,
    create_bearer_token,
    extract_bearer_token,
    validate_password,
)

__all__ = [
    "BearerAuthenticator",
    "ScopeAuthorizer",
    "InMemoryRevocationStore",
    "hash_password",
    "verify_password",
    "create_bearer_token",
    "extract_bearer_token",
    "validate_password",
]
