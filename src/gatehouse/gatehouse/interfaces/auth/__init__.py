# ABOUTME: Authentication interfaces package exports
# ABOUTME: Exports abstract classes for token issuance, validation, revocation, authentication and authorization

from .authenticator import AbstractAuthenticator
from .authorizer import AbstractScopeAuthorizer
from .revocation_store import AbstractRevocationStore
from .token_issuer import AbstractTokenIssuer
from .token_validator import AbstractTokenValidator

__all__ = [
    "AbstractAuthenticator",
    "AbstractScopeAuthorizer",
    "AbstractRevocationStore",
    "AbstractTokenIssuer",
    "AbstractTokenValidator",
]
