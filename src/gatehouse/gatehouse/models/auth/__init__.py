# ABOUTME: Authentication models package exports
# ABOUTME: Exports request protocol, principal, claims and scope helpers

from .auth_request import AuthRequest
from .claims import TokenClaims
from .principal import Principal
from .scope import StandardScope, normalize_scopes

__all__ = [
    "AuthRequest",
    "TokenClaims",
    "Principal",
    "StandardScope",
    "normalize_scopes",
]
