# ABOUTME: JWT token implementations
# ABOUTME: Exports the HMAC-signed token issuer/validator

from .token_service import JwtTokenService, SUPPORTED_ALGORITHMS

__all__ = ["JwtTokenService", "SUPPORTED_ALGORITHMS"]
