# ABOUTME: Common type definitions for improved type safety across the service core
# ABOUTME: Provides TypedDict classes and aliases for token payloads, clocks and entity patches

from typing import Any, Callable, Dict, TypedDict


class TokenPayload(TypedDict):
    """Decoded token payload with wire claim names."""

    sub: str
    scopes: list[str]
    iat: float
    exp: float
    jti: str


EntityPatch = Dict[str, Any]
"""Field name to new value, as accepted by ``AbstractRepository.update``."""

Clock = Callable[[], float]
"""Zero-argument callable returning the current Unix time in seconds."""
