# ABOUTME: In-memory implementations package
# ABOUTME: Process-local implementations built on the Python standard library and pydantic models

from .auth import BearerAuthenticator, InMemoryRevocationStore, ScopeAuthorizer
from .common.rate_limiter import FixedWindowRateLimiter
from .middleware import InMemoryMiddlewarePipeline, build_access_pipeline
from .storage import InMemoryDataStore

__all__ = [
    "BearerAuthenticator",
    "InMemoryRevocationStore",
    "ScopeAuthorizer",
    "FixedWindowRateLimiter",
    "InMemoryMiddlewarePipeline",
    "build_access_pipeline",
    "InMemoryDataStore",
]
