# ABOUTME: Gatehouse implementations package exports
# ABOUTME: Contains concrete implementations of the gatehouse interfaces and settings-driven factories

from .factory import create_data_store, create_token_service
from .jwt import JwtTokenService
from .memory import (
    BearerAuthenticator,
    FixedWindowRateLimiter,
    InMemoryDataStore,
    InMemoryMiddlewarePipeline,
    InMemoryRevocationStore,
    ScopeAuthorizer,
    build_access_pipeline,
)
from .noop import NoOpRateLimiter
from .sqlalchemy import SqlAlchemyDataStore

__all__ = [
    "create_data_store",
    "create_token_service",
    "JwtTokenService",
    "BearerAuthenticator",
    "FixedWindowRateLimiter",
    "InMemoryDataStore",
    "InMemoryMiddlewarePipeline",
    "InMemoryRevocationStore",
    "ScopeAuthorizer",
    "build_access_pipeline",
    "NoOpRateLimiter",
    "SqlAlchemyDataStore",
]
