# ABOUTME: Gatehouse interfaces package exports
# ABOUTME: Exports the abstract contracts for tokens, authorization, admission control, storage and request guards

# Authentication interfaces
from .auth import (
    AbstractAuthenticator,
    AbstractScopeAuthorizer,
    AbstractRevocationStore,
    AbstractTokenIssuer,
    AbstractTokenValidator,
)

# Common interfaces
from .common import AbstractRateLimiter

# Storage interfaces
from .storage import AbstractDataStore, AbstractRepository, AbstractUnitOfWork, UnitOfWorkState

# Middleware interfaces
from .middleware import AbstractMiddleware, AbstractMiddlewarePipeline

__all__ = [
    # Authentication
    "AbstractAuthenticator",
    "AbstractScopeAuthorizer",
    "AbstractRevocationStore",
    "AbstractTokenIssuer",
    "AbstractTokenValidator",
    # Common
    "AbstractRateLimiter",
    # Storage
    "AbstractDataStore",
    "AbstractRepository",
    "AbstractUnitOfWork",
    "UnitOfWorkState",
    # Middleware
    "AbstractMiddleware",
    "AbstractMiddlewarePipeline",
]
