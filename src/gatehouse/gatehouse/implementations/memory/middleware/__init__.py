# ABOUTME: In-memory request pipeline implementations
# ABOUTME: Exports the pipeline, the access guards and the standard pipeline factory

from .pipeline import InMemoryMiddlewarePipeline
from .guards import AuthenticationMiddleware, RateLimitMiddleware, ScopeMiddleware, build_access_pipeline

__all__ = [
    "InMemoryMiddlewarePipeline",
    "AuthenticationMiddleware",
    "RateLimitMiddleware",
    "ScopeMiddleware",
    "build_access_pipeline",
]
