# ABOUTME: Middleware interfaces package exports
# ABOUTME: Exports abstract interfaces for request guards and pipeline management

from .middleware import AbstractMiddleware
from .pipeline import AbstractMiddlewarePipeline

__all__ = ["AbstractMiddleware", "AbstractMiddlewarePipeline"]
