# ABOUTME: Middleware models package exports
# ABOUTME: Exports request context, guard ordering and result models

from .context import RequestContext
from .priority import GuardPriority
from .result import MiddlewareResult, MiddlewareStatus, PipelineResult

__all__ = ["RequestContext", "GuardPriority", "MiddlewareResult", "MiddlewareStatus", "PipelineResult"]
