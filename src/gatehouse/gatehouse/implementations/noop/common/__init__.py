# ABOUTME: NoOp common implementations package
# ABOUTME: Exports the pass-through rate limiter

from .rate_limiter import NoOpRateLimiter

__all__ = ["NoOpRateLimiter"]
