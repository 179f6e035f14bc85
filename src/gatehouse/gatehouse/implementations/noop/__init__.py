# ABOUTME: NoOp implementations package
# ABOUTME: Contains no-operation implementations for disabled features and tests

from .common.rate_limiter import NoOpRateLimiter

__all__ = ["NoOpRateLimiter"]
