# ABOUTME: Common interfaces package exports
# ABOUTME: Exports the abstract rate limiter

from .rate_limiter import AbstractRateLimiter

__all__ = ["AbstractRateLimiter"]
