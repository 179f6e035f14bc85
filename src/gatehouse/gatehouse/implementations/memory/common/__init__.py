# ABOUTME: Memory-based common implementations package
# ABOUTME: Provides the in-memory fixed-window rate limiter

from .rate_limiter import FixedWindowRateLimiter

__all__ = ["FixedWindowRateLimiter"]
