# ABOUTME: Rate limiting models package exports
# ABOUTME: Exports the admission decision returned by rate limiters

from .decision import RateLimitDecision

__all__ = ["RateLimitDecision"]
