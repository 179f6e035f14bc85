# ABOUTME: Admission decision produced by a rate limiter for one request
# ABOUTME: Carries the window state needed to advertise the earliest retry time

import math
from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class RateLimitDecision:
    """
    Outcome of one admission check.

    Attributes:
        key: Caller key the decision applies to.
        allowed: Whether the request was admitted.
        count: Requests counted in the current window, including this one.
        limit: Maximum requests admitted per window.
        window_start: Unix timestamp at which the current window opened.
        window_seconds: Window duration.
        checked_at: Unix timestamp of the check.
    """

    key: str
    allowed: bool
    count: int
    limit: int
    window_start: float
    window_seconds: float
    checked_at: float

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.count)

    @property
    def retry_at(self) -> float:
        """Earliest timestamp at which the key is admitted again (start of the next window)."""
        return self.window_start + self.window_seconds

    @property
    def retry_after(self) -> float:
        return max(0.0, self.retry_at - self.checked_at)

    def to_headers(self) -> Dict[str, str]:
        """Conventional rate-limit response headers for the boundary layer."""
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(int(self.retry_at)),
        }
        if not self.allowed:
            headers["Retry-After"] = str(max(1, math.ceil(self.retry_after)))
        return headers

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "allowed": self.allowed,
            "count": self.count,
            "limit": self.limit,
            "remaining": self.remaining,
            "window_start": self.window_start,
            "retry_at": self.retry_at,
            "retry_after": self.retry_after,
        }
