# ABOUTME: NoOp implementation of AbstractRateLimiter that admits every request
# ABOUTME: Used where admission control is disabled, e.g. internal callers and tests

import time
from typing import Optional

from gatehouse.interfaces.common.rate_limiter import AbstractRateLimiter
from gatehouse.models.ratelimit.decision import RateLimitDecision
from gatehouse.models.types import Clock


class NoOpRateLimiter(AbstractRateLimiter):
    """
    Rate limiter that never rejects.

    Decisions report ``count=1`` against a nominal limit so that callers
    rendering rate-limit headers keep working unchanged.
    """

    def __init__(self, nominal_limit: int = 1_000_000, clock: Optional[Clock] = None):
        self.nominal_limit = nominal_limit
        self._clock = clock if clock is not None else time.time

    async def check(self, key: str) -> RateLimitDecision:
        now = self._clock()
        return RateLimitDecision(
            key=key,
            allowed=True,
            count=1,
            limit=self.nominal_limit,
            window_start=now,
            window_seconds=1.0,
            checked_at=now,
        )
