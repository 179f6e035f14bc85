# ABOUTME: Abstract rate limiter interface for per-caller admission control
# ABOUTME: Defines the contract for components that admit or reject requests by caller key

from abc import abstractmethod, ABC

from gatehouse.exceptions import RateLimitExceeded
from gatehouse.models.ratelimit.decision import RateLimitDecision


class AbstractRateLimiter(ABC):
    """
    Abstract admission-control gate bounding the request rate per caller key.

    The key is whatever identifies the caller to the deployment: an IP
    address, a token subject or an API key. Rejection is an expected outcome
    reported through the return value; ``enforce`` is the raising variant for
    callers that prefer exceptions.
    """

    @abstractmethod
    async def check(self, key: str) -> RateLimitDecision:
        """
        Counts one request against ``key`` and returns the full decision.

        The check and the increment are atomic per key: concurrent callers on
        the same key can never be admitted beyond the limit.

        Args:
            key (str): Non-empty caller key.

        Returns:
            RateLimitDecision: Whether the request was admitted, with the window state.

        Raises:
            ValueError: If ``key`` is empty.
        """
        pass

    async def admit(self, key: str) -> bool:
        """
        Counts one request against ``key``.

        Returns:
            bool: True if the request is admitted, False if the key is over its limit.
        """
        decision = await self.check(key)
        return decision.allowed

    async def enforce(self, key: str) -> RateLimitDecision:
        """
        Like ``check`` but raises when the request is rejected.

        Raises:
            RateLimitExceeded: Carrying the earliest retry time for ``key``.
        """
        decision = await self.check(key)
        if not decision.allowed:
            raise RateLimitExceeded(
                key=key, retry_at=decision.retry_at, retry_after=decision.retry_after, limit=decision.limit
            )
        return decision
