# ABOUTME: In-memory implementation of AbstractRateLimiter using a fixed-window counter
# ABOUTME: Provides thread-safe per-key admission control with atomic check-and-increment

import asyncio
import time
import threading
from typing import Dict, Optional

from loguru import logger

from gatehouse.config.rate_limit import RateLimitSettings
from gatehouse.interfaces.common import AbstractRateLimiter
from gatehouse.models.ratelimit.decision import RateLimitDecision
from gatehouse.models.types import Clock


class WindowBucket:
    """
    Request counter for one key over one fixed window.

    The bucket owns its lock so that keys never contend with each other.
    A bucket dropped from the limiter is retired and counts nothing more.
    """

    __slots__ = ("window_start", "count", "lock", "retired")

    def __init__(self, window_start: float):
        self.window_start = window_start
        self.count = 0
        self.lock = threading.Lock()
        self.retired = False

    def hit(self, now: float, window_seconds: float) -> Optional[tuple[int, float]]:
        """Open a new window if the current one has ended, then count one request.

        Returns:
            tuple[int, float]: The count including this request and the window start,
            or None if the bucket was retired and the caller must look it up again.
        """
        with self.lock:
            if self.retired:
                return None
            if now - self.window_start >= window_seconds:
                self.window_start = now
                self.count = 0
            self.count += 1
            return self.count, self.window_start

    def is_idle(self, now: float, window_seconds: float) -> bool:
        return now - self.window_start >= window_seconds

    def retire(self) -> None:
        with self.lock:
            self.retired = True

    def retire_if_idle(self, now: float, window_seconds: float) -> bool:
        with self.lock:
            if self.is_idle(now, window_seconds):
                self.retired = True
            return self.retired


class FixedWindowRateLimiter(AbstractRateLimiter):
    """
    In-memory fixed-window rate limiter.

    Each key gets a bucket holding ``window_start`` and ``count``. A request
    opens a fresh window when none exists or the current one has lasted
    ``window_seconds``; it is admitted while ``count <= limit``. Rejected
    requests still count, so a caller hammering the limiter cannot shorten
    its own penalty, but they never push ``retry_at`` further out either.

    The bucket map is guarded by a short-lived lock used only to look up or
    create a bucket; the check-and-increment itself runs under the bucket's
    own lock. Buckets are retired under the map lock before they are
    removed; a request that lands on a retired bucket looks its key up again.

    Note:
        Buckets live in process memory. A deployment with several processes
        gets one independent limit per process.
    """

    def __init__(
        self,
        limit: int = 100,
        window_seconds: float = 60.0,
        clock: Optional[Clock] = None,
        cleanup_interval: Optional[float] = None,
    ):
        """
        Initialize the fixed-window rate limiter.

        Args:
            limit: Requests admitted per key and window, >= 1
            window_seconds: Window duration in seconds, > 0
            clock: Source of the current Unix time (defaults to ``time.time``)
            cleanup_interval: If set, idle buckets are purged in the background
                              at this interval once the limiter is first used
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")

        self.limit = limit
        self.window_seconds = float(window_seconds)
        self.cleanup_interval = cleanup_interval
        self._clock = clock if clock is not None else time.time

        self._buckets: Dict[str, WindowBucket] = {}
        self._lock = threading.Lock()

        self._cleanup_task: Optional[asyncio.Task] = None
        self._should_cleanup = True
        self._logger = logger.bind(name=__name__)

    @classmethod
    def from_settings(cls, settings: RateLimitSettings, clock: Optional[Clock] = None) -> "FixedWindowRateLimiter":
        return cls(limit=settings.RATE_LIMIT_LIMIT, window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS, clock=clock)

    async def check(self, key: str) -> RateLimitDecision:
        if not key:
            raise ValueError("Rate limit key must not be empty")

        now = self._clock()
        hit = None
        while hit is None:
            hit = self._get_or_create_bucket(key, now).hit(now, self.window_seconds)
        count, window_start = hit

        decision = RateLimitDecision(
            key=key,
            allowed=count <= self.limit,
            count=count,
            limit=self.limit,
            window_start=window_start,
            window_seconds=self.window_seconds,
            checked_at=now,
        )
        if not decision.allowed:
            self._logger.debug(f"Rate limit exceeded for '{key}' ({count}/{self.limit}), retry at {decision.retry_at}")

        self._ensure_cleanup_task()
        return decision

    def _get_or_create_bucket(self, key: str, now: float) -> WindowBucket:
        with self._lock:
            bucket = self._buckets.get(key)
            if bucket is None:
                bucket = WindowBucket(window_start=now)
                self._buckets[key] = bucket
            return bucket

    async def get_remaining(self, key: str) -> int:
        """
        Requests ``key`` may still make in its current window, without counting one.
        """
        now = self._clock()
        with self._lock:
            bucket = self._buckets.get(key)
        if bucket is None:
            return self.limit
        with bucket.lock:
            if bucket.retired or bucket.is_idle(now, self.window_seconds):
                return self.limit
            return max(0, self.limit - bucket.count)

    async def reset(self, key: str) -> None:
        """Forget the window of ``key``; its next request opens a fresh one."""
        with self._lock:
            bucket = self._buckets.pop(key, None)
            if bucket is not None:
                bucket.retire()

    async def purge_idle(self) -> int:
        """
        Drop buckets whose window has ended.

        Returns:
            int: Number of buckets removed.
        """
        idle = self._purge_idle_buckets(self._clock())
        if idle:
            self._logger.debug(f"Purged {len(idle)} idle rate limit buckets")
        return len(idle)

    def _purge_idle_buckets(self, now: float) -> list[str]:
        with self._lock:
            idle = [key for key, bucket in self._buckets.items() if bucket.retire_if_idle(now, self.window_seconds)]
            for key in idle:
                del self._buckets[key]
        return idle

    @property
    def bucket_count(self) -> int:
        with self._lock:
            return len(self._buckets)

    def _ensure_cleanup_task(self) -> None:
        if self.cleanup_interval is None or self._cleanup_task is not None or not self._should_cleanup:
            return
        self._cleanup_task = asyncio.create_task(self._cleanup_loop())

    async def _cleanup_loop(self) -> None:
        while self._should_cleanup:
            try:
                await asyncio.sleep(self.cleanup_interval)
                await self.purge_idle()
            except asyncio.CancelledError:
                break

    async def close(self) -> None:
        """Stop the background cleanup and drop every bucket."""
        self._should_cleanup = False

        if self._cleanup_task and not self._cleanup_task.done():
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass

        with self._lock:
            for bucket in self._buckets.values():
                bucket.retire()
            self._buckets.clear()
