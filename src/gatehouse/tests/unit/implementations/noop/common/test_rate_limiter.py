# ABOUTME: Unit tests for NoOpRateLimiter
# ABOUTME: Tests that every request is admitted with a well-formed decision

import pytest

from gatehouse.implementations.noop import NoOpRateLimiter


class TestNoOpRateLimiter:
    """Test NoOpRateLimiter."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_always_admits(self, clock):
        """Test that no request is ever rejected."""
        limiter = NoOpRateLimiter(nominal_limit=1, clock=clock)

        results = [await limiter.admit("client:1") for _ in range(10)]

        assert all(results)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_decision(self, clock):
        """Test the reported decision."""
        decision = await NoOpRateLimiter(clock=clock).enforce("client:1")

        assert decision.allowed
        assert decision.count == 1
        assert decision.limit == 1_000_000
        assert decision.checked_at == clock.now
        assert "Retry-After" not in decision.to_headers()
