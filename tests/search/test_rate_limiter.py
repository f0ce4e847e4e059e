"""Tests for RateLimiter."""

from __future__ import annotations

import asyncio

import pytest

from llm_search_kit.search.base import ProviderId
from llm_search_kit.search.rate_limiter import RateLimiter

DDG = ProviderId.DUCKDUCKGO
GOOGLE = ProviderId.GOOGLE


class TestRateLimiter:
    """Tests for RateLimiter."""

    @pytest.mark.asyncio
    async def test_first_call_does_not_wait(self, clock) -> None:
        """Test that the first dispatch proceeds immediately."""
        limiter = RateLimiter({DDG: 2.0}, clock=clock, sleep=clock.sleep)

        waited = await limiter.wait(DDG)

        assert waited == 0.0
        assert limiter.last_dispatch(DDG) == clock()

    @pytest.mark.asyncio
    async def test_second_call_waits_for_interval(self, clock) -> None:
        """Test that back-to-back calls are spaced by the minimum interval."""
        limiter = RateLimiter({DDG: 2.0}, clock=clock, sleep=clock.sleep)

        await limiter.wait(DDG)
        first = limiter.last_dispatch(DDG)
        clock.advance(0.5)
        waited = await limiter.wait(DDG)

        assert waited == pytest.approx(1.5)
        assert limiter.last_dispatch(DDG) - first >= 2.0

    @pytest.mark.asyncio
    async def test_no_wait_after_interval_elapsed(self, clock) -> None:
        """Test that no wait happens once the interval has passed."""
        limiter = RateLimiter({DDG: 2.0}, clock=clock, sleep=clock.sleep)

        await limiter.wait(DDG)
        clock.advance(5)

        assert await limiter.wait(DDG) == 0.0
        assert clock.sleeps == []

    @pytest.mark.asyncio
    async def test_providers_are_independent(self, clock) -> None:
        """Test that different providers never wait on each other."""
        limiter = RateLimiter({DDG: 2.0, GOOGLE: 1.0}, clock=clock, sleep=clock.sleep)

        await limiter.wait(DDG)
        waited = await limiter.wait(GOOGLE)

        assert waited == 0.0
        assert clock.sleeps == []

    @pytest.mark.asyncio
    async def test_concurrent_callers_are_serialized(self, clock) -> None:
        """Test that concurrent callers record spaced instants in call order."""
        limiter = RateLimiter({GOOGLE: 1.0}, clock=clock, sleep=clock.sleep)
        order: list[tuple[int, float]] = []

        async def call(index: int) -> None:
            await limiter.wait(GOOGLE)
            order.append((index, clock()))

        await asyncio.gather(*(call(i) for i in range(4)))

        assert [index for index, _ in order] == [0, 1, 2, 3]
        instants = [instant for _, instant in order]
        assert all(b - a >= 1.0 for a, b in zip(instants, instants[1:]))

    @pytest.mark.asyncio
    async def test_sleep_returning_early_is_tolerated(self, clock) -> None:
        """Test that a short sleep is followed by another wait."""

        async def early_sleep(seconds: float) -> None:
            clock.advance(max(seconds - 0.5, 0.5))

        limiter = RateLimiter({DDG: 2.0}, clock=clock, sleep=early_sleep)

        await limiter.wait(DDG)
        first = limiter.last_dispatch(DDG)
        await limiter.wait(DDG)

        assert limiter.last_dispatch(DDG) - first >= 2.0

    @pytest.mark.asyncio
    async def test_cancelled_waiter_records_nothing(self) -> None:
        """Test that a cancelled waiter leaves the recorded instant untouched."""
        limiter = RateLimiter({DDG: 30.0})

        await limiter.wait(DDG)
        recorded = limiter.last_dispatch(DDG)

        waiter = asyncio.ensure_future(limiter.wait(DDG))
        await asyncio.sleep(0.01)
        waiter.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiter

        assert limiter.last_dispatch(DDG) == recorded

    @pytest.mark.asyncio
    async def test_default_interval(self, clock) -> None:
        """Test the interval used for unconfigured providers."""
        limiter = RateLimiter(default_interval=0.25, clock=clock, sleep=clock.sleep)

        assert limiter.min_interval(GOOGLE) == 0.25
        await limiter.wait(GOOGLE)
        assert await limiter.wait(GOOGLE) == pytest.approx(0.25)

    @pytest.mark.asyncio
    async def test_reset(self, clock) -> None:
        """Test that reset forgets recorded instants."""
        limiter = RateLimiter({DDG: 2.0, GOOGLE: 1.0}, clock=clock, sleep=clock.sleep)

        await limiter.wait(DDG)
        await limiter.wait(GOOGLE)
        limiter.reset(DDG)

        assert limiter.last_dispatch(DDG) is None
        assert limiter.last_dispatch(GOOGLE) is not None

        limiter.reset()
        assert limiter.last_dispatch(GOOGLE) is None
