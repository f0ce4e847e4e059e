"""Per-provider minimum-interval throttling."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Mapping

from ..core.logger import get_logger
from .base import ProviderId

logger = get_logger("search.rate_limiter")


class RateLimiter:
    """Enforce a minimum interval between dispatches to the same provider.

    Each provider has its own lock and its own "last dispatch" instant, so
    callers targeting different providers never wait on each other.
    ``asyncio.Lock`` wakes waiters in FIFO order, which keeps the recorded
    instants in call order and prevents starvation.
    """

    def __init__(
        self,
        intervals: Mapping[ProviderId, float] | None = None,
        *,
        default_interval: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        """Initialize the rate limiter.

        Args:
            intervals: Minimum seconds between dispatches, per provider
            default_interval: Interval for providers missing from ``intervals``
            clock: Monotonic clock returning seconds
            sleep: Coroutine function used to wait
        """
        self._intervals = dict(intervals or {})
        self._default_interval = default_interval
        self._clock = clock
        self._sleep = sleep
        self._last_dispatch: dict[ProviderId, float] = {}
        self._locks: dict[ProviderId, asyncio.Lock] = {}

    def min_interval(self, provider: ProviderId) -> float:
        return self._intervals.get(provider, self._default_interval)

    def last_dispatch(self, provider: ProviderId) -> float | None:
        return self._last_dispatch.get(provider)

    async def wait(self, provider: ProviderId) -> float:
        """Wait for the provider's slot and record the dispatch instant.

        Args:
            provider: Provider about to be called

        Returns:
            Seconds spent waiting
        """
        lock = self._locks.get(provider)
        if lock is None:
            lock = self._locks.setdefault(provider, asyncio.Lock())

        interval = self.min_interval(provider)
        waited = 0.0
        async with lock:
            last = self._last_dispatch.get(provider)
            if last is not None:
                # Loop: a sleep may return marginally early on coarse clocks.
                remaining = last + interval - self._clock()
                while remaining > 0:
                    logger.debug("Rate limit: waiting %.3fs before %s", remaining, provider.value)
                    await self._sleep(remaining)
                    waited += remaining
                    remaining = last + interval - self._clock()
            self._last_dispatch[provider] = self._clock()
        return waited

    def reset(self, provider: ProviderId | None = None) -> None:
        """Forget recorded dispatch instants (all providers when None)."""
        if provider is None:
            self._last_dispatch.clear()
        else:
            self._last_dispatch.pop(provider, None)
