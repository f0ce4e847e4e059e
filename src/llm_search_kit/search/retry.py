"""Bounded retry for provider calls."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from ..core.config import RetryPolicyConfig
from ..core.logger import get_logger

logger = get_logger("search.retry")

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """How often and how patiently a provider call is retried.

    Attributes:
        max_attempts: Total attempts including the first one
        delay_seconds: Delay before the first retry
        backoff_multiplier: Factor applied to the delay after each retry
        max_delay_seconds: Upper bound for any single delay
    """

    max_attempts: int = 1
    delay_seconds: float = 0.0
    backoff_multiplier: float = 1.0
    max_delay_seconds: float = 30.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.delay_seconds < 0 or self.max_delay_seconds < 0:
            raise ValueError("retry delays cannot be negative")

    @classmethod
    def from_config(cls, config: RetryPolicyConfig) -> RetryPolicy:
        return cls(
            max_attempts=config.max_attempts,
            delay_seconds=config.backoff_seconds,
            backoff_multiplier=config.backoff_multiplier,
            max_delay_seconds=config.max_backoff_seconds,
        )

    def delay_for(self, attempt: int) -> float:
        """Delay to wait after the given (1-indexed) failed attempt."""
        delay = self.delay_seconds * (self.backoff_multiplier ** (attempt - 1))
        return min(delay, self.max_delay_seconds)


NO_RETRY = RetryPolicy()


async def retry_async(
    func: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    name: str | None = None,
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
) -> T:
    """Call ``func`` until it succeeds or the policy is exhausted.

    Only exceptions matching ``retry_on`` are retried; anything else is
    raised immediately. The last error is re-raised once all attempts fail.

    Args:
        func: Zero-argument coroutine function to call
        policy: Retry policy
        retry_on: Exception types that trigger a retry
        name: Label used in log messages
        sleep: Coroutine function used to wait between attempts

    Returns:
        The value returned by ``func``
    """
    label = name or getattr(func, "__name__", "call")

    for attempt in range(1, policy.max_attempts + 1):
        try:
            return await func()
        except retry_on as exc:
            if attempt >= policy.max_attempts:
                if policy.max_attempts > 1:
                    logger.error(
                        "%s failed after %d attempts: %s",
                        label,
                        policy.max_attempts,
                        exc,
                    )
                raise

            delay = policy.delay_for(attempt)
            logger.warning(
                "%s failed (attempt %d/%d): %s. Retrying in %.2fs...",
                label,
                attempt,
                policy.max_attempts,
                exc,
                delay,
            )
            if delay > 0:
                await sleep(delay)

    raise RuntimeError("Unexpected retry loop exit")
