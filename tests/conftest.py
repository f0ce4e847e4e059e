"""Shared test fixtures."""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable, Iterable, Sequence
from typing import Any

import pytest

from llm_search_kit.search.base import ProviderId, SearchOptions, SearchProvider, SearchResult
from llm_search_kit.search.cache import ResultCache
from llm_search_kit.search.config import SearchConfig
from llm_search_kit.search.manager import SearchManager
from llm_search_kit.search.rate_limiter import RateLimiter


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch, tmp_path):
    """Keep ``LLM_SEARCH_*`` variables and stray ``.env`` files out of tests."""
    for name in list(os.environ):
        if name.upper().startswith("LLM_SEARCH_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def _restore_logging():
    """Undo root handler changes made by ``setup_logging``."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class FakeClock:
    """Manually advanced monotonic clock with a matching ``sleep``."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.advance(seconds)
        await asyncio.sleep(0)


class FakeAdapter(SearchProvider):
    """In-memory adapter recording every call.

    ``outcomes`` is consumed one item per call: an exception is raised, a
    list is returned. Once exhausted, ``results`` is returned (or ``error``
    raised, when set).
    """

    def __init__(
        self,
        provider: ProviderId,
        results: Sequence[SearchResult] = (),
        *,
        error: BaseException | None = None,
        outcomes: Iterable[BaseException | Sequence[SearchResult]] = (),
        clock: Callable[[], float] | None = None,
        delay: float = 0.0,
    ) -> None:
        super().__init__()
        self._provider = provider
        self.results = list(results)
        self.error = error
        self.outcomes = list(outcomes)
        self.clock = clock
        self.delay = delay
        self.calls: list[tuple[str, SearchOptions]] = []
        self.call_times: list[float] = []

    @property
    def provider_id(self) -> ProviderId:
        return self._provider

    async def fetch(self, query: str, options: SearchOptions) -> list[SearchResult]:
        self._increment_request()
        self.calls.append((query, options))
        if self.clock is not None:
            self.call_times.append(self.clock())
        if self.delay:
            await asyncio.sleep(self.delay)

        if self.outcomes:
            outcome = self.outcomes.pop(0)
        elif self.error is not None:
            outcome = self.error
        else:
            outcome = self.results

        if isinstance(outcome, BaseException):
            self._increment_error()
            raise outcome
        return list(outcome)


def make_results(provider: ProviderId, count: int, prefix: str = "Result") -> list[SearchResult]:
    return [
        SearchResult(
            title=f"{prefix} {i}",
            url=f"https://example.com/{provider.value}/{i}",
            snippet=f"Snippet {i}",
            source=provider,
        )
        for i in range(1, count + 1)
    ]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_manager(clock: FakeClock) -> Callable[..., SearchManager]:
    """Build a manager around fake adapters, driven by the fake clock."""

    def _make(adapters: dict[ProviderId, SearchProvider], **config: Any) -> SearchManager:
        search_config = SearchConfig(**config)
        return SearchManager(
            adapters,
            config=search_config,
            cache=ResultCache(ttl_seconds=search_config.cache.ttl_seconds, clock=clock),
            rate_limiter=RateLimiter(
                {pid: s.min_interval_seconds for pid, s in search_config.providers.items()},
                clock=clock,
                sleep=clock.sleep,
            ),
            sleep=clock.sleep,
        )

    return _make


@pytest.fixture
def make_adapter(clock: FakeClock) -> Callable[..., FakeAdapter]:
    """Build a ``FakeAdapter`` stamped with the fake clock."""

    def _make(provider: ProviderId, results: Sequence[SearchResult] = (), **kwargs: Any) -> FakeAdapter:
        kwargs.setdefault("clock", clock)
        return FakeAdapter(provider, results, **kwargs)

    return _make


@pytest.fixture
def results_for() -> Callable[..., list[SearchResult]]:
    return make_results
