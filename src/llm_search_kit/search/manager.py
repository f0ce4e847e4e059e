"""Search manager: the single entry point for searches.

``SearchManager.search`` runs one pass of:

1. validate the query, the options and the requested provider
2. return a live cache entry if there is one
3. wait for the provider's rate-limit slot
4. call the provider's adapter under its retry policy
5. on failure (or on an empty answer for the default path) try the
   provider's fallback exactly once
6. cache the successful result, tagged with the provider that produced it
7. return at most ``limit`` results
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from ..core.logger import get_logger
from .base import ProviderId, SearchOptions, SearchProvider, SearchResult
from .cache import ResultCache, make_cache_key
from .config import SearchConfig
from .exceptions import (
    AllProvidersFailedError,
    InvalidRequestError,
    MalformedHtmlError,
    ProviderFetchError,
    SearchError,
    SearchTimeoutError,
)
from .rate_limiter import RateLimiter
from .registry import ProviderRegistry
from .retry import NO_RETRY, RetryPolicy, retry_async

logger = get_logger("search.manager")

RETRYABLE_ERRORS: tuple[type[SearchError], ...] = (ProviderFetchError, MalformedHtmlError)


@dataclass
class _Outcome:
    results: list[SearchResult]
    source: ProviderId


@dataclass
class _InFlight:
    task: asyncio.Task[_Outcome]
    waiters: int = 0


class SearchManager:
    """Unified search across providers.

    Features:
    - Static provider registry with disabled/experimental providers
    - Per-provider rate limiting and retry policies
    - Result caching with a fixed TTL
    - One-step fallback to a secondary provider
    - Optional coalescing of identical concurrent searches
    """

    def __init__(
        self,
        adapters: Mapping[ProviderId, SearchProvider] | None = None,
        *,
        config: SearchConfig | None = None,
        registry: ProviderRegistry | None = None,
        cache: ResultCache | None = None,
        rate_limiter: RateLimiter | None = None,
        retry_policies: Mapping[ProviderId, RetryPolicy] | None = None,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        """Initialize the search manager.

        Args:
            adapters: Adapter per provider (built from ``config`` if None)
            config: Search configuration (defaults when None)
            registry: Provider registry (built from ``config`` if None)
            cache: Result cache (built from ``config`` if None; disabled when
                ``config.cache.enabled`` is false)
            rate_limiter: Rate limiter (built from ``config`` if None)
            retry_policies: Retry policy per provider (built from ``config`` if None)
            sleep: Coroutine function used for delays between retries
        """
        self._config = config or SearchConfig()

        if adapters is None:
            from .providers import build_default_adapters

            adapters = build_default_adapters(self._config)
        self._adapters: dict[ProviderId, SearchProvider] = dict(adapters)

        self._registry = registry or ProviderRegistry(
            default_provider=self._config.default_provider,
            enable_experimental=self._config.enable_experimental,
        )

        if cache is not None:
            self._cache: ResultCache | None = cache
        elif self._config.cache.enabled:
            self._cache = ResultCache(
                ttl_seconds=self._config.cache.ttl_seconds,
                max_size=self._config.cache.max_size,
            )
        else:
            self._cache = None

        self._rate_limiter = rate_limiter or RateLimiter(
            {pid: s.min_interval_seconds for pid, s in self._config.providers.items()}
        )
        self._retry_policies: dict[ProviderId, RetryPolicy] = (
            dict(retry_policies)
            if retry_policies is not None
            else {
                pid: RetryPolicy.from_config(s.retry) for pid, s in self._config.providers.items()
            }
        )
        self._sleep = sleep
        self._inflight: dict[str, _InFlight] = {}

        # Statistics
        self._total_searches = 0
        self._successful_searches = 0
        self._failed_searches = 0
        self._cache_hits = 0
        self._failover_count = 0

        logger.info(
            "SearchManager initialized (providers=%s, default=%s, cache=%s, failover=%s)",
            [pid.value for pid in self._adapters],
            self._registry.default_provider.value,
            self._cache is not None,
            self._config.enable_failover,
        )

    @classmethod
    def from_config(cls, config: SearchConfig) -> SearchManager:
        return cls(config=config)

    @property
    def registry(self) -> ProviderRegistry:
        return self._registry

    @property
    def cache(self) -> ResultCache | None:
        return self._cache

    @property
    def rate_limiter(self) -> RateLimiter:
        return self._rate_limiter

    def get_adapter(self, provider: ProviderId | str) -> SearchProvider | None:
        return self._adapters.get(self._registry.resolve(provider))

    def retry_policy(self, provider: ProviderId) -> RetryPolicy:
        return self._retry_policies.get(provider, NO_RETRY)

    def fallback_for(self, provider: ProviderId) -> ProviderId | None:
        """The provider tried after ``provider``, or None when there is none."""
        if not self._config.enable_failover:
            return None
        fallback = self._config.fallback_chain.get(provider)
        if fallback is None or fallback == provider or fallback not in self._adapters:
            return None
        if not self._registry.is_enabled(fallback):
            return None
        return fallback

    def resolve_options(
        self,
        options: SearchOptions | Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> SearchOptions:
        """Merge caller options over the configured defaults.

        Raises:
            InvalidRequestError: If an option is unknown or invalid
        """
        data: dict[str, Any] = {
            "limit": self._config.default_limit,
            "safe_search": self._config.safe_search,
            "timeout": self._config.default_timeout_ms,
        }
        if isinstance(options, SearchOptions):
            data.update(options.model_dump(exclude_unset=True))
        elif options is not None:
            data.update(options)
        data.update(overrides)
        if "safeSearch" in data:
            data["safe_search"] = data.pop("safeSearch")
        data = {key: value for key, value in data.items() if value is not None}

        try:
            return SearchOptions.model_validate(data)
        except ValidationError as exc:
            raise InvalidRequestError(f"Invalid search options: {exc}", original_error=exc) from exc

    async def search(
        self,
        query: str,
        options: SearchOptions | Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> list[SearchResult]:
        """Perform a search.

        Args:
            query: Search query string
            options: ``SearchOptions`` or a mapping with ``limit``,
                ``safe_search``/``safeSearch``, ``timeout`` (ms) and ``provider``
            **overrides: Individual options, applied over ``options``

        Returns:
            Up to ``limit`` results (possibly empty)

        Raises:
            InvalidRequestError: Empty query or invalid options
            UnknownProviderError: Provider id not registered
            ProviderDisabledError: Provider disabled
            ProviderFetchError: Provider has no adapter configured
            SearchTimeoutError: The call exceeded its timeout
            AllProvidersFailedError: Provider and fallback both failed
            SearchError: The provider failed and had no usable fallback
        """
        self._total_searches += 1
        start_time = time.perf_counter()

        try:
            if not isinstance(query, str) or not query.strip():
                raise InvalidRequestError("Search query cannot be empty")
            query = query.strip()
            opts = self.resolve_options(options, **overrides)

            auto = opts.provider is None
            provider = (
                self._registry.default_provider
                if auto
                else self._registry.ensure_dispatchable(opts.provider)  # type: ignore[arg-type]
            )
            if provider not in self._adapters:
                raise ProviderFetchError(
                    f"No adapter configured for provider '{provider.value}'",
                    provider=provider.value,
                )
        except SearchError:
            self._failed_searches += 1
            raise

        logger.info(
            "Searching for: %s (provider=%s, limit=%d)",
            query[:100],
            opts.provider or "auto",
            opts.limit,
        )

        key = make_cache_key(query, opts)
        if self._cache is not None:
            entry = self._cache.get(key)
            if entry is not None:
                self._cache_hits += 1
                self._successful_searches += 1
                logger.info("Returning cached results for: %s", query[:50])
                return list(entry.results)

        try:
            async with asyncio.timeout(opts.timeout_seconds):
                outcome = await self._fetch(key, query, opts, provider, auto)
        except TimeoutError as exc:
            self._failed_searches += 1
            logger.warning("Search timed out after %dms: %s", opts.timeout, query[:50])
            raise SearchTimeoutError(
                f"Search timed out after {opts.timeout}ms",
                provider=provider.value,
                original_error=exc,
            ) from exc
        except SearchError:
            self._failed_searches += 1
            raise

        self._successful_searches += 1
        logger.info(
            "Search completed: %d results from %s in %.2fms",
            len(outcome.results),
            outcome.source.value,
            (time.perf_counter() - start_time) * 1000,
        )
        return list(outcome.results)

    async def _fetch(
        self,
        key: str,
        query: str,
        opts: SearchOptions,
        provider: ProviderId,
        auto: bool,
    ) -> _Outcome:
        if not self._config.coalesce_requests:
            return await self._fetch_and_store(key, query, opts, provider, auto)

        inflight = self._inflight.get(key)
        if inflight is None or inflight.task.done():
            task = asyncio.ensure_future(self._fetch_and_store(key, query, opts, provider, auto))
            inflight = _InFlight(task=task)
            self._inflight[key] = inflight

            def _forget(_: asyncio.Task[_Outcome], entry: _InFlight = inflight) -> None:
                if self._inflight.get(key) is entry:
                    del self._inflight[key]

            task.add_done_callback(_forget)
        else:
            logger.debug("Joining in-flight search for: %s", query[:50])

        inflight.waiters += 1
        try:
            return await asyncio.shield(inflight.task)
        finally:
            inflight.waiters -= 1
            if inflight.waiters == 0 and not inflight.task.done():
                # Last interested caller gave up; later callers start a fresh fetch.
                if self._inflight.get(key) is inflight:
                    del self._inflight[key]
                inflight.task.cancel()

    async def _fetch_and_store(
        self,
        key: str,
        query: str,
        opts: SearchOptions,
        provider: ProviderId,
        auto: bool,
    ) -> _Outcome:
        outcome = await self._dispatch_with_fallback(query, opts, provider, auto)
        outcome.results = outcome.results[: opts.limit]
        if self._cache is not None:
            self._cache.store(key, outcome.results, outcome.source)
        return outcome

    async def _dispatch_with_fallback(
        self,
        query: str,
        opts: SearchOptions,
        provider: ProviderId,
        auto: bool,
    ) -> _Outcome:
        primary_error: SearchError | None = None
        results: list[SearchResult] = []

        try:
            results = await self._dispatch(provider, query, opts)
        except SearchError as exc:
            primary_error = exc
            logger.warning("Provider %s failed: %s", provider.value, exc.message)
        else:
            if results or not auto:
                return _Outcome(results, provider)
            logger.warning("Provider %s returned no results", provider.value)

        fallback = self.fallback_for(provider)
        if fallback is None:
            if primary_error is not None:
                raise primary_error
            return _Outcome(results, provider)

        logger.info("Falling back from %s to %s", provider.value, fallback.value)
        try:
            fallback_results = await self._dispatch(fallback, query, opts)
        except SearchError as exc:
            if primary_error is None:
                logger.warning(
                    "Fallback provider %s failed after an empty answer: %s",
                    fallback.value,
                    exc.message,
                )
                return _Outcome(results, provider)
            logger.error("Fallback provider %s failed: %s", fallback.value, exc.message)
            raise AllProvidersFailedError(primary_error, exc) from exc

        self._failover_count += 1
        logger.info("Failover to %s succeeded", fallback.value)
        return _Outcome(fallback_results, fallback)

    async def _dispatch(
        self,
        provider: ProviderId,
        query: str,
        opts: SearchOptions,
    ) -> list[SearchResult]:
        """Call one provider under its rate limit and retry policy."""
        adapter = self._adapters[provider]

        async def attempt() -> list[SearchResult]:
            await self._rate_limiter.wait(provider)
            try:
                return await adapter.fetch(query, opts)
            except SearchError:
                raise
            except Exception as exc:
                raise ProviderFetchError(
                    f"{adapter.name} search failed: {exc}",
                    provider=provider.value,
                    original_error=exc,
                ) from exc

        return await retry_async(
            attempt,
            self.retry_policy(provider),
            retry_on=RETRYABLE_ERRORS,
            name=f"{adapter.name} search",
            sleep=self._sleep,
        )

    def get_stats(self) -> dict[str, Any]:
        """Get search manager statistics.

        Returns:
            Dictionary with statistics
        """
        success_rate = (
            self._successful_searches / self._total_searches * 100
            if self._total_searches > 0
            else 0.0
        )

        return {
            "total_searches": self._total_searches,
            "successful_searches": self._successful_searches,
            "failed_searches": self._failed_searches,
            "success_rate_percent": round(success_rate, 2),
            "cache_hits": self._cache_hits,
            "failover_count": self._failover_count,
            "providers": {pid.value: a.get_stats() for pid, a in self._adapters.items()},
            "cache_stats": self._cache.get_stats() if self._cache else None,
        }

    def clear_cache(self) -> None:
        """Clear the result cache."""
        if self._cache:
            self._cache.clear()
