"""Search result caching."""

from __future__ import annotations

import hashlib
import json
import threading
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from ..core.logger import get_logger
from .base import ProviderId, SearchOptions, SearchResult

logger = get_logger("search.cache")

DEFAULT_TTL_SECONDS = 3600.0
AUTO_PROVIDER = "auto"


@dataclass(frozen=True)
class CacheEntry:
    """Cached results for one key.

    Attributes:
        results: Results as returned to the caller
        timestamp: Clock reading when the entry was stored
        source: Provider that actually produced the results
    """

    results: tuple[SearchResult, ...]
    timestamp: float
    source: ProviderId


def make_cache_key(query: str, options: SearchOptions) -> str:
    """Create a cache key from a query and its effective options.

    The key only depends on what changes the results: the normalized query,
    the limit, the safe-search flag and the requested provider (``auto``
    when none). Equivalent option sets therefore hash identically.
    """
    key_data = {
        "query": " ".join(query.lower().split()),
        "limit": options.limit,
        "safe_search": options.safe_search,
        "provider": options.provider or AUTO_PROVIDER,
    }
    key_str = json.dumps(key_data, sort_keys=True)
    return hashlib.sha256(key_str.encode()).hexdigest()[:32]


class ResultCache:
    """In-memory cache for search results with TTL support.

    Features:
    - Fixed time-to-live, checked on read (expired entries are dropped lazily)
    - Unbounded by default; optional oldest-first eviction with ``max_size``
    - Cache statistics tracking
    - Safe for concurrent use
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_size: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize result cache.

        Args:
            ttl_seconds: Time-to-live for cached results in seconds
            max_size: Maximum number of entries (None = unbounded)
            clock: Monotonic clock returning seconds
        """
        self._cache: dict[str, CacheEntry] = {}
        self._ttl = ttl_seconds
        self._max_size = max_size
        self._clock = clock
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        logger.debug(
            "ResultCache initialized (ttl=%.0fs, max_size=%s)",
            ttl_seconds,
            max_size if max_size is not None else "unbounded",
        )

    @staticmethod
    def make_key(query: str, options: SearchOptions) -> str:
        return make_cache_key(query, options)

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def get(self, key: str) -> CacheEntry | None:
        """Get a live entry.

        Args:
            key: Cache key

        Returns:
            The entry if present and younger than the TTL, otherwise None
        """
        with self._lock:
            entry = self._cache.get(key)
            if entry is not None:
                if self._clock() - entry.timestamp < self._ttl:
                    self._hits += 1
                    logger.debug("Cache hit for key %s (source=%s)", key, entry.source.value)
                    return entry
                del self._cache[key]
                logger.debug("Cache expired for key %s", key)

            self._misses += 1
            return None

    def put(self, key: str, entry: CacheEntry) -> None:
        """Store an entry, replacing any previous entry for the key."""
        with self._lock:
            if (
                self._max_size is not None
                and key not in self._cache
                and len(self._cache) >= self._max_size
            ):
                self._evict_oldest()
            self._cache[key] = entry
        logger.debug("Cached %d results for key %s", len(entry.results), key)

    def store(
        self,
        key: str,
        results: Sequence[SearchResult],
        source: ProviderId,
    ) -> CacheEntry:
        """Build an entry stamped with the current time and store it."""
        entry = CacheEntry(results=tuple(results), timestamp=self._clock(), source=source)
        self.put(key, entry)
        return entry

    def _evict_oldest(self) -> None:
        """Evict the oldest cache entry."""
        if not self._cache:
            return

        oldest_key = min(self._cache, key=lambda k: self._cache[k].timestamp)
        del self._cache[oldest_key]
        logger.debug("Evicted oldest cache entry")

    def invalidate(self, provider: ProviderId | None = None) -> int:
        """Invalidate cache entries.

        Args:
            provider: Only drop entries produced by this provider (None for all)

        Returns:
            Number of entries invalidated
        """
        with self._lock:
            if provider is None:
                count = len(self._cache)
                self._cache.clear()
            else:
                keys = [k for k, e in self._cache.items() if e.source == provider]
                for key in keys:
                    del self._cache[key]
                count = len(keys)

        logger.info("Invalidated %d cache entries", count)
        return count

    def clear(self) -> None:
        """Clear all cached results and reset statistics."""
        with self._lock:
            self._cache.clear()
            self._hits = 0
            self._misses = 0
        logger.info("Search cache cleared")

    def cleanup_expired(self) -> int:
        """Remove expired entries from cache.

        Returns:
            Number of entries removed
        """
        with self._lock:
            now = self._clock()
            expired_keys = [
                key for key, entry in self._cache.items() if now - entry.timestamp >= self._ttl
            ]
            for key in expired_keys:
                del self._cache[key]

        if expired_keys:
            logger.info("Cleaned up %d expired cache entries", len(expired_keys))

        return len(expired_keys)

    def __len__(self) -> int:
        return len(self._cache)

    def get_stats(self) -> dict[str, Any]:
        """Get cache statistics.

        Returns:
            Dictionary with cache statistics
        """
        with self._lock:
            total = self._hits + self._misses
            hit_rate = (self._hits / total * 100) if total > 0 else 0.0

            return {
                "size": len(self._cache),
                "max_size": self._max_size,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate_percent": round(hit_rate, 2),
                "ttl_seconds": self._ttl,
            }
