"""Tests for ResultCache.

Tests cover:
- Cache key construction
- Set and get operations
- TTL expiry
- Unbounded growth and optional eviction
- Invalidation and statistics
"""

from __future__ import annotations

from llm_search_kit.search.base import ProviderId, SearchOptions, SearchResult
from llm_search_kit.search.cache import CacheEntry, ResultCache, make_cache_key

DDG = ProviderId.DUCKDUCKGO
GOOGLE = ProviderId.GOOGLE


def _results(provider: ProviderId = DDG) -> list[SearchResult]:
    return [SearchResult(title="Test", url="https://test.com", snippet="Test", source=provider)]


# ==============================================================================
# Cache Key Tests
# ==============================================================================


class TestCacheKey:
    """Tests for make_cache_key."""

    def test_equivalent_options_hash_identically(self) -> None:
        """Test that default and explicit default values produce the same key."""
        key = make_cache_key("query", SearchOptions())

        assert make_cache_key("query", SearchOptions(limit=10)) == key
        assert make_cache_key("query", SearchOptions.model_validate({"safeSearch": True})) == key
        assert make_cache_key("query", SearchOptions(safe_search=True)) == key

    def test_timeout_not_part_of_key(self) -> None:
        """Test that the call timeout does not change the key."""
        assert make_cache_key("query", SearchOptions(timeout=500)) == make_cache_key(
            "query", SearchOptions(timeout=30000)
        )

    def test_query_is_normalized(self) -> None:
        """Test that case and whitespace differences share a key."""
        assert make_cache_key("  TypeScript   Programming ", SearchOptions()) == make_cache_key(
            "typescript programming", SearchOptions()
        )

    def test_result_affecting_options_change_key(self) -> None:
        """Test that limit, safe search and provider change the key."""
        base = make_cache_key("query", SearchOptions())

        assert make_cache_key("query", SearchOptions(limit=5)) != base
        assert make_cache_key("query", SearchOptions(safe_search=False)) != base
        assert make_cache_key("query", SearchOptions(provider="duckduckgo")) != base
        assert make_cache_key("other", SearchOptions()) != base

    def test_make_key_matches_function(self) -> None:
        """Test the ResultCache.make_key shortcut."""
        options = SearchOptions(limit=3)
        assert ResultCache.make_key("q", options) == make_cache_key("q", options)


# ==============================================================================
# ResultCache Tests
# ==============================================================================


class TestResultCache:
    """Tests for ResultCache."""

    def test_cache_miss(self, clock) -> None:
        """Test cache miss."""
        cache = ResultCache(clock=clock)
        assert cache.get("missing") is None

    def test_store_and_get(self, clock) -> None:
        """Test storing and reading an entry."""
        cache = ResultCache(clock=clock)

        stored = cache.store("key", _results(), GOOGLE)
        entry = cache.get("key")

        assert entry == stored
        assert entry.results == tuple(_results())
        assert entry.timestamp == clock()
        assert entry.source == GOOGLE

    def test_put_overwrites(self, clock) -> None:
        """Test that put replaces an existing entry."""
        cache = ResultCache(clock=clock)
        cache.store("key", _results(DDG), DDG)

        replacement = CacheEntry(results=(), timestamp=clock(), source=GOOGLE)
        cache.put("key", replacement)

        assert cache.get("key") == replacement
        assert len(cache) == 1

    def test_entry_expires_at_ttl(self, clock) -> None:
        """Test that an entry is live before the TTL and gone at the TTL."""
        cache = ResultCache(ttl_seconds=60, clock=clock)
        cache.store("key", _results(), DDG)

        clock.advance(59)
        assert cache.get("key") is not None

        clock.advance(1)
        assert cache.get("key") is None
        assert len(cache) == 0

    def test_unbounded_by_default(self, clock) -> None:
        """Test that the cache grows without an upper bound by default."""
        cache = ResultCache(clock=clock)

        for i in range(5000):
            cache.store(f"key-{i}", _results(), DDG)

        assert len(cache) == 5000
        assert cache.get("key-0") is not None
        assert cache.get_stats()["max_size"] is None

    def test_max_size_evicts_oldest(self, clock) -> None:
        """Test eviction of the oldest entry when max_size is set."""
        cache = ResultCache(max_size=2, clock=clock)

        cache.store("first", _results(), DDG)
        clock.advance(1)
        cache.store("second", _results(), DDG)
        clock.advance(1)
        cache.store("third", _results(), DDG)

        assert len(cache) == 2
        assert cache.get("first") is None
        assert cache.get("second") is not None
        assert cache.get("third") is not None

    def test_invalidate_by_provider(self, clock) -> None:
        """Test invalidating only the entries produced by one provider."""
        cache = ResultCache(clock=clock)
        cache.store("a", _results(DDG), DDG)
        cache.store("b", _results(GOOGLE), GOOGLE)

        assert cache.invalidate(GOOGLE) == 1
        assert cache.get("a") is not None
        assert cache.get("b") is None

        assert cache.invalidate() == 1
        assert len(cache) == 0

    def test_cleanup_expired(self, clock) -> None:
        """Test removal of expired entries."""
        cache = ResultCache(ttl_seconds=10, clock=clock)
        cache.store("old", _results(), DDG)
        clock.advance(20)
        cache.store("new", _results(), DDG)

        assert cache.cleanup_expired() == 1
        assert len(cache) == 1

    def test_cache_stats(self, clock) -> None:
        """Test cache statistics."""
        cache = ResultCache(ttl_seconds=120, clock=clock)
        cache.store("key", _results(), DDG)

        cache.get("key")  # Hit
        cache.get("missing")  # Miss

        stats = cache.get_stats()
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate_percent"] == 50.0
        assert stats["size"] == 1
        assert stats["ttl_seconds"] == 120

    def test_clear(self, clock) -> None:
        """Test clearing entries and statistics."""
        cache = ResultCache(clock=clock)
        cache.store("key", _results(), DDG)
        cache.get("key")

        cache.clear()

        assert len(cache) == 0
        assert cache.get_stats()["hits"] == 0
