"""Search-provider orchestration.

This module provides a unified interface for web search across multiple
search engine providers including:
- DuckDuckGo (scraped HTML endpoint, default)
- Google (scraped result page)
- Brave Search (JSON API, experimental)
- Ecosia (scraped result page, experimental)

Features:
- Unified search interface with standardized results
- Per-provider rate limiting and retry
- Automatic fallback between providers
- Result caching with a fixed TTL
"""

from .base import ProviderConfig, ProviderId, SearchOptions, SearchProvider, SearchResult
from .cache import CacheEntry, ResultCache, make_cache_key
from .config import CacheConfig, ProviderSettings, SearchConfig
from .exceptions import (
    AllProvidersFailedError,
    ErrorCode,
    InvalidRequestError,
    MalformedHtmlError,
    ProviderDisabledError,
    ProviderFetchError,
    ProviderResponseError,
    SearchError,
    SearchTimeoutError,
    UnknownProviderError,
)
from .extractor import SelectorConfig, extract
from .manager import SearchManager
from .rate_limiter import RateLimiter
from .registry import PROVIDER_TABLE, ProviderRegistry
from .retry import RetryPolicy, retry_async

__all__ = [
    "AllProvidersFailedError",
    "CacheConfig",
    "CacheEntry",
    "ErrorCode",
    "InvalidRequestError",
    "MalformedHtmlError",
    "PROVIDER_TABLE",
    "ProviderConfig",
    "ProviderDisabledError",
    "ProviderFetchError",
    "ProviderId",
    "ProviderRegistry",
    "ProviderResponseError",
    "ProviderSettings",
    "RateLimiter",
    "ResultCache",
    "RetryPolicy",
    "SearchConfig",
    "SearchError",
    "SearchManager",
    "SearchOptions",
    "SearchProvider",
    "SearchResult",
    "SearchTimeoutError",
    "SelectorConfig",
    "UnknownProviderError",
    "extract",
    "make_cache_key",
    "retry_async",
]
