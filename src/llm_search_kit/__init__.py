"""llm-search-kit.

Multi-provider web search for LLM tooling with:
- A static provider registry (DuckDuckGo, Google, Brave, Ecosia)
- Per-provider rate limiting and retry policies
- Cross-provider fallback
- In-memory result caching
- Declarative HTML result extraction

Example:
    ```python
    import asyncio

    from llm_search_kit import SearchConfig, SearchManager

    manager = SearchManager.from_config(SearchConfig.load())
    results = asyncio.run(manager.search("typescript programming", limit=5))
    for result in results:
        print(result.title, result.url)
    ```
"""

from importlib.metadata import PackageNotFoundError, version

from .core import get_logger, setup_logging
from .search import (
    ProviderId,
    SearchConfig,
    SearchError,
    SearchManager,
    SearchOptions,
    SearchResult,
)

__all__ = [
    "__version__",
    "ProviderId",
    "SearchConfig",
    "SearchError",
    "SearchManager",
    "SearchOptions",
    "SearchResult",
    "get_logger",
    "setup_logging",
]

try:  # pragma: no cover - best-effort during development
    __version__ = version("llm-search-kit")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"
