"""Base class for adapters that scrape an HTML result page."""

from __future__ import annotations

from abc import abstractmethod
from typing import Any

from ..core.logger import get_logger
from .base import SearchOptions, SearchProvider, SearchResult
from .exceptions import ProviderResponseError, SearchError
from .extractor import SelectorConfig, extract
from .html_cleaner import process_html
from .http import BROWSER_HEADERS, http_get

logger = get_logger("search.scraping")


class ScrapingSearchProvider(SearchProvider):
    """Adapter for providers without a JSON API.

    Subclasses describe the request (``search_url``, ``build_params``), the
    page layout (``selector_config``) and, optionally, strings that only
    appear on the provider's anti-bot challenge page (``blocked_markers``).
    """

    search_url: str
    base_url: str
    selector_config: SelectorConfig
    blocked_markers: tuple[str, ...] = ()

    @abstractmethod
    def build_params(self, query: str, options: SearchOptions) -> dict[str, Any]:
        """Query-string parameters for a search."""

    def build_headers(self) -> dict[str, str]:
        headers = dict(BROWSER_HEADERS)
        headers["Referer"] = self.base_url + "/"
        return headers

    def detect_block(self, html: str) -> str | None:
        """Return the challenge marker found in ``html``, if any."""
        lowered = html.lower()
        for marker in self.blocked_markers:
            if marker in lowered:
                return marker
        return None

    def parse(self, html: str) -> list[SearchResult]:
        """Pre-process a result page and extract its results.

        Nested containers can yield the same link twice; only the first
        occurrence is kept.
        """
        processed = process_html(html, self.base_url, provider=self.name)
        seen: set[str] = set()
        results: list[SearchResult] = []
        for result in extract(processed, self.selector_config, self.provider_id):
            if result.url not in seen:
                seen.add(result.url)
                results.append(result)
        return results

    async def fetch(self, query: str, options: SearchOptions) -> list[SearchResult]:
        self._increment_request()
        logger.info("%s search: %s", self.name, query[:100])

        try:
            response = await http_get(
                self.search_url,
                provider=self.name,
                params=self.build_params(query, options),
                headers=self.build_headers(),
                timeout=options.timeout_seconds,
            )
            html = response.text

            marker = self.detect_block(html)
            if marker is not None:
                raise ProviderResponseError(
                    f"{self.name} served an anti-bot challenge page",
                    provider=self.name,
                    detail=marker,
                )

            results = self.parse(html)
        except SearchError:
            self._increment_error()
            raise

        if results:
            logger.info("%s returned %d results", self.name, len(results))
        else:
            logger.warning(
                "%s page parsed but no results matched (markup may have changed)", self.name
            )
        return results[: options.limit]
