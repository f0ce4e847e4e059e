"""Ecosia search provider (experimental) - scrapes the result page."""

from __future__ import annotations

from typing import Any

from ..base import ProviderId, SearchOptions
from ..extractor import SelectorConfig
from ..scraping import ScrapingSearchProvider

ECOSIA_SEARCH_URL = "https://www.ecosia.org/search"
ECOSIA_BASE_URL = "https://www.ecosia.org"

SELECTORS = SelectorConfig(
    result_container="div.result, article[data-test-id='organic-result']",
    title_selector=".result-title, .result__title, [data-test-id='result-title'], h2",
    url_selector=(
        "a.result-title, a.result__link, a[data-test-id='result-link'], a[href]"
    ),
    snippet_selector=(
        ".result-snippet, .result__description, [data-test-id='result-description'], p"
    ),
    base_url=ECOSIA_BASE_URL,
    exclude_selectors=(".result--ad", "[data-test-id='ad-result']", ".ad-result"),
)


class EcosiaSearchProvider(ScrapingSearchProvider):
    """Ecosia search provider.

    Ecosia's markup changes often, so the provider is registered as
    experimental. It has no safe-search parameter.
    """

    search_url = ECOSIA_SEARCH_URL
    base_url = ECOSIA_BASE_URL
    selector_config = SELECTORS
    blocked_markers = ("cf-challenge", "just a moment...")

    @property
    def provider_id(self) -> ProviderId:
        return ProviderId.ECOSIA

    @property
    def name(self) -> str:
        return "Ecosia"

    def build_params(self, query: str, options: SearchOptions) -> dict[str, Any]:
        return {"q": query, "method": "index"}
