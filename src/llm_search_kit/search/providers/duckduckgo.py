"""DuckDuckGo search provider - scrapes the JavaScript-free HTML endpoint."""

from __future__ import annotations

from typing import Any
from urllib.parse import parse_qs, urlsplit

from bs4 import Tag

from ..base import ProviderId, SearchOptions
from ..extractor import SelectorConfig
from ..scraping import ScrapingSearchProvider

DDG_HTML_URL = "https://html.duckduckgo.com/html/"
DDG_BASE_URL = "https://html.duckduckgo.com"

SAFE_SEARCH_STRICT = "1"
SAFE_SEARCH_OFF = "-2"


def unwrap_redirect(href: str) -> str:
    """Return the target of a ``/l/?uddg=<target>`` redirect link."""
    parts = urlsplit(href)
    if parts.path.rstrip("/") == "/l":
        target = parse_qs(parts.query).get("uddg")
        if target:
            return target[0]
    return href


def _result_url(node: Tag) -> str | None:
    link = node.select_one("a.result__a")
    if link is None:
        return None
    href = link.get("href")
    if not isinstance(href, str) or not href.strip():
        return None
    return unwrap_redirect(href.strip())


SELECTORS = SelectorConfig(
    result_container="div.result",
    title_selector="a.result__a",
    snippet_selector=".result__snippet",
    base_url=DDG_BASE_URL,
    exclude_selectors=(".result--ad", ".result--no-result"),
    extractors={"url": _result_url},
)


class DuckDuckGoProvider(ScrapingSearchProvider):
    """DuckDuckGo search provider.

    Features:
    - Free to use, no API key required
    - Region (``kl``) and strict/off safe search (``kp``)
    - Sponsored results are dropped
    """

    search_url = DDG_HTML_URL
    base_url = DDG_BASE_URL
    selector_config = SELECTORS
    blocked_markers = ("anomaly-modal", "if this error persists, please let us know")

    @property
    def provider_id(self) -> ProviderId:
        return ProviderId.DUCKDUCKGO

    @property
    def name(self) -> str:
        return "DuckDuckGo"

    @property
    def region(self) -> str:
        return str(self.options.get("region", "wt-wt"))

    def build_params(self, query: str, options: SearchOptions) -> dict[str, Any]:
        return {
            "q": query,
            "kl": self.region,
            "kp": SAFE_SEARCH_STRICT if options.safe_search else SAFE_SEARCH_OFF,
        }
