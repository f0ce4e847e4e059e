"""Google search provider - scrapes the public result page."""

from __future__ import annotations

from typing import Any
from urllib.parse import parse_qs, urlsplit

from bs4 import Tag

from ..base import ProviderId, SearchOptions
from ..extractor import SelectorConfig
from ..scraping import ScrapingSearchProvider

GOOGLE_SEARCH_URL = "https://www.google.com/search"
GOOGLE_BASE_URL = "https://www.google.com"

# Google pages always ask for at least this many results.
MIN_PAGE_SIZE = 10


def unwrap_redirect(href: str) -> str:
    """Return the target of a ``/url?q=<target>`` redirect link."""
    parts = urlsplit(href)
    if parts.path == "/url":
        query = parse_qs(parts.query)
        for key in ("q", "url"):
            if query.get(key):
                return query[key][0]
    return href


def _result_url(node: Tag) -> str | None:
    link = node.select_one("a:has(h3)") or node.select_one("a[href]")
    if link is None:
        return None
    href = link.get("href")
    if not isinstance(href, str) or not href.strip():
        return None
    return unwrap_redirect(href.strip())


SELECTORS = SelectorConfig(
    result_container="div.g",
    title_selector="h3",
    snippet_selector="div.VwiC3b, div[data-sncf], span.aCOpRe, div.IsZvec",
    base_url=GOOGLE_BASE_URL,
    exclude_selectors=("#tads", "#tadsb", "#bottomads", "[data-text-ad]"),
    extractors={"url": _result_url},
)


class GoogleSearchProvider(ScrapingSearchProvider):
    """Google search provider.

    Features:
    - No API key required
    - Interface language (``hl``) and strict/off safe search
    - Ads and ``/url?q=`` redirect wrappers are removed
    """

    search_url = GOOGLE_SEARCH_URL
    base_url = GOOGLE_BASE_URL
    selector_config = SELECTORS
    blocked_markers = ("/sorry/index", "our systems have detected unusual traffic")

    @property
    def provider_id(self) -> ProviderId:
        return ProviderId.GOOGLE

    @property
    def name(self) -> str:
        return "Google"

    @property
    def language(self) -> str:
        return str(self.options.get("language", "en"))

    def build_params(self, query: str, options: SearchOptions) -> dict[str, Any]:
        return {
            "q": query,
            "num": max(options.limit, MIN_PAGE_SIZE),
            "hl": self.language,
            "safe": "active" if options.safe_search else "off",
        }
