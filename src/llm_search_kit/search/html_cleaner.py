"""HTML pre-processing for scraped result pages.

Scraped pages are cleaned before selector extraction:
- non-content and invisible elements are removed (scripts, styles, hidden nodes)
- comments and inline event handlers are dropped
- relative ``href``/``src`` values are rewritten to absolute URLs

Class and id attributes are preserved because result selectors rely on them.
"""

from __future__ import annotations

import re
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Comment, ParserRejectedMarkup

from .exceptions import MalformedHtmlError

REMOVED_SELECTORS = (
    "script",
    "style",
    "meta",
    'link[rel="stylesheet"]',
    'link[rel="preload"]',
    'link[rel="prefetch"]',
    "iframe",
    "noscript",
    "svg",
    "video",
    "object",
    "embed",
    "canvas",
    "template",
    "[hidden]",
    '[aria-hidden="true"]',
)

URL_ATTRIBUTES = ("href", "src")

_HIDDEN_STYLE = re.compile(r"display\s*:\s*none|visibility\s*:\s*hidden", re.IGNORECASE)


def parse_html(html: str, provider: str | None = None) -> BeautifulSoup:
    """Parse an HTML document.

    Raises:
        MalformedHtmlError: If the document is empty or rejected by the parser
    """
    if not html or not html.strip():
        raise MalformedHtmlError("Empty HTML document", provider=provider)
    try:
        return BeautifulSoup(html, "html.parser")
    except ParserRejectedMarkup as exc:
        raise MalformedHtmlError(
            f"Unparseable HTML document: {exc}", provider=provider, original_error=exc
        ) from exc


def _strip_invisible(soup: BeautifulSoup) -> None:
    for selector in REMOVED_SELECTORS:
        for element in soup.select(selector):
            if not element.decomposed:
                element.decompose()

    for element in soup.find_all(style=True):
        if not element.decomposed and _HIDDEN_STYLE.search(str(element.get("style", ""))):
            element.decompose()

    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()

    for element in soup.find_all(True):
        for attr in [name for name in element.attrs if name.lower().startswith("on")]:
            del element.attrs[attr]


def _absolutize(soup: BeautifulSoup, base_url: str) -> None:
    for attr in URL_ATTRIBUTES:
        for element in soup.find_all(attrs={attr: True}):
            value = element.get(attr)
            if not isinstance(value, str):
                continue
            value = value.strip()
            if not value or value.startswith(("data:", "http")):
                continue
            try:
                element[attr] = urljoin(base_url, value)
            except ValueError:
                # keep the original value
                continue


def clean_html(html: str) -> str:
    """Remove invisible and non-content elements from a document."""
    soup = parse_html(html)
    _strip_invisible(soup)
    return str(soup)


def make_urls_absolute(html: str, base_url: str) -> str:
    """Rewrite relative ``href``/``src`` attributes against ``base_url``."""
    soup = parse_html(html)
    _absolutize(soup, base_url)
    return str(soup)


def process_html(html: str, base_url: str, provider: str | None = None) -> str:
    """Clean a document and make its URLs absolute in a single parse.

    Raises:
        MalformedHtmlError: If the document is empty or unparseable
    """
    soup = parse_html(html, provider=provider)
    _strip_invisible(soup)
    _absolutize(soup, base_url)
    return str(soup)
