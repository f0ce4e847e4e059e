"""Declarative HTML-to-result extraction.

A :class:`SelectorConfig` describes, for one provider, where results live in
a page and how to read their fields. :func:`extract` applies it to a page.

Extraction is best-effort: markup changes on a scraped site usually show up
as zero results rather than as an exception, and the manager's fallback
handles that case.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from urllib.parse import urljoin, urlsplit

from bs4 import Tag

from ..core.logger import get_logger
from .base import ProviderId, SearchResult
from .html_cleaner import parse_html

logger = get_logger("search.extractor")

FieldExtractor = Callable[[Tag], "str | None"]

FIELDS = ("title", "url", "snippet")
ALLOWED_SCHEMES = ("http", "https")

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class SelectorConfig:
    """How to find results in a provider's HTML.

    Attributes:
        result_container: CSS selector matching one node per result
        title_selector: Sub-selector for the title text
        url_selector: Sub-selector for the link element (the container itself if None)
        snippet_selector: Sub-selector for the snippet text
        url_attribute: Attribute holding the link
        base_url: Base used to resolve relative links
        exclude_selectors: Containers matching any of these (or nested in one) are skipped
        extractors: Per-field callables overriding the selectors (``title``, ``url``, ``snippet``)
    """

    result_container: str
    title_selector: str | None = None
    url_selector: str | None = None
    snippet_selector: str | None = None
    url_attribute: str = "href"
    base_url: str | None = None
    exclude_selectors: tuple[str, ...] = ()
    extractors: Mapping[str, FieldExtractor] = field(default_factory=dict)

    def __post_init__(self) -> None:
        unknown = set(self.extractors) - set(FIELDS)
        if unknown:
            raise ValueError(f"Unknown extractor fields: {sorted(unknown)}")
        object.__setattr__(self, "exclude_selectors", tuple(self.exclude_selectors))
        object.__setattr__(self, "extractors", MappingProxyType(dict(self.extractors)))


def normalize_text(value: str | None) -> str:
    if not value:
        return ""
    return _WHITESPACE.sub(" ", value).strip()


def node_text(node: Tag, selector: str | None) -> str | None:
    """Text of the first match of ``selector`` inside ``node``."""
    if selector is None:
        return None
    target = node.select_one(selector)
    if target is None:
        return None
    return normalize_text(target.get_text(" ", strip=True)) or None


def node_attribute(node: Tag, selector: str | None, attribute: str) -> str | None:
    """Attribute of the first match of ``selector`` (or of ``node`` itself)."""
    target = node if selector is None else node.select_one(selector)
    if target is None:
        return None
    value = target.get(attribute)
    if isinstance(value, list):
        value = " ".join(value)
    return value.strip() if isinstance(value, str) and value.strip() else None


def resolve_url(url: str, base_url: str | None) -> str | None:
    """Return an absolute http(s) URL, or None if ``url`` cannot be used.

    Relative URLs are resolved against ``base_url`` when one is given.
    """
    try:
        parts = urlsplit(url)
        if not parts.scheme and base_url:
            url = urljoin(base_url, url)
            parts = urlsplit(url)
        # Accessing the port validates it (raises ValueError when out of range).
        _ = parts.port
    except ValueError:
        return None

    if not parts.scheme:
        # Relative link with no base to resolve it against.
        return url
    if parts.scheme.lower() not in ALLOWED_SCHEMES or not parts.netloc:
        return None
    return url


def _is_excluded(node: Tag, selectors: tuple[str, ...]) -> bool:
    if not selectors:
        return False
    candidate: Tag | None = node
    while candidate is not None and candidate.name != "[document]":
        if any(candidate.css.match(selector) for selector in selectors):
            return True
        candidate = candidate.parent
    return False


def _field(node: Tag, config: SelectorConfig, name: str) -> str | None:
    extractor = config.extractors.get(name)
    if extractor is not None:
        try:
            value = extractor(node)
        except Exception as exc:
            logger.debug("Custom %s extractor failed on a result node: %s", name, exc)
            return None
        return normalize_text(value) or None

    if name == "title":
        return node_text(node, config.title_selector)
    if name == "snippet":
        return node_text(node, config.snippet_selector)
    return node_attribute(node, config.url_selector, config.url_attribute)


def extract(html: str, config: SelectorConfig, source: ProviderId) -> list[SearchResult]:
    """Convert an HTML document into results.

    Args:
        html: Raw (or pre-processed) HTML document
        config: Selector configuration of the provider
        source: Provider the results are attributed to

    Returns:
        Results in document order; empty when nothing matches

    Raises:
        MalformedHtmlError: If ``html`` is empty or cannot be parsed
    """
    soup = parse_html(html, provider=source.value)
    results: list[SearchResult] = []
    skipped = 0

    for node in soup.select(config.result_container):
        if _is_excluded(node, config.exclude_selectors):
            skipped += 1
            continue

        title = _field(node, config, "title")
        raw_url = _field(node, config, "url")
        if not title or not raw_url:
            continue

        url = resolve_url(raw_url, config.base_url)
        if url is None:
            logger.debug("Dropping result with unusable URL: %r", raw_url)
            continue

        results.append(
            SearchResult(
                title=title,
                url=url,
                snippet=_field(node, config, "snippet"),
                source=source,
            )
        )

    logger.debug(
        "Extracted %d results for %s (%d excluded)", len(results), source.value, skipped
    )
    return results
