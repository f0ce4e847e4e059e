"""Brave search provider - official JSON Web Search API (experimental)."""

from __future__ import annotations

import html
import re
from typing import Any, Literal

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ...core.logger import get_logger
from ..base import ProviderId, SearchOptions, SearchProvider, SearchResult
from ..exceptions import ProviderFetchError, ProviderResponseError, SearchError
from ..http import http_get

logger = get_logger("search.brave")

BRAVE_API_BASE = "https://api.search.brave.com/res/v1"
BRAVE_WEB_URL = f"{BRAVE_API_BASE}/web/search"

# The API caps ``count`` at 20.
MAX_COUNT = 20

_TAGS = re.compile(r"<[^>]+>")


class BraveWebResult(BaseModel):
    """One entry of ``web.results``."""

    model_config = ConfigDict(extra="ignore")

    title: str
    url: str
    description: str | None = None


class BraveWebSection(BaseModel):
    model_config = ConfigDict(extra="ignore")

    results: list[BraveWebResult] = Field(default_factory=list)


class BraveWebResponse(BaseModel):
    """Successful response of the web search endpoint."""

    model_config = ConfigDict(extra="ignore")

    type: Literal["search"] = "search"
    web: BraveWebSection | None = None


class BraveErrorDetail(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code: str | None = None
    detail: str | None = None
    status: int | None = None


class BraveErrorResponse(BaseModel):
    """Error envelope returned by the API."""

    model_config = ConfigDict(extra="ignore")

    type: Literal["ErrorResponse"]
    error: BraveErrorDetail


def _clean(text: str | None) -> str | None:
    if not text:
        return None
    cleaned = re.sub(r"\s+", " ", html.unescape(_TAGS.sub("", text))).strip()
    return cleaned or None


class BraveSearchProvider(SearchProvider):
    """Brave Search provider.

    Features:
    - Independent search index with an official API
    - Strict/off safe search, country and language selection
    - Requires an API key (``X-Subscription-Token``)
    """

    @property
    def provider_id(self) -> ProviderId:
        return ProviderId.BRAVE

    @property
    def name(self) -> str:
        return "Brave"

    @property
    def requires_api_key(self) -> bool:
        return True

    def build_params(self, query: str, options: SearchOptions) -> dict[str, Any]:
        return {
            "q": query,
            "count": min(options.limit, MAX_COUNT),
            "country": self.options.get("country", "us"),
            "search_lang": self.options.get("search_lang", "en"),
            "safesearch": "strict" if options.safe_search else "off",
        }

    async def fetch(self, query: str, options: SearchOptions) -> list[SearchResult]:
        """Search using the Brave Web Search API.

        Raises:
            ProviderFetchError: Missing API key, network failure or HTTP error
            ProviderResponseError: The API returned an error envelope or an
                unexpected body
        """
        if not self.api_key:
            raise ProviderFetchError("Brave Search API key is not configured", provider=self.name)

        self._increment_request()
        logger.info("Brave search: %s", query[:100])

        try:
            response = await http_get(
                BRAVE_WEB_URL,
                provider=self.name,
                params=self.build_params(query, options),
                headers={"X-Subscription-Token": self.api_key, "Accept": "application/json"},
                timeout=options.timeout_seconds,
                raise_for_status=False,
            )
            results = self._parse(_json_body(response), response)
        except SearchError:
            self._increment_error()
            raise

        logger.info("Brave returned %d results", len(results))
        return results[: options.limit]

    def _parse(self, data: Any, response: httpx.Response) -> list[SearchResult]:
        if isinstance(data, dict) and data.get("type") == "ErrorResponse":
            try:
                error = BraveErrorResponse.model_validate(data).error
            except ValidationError:
                error = BraveErrorDetail()
            raise ProviderResponseError(
                f"Brave Search API error: {error.detail or error.code or 'unknown error'}",
                provider=self.name,
                detail=error.model_dump(exclude_none=True),
            )

        if not response.is_success:
            raise ProviderFetchError(
                f"Brave returned HTTP {response.status_code}",
                provider=self.name,
                status_code=response.status_code,
            )

        try:
            payload = BraveWebResponse.model_validate(data)
        except ValidationError as exc:
            raise ProviderResponseError(
                "Unexpected Brave Search response body",
                provider=self.name,
                detail=str(exc),
            ) from exc

        if payload.web is None:
            return []
        return [
            SearchResult(
                title=_clean(item.title) or item.url,
                url=item.url,
                snippet=_clean(item.description),
                source=self.provider_id,
            )
            for item in payload.web.results
        ]


def _json_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None
