"""Base classes and interfaces for search providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProviderId(str, Enum):
    """Supported search providers.

    The set is closed: a new provider needs a new member and a new adapter.
    """

    GOOGLE = "google"
    BRAVE = "brave"
    DUCKDUCKGO = "duckduckgo"
    ECOSIA = "ecosia"


class ProviderConfig(BaseModel):
    """Registry entry describing a provider.

    Attributes:
        enabled: Whether the provider may be dispatched
        name: Human readable provider name
        experimental: Whether the provider is experimental (off unless opted in)
    """

    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(description="Whether the provider may be dispatched")
    name: str = Field(description="Display name")
    experimental: bool = Field(default=False, description="Experimental provider")


class SearchResult(BaseModel):
    """Standardized search result from any provider.

    Attributes:
        title: Result title
        url: Absolute result URL
        snippet: Text snippet/description, when the provider has one
        source: Provider that produced the result
    """

    model_config = ConfigDict(frozen=True)

    title: str = Field(description="Result title")
    url: str = Field(description="Result URL")
    snippet: str | None = Field(default=None, description="Text snippet or description")
    source: ProviderId = Field(description="Provider that produced the result")

    def to_dict(self) -> dict[str, Any]:
        """Return the ``{title, url, snippet?, source}`` form."""
        return self.model_dump(mode="json", exclude_none=True)


class SearchOptions(BaseModel):
    """Options recognised by ``SearchManager.search``.

    ``safeSearch`` is accepted as an alias of ``safe_search``. ``timeout`` is
    expressed in milliseconds.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    limit: int = Field(default=10, ge=1, le=100, description="Maximum number of results")
    safe_search: bool = Field(default=True, alias="safeSearch", description="Strict content filter")
    timeout: int = Field(default=10000, gt=0, description="Call timeout in milliseconds")
    provider: str | None = Field(default=None, description="Explicit provider id")

    @field_validator("provider", mode="before")
    @classmethod
    def normalise_provider(cls, value: Any) -> Any:
        if isinstance(value, Enum):
            value = value.value
        if isinstance(value, str):
            value = value.strip().lower()
            return value or None
        return value

    @property
    def timeout_seconds(self) -> float:
        return self.timeout / 1000.0


class SearchProvider(ABC):
    """Abstract base class for provider adapters.

    An adapter performs the network call appropriate to its provider and maps
    the answer into :class:`SearchResult` objects. Rate limiting, retries,
    caching and fallback are applied by the manager, never by the adapter.
    """

    def __init__(
        self,
        api_key: str | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> None:
        """Initialize the search provider.

        Args:
            api_key: API key for the provider (if required)
            options: Provider-specific options
        """
        self.api_key = api_key
        self.options: dict[str, Any] = dict(options or {})
        self._request_count = 0
        self._error_count = 0

    @property
    @abstractmethod
    def provider_id(self) -> ProviderId:
        """Get the provider identifier."""

    @property
    def name(self) -> str:
        """Get the provider display name."""
        return self.provider_id.value

    @property
    def requires_api_key(self) -> bool:
        """Check if this provider requires an API key."""
        return False

    @property
    def is_configured(self) -> bool:
        """Check if the provider is properly configured."""
        if self.requires_api_key:
            return bool(self.api_key)
        return True

    @abstractmethod
    async def fetch(self, query: str, options: SearchOptions) -> list[SearchResult]:
        """Fetch results for a query.

        Args:
            query: Search query string
            options: Effective search options

        Returns:
            Normalized results, possibly empty

        Raises:
            ProviderFetchError: On network or HTTP failure
            ProviderResponseError: If the provider reports an error
        """

    def get_stats(self) -> dict[str, Any]:
        """Get provider statistics.

        Returns:
            Dictionary with provider statistics
        """
        return {
            "name": self.name,
            "provider": self.provider_id.value,
            "configured": self.is_configured,
            "requires_api_key": self.requires_api_key,
            "request_count": self._request_count,
            "error_count": self._error_count,
            "error_rate": (
                self._error_count / self._request_count if self._request_count > 0 else 0.0
            ),
        }

    def _increment_request(self) -> None:
        """Increment request counter."""
        self._request_count += 1

    def _increment_error(self) -> None:
        """Increment error counter."""
        self._error_count += 1
