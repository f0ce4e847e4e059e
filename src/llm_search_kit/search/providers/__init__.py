"""Search provider adapters."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..base import ProviderId, SearchProvider
from .brave import BraveSearchProvider
from .duckduckgo import DuckDuckGoProvider
from .ecosia import EcosiaSearchProvider
from .google import GoogleSearchProvider

if TYPE_CHECKING:
    from ..config import SearchConfig

ADAPTER_CLASSES: dict[ProviderId, type[SearchProvider]] = {
    ProviderId.DUCKDUCKGO: DuckDuckGoProvider,
    ProviderId.GOOGLE: GoogleSearchProvider,
    ProviderId.BRAVE: BraveSearchProvider,
    ProviderId.ECOSIA: EcosiaSearchProvider,
}


def build_default_adapters(config: SearchConfig) -> dict[ProviderId, SearchProvider]:
    """Instantiate one adapter per known provider from its settings."""
    adapters: dict[ProviderId, SearchProvider] = {}
    for provider_id, adapter_class in ADAPTER_CLASSES.items():
        settings = config.provider(provider_id)
        adapters[provider_id] = adapter_class(api_key=settings.api_key, options=settings.options)
    return adapters


__all__ = [
    "ADAPTER_CLASSES",
    "BraveSearchProvider",
    "DuckDuckGoProvider",
    "EcosiaSearchProvider",
    "GoogleSearchProvider",
    "build_default_adapters",
]
