"""Static provider registry."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from ..core.logger import get_logger
from .base import ProviderConfig, ProviderId
from .exceptions import ProviderDisabledError, UnknownProviderError

logger = get_logger("search.registry")

PROVIDER_TABLE: Mapping[ProviderId, ProviderConfig] = MappingProxyType(
    {
        ProviderId.DUCKDUCKGO: ProviderConfig(enabled=True, name="DuckDuckGo"),
        ProviderId.GOOGLE: ProviderConfig(enabled=True, name="Google"),
        ProviderId.BRAVE: ProviderConfig(enabled=False, name="Brave", experimental=True),
        ProviderId.ECOSIA: ProviderConfig(enabled=False, name="Ecosia", experimental=True),
    }
)

DEFAULT_PROVIDER = ProviderId.DUCKDUCKGO


class ProviderRegistry:
    """Read-only table of known providers.

    The registry is built once at start-up. There is no runtime registration:
    adding a provider is a code change (a ``ProviderId`` member, a table
    entry and an adapter).
    """

    def __init__(
        self,
        table: Mapping[ProviderId, ProviderConfig] | None = None,
        *,
        default_provider: ProviderId | str = DEFAULT_PROVIDER,
        enable_experimental: bool = False,
    ) -> None:
        """Initialize the registry.

        Args:
            table: Provider table (defaults to ``PROVIDER_TABLE``)
            default_provider: Provider used when a search names none
            enable_experimental: Turn experimental providers on for this process
        """
        entries = dict(table if table is not None else PROVIDER_TABLE)
        if enable_experimental:
            entries = {
                pid: cfg.model_copy(update={"enabled": True}) if cfg.experimental else cfg
                for pid, cfg in entries.items()
            }
        self._table: Mapping[ProviderId, ProviderConfig] = MappingProxyType(entries)

        self._default = self.resolve(default_provider)
        self.ensure_dispatchable(self._default)

        logger.debug(
            "ProviderRegistry initialized (enabled=%s, default=%s)",
            [pid.value for pid in self.enabled_providers()],
            self._default.value,
        )

    @property
    def default_provider(self) -> ProviderId:
        return self._default

    def resolve(self, provider: ProviderId | str) -> ProviderId:
        """Map a provider id or its string form to a registered ``ProviderId``.

        Raises:
            UnknownProviderError: If the id is not registered
        """
        try:
            provider_id = ProviderId(provider)
        except ValueError:
            raise UnknownProviderError(str(provider)) from None
        if provider_id not in self._table:
            raise UnknownProviderError(provider_id.value)
        return provider_id

    def config_of(self, provider: ProviderId | str) -> ProviderConfig:
        return self._table[self.resolve(provider)]

    def is_enabled(self, provider: ProviderId | str) -> bool:
        return self.config_of(provider).enabled

    def ensure_dispatchable(self, provider: ProviderId | str) -> ProviderId:
        """Resolve a provider and check that it may be dispatched.

        Raises:
            UnknownProviderError: If the id is not registered
            ProviderDisabledError: If the provider is disabled
        """
        provider_id = self.resolve(provider)
        config = self._table[provider_id]
        if not config.enabled:
            raise ProviderDisabledError(provider_id.value, experimental=config.experimental)
        return provider_id

    def providers(self) -> list[ProviderId]:
        return list(self._table)

    def enabled_providers(self) -> list[ProviderId]:
        return [pid for pid, cfg in self._table.items() if cfg.enabled]

    def __contains__(self, provider: object) -> bool:
        try:
            return ProviderId(provider) in self._table  # type: ignore[arg-type]
        except ValueError:
            return False

    def __iter__(self):
        return iter(self._table.items())
