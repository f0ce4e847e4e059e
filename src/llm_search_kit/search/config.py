"""Configuration for the search engine.

Settings can come from keyword arguments, environment variables
(``LLM_SEARCH_`` prefix, ``__`` as the nested delimiter, e.g.
``LLM_SEARCH_PROVIDERS__BRAVE__API_KEY``), a ``.env`` file, or a YAML/JSON
file loaded with :meth:`SearchConfig.from_file`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.config import LoggingConfig, RetryPolicyConfig, _load_env_once, load_config_data
from .base import ProviderId


class ProviderSettings(BaseModel):
    """Per-provider settings.

    Attributes:
        min_interval_seconds: Minimum delay between two requests to the provider
        retry: Retry policy applied to this provider's calls only
        api_key: API key for the provider (if required)
        options: Provider-specific options (region, language, country...)
    """

    min_interval_seconds: float = Field(
        default=1.0, ge=0.0, description="Minimum seconds between requests"
    )
    retry: RetryPolicyConfig = Field(
        default_factory=RetryPolicyConfig, description="Retry policy for this provider"
    )
    api_key: str | None = Field(default=None, description="API key (if required)")
    options: dict[str, Any] = Field(default_factory=dict, description="Provider-specific options")


def default_provider_settings() -> dict[ProviderId, dict[str, Any]]:
    """Built-in per-provider defaults."""
    return {
        ProviderId.DUCKDUCKGO: {
            "min_interval_seconds": 2.0,
            "retry": {"max_attempts": 2, "backoff_seconds": 1.0},
            "options": {"region": "wt-wt"},
        },
        ProviderId.GOOGLE: {
            "min_interval_seconds": 1.0,
            "options": {"language": "en"},
        },
        ProviderId.BRAVE: {
            "min_interval_seconds": 1.0,
            "options": {"country": "us", "search_lang": "en"},
        },
        ProviderId.ECOSIA: {"min_interval_seconds": 2.0},
    }


def default_fallback_chain() -> dict[ProviderId, ProviderId]:
    return {
        ProviderId.DUCKDUCKGO: ProviderId.GOOGLE,
        ProviderId.GOOGLE: ProviderId.DUCKDUCKGO,
        ProviderId.BRAVE: ProviderId.DUCKDUCKGO,
        ProviderId.ECOSIA: ProviderId.DUCKDUCKGO,
    }


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class CacheConfig(BaseModel):
    """Configuration for the result cache."""

    enabled: bool = Field(default=True, description="Enable result caching")
    ttl_seconds: float = Field(default=3600.0, gt=0.0, description="Cache entry time-to-live")
    max_size: int | None = Field(
        default=None, ge=1, description="Maximum number of entries (unbounded when unset)"
    )


class SearchConfig(BaseSettings):
    """Main configuration for the search engine."""

    model_config = SettingsConfigDict(
        env_prefix="LLM_SEARCH_",
        env_nested_delimiter="__",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_provider: ProviderId = Field(
        default=ProviderId.DUCKDUCKGO, description="Provider used when a search names none"
    )
    enable_failover: bool = Field(
        default=True, description="Fall back to another provider on failure or empty results"
    )
    fallback_chain: dict[ProviderId, ProviderId] = Field(
        default_factory=default_fallback_chain,
        description="Provider tried when the key provider fails",
    )
    enable_experimental: bool = Field(
        default=False, description="Enable experimental providers (Brave, Ecosia)"
    )
    coalesce_requests: bool = Field(
        default=False, description="Share one fetch between identical concurrent searches"
    )
    default_limit: int = Field(default=10, ge=1, le=100, description="Default result limit")
    default_timeout_ms: int = Field(default=10000, gt=0, description="Default call timeout (ms)")
    safe_search: bool = Field(default=True, description="Default safe-search setting")
    cache: CacheConfig = Field(default_factory=CacheConfig, description="Result cache")
    providers: dict[ProviderId, ProviderSettings] = Field(
        default_factory=dict, description="Per-provider settings"
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Logging")

    @field_validator("providers", mode="before")
    @classmethod
    def merge_provider_defaults(cls, value: Any) -> Any:
        """Overlay user-supplied provider settings on the built-in defaults."""

        if value is None:
            value = {}
        if not isinstance(value, dict):
            return value
        merged: dict[Any, Any] = {pid.value: cfg for pid, cfg in default_provider_settings().items()}
        for key, override in value.items():
            name = key.value if isinstance(key, ProviderId) else str(key).lower()
            if isinstance(override, BaseModel):
                override = override.model_dump(exclude_unset=True)
            base = merged.get(name, {})
            merged[name] = _deep_merge(base, override) if isinstance(override, dict) else override
        return merged

    @model_validator(mode="after")
    def validate_fallback_chain(self) -> SearchConfig:
        for provider, fallback in self.fallback_chain.items():
            if provider == fallback:
                raise ValueError(f"fallback_chain maps {provider.value!r} to itself")
        for pid, cfg in default_provider_settings().items():
            if pid not in self.providers:
                self.providers[pid] = ProviderSettings.model_validate(cfg)
        return self

    def provider(self, provider: ProviderId) -> ProviderSettings:
        return self.providers[provider]

    @classmethod
    def from_file(cls, path: str | Path) -> SearchConfig:
        """Load configuration from a YAML or JSON file."""

        return cls(**load_config_data(path))

    @classmethod
    def from_yaml(cls, path: str | Path) -> SearchConfig:
        return cls.from_file(path)

    @classmethod
    def from_json(cls, path: str | Path) -> SearchConfig:
        return cls.from_file(path)

    @classmethod
    def defaults(cls) -> SearchConfig:
        """Built-in defaults, ignoring environment variables and ``.env``."""

        return cls.model_validate({})

    @classmethod
    def load(cls, path: str | Path | None = None) -> SearchConfig:
        """Load from ``path`` when given, otherwise from the environment only."""

        if path is not None:
            return cls.from_file(path)
        _load_env_once()
        return cls()

    def to_yaml(self, path: str | Path) -> None:
        """Write the configuration to a YAML file."""

        data = self.model_dump(mode="json")
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w", encoding="utf-8") as handle:
            yaml.safe_dump(data, handle, sort_keys=False, allow_unicode=True)
