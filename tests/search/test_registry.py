"""Tests for ProviderRegistry."""

from __future__ import annotations

import pytest

from llm_search_kit.search.base import ProviderConfig, ProviderId
from llm_search_kit.search.exceptions import ProviderDisabledError, UnknownProviderError
from llm_search_kit.search.registry import DEFAULT_PROVIDER, PROVIDER_TABLE, ProviderRegistry

# ==============================================================================
# ProviderRegistry Tests
# ==============================================================================


class TestProviderRegistry:
    """Tests for ProviderRegistry."""

    def test_static_table(self) -> None:
        """Test the built-in provider table."""
        registry = ProviderRegistry()

        assert registry.providers() == [
            ProviderId.DUCKDUCKGO,
            ProviderId.GOOGLE,
            ProviderId.BRAVE,
            ProviderId.ECOSIA,
        ]
        assert registry.enabled_providers() == [ProviderId.DUCKDUCKGO, ProviderId.GOOGLE]
        assert registry.config_of("brave") == ProviderConfig(
            enabled=False, name="Brave", experimental=True
        )
        assert registry.default_provider == DEFAULT_PROVIDER

    def test_table_is_read_only(self) -> None:
        """Test that the shared table cannot be mutated."""
        with pytest.raises(TypeError):
            PROVIDER_TABLE[ProviderId.BRAVE] = ProviderConfig(enabled=True, name="Brave")  # type: ignore[index]

    def test_resolve(self) -> None:
        """Test resolving string and enum ids."""
        registry = ProviderRegistry()

        assert registry.resolve("google") is ProviderId.GOOGLE
        assert registry.resolve(ProviderId.ECOSIA) is ProviderId.ECOSIA

    def test_resolve_unknown(self) -> None:
        """Test that unknown ids raise UnknownProviderError."""
        registry = ProviderRegistry()

        with pytest.raises(UnknownProviderError) as exc_info:
            registry.resolve("bing")

        assert exc_info.value.provider == "bing"
        assert "bing" not in registry

    def test_is_enabled(self) -> None:
        """Test enabled lookups."""
        registry = ProviderRegistry()

        assert registry.is_enabled("duckduckgo") is True
        assert registry.is_enabled(ProviderId.ECOSIA) is False

    def test_ensure_dispatchable_disabled(self) -> None:
        """Test that a disabled experimental provider is rejected."""
        registry = ProviderRegistry()

        with pytest.raises(ProviderDisabledError) as exc_info:
            registry.ensure_dispatchable("ecosia")

        assert exc_info.value.experimental is True
        assert "experimental" in exc_info.value.message

    def test_non_experimental_disabled_provider(self) -> None:
        """Test the error for a provider that was simply disabled."""
        table = {
            ProviderId.DUCKDUCKGO: ProviderConfig(enabled=True, name="DuckDuckGo"),
            ProviderId.GOOGLE: ProviderConfig(enabled=False, name="Google"),
        }
        registry = ProviderRegistry(table)

        with pytest.raises(ProviderDisabledError) as exc_info:
            registry.ensure_dispatchable(ProviderId.GOOGLE)

        assert exc_info.value.experimental is False
        assert ProviderId.BRAVE not in registry

    def test_enable_experimental(self) -> None:
        """Test that experimental providers can be turned on."""
        registry = ProviderRegistry(enable_experimental=True)

        assert registry.ensure_dispatchable("brave") is ProviderId.BRAVE
        assert registry.is_enabled(ProviderId.ECOSIA) is True
        assert PROVIDER_TABLE[ProviderId.BRAVE].enabled is False

    def test_default_provider_must_be_enabled(self) -> None:
        """Test that a disabled default provider is rejected at construction."""
        with pytest.raises(ProviderDisabledError):
            ProviderRegistry(default_provider="brave")

        registry = ProviderRegistry(default_provider="brave", enable_experimental=True)
        assert registry.default_provider is ProviderId.BRAVE

    def test_iteration(self) -> None:
        """Test iterating over (id, config) pairs."""
        registry = ProviderRegistry()

        names = {pid.value: cfg.name for pid, cfg in registry}

        assert names == {
            "duckduckgo": "DuckDuckGo",
            "google": "Google",
            "brave": "Brave",
            "ecosia": "Ecosia",
        }
