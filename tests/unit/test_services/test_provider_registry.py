"""Unit tests for provider class registration and construction"""

import pytest

from issue_resolver.core.config import ProviderSettings
from issue_resolver.core.exceptions import NotFoundError
from issue_resolver.services.llm.providers.provider_decorators import (
    initialize_providers,
    register_provider,
)
from issue_resolver.services.llm.providers.provider_registry import (
    ModelProviderRegistry,
    build_providers,
)

from conftest import FakeProvider


class TestProviderRegistry:
    """Test provider class catalog"""

    def test_builtin_providers_discovered(self):
        stats = initialize_providers()

        assert {"openai", "anthropic", "local"} <= set(ModelProviderRegistry.get_available_providers())
        assert stats["registered_providers"] >= 3

    def test_create_unknown_provider(self):
        with pytest.raises(NotFoundError):
            ModelProviderRegistry.create(ProviderSettings(provider_id="does-not-exist"))

    def test_register_rejects_non_provider(self):
        with pytest.raises(ValueError):
            ModelProviderRegistry.register("bad", object)

    def test_build_providers_in_order(self):
        providers = build_providers([
            ProviderSettings(provider_id="local", base_url="http://a.test"),
            ProviderSettings(provider_id="openai", api_key="sk-test"),
        ])

        assert [p.provider_id for p in providers] == ["local", "openai"]
        assert providers[1].api_key == "sk-test"

    def test_build_providers_empty(self):
        assert build_providers([]) == []


class TestRegisterProviderDecorator:
    """Test decorator-based registration"""

    def test_decorator_sets_provider_id(self):
        @register_provider("decorated-test")
        class DecoratedProvider(FakeProvider):
            pass

        assert DecoratedProvider.provider_id == "decorated-test"

    def test_decorator_rejects_non_provider(self):
        with pytest.raises(ValueError):
            @register_provider("broken")
            class NotAProvider:
                pass
