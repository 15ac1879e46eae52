"""Catalog of provider adapter classes"""

from typing import Dict, Type, List, Optional

from ....core.config import ProviderSettings
from ....core.exceptions import NotFoundError
from ....core.logger import CentralizedLogger
from .base_provider import BaseModelProvider


class ModelProviderRegistry:
    """Registry of provider adapter classes keyed by provider id

    Only classes live here. Provider instances and their models are owned
    by the ``ModelRegistry`` of each ``ModelManager``.
    """

    _providers: Dict[str, Type[BaseModelProvider]] = {}
    _logger = CentralizedLogger("ModelProviderRegistry")

    @classmethod
    def register(cls, provider_id: str, provider_class: Type[BaseModelProvider]):
        """Register a provider class

        Args:
            provider_id: Unique identifier for the provider
            provider_class: Provider class to register
        """
        if not issubclass(provider_class, BaseModelProvider):
            raise ValueError(f"{provider_class} must inherit from BaseModelProvider")

        cls._providers[provider_id] = provider_class
        cls._logger.debug(f"Registered model provider: {provider_id}")

    @classmethod
    def create(cls, settings: ProviderSettings) -> BaseModelProvider:
        """Create a provider instance from explicit settings

        Raises:
            NotFoundError: If no class is registered for the provider id
        """
        provider_class = cls._providers.get(settings.provider_id)
        if provider_class is None:
            raise NotFoundError("provider", settings.provider_id)

        provider = provider_class(
            api_key=settings.api_key,
            base_url=settings.base_url,
            timeout=settings.timeout
        )
        cls._logger.debug(f"Created provider instance: {settings.provider_id}")
        return provider

    @classmethod
    def get(cls, provider_id: str) -> Optional[Type[BaseModelProvider]]:
        return cls._providers.get(provider_id)

    @classmethod
    def get_available_providers(cls) -> List[str]:
        """Get list of registered provider ids"""
        return list(cls._providers.keys())

    @classmethod
    def clear(cls):
        """Clear all registered providers (mainly for testing)"""
        cls._providers.clear()


def build_providers(provider_settings: List[ProviderSettings]) -> List[BaseModelProvider]:
    """Construct the adapters named by an explicit provider list"""
    from .provider_decorators import initialize_providers

    initialize_providers()
    return [ModelProviderRegistry.create(settings) for settings in provider_settings]
