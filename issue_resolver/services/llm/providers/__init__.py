"""LLM Provider Architecture - Dynamic model provider system"""

from .base_provider import BaseModelProvider
from .provider_registry import ModelProviderRegistry, build_providers
from .provider_decorators import register_provider, initialize_providers
from .model_selector import ModelSelector, DEFAULT_SAFE_MODEL

__all__ = [
    'BaseModelProvider',
    'ModelProviderRegistry',
    'build_providers',
    'register_provider',
    'initialize_providers',
    'ModelSelector',
    'DEFAULT_SAFE_MODEL',
]
