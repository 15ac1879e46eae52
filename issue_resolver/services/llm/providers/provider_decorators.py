"""Decorator-based registration for model providers"""

from typing import Type, Dict, Any, List

from ....core.logger import CentralizedLogger
from .base_provider import BaseModelProvider
from .provider_registry import ModelProviderRegistry


# Dictionary to hold decorated providers before registration
_decorated_providers: Dict[str, Type[BaseModelProvider]] = {}

logger = CentralizedLogger("ProviderDecorators")


def register_provider(provider_id: str):
    """Decorator to register a model provider class

    Args:
        provider_id: Unique id for the provider, matched against
            ``AIModel.provider``

    Returns:
        Decorator function
    """
    def decorator(cls: Type[BaseModelProvider]) -> Type[BaseModelProvider]:
        if not issubclass(cls, BaseModelProvider):
            raise ValueError(f"{cls.__name__} must inherit from BaseModelProvider")

        _decorated_providers[provider_id] = cls
        cls.provider_id = provider_id
        return cls

    return decorator


def auto_register_decorated_providers() -> int:
    """Register all decorated providers with the ModelProviderRegistry

    Returns:
        Number of providers registered
    """
    count = 0
    for provider_id, provider_class in _decorated_providers.items():
        ModelProviderRegistry.register(provider_id, provider_class)
        count += 1

    return count


def scan_and_import_providers(package_path: str = None) -> List[str]:
    """Import all ``*_providers.py`` modules so their decorators run

    Args:
        package_path: Python package path containing provider modules

    Returns:
        List of imported module names
    """
    import importlib
    from pathlib import Path

    package_path = package_path or f"{__package__}.implementations"
    imported_modules = []

    base_path = Path(__file__).parent / "implementations"
    if not base_path.exists():
        return imported_modules

    for file_path in sorted(base_path.glob("*_providers.py")):
        full_module_path = f"{package_path}.{file_path.stem}"
        try:
            importlib.import_module(full_module_path)
            imported_modules.append(full_module_path)
        except ImportError as e:
            # A missing optional SDK disables only that provider
            logger.warning(f"Could not import provider module {full_module_path}: {e}")

    return imported_modules


def initialize_providers() -> Dict[str, Any]:
    """Scan provider modules and register every decorated provider class

    Returns:
        Dictionary with initialization statistics
    """
    imported_modules = scan_and_import_providers()
    registered_count = auto_register_decorated_providers()

    return {
        "imported_modules": imported_modules,
        "imported_module_count": len(imported_modules),
        "registered_providers": registered_count,
        "total_providers": len(ModelProviderRegistry.get_available_providers()),
    }
