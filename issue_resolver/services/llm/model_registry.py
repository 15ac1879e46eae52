"""Registry of known models and the provider adapters that serve them"""

from typing import Dict, List, Optional

from ...core.exceptions import NotFoundError, ProviderNotConfiguredError
from ...core.logger import CentralizedLogger
from ...models.ai_model import AIModel
from .providers.base_provider import BaseModelProvider
from .usage_ledger import UsageLedger


class ModelRegistry:
    """Authoritative set of models keyed by unique name

    Registering a model name twice keeps the last definition (and the
    first registration position); the model's usage record survives.
    """

    def __init__(self, ledger: Optional[UsageLedger] = None):
        self.ledger = ledger if ledger is not None else UsageLedger()
        self._models: Dict[str, AIModel] = {}
        self._providers: Dict[str, BaseModelProvider] = {}
        self.logger = CentralizedLogger("ModelRegistry")

    def register(self, provider: BaseModelProvider) -> None:
        """Attach a provider adapter and register all of its models"""
        if provider.provider_id in self._providers:
            self.logger.warning(f"Replacing provider adapter: {provider.provider_id}")
        self._providers[provider.provider_id] = provider

        for model in provider.models:
            self.register_model(model)

        self.logger.info(
            f"Added provider: {provider.name} with {len(provider.models)} models"
        )

    def register_model(self, model: AIModel) -> None:
        """Add a single model definition to the catalog"""
        if model.name in self._models:
            previous = self._models[model.name]
            self.logger.warning(
                f"Model '{model.name}' re-registered: "
                f"{previous.provider} definition replaced by {model.provider}"
            )
        self._models[model.name] = model
        self.ledger.ensure(model.name)

    def lookup(self, model_name: str) -> AIModel:
        model = self._models.get(model_name)
        if model is None:
            raise NotFoundError("model", model_name)
        return model

    def contains(self, model_name: str) -> bool:
        return model_name in self._models

    def list_all(self) -> List[AIModel]:
        """All models in registration order"""
        return list(self._models.values())

    def get_provider(self, model_name: str) -> BaseModelProvider:
        """Adapter owning a model

        Raises:
            NotFoundError: Unknown model
            ProviderNotConfiguredError: Model's provider never attached
        """
        model = self.lookup(model_name)
        provider = self._providers.get(model.provider)
        if provider is None:
            raise ProviderNotConfiguredError(model.provider, model_name)
        return provider

    @property
    def providers(self) -> List[BaseModelProvider]:
        return list(self._providers.values())

    def __len__(self) -> int:
        return len(self._models)
