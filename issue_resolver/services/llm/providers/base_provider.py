"""Base provider architecture for multi-model LLM support"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, List

from ....models.ai_model import AIModel


class BaseModelProvider(ABC):
    """Abstract base class for all model providers

    A provider is the credentialed backend hosting one or more models.
    Each implementation turns a prompt plus an option bag into raw
    response text and declares the catalog of models it serves.
    """

    provider_id: str = ""
    display_name: str = ""

    def __init__(
        self,
        api_key: str = "",
        base_url: Optional[str] = None,
        timeout: float = 120.0,
        models: Optional[List[AIModel]] = None
    ):
        """Initialize the provider

        Args:
            api_key: Credential, empty for providers that need none
            base_url: Optional endpoint override
            timeout: Request timeout in seconds
            models: Override for the default model catalog
        """
        self.api_key = api_key
        self.base_url = base_url or self.default_base_url()
        self.timeout = timeout
        self.models: List[AIModel] = list(models) if models is not None else self.default_models()
        self._client = None

    @property
    def name(self) -> str:
        return self.display_name or self.provider_id

    def default_base_url(self) -> Optional[str]:
        return None

    @abstractmethod
    def default_models(self) -> List[AIModel]:
        """Models this provider offers unless overridden

        Returns:
            Ordered list of model definitions
        """
        pass

    @abstractmethod
    async def make_request(
        self,
        prompt: str,
        model_name: str,
        options: Optional[Dict[str, Any]] = None
    ) -> str:
        """Send one prompt to a model

        Args:
            prompt: Input prompt
            model_name: Model to address
            options: Option bag (max_tokens, temperature, ...)

        Returns:
            Raw response text

        Raises:
            ProviderCallError: If the underlying call fails
        """
        pass

    async def health_check(self) -> Dict[str, Any]:
        """Check provider health and availability

        Returns:
            Health status dictionary
        """
        return {
            "provider": self.provider_id,
            "status": "configured" if (self.api_key or self.base_url) else "no_credentials",
            "models": [model.name for model in self.models],
        }

    def owns(self, model_name: str) -> bool:
        return any(model.name == model_name for model in self.models)

    async def shutdown(self) -> None:
        """Cleanup provider resources"""
        close = getattr(self._client, "close", None)
        if close is not None:
            await close()
        self._client = None

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(provider_id={self.provider_id}, models={len(self.models)})>"
