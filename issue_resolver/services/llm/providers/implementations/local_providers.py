"""Self-hosted model provider speaking the Ollama generate API"""

from typing import Dict, Any, Optional, List

import httpx

from .....core.exceptions import ProviderCallError
from .....core.logger import CentralizedLogger
from .....models.ai_model import AIModel, FeatureSupport, capabilities
from ..base_provider import BaseModelProvider
from ..provider_decorators import register_provider
from .options import split_options


@register_provider("local")
class LocalProvider(BaseModelProvider):
    """Local or self-hosted models, no credential required"""

    display_name = "Local"

    def __init__(self, *args, transport: Optional[httpx.AsyncBaseTransport] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self._transport = transport
        self.logger = CentralizedLogger("LocalProvider")

    def default_base_url(self) -> Optional[str]:
        return "http://localhost:11434"

    def default_models(self) -> List[AIModel]:
        return [
            AIModel(
                name="llama-3.1-8b",
                provider="local",
                capabilities=capabilities(
                    analysis="medium",
                    coding="medium",
                    reasoning="medium",
                ),
                cost_per_token=0.0,
                max_tokens=32000,
                supports=FeatureSupport(
                    code_generation=True,
                    analysis=True,
                    reasoning=True,
                    vision=False,
                    function_calling=False,
                ),
            ),
        ]

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url.rstrip("/"),
                timeout=self.timeout,
                transport=self._transport
            )
        return self._client

    async def make_request(
        self,
        prompt: str,
        model_name: str,
        options: Optional[Dict[str, Any]] = None
    ) -> str:
        """Generate text with a non-streaming generate call"""
        max_tokens, temperature, _ = split_options(options)
        payload = {
            "model": model_name,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": temperature,
                "num_predict": max_tokens,
            },
        }

        try:
            response = await self._get_client().post("/api/generate", json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise ProviderCallError(
                self.provider_id, model_name, f"HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise ProviderCallError(self.provider_id, model_name, str(e)) from e
        except ValueError as e:
            raise ProviderCallError(self.provider_id, model_name, "malformed JSON payload") from e

        if not isinstance(data, dict) or "response" not in data:
            raise ProviderCallError(self.provider_id, model_name, "payload has no 'response' field")
        return data["response"]

    async def health_check(self) -> Dict[str, Any]:
        """Ping the tags endpoint of the local service"""
        try:
            response = await self._get_client().get("/api/tags")
            response.raise_for_status()
            status = "healthy"
        except httpx.HTTPError as e:
            self.logger.warning(f"Local model service unreachable: {str(e)}")
            status = "unreachable"

        return {
            "provider": self.provider_id,
            "status": status,
            "base_url": self.base_url,
            "models": [model.name for model in self.models],
        }

    async def shutdown(self) -> None:
        if self._client is not None:
            await self._client.aclose()
        self._client = None
