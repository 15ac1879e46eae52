"""Anthropic model provider implementation"""

from typing import Dict, Any, Optional, List

from anthropic import AsyncAnthropic, AnthropicError

from .....core.exceptions import ProviderCallError
from .....models.ai_model import AIModel, FeatureSupport, capabilities
from ..base_provider import BaseModelProvider
from ..provider_decorators import register_provider
from .options import split_options


@register_provider("anthropic")
class AnthropicProvider(BaseModelProvider):
    """Hosted Claude models through the Messages API"""

    display_name = "Anthropic"

    def default_models(self) -> List[AIModel]:
        return [
            AIModel(
                name="claude-3-5-sonnet-20241022",
                provider="anthropic",
                capabilities=capabilities(
                    analysis="excellent",
                    coding="excellent",
                    reasoning="excellent",
                    creative="high",
                ),
                cost_per_token=0.000015,
                max_tokens=200000,
                supports=FeatureSupport(
                    code_generation=True,
                    analysis=True,
                    reasoning=True,
                    vision=True,
                    function_calling=True,
                ),
            ),
            AIModel(
                name="claude-3-haiku-20240307",
                provider="anthropic",
                capabilities=capabilities(
                    analysis="high",
                    coding="medium",
                    reasoning="medium",
                ),
                cost_per_token=0.00000125,
                max_tokens=200000,
                supports=FeatureSupport(
                    code_generation=True,
                    analysis=True,
                    reasoning=True,
                    vision=True,
                    function_calling=True,
                ),
            ),
        ]

    def _get_client(self) -> AsyncAnthropic:
        if self._client is None:
            if not self.api_key:
                raise ProviderCallError(self.provider_id, "-", "no API key configured")
            kwargs = {"api_key": self.api_key, "timeout": self.timeout}
            if self.base_url:
                kwargs["base_url"] = self.base_url
            self._client = AsyncAnthropic(**kwargs)
        return self._client

    async def make_request(
        self,
        prompt: str,
        model_name: str,
        options: Optional[Dict[str, Any]] = None
    ) -> str:
        """Generate text with Claude"""
        max_tokens, temperature, extra = split_options(options)
        client = self._get_client()

        try:
            response = await client.messages.create(
                model=model_name,
                max_tokens=max_tokens,
                temperature=temperature,
                messages=[{"role": "user", "content": prompt}],
                **extra
            )
        except AnthropicError as e:
            raise ProviderCallError(self.provider_id, model_name, str(e)) from e

        text_blocks = [
            block.text for block in response.content
            if getattr(block, "type", "text") == "text"
        ]
        if not text_blocks:
            raise ProviderCallError(self.provider_id, model_name, "response contained no text")
        return "".join(text_blocks)
