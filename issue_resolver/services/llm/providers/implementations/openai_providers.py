"""OpenAI model provider implementation"""

from typing import Dict, Any, Optional, List

from openai import AsyncOpenAI, OpenAIError

from .....core.exceptions import ProviderCallError
from .....models.ai_model import AIModel, FeatureSupport, capabilities
from ..base_provider import BaseModelProvider
from ..provider_decorators import register_provider
from .options import split_options

JSON_ONLY_SYSTEM_PROMPT = (
    "You must respond with valid JSON only. Do not include any markdown "
    "formatting, code blocks, or explanatory text. Return only the JSON object."
)
JSON_PROMPT_MARKERS = ("Return ONLY valid JSON", "Provide JSON")


@register_provider("openai")
class OpenAIProvider(BaseModelProvider):
    """Hosted OpenAI chat completion models"""

    display_name = "OpenAI"

    def default_base_url(self) -> Optional[str]:
        return "https://api.openai.com/v1"

    def default_models(self) -> List[AIModel]:
        return [
            AIModel(
                name="gpt-4o",
                provider="openai",
                capabilities=capabilities(
                    analysis="excellent",
                    coding="excellent",
                    reasoning="excellent",
                    vision="high",
                ),
                cost_per_token=0.00003,
                max_tokens=128000,
                supports=FeatureSupport(
                    code_generation=True,
                    analysis=True,
                    reasoning=True,
                    vision=True,
                    function_calling=True,
                ),
            ),
            AIModel(
                name="gpt-4o-mini",
                provider="openai",
                capabilities=capabilities(
                    analysis="high",
                    coding="high",
                    reasoning="high",
                ),
                cost_per_token=0.000015,
                max_tokens=128000,
                supports=FeatureSupport(
                    code_generation=True,
                    analysis=True,
                    reasoning=True,
                    vision=False,
                    function_calling=True,
                ),
            ),
        ]

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self.api_key:
                raise ProviderCallError(self.provider_id, "-", "no API key configured")
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout
            )
        return self._client

    def _build_messages(self, prompt: str) -> List[Dict[str, str]]:
        messages = []
        if any(marker in prompt for marker in JSON_PROMPT_MARKERS):
            messages.append({"role": "system", "content": JSON_ONLY_SYSTEM_PROMPT})
        messages.append({"role": "user", "content": prompt})
        return messages

    async def make_request(
        self,
        prompt: str,
        model_name: str,
        options: Optional[Dict[str, Any]] = None
    ) -> str:
        """Generate text with a chat completion"""
        max_tokens, temperature, extra = split_options(options)
        client = self._get_client()

        try:
            response = await client.chat.completions.create(
                model=model_name,
                messages=self._build_messages(prompt),
                max_tokens=max_tokens,
                temperature=temperature,
                **extra
            )
        except OpenAIError as e:
            raise ProviderCallError(self.provider_id, model_name, str(e)) from e

        if not response.choices:
            raise ProviderCallError(self.provider_id, model_name, "response contained no choices")
        return response.choices[0].message.content or ""
