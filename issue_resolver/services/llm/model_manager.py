"""Model manager: selection, invocation and usage tracking"""

import math
import time
from typing import Dict, Any, Optional, List

from ...core.config import Settings, ProviderSettings
from ...core.exceptions import ProviderCallError
from ...models.ai_model import AIModel, ExecutionOutcome, SelectionConstraints
from ..base_service import BaseService
from .model_registry import ModelRegistry
from .providers.base_provider import BaseModelProvider
from .providers.model_selector import ModelSelector, DEFAULT_SAFE_MODEL
from .providers.provider_registry import build_providers
from .usage_ledger import UsageLedger

CHARS_PER_TOKEN = 4


def estimate_tokens(prompt: str, response: str) -> int:
    """Coarse, provider-agnostic token estimate used for accounting"""
    return math.ceil(len(prompt) / CHARS_PER_TOKEN) + math.ceil(len(response) / CHARS_PER_TOKEN)


class ModelManager(BaseService):
    """Owns the model registry, usage ledger, selector and task preferences

    One instance is built per process (or per test) and handed to the task
    layer and the CLI.
    """

    def __init__(
        self,
        providers: Optional[List[BaseModelProvider]] = None,
        task_preferences: Optional[Dict[str, str]] = None,
        default_model: str = DEFAULT_SAFE_MODEL,
        max_tokens_per_request: Optional[int] = None,
        max_daily_cost: Optional[float] = None
    ):
        """Initialize model manager

        Args:
            providers: Provider adapters to attach, in registration order
            task_preferences: Task name to preferred model name
            default_model: Model returned when selection filters leave
                no candidates
            max_tokens_per_request: Upper bound applied to a requested
                ``max_tokens`` option
            max_daily_cost: Spend above which every further call logs a
                budget warning
        """
        super().__init__("ModelManager")
        self.ledger = UsageLedger()
        self.registry = ModelRegistry(self.ledger)
        self.selector = ModelSelector(self.registry, default_model=default_model)
        self._task_preferences: Dict[str, str] = dict(task_preferences or {})
        self.max_tokens_per_request = max_tokens_per_request
        self.max_daily_cost = max_daily_cost

        for provider in providers or []:
            self.add_provider(provider)

    @classmethod
    def from_provider_settings(
        cls,
        provider_settings: List[ProviderSettings],
        **kwargs
    ) -> "ModelManager":
        """Build a manager for an explicit list of providers"""
        return cls(providers=build_providers(provider_settings), **kwargs)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ModelManager":
        """Build a manager for every provider whose credential is configured"""
        return cls.from_provider_settings(
            settings.llm.provider_settings(),
            task_preferences=settings.llm.task_preferences,
            default_model=settings.llm.safe_default_model,
            max_tokens_per_request=settings.limits.max_tokens_per_request,
            max_daily_cost=settings.limits.max_daily_cost
        )

    def add_provider(self, provider: BaseModelProvider) -> None:
        self.registry.register(provider)

    @property
    def has_providers(self) -> bool:
        return bool(self.registry.providers)

    def list_available_models(self) -> List[AIModel]:
        return self.registry.list_all()

    def get_model_info(self, model_name: str) -> Optional[AIModel]:
        if not self.registry.contains(model_name):
            return None
        return self.registry.lookup(model_name)

    def get_optimal_model(
        self,
        task_type: str,
        constraints: Optional[SelectionConstraints] = None,
        task_name: Optional[str] = None
    ) -> str:
        """Pick the best model for a task category under constraints

        Args:
            task_type: Task category (or capability domain) to rank on
            constraints: Selection constraints
            task_name: Task whose preference should be honoured; defaults
                to ``task_type``

        Returns:
            Model name
        """
        preferred = self._task_preferences.get(task_name or task_type)
        return self.selector.select(task_type, constraints, preferred_model=preferred)

    async def execute_with_model(
        self,
        prompt: str,
        model_name: str,
        options: Optional[Dict[str, Any]] = None
    ) -> ExecutionOutcome:
        """Perform exactly one provider call and account for it

        Raises:
            NotFoundError: Model not registered
            ProviderNotConfiguredError: Model's provider not attached
            ProviderCallError: The adapter call failed; the ledger is
                left untouched
        """
        model = self.registry.lookup(model_name)
        provider = self.registry.get_provider(model_name)

        with self.traced_operation(
            "execute_with_model",
            model=model_name,
            provider=model.provider
        ) as span:
            started = time.perf_counter()
            try:
                response = await provider.make_request(
                    prompt,
                    model_name,
                    self._limit_options(options or {})
                )
            except ProviderCallError:
                raise
            except Exception as e:
                raise ProviderCallError(model.provider, model_name, str(e)) from e
            duration_ms = (time.perf_counter() - started) * 1000

            tokens_used = estimate_tokens(prompt, response)
            cost = tokens_used * model.cost_per_token
            self.ledger.record_usage(model_name, tokens_used, cost)

            span.set_attributes({"llm.tokens": tokens_used, "llm.cost": cost})
            self.logger.info(
                f"Request completed in {duration_ms:.0f}ms. "
                f"Tokens: {tokens_used}, Cost: ${cost:.6f}"
            )
            if self.max_daily_cost is not None and self.ledger.total_cost() > self.max_daily_cost:
                self.logger.warning(
                    f"Daily cost budget exceeded: ${self.ledger.total_cost():.4f} "
                    f"> ${self.max_daily_cost:.2f}"
                )

        return ExecutionOutcome(
            response=response,
            model=model_name,
            tokens_used=tokens_used,
            cost=cost
        )

    def _limit_options(self, options: Dict[str, Any]) -> Dict[str, Any]:
        """Clamp a requested max_tokens to the configured per-request limit"""
        if self.max_tokens_per_request is None:
            return options
        limited = dict(options)
        for key in ("max_tokens", "maxTokens"):
            if key in limited and limited[key] > self.max_tokens_per_request:
                limited[key] = self.max_tokens_per_request
        return limited

    def set_task_preference(self, task_name: str, model_name: str) -> None:
        """Point a task at a model; existence is checked at selection time"""
        self._task_preferences[task_name] = model_name
        self.logger.info(f"Set task preference: {task_name} -> {model_name}")

    def get_task_preference(self, task_name: str) -> Optional[str]:
        return self._task_preferences.get(task_name)

    @property
    def task_preferences(self) -> Dict[str, str]:
        return dict(self._task_preferences)

    def require_model(self, model_name: str) -> AIModel:
        """Lookup that raises for unknown names"""
        return self.registry.lookup(model_name)

    def get_usage_stats(self) -> List[Dict[str, Any]]:
        return self.ledger.snapshot()

    def total_cost(self) -> float:
        return self.ledger.total_cost()

    async def shutdown(self) -> None:
        """Close every provider client"""
        for provider in self.registry.providers:
            await provider.shutdown()
