"""Model selector: capability filtering and category-based ranking"""

from typing import Optional, List, TYPE_CHECKING

from ....core.logger import CentralizedLogger
from ....models.ai_model import AIModel, CapabilityDomain, SelectionConstraints
from ....models.task import TaskCategory

if TYPE_CHECKING:
    from ..model_registry import ModelRegistry

DEFAULT_SAFE_MODEL = "gpt-4o-mini"

# Task categories that are not capability domains rank on a related domain
CATEGORY_DOMAINS = {
    TaskCategory.ANALYSIS.value: CapabilityDomain.ANALYSIS.value,
    TaskCategory.RESOLUTION.value: CapabilityDomain.CODING.value,
    TaskCategory.MAINTENANCE.value: CapabilityDomain.CODING.value,
    TaskCategory.REPORTING.value: CapabilityDomain.ANALYSIS.value,
}


class ModelSelector:
    """Choose exactly one model name for a task category

    Selection is a pure function of registry state and inputs: capability
    constraints eliminate candidates, a surviving preferred model wins
    outright, and the rest are ranked by capability strength for the
    category. When nothing survives the filters the designated safe
    default is returned, even if that model is not registered.
    """

    def __init__(self, registry: "ModelRegistry", default_model: str = DEFAULT_SAFE_MODEL):
        self.registry = registry
        self.default_model = default_model
        self.logger = CentralizedLogger("ModelSelector")

    def select(
        self,
        task_category: str,
        constraints: Optional[SelectionConstraints] = None,
        preferred_model: Optional[str] = None
    ) -> str:
        """Select optimal model for a task category

        Args:
            task_category: Task category or capability domain name
            constraints: Hard filters and speed preference
            preferred_model: Task-specific override, honoured only if it
                exists and passes the filters

        Returns:
            Model name
        """
        constraints = constraints or SelectionConstraints()
        candidates = self._filter(self.registry.list_all(), constraints)

        if not candidates:
            self.logger.warning(
                f"No model satisfies constraints for '{task_category}', "
                f"using default: {self.default_model}"
            )
            return self.default_model

        if preferred_model and any(m.name == preferred_model for m in candidates):
            self.logger.debug(f"Using task preference: {preferred_model}")
            return preferred_model

        ranked = self._rank(candidates, task_category, constraints.prefer_speed)
        selected = ranked[0].name
        self.logger.debug(f"Selected {selected} for '{task_category}'")
        return selected

    def _filter(
        self,
        models: List[AIModel],
        constraints: SelectionConstraints
    ) -> List[AIModel]:
        """Drop models failing a hard constraint"""
        if constraints.needs_vision:
            models = [m for m in models if m.supports.vision]
        if constraints.needs_function_calling:
            models = [m for m in models if m.supports.function_calling]
        if constraints.max_cost_per_token is not None:
            models = [m for m in models if m.cost_per_token <= constraints.max_cost_per_token]
        return models

    def _rank(
        self,
        models: List[AIModel],
        task_category: str,
        prefer_speed: bool
    ) -> List[AIModel]:
        """Order by category strength, then cost or registry order"""
        domain = CATEGORY_DOMAINS.get(task_category, task_category)

        def strength_score(model: AIModel) -> int:
            strength = model.strength_for(domain)
            # Untagged models rank below every tagged one
            return strength.rank if strength else 0

        if prefer_speed:
            key = lambda m: (-strength_score(m), m.cost_per_token)
        else:
            key = lambda m: -strength_score(m)

        # sorted() is stable, so equal keys keep registry order
        return sorted(models, key=key)
