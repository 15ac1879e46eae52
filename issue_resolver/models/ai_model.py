"""Model catalog types: capabilities, costs and usage accounting"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Optional, Tuple, Dict, Any


class CapabilityDomain(str, Enum):
    """Task domains a model can be rated on"""
    ANALYSIS = "analysis"
    CODING = "coding"
    REASONING = "reasoning"
    CREATIVE = "creative"
    VISION = "vision"
    FUNCTION_CALLING = "function_calling"


class CapabilityStrength(str, Enum):
    """How well a model performs in a domain"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    EXCELLENT = "excellent"

    @property
    def rank(self) -> int:
        return _STRENGTH_RANK[self]


_STRENGTH_RANK = {
    CapabilityStrength.EXCELLENT: 4,
    CapabilityStrength.HIGH: 3,
    CapabilityStrength.MEDIUM: 2,
    CapabilityStrength.LOW: 1,
}


@dataclass(frozen=True)
class ModelCapability:
    """A (domain, strength) rating"""
    domain: CapabilityDomain
    strength: CapabilityStrength


@dataclass(frozen=True)
class FeatureSupport:
    """Boolean feature flags declared by a model"""
    code_generation: bool = False
    analysis: bool = False
    reasoning: bool = False
    vision: bool = False
    function_calling: bool = False


@dataclass(frozen=True)
class AIModel:
    """A named, addressable inference endpoint

    Instances are immutable once registered. ``provider`` is the id of the
    owning provider adapter.
    """
    name: str
    provider: str
    capabilities: Tuple[ModelCapability, ...] = ()
    cost_per_token: float = 0.0
    max_tokens: int = 4096
    supports: FeatureSupport = field(default_factory=FeatureSupport)

    def __post_init__(self):
        if not self.name:
            raise ValueError("Model name must not be empty")
        if self.cost_per_token < 0:
            raise ValueError(f"Model '{self.name}' has negative cost per token")
        # Accept lists from callers but store an immutable tuple
        object.__setattr__(self, "capabilities", tuple(self.capabilities))

    def strength_for(self, domain: str) -> Optional[CapabilityStrength]:
        """Strength of the capability tag for a domain, if declared"""
        for capability in self.capabilities:
            if capability.domain.value == domain:
                return capability.strength
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "provider": self.provider,
            "capabilities": [
                {"type": c.domain.value, "strength": c.strength.value}
                for c in self.capabilities
            ],
            "cost_per_token": self.cost_per_token,
            "max_tokens": self.max_tokens,
            "supports": asdict(self.supports),
        }


def capabilities(**ratings: str) -> Tuple[ModelCapability, ...]:
    """Build a capability tuple from ``domain=strength`` keywords"""
    return tuple(
        ModelCapability(CapabilityDomain(domain), CapabilityStrength(strength))
        for domain, strength in ratings.items()
    )


@dataclass
class UsageRecord:
    """Running totals for one model"""
    model: str
    calls: int = 0
    tokens: int = 0
    cost: float = 0.0


@dataclass
class SelectionConstraints:
    """Hard filters and tie-break preference for model selection"""
    needs_vision: bool = False
    needs_function_calling: bool = False
    max_cost_per_token: Optional[float] = None
    prefer_speed: bool = False

    @classmethod
    def from_params(cls, params: Dict[str, Any]) -> "SelectionConstraints":
        """Read constraints from a task parameter bag"""
        max_cost = params.get("maxCost", params.get("max_cost"))
        return cls(
            needs_vision=bool(params.get("needsVision", params.get("needs_vision", False))),
            needs_function_calling=bool(
                params.get("needsFunctionCalling", params.get("needs_function_calling", False))
            ),
            max_cost_per_token=float(max_cost) if max_cost is not None else None,
            prefer_speed=bool(params.get("preferSpeed", params.get("prefer_speed", False))),
        )


@dataclass
class ExecutionOutcome:
    """Result of a single model invocation"""
    response: str
    model: str
    tokens_used: int
    cost: float
