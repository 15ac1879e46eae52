"""Model catalogue, selection, invocation and usage accounting"""

from .usage_ledger import UsageLedger
from .model_registry import ModelRegistry
from .model_manager import ModelManager, estimate_tokens

__all__ = [
    "UsageLedger",
    "ModelRegistry",
    "ModelManager",
    "estimate_tokens",
]
