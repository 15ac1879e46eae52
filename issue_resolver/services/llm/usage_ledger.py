"""Per-model usage accounting"""

from dataclasses import replace, asdict
from typing import Dict, List, Any

from ...core.exceptions import NotFoundError
from ...models.ai_model import UsageRecord


class UsageLedger:
    """Running call, token and cost totals for every registered model

    Counters only ever grow. ``record_usage`` performs no awaits, so
    updates from coroutines on one event loop are naturally serialised.
    """

    def __init__(self):
        self._records: Dict[str, UsageRecord] = {}

    def ensure(self, model_name: str) -> None:
        """Create a zeroed record unless one already exists"""
        if model_name not in self._records:
            self._records[model_name] = UsageRecord(model=model_name)

    def record_usage(self, model_name: str, tokens: int, cost: float) -> None:
        """Account for one successful call

        Raises:
            NotFoundError: If the model has no record
            ValueError: If tokens or cost is negative
        """
        if tokens < 0 or cost < 0:
            raise ValueError("Usage increments must be non-negative")

        record = self._records.get(model_name)
        if record is None:
            raise NotFoundError("model", model_name)

        record.calls += 1
        record.tokens += tokens
        record.cost += cost

    def get(self, model_name: str) -> UsageRecord:
        record = self._records.get(model_name)
        if record is None:
            raise NotFoundError("model", model_name)
        return replace(record)

    def snapshot(self) -> List[Dict[str, Any]]:
        """Copy of all rows in registration order, zero rows included"""
        return [asdict(record) for record in self._records.values()]

    def total_cost(self) -> float:
        return sum(record.cost for record in self._records.values())

    def __len__(self) -> int:
        return len(self._records)
