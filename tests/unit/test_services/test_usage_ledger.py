"""Unit tests for the usage ledger"""

import pytest

from issue_resolver.core.exceptions import NotFoundError
from issue_resolver.services.llm.usage_ledger import UsageLedger


class TestUsageLedger:
    """Test per-model usage accounting"""

    def test_ensure_creates_zero_row(self):
        ledger = UsageLedger()
        ledger.ensure("m")

        assert ledger.snapshot() == [{"model": "m", "calls": 0, "tokens": 0, "cost": 0.0}]

    def test_ensure_keeps_existing_totals(self):
        ledger = UsageLedger()
        ledger.ensure("m")
        ledger.record_usage("m", 10, 0.5)
        ledger.ensure("m")

        assert ledger.get("m").calls == 1

    def test_record_usage_accumulates(self):
        ledger = UsageLedger()
        ledger.ensure("m")

        ledger.record_usage("m", 10, 0.1)
        ledger.record_usage("m", 5, 0.05)

        record = ledger.get("m")
        assert record.calls == 2
        assert record.tokens == 15
        assert record.cost == pytest.approx(0.15)

    def test_record_usage_unknown_model(self):
        with pytest.raises(NotFoundError):
            UsageLedger().record_usage("missing", 1, 0.0)

    def test_negative_increments_rejected(self):
        ledger = UsageLedger()
        ledger.ensure("m")

        with pytest.raises(ValueError):
            ledger.record_usage("m", -1, 0.0)
        with pytest.raises(ValueError):
            ledger.record_usage("m", 1, -0.1)

    def test_get_returns_copy(self):
        ledger = UsageLedger()
        ledger.ensure("m")

        ledger.get("m").calls = 42

        assert ledger.get("m").calls == 0

    def test_total_cost(self):
        ledger = UsageLedger()
        ledger.ensure("a")
        ledger.ensure("b")
        ledger.record_usage("a", 1, 0.25)
        ledger.record_usage("b", 1, 0.5)

        assert ledger.total_cost() == pytest.approx(0.75)
        assert len(ledger) == 2
