"""Unit tests for the model manager"""

import pytest
from unittest.mock import patch

from issue_resolver.core.config import ProviderSettings
from issue_resolver.core.exceptions import (
    NotFoundError,
    ProviderCallError,
    ProviderNotConfiguredError,
)
from issue_resolver.models.ai_model import SelectionConstraints
from issue_resolver.services.llm.model_manager import ModelManager, estimate_tokens

from conftest import FakeProvider, make_model


class TestEstimateTokens:
    """Test the character-count token estimate"""

    def test_rounds_each_side_up(self):
        assert estimate_tokens("hello", "hi") == 2 + 1

    def test_empty_strings(self):
        assert estimate_tokens("", "") == 0

    def test_exact_multiples(self):
        assert estimate_tokens("a" * 8, "b" * 4) == 3


class TestExecuteWithModel:
    """Test the single-call invocation primitive"""

    @pytest.mark.asyncio
    async def test_success_records_usage(self, model_manager, fake_provider):
        fake_provider.responses["fast-cheap"] = "world"

        outcome = await model_manager.execute_with_model("hello", "fast-cheap")

        assert outcome.response == "world"
        assert outcome.model == "fast-cheap"
        assert outcome.tokens_used == estimate_tokens("hello", "world")
        assert outcome.cost == pytest.approx(outcome.tokens_used * 0.0001)

        record = model_manager.ledger.get("fast-cheap")
        assert record.calls == 1
        assert record.tokens == outcome.tokens_used

    @pytest.mark.asyncio
    async def test_two_calls_count_twice(self, model_manager):
        await model_manager.execute_with_model("hello", "fast-cheap")
        await model_manager.execute_with_model("hello", "fast-cheap")

        assert model_manager.ledger.get("fast-cheap").calls == 2

    @pytest.mark.asyncio
    async def test_totals_sum_over_calls(self, model_manager, fake_provider):
        prompts = ["a" * 10, "b" * 25, "c" * 3]
        expected_tokens = sum(estimate_tokens(p, "ok") for p in prompts)

        for prompt in prompts:
            await model_manager.execute_with_model(prompt, "strong-expensive")

        record = model_manager.ledger.get("strong-expensive")
        assert record.calls == 3
        assert record.tokens == expected_tokens
        assert record.cost == pytest.approx(expected_tokens * 0.01)

    @pytest.mark.asyncio
    async def test_unknown_model(self, model_manager):
        with pytest.raises(NotFoundError):
            await model_manager.execute_with_model("hello", "ghost")

    @pytest.mark.asyncio
    async def test_provider_not_configured(self, model_manager):
        model_manager.registry.register_model(make_model("orphan", provider="absent"))

        with pytest.raises(ProviderNotConfiguredError):
            await model_manager.execute_with_model("hello", "orphan")

    @pytest.mark.asyncio
    async def test_failure_leaves_ledger_untouched(self, model_manager, fake_provider):
        fake_provider.fail_models.add("fast-cheap")

        with pytest.raises(ProviderCallError):
            await model_manager.execute_with_model("hello", "fast-cheap")

        assert model_manager.ledger.get("fast-cheap").calls == 0

    @pytest.mark.asyncio
    async def test_unexpected_adapter_error_is_wrapped(self, model_manager, fake_provider):
        async def broken(prompt, model_name, options=None):
            raise RuntimeError("socket closed")

        fake_provider.make_request = broken

        with pytest.raises(ProviderCallError) as exc_info:
            await model_manager.execute_with_model("hello", "fast-cheap")

        assert "socket closed" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_options_forwarded(self, model_manager, fake_provider):
        await model_manager.execute_with_model("hello", "fast-cheap", {"temperature": 0.1})

        assert fake_provider.calls[-1]["options"] == {"temperature": 0.1}

    @pytest.mark.asyncio
    async def test_max_tokens_clamped(self, fake_provider):
        manager = ModelManager(providers=[fake_provider], max_tokens_per_request=1000)

        await manager.execute_with_model("hello", "fast-cheap", {"max_tokens": 5000})

        assert fake_provider.calls[-1]["options"] == {"max_tokens": 1000}

    @pytest.mark.asyncio
    async def test_budget_warning(self, fake_provider):
        manager = ModelManager(providers=[fake_provider], max_daily_cost=0.0)

        with patch.object(manager.logger, "warning") as warning:
            await manager.execute_with_model("hello", "strong-expensive")

        warning.assert_called_once()
        assert "budget exceeded" in warning.call_args.args[0]


class TestModelManager:
    """Test catalog access and preferences"""

    def test_list_available_models_idempotent(self, model_manager):
        first = model_manager.list_available_models()

        assert first == model_manager.list_available_models()
        assert [m.name for m in first] == ["fast-cheap", "strong-expensive"]

    def test_get_model_info(self, model_manager):
        assert model_manager.get_model_info("fast-cheap").provider == "fake"
        assert model_manager.get_model_info("ghost") is None

    def test_get_optimal_model_end_to_end(self, model_manager):
        assert model_manager.get_optimal_model("analysis") == "fast-cheap"
        assert model_manager.get_optimal_model(
            "analysis", SelectionConstraints(needs_vision=True)
        ) == "strong-expensive"

    def test_task_preference_honoured(self, model_manager):
        model_manager.set_task_preference("analyze-issue", "strong-expensive")

        assert model_manager.get_optimal_model("analysis", task_name="analyze-issue") == "strong-expensive"
        assert model_manager.get_optimal_model("analysis") == "fast-cheap"

    def test_nonexistent_preference_falls_through(self, model_manager):
        model_manager.set_task_preference("analysis", "ghost-model")

        assert model_manager.get_optimal_model("analysis") == "fast-cheap"

    def test_require_model(self, model_manager):
        with pytest.raises(NotFoundError):
            model_manager.require_model("ghost")

    def test_usage_stats_start_at_zero(self, model_manager):
        stats = model_manager.get_usage_stats()

        assert [row["model"] for row in stats] == ["fast-cheap", "strong-expensive"]
        assert model_manager.total_cost() == 0

    def test_has_providers(self, fake_provider):
        assert ModelManager().has_providers is False
        assert ModelManager(providers=[fake_provider]).has_providers is True

    def test_isolated_instances(self, fake_provider):
        """Each manager owns its own registry and ledger"""
        first = ModelManager(providers=[fake_provider])
        second = ModelManager()

        assert len(first.registry) == 2
        assert len(second.registry) == 0

    def test_from_provider_settings(self):
        manager = ModelManager.from_provider_settings([
            ProviderSettings(provider_id="local", base_url="http://models.internal:11434"),
        ])

        assert [m.name for m in manager.list_available_models()] == ["llama-3.1-8b"]
        assert manager.registry.get_provider("llama-3.1-8b").base_url == "http://models.internal:11434"

    def test_from_provider_settings_unknown_provider(self):
        with pytest.raises(NotFoundError):
            ModelManager.from_provider_settings([ProviderSettings(provider_id="nonexistent")])

    @pytest.mark.asyncio
    async def test_shutdown_closes_providers(self, model_manager, fake_provider):
        closed = []

        async def close():
            closed.append(True)

        fake_provider._client = type("Client", (), {"close": staticmethod(close)})()

        await model_manager.shutdown()

        assert closed == [True]
