"""Pytest configuration and shared fixtures"""

import pytest
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock

from issue_resolver.core.exceptions import ProviderCallError
from issue_resolver.models.ai_model import AIModel, FeatureSupport, capabilities
from issue_resolver.models.task import ModelSelection, TaskContext
from issue_resolver.services.github_client import GitHubClient
from issue_resolver.services.llm.model_manager import ModelManager
from issue_resolver.services.llm.providers.base_provider import BaseModelProvider


def make_model(
    name: str,
    provider: str = "fake",
    cost: float = 0.00001,
    vision: bool = False,
    function_calling: bool = False,
    **ratings: str
) -> AIModel:
    """Model definition with ``domain=strength`` capability keywords"""
    return AIModel(
        name=name,
        provider=provider,
        capabilities=capabilities(**ratings),
        cost_per_token=cost,
        max_tokens=8192,
        supports=FeatureSupport(
            code_generation=True,
            analysis=True,
            reasoning=True,
            vision=vision,
            function_calling=function_calling,
        ),
    )


class FakeProvider(BaseModelProvider):
    """In-memory provider returning canned replies"""

    def __init__(
        self,
        provider_id: str = "fake",
        models: Optional[List[AIModel]] = None,
        responses: Optional[Dict[str, str]] = None,
        default_response: str = "ok",
        fail_models: Optional[set] = None
    ):
        self.provider_id = provider_id
        self.responses = dict(responses or {})
        self.default_response = default_response
        self.fail_models = set(fail_models or ())
        self.calls: List[Dict[str, Any]] = []
        super().__init__(api_key="test-key", models=models or [])

    def default_models(self) -> List[AIModel]:
        return []

    async def make_request(
        self,
        prompt: str,
        model_name: str,
        options: Optional[Dict[str, Any]] = None
    ) -> str:
        self.calls.append({"prompt": prompt, "model": model_name, "options": options})
        if model_name in self.fail_models:
            raise ProviderCallError(self.provider_id, model_name, "simulated outage")
        return self.responses.get(model_name, self.default_response)


@pytest.fixture
def fake_provider() -> FakeProvider:
    """Provider with one cheap and one strong vision model"""
    return FakeProvider(models=[
        make_model("fast-cheap", cost=0.0001, analysis="high", coding="medium"),
        make_model("strong-expensive", cost=0.01, vision=True, analysis="high", coding="excellent"),
    ])


@pytest.fixture
def model_manager(fake_provider) -> ModelManager:
    return ModelManager(providers=[fake_provider])


@pytest.fixture
def github() -> AsyncMock:
    """GitHub client double; async methods are AsyncMocks"""
    client = AsyncMock(spec=GitHubClient)
    client.get_issue.return_value = {
        "number": 7,
        "title": "Crash when saving settings",
        "body": "Saving an empty form raises a TypeError",
        "labels": [{"name": "bug"}],
        "user": {"login": "octocat"},
        "created_at": "2024-01-01T00:00:00Z",
    }
    client.get_open_issues.return_value = []
    client.create_issue.return_value = 99
    return client


@pytest.fixture
def task_context(tmp_path) -> TaskContext:
    return TaskContext(
        owner="octo",
        repository="widgets",
        issue_number=7,
        working_directory=str(tmp_path),
        model_selection=ModelSelection(primary="fast-cheap", fallback="strong-expensive"),
    )
