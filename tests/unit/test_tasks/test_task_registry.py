"""Unit tests for task discovery and the task registry"""

import pytest

from issue_resolver.core.exceptions import NotFoundError
from issue_resolver.models.task import TaskCategory, TaskPriority
from issue_resolver.services.tasks import BaseTask, TaskRegistry, load_task_classes, register_task

BUILTIN_TASKS = [
    "analyze-issue",
    "triage-issues",
    "find-duplicates",
    "bug-fix",
    "feature-implementation",
    "refactor",
    "documentation-update",
    "security-scan",
    "test-generation",
    "generate-report",
    "metrics",
]


class TestTaskDiscovery:
    """Test decorator-based task discovery"""

    def test_builtin_tasks_discovered(self):
        classes = load_task_classes()

        assert set(BUILTIN_TASKS) <= set(classes)
        assert all(issubclass(cls, BaseTask) for cls in classes.values())

    def test_decorator_assigns_name(self):
        classes = load_task_classes()

        assert classes["bug-fix"].name == "bug-fix"

    def test_decorator_rejects_non_task(self):
        with pytest.raises(ValueError):
            @register_task("not-a-task")
            class NotATask:
                pass


class TestTaskRegistry:
    """Test the task registry built for one manager and repository"""

    def test_default_registry_has_builtin_tasks(self, model_manager, github):
        registry = TaskRegistry(model_manager, github)

        names = [task.name for task in registry.list_tasks()]
        assert set(BUILTIN_TASKS) <= set(names)

    def test_get_unknown_task(self, model_manager, github):
        with pytest.raises(NotFoundError) as exc_info:
            TaskRegistry(model_manager, github).get("ghost")

        assert str(exc_info.value) == "Task 'ghost' not found"

    def test_tasks_share_collaborators(self, model_manager, github):
        task = TaskRegistry(model_manager, github).get("analyze-issue")

        assert task.model_manager is model_manager
        assert task.github is github

    def test_metadata(self, model_manager, github):
        metadata = TaskRegistry(model_manager, github).get("security-scan").get_metadata()

        assert metadata.category == TaskCategory.MAINTENANCE
        assert metadata.priority == TaskPriority.CRITICAL
        assert "security" in metadata.triggers
        assert metadata.to_dict()["category"] == "maintenance"

    def test_find_matching_orders_by_priority(self, model_manager, github):
        matches = TaskRegistry(model_manager, github).find_matching("security scan and test coverage")

        names = [task.name for task in matches]
        assert names[0] == "security-scan"
        assert "test-generation" in names
        priorities = [task.priority.rank for task in matches]
        assert priorities == sorted(priorities, reverse=True)

    def test_bug_fix_depends_on_analysis(self, model_manager, github):
        metadata = TaskRegistry(model_manager, github).get("bug-fix").get_metadata()

        assert metadata.dependencies == ["analyze-issue"]
