"""Unit tests for fix, feature, refactoring and documentation tasks"""

import json

import pytest

from issue_resolver.core.exceptions import ResponseParseError
from issue_resolver.services.tasks.implementations.resolution_tasks import (
    BugFixTask,
    DocumentationUpdateTask,
    FeatureImplementationTask,
    RefactorTask,
    effort_level,
    estimated_hours,
)

FIX_PLAN = {
    "rootCause": "Empty form posts None",
    "solution": "Default missing fields",
    "codeChanges": [
        {"file": "app/settings.py", "action": "create", "content": "VALUE = 1\n", "explanation": "new module"},
        {"file": "old.py", "action": "delete", "explanation": "unused"},
        {"file": "../outside.py", "action": "create", "content": "x", "explanation": "escapes"},
    ],
    "testCases": ["save empty form"],
    "risks": [],
}


class TestBugFixTask:
    """Test fix generation and application"""

    @pytest.mark.asyncio
    async def test_plan_without_auto_implement(self, model_manager, github, task_context, fake_provider, tmp_path):
        (tmp_path / "README.md").write_text("# Widgets\n")
        fake_provider.responses["fast-cheap"] = json.dumps(FIX_PLAN)

        result = await BugFixTask(model_manager, github).execute(task_context)

        assert result.success is True
        assert result.files_modified == []
        assert result.next_tasks == []
        assert not (tmp_path / "app" / "settings.py").exists()
        assert "README.md" in fake_provider.calls[0]["prompt"]
        assert "Empty form posts None" in github.add_comment.call_args.args[1]

    @pytest.mark.asyncio
    async def test_auto_implement_writes_inside_working_directory(
        self, model_manager, github, task_context, fake_provider, tmp_path
    ):
        (tmp_path / "old.py").write_text("pass\n")
        fake_provider.responses["fast-cheap"] = json.dumps(FIX_PLAN)

        result = await BugFixTask(model_manager, github).execute(
            task_context.with_params({"autoImplement": True})
        )

        assert result.files_modified == ["app/settings.py", "old.py"]
        assert (tmp_path / "app" / "settings.py").read_text() == "VALUE = 1\n"
        assert not (tmp_path / "old.py").exists()
        assert not (tmp_path.parent / "outside.py").exists()
        assert result.next_tasks == ["test-generation"]

    @pytest.mark.asyncio
    async def test_requested_files_are_read(self, model_manager, github, task_context, fake_provider, tmp_path):
        (tmp_path / "core.py").write_text("def save(): pass\n")
        fake_provider.responses["fast-cheap"] = json.dumps(FIX_PLAN)

        await BugFixTask(model_manager, github).execute(task_context.with_params({"files": ["core.py"]}))

        assert "def save(): pass" in fake_provider.calls[0]["prompt"]

    @pytest.mark.asyncio
    async def test_unparseable_plan_raises(self, model_manager, github, task_context, fake_provider):
        fake_provider.responses["fast-cheap"] = "no plan today"

        with pytest.raises(ResponseParseError):
            await BugFixTask(model_manager, github).execute(task_context)

    @pytest.mark.asyncio
    async def test_requires_issue(self, model_manager, github, task_context):
        result = await BugFixTask(model_manager, github).execute(
            task_context.model_copy(update={"issue_number": None})
        )

        assert result.success is False


class TestDocumentationUpdateTask:
    """Test documentation planning"""

    @pytest.mark.asyncio
    async def test_auto_update(self, model_manager, github, task_context, fake_provider, tmp_path):
        (tmp_path / "README.md").write_text("old readme\n")
        fake_provider.responses["fast-cheap"] = json.dumps({
            "updates": [{"file": "README.md", "content": "new readme\n", "changesSummary": "refresh"}],
            "newFiles": [{"file": "docs/USAGE.md", "content": "usage\n", "purpose": "guide"}],
            "changelog": {"version": "1.1.0", "date": "2024-01-01", "changes": ["docs"]},
        })
        context = task_context.model_copy(update={"issue_number": None}).with_params({
            "changes": "Added a settings page",
            "autoImplement": True,
        })

        result = await DocumentationUpdateTask(model_manager, github).execute(context)

        assert result.success is True
        assert result.files_modified == ["README.md", "docs/USAGE.md"]
        assert (tmp_path / "README.md").read_text() == "new readme\n"
        assert (tmp_path / "docs" / "USAGE.md").read_text() == "usage\n"
        assert "Added a settings page" in fake_provider.calls[0]["prompt"]
        github.get_issue.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_issue_describes_changes(self, model_manager, github, task_context, fake_provider):
        fake_provider.responses["fast-cheap"] = json.dumps({"updates": [], "newFiles": []})

        result = await DocumentationUpdateTask(model_manager, github).execute(task_context)

        assert result.files_modified == []
        assert "Crash when saving settings" in fake_provider.calls[0]["prompt"]

    @pytest.mark.asyncio
    async def test_malformed_entries_are_skipped(self, model_manager, github, task_context, fake_provider, tmp_path):
        fake_provider.responses["fast-cheap"] = json.dumps({
            "updates": ["README.md", {"file": "README.md", "content": "fresh\n"}],
            "newFiles": [42],
        })
        context = task_context.model_copy(update={"issue_number": None}).with_params({"autoImplement": True})

        result = await DocumentationUpdateTask(model_manager, github).execute(context)

        assert result.success is True
        assert result.files_modified == ["README.md"]
        assert (tmp_path / "README.md").read_text() == "fresh\n"


class TestWriteFiles:
    """Test applying model-proposed changes"""

    @pytest.mark.asyncio
    async def test_non_dict_changes_are_skipped(self, model_manager, github, tmp_path):
        task = BugFixTask(model_manager, github)

        modified = await task.write_files(
            str(tmp_path),
            ["notes.md", None, {"file": "notes.md", "action": "create", "content": "kept\n"}],
        )

        assert modified == ["notes.md"]
        assert (tmp_path / "notes.md").read_text() == "kept\n"

    @pytest.mark.asyncio
    async def test_bug_fix_with_malformed_code_changes(self, model_manager, github, task_context, fake_provider):
        fake_provider.responses["fast-cheap"] = json.dumps({
            "rootCause": "typo",
            "solution": "rename",
            "codeChanges": ["app.py"],
        })

        result = await BugFixTask(model_manager, github).execute(
            task_context.with_params({"autoImplement": True})
        )

        assert result.success is True
        assert result.files_modified == []
        github.add_comment.assert_awaited_once()


FEATURE_PLAN = {
    "featureName": "Dark mode",
    "implementationPlan": {
        "overview": "Add a theme switch",
        "phases": [
            {"name": "Styles", "description": "CSS variables", "tasks": ["palette"], "estimatedHours": 6},
            {"name": "Toggle", "description": "Settings entry", "tasks": ["switch"], "estimatedHours": 4},
        ],
    },
    "technicalSpecs": {"architecture": "CSS custom properties"},
    "codeImplementation": [
        {"file": "ui/theme.py", "content": "DARK = True\n", "explanation": "theme flag"},
        "not a change",
    ],
}


class TestFeatureImplementationTask:
    """Test feature planning"""

    @pytest.mark.asyncio
    async def test_plan_commented_and_labelled(self, model_manager, github, task_context, fake_provider, tmp_path):
        fake_provider.responses["fast-cheap"] = json.dumps(FEATURE_PLAN)

        result = await FeatureImplementationTask(model_manager, github).execute(task_context)

        assert result.success is True
        assert result.data == FEATURE_PLAN
        assert result.next_tasks == ["test-generation", "documentation-update"]
        assert result.files_modified == []
        comment = github.add_comment.call_args.args[1]
        assert "Dark mode" in comment
        assert "**Total estimated hours:** 10" in comment
        github.add_labels.assert_awaited_once_with(7, ["implementation-ready", "effort-medium"])
        assert not (tmp_path / "ui" / "theme.py").exists()

    @pytest.mark.asyncio
    async def test_auto_implement_writes_code(self, model_manager, github, task_context, fake_provider, tmp_path):
        fake_provider.responses["fast-cheap"] = json.dumps(FEATURE_PLAN)

        result = await FeatureImplementationTask(model_manager, github).execute(
            task_context.with_params({"autoImplement": True})
        )

        assert result.files_modified == ["ui/theme.py"]
        assert (tmp_path / "ui" / "theme.py").read_text() == "DARK = True\n"

    @pytest.mark.asyncio
    async def test_requires_issue(self, model_manager, github, task_context):
        result = await FeatureImplementationTask(model_manager, github).execute(
            task_context.model_copy(update={"issue_number": None})
        )

        assert result.success is False
        github.get_issue.assert_not_awaited()

    def test_effort_levels(self):
        def plan(*hours):
            return {"implementationPlan": {"phases": [{"estimatedHours": h} for h in hours]}}

        assert effort_level(plan(2, 3)) == "small"
        assert effort_level(plan(8)) == "medium"
        assert effort_level(plan(20, 10)) == "large"
        assert effort_level({"implementationPlan": "later"}) == "small"
        assert estimated_hours(plan("4", "soon")) == 4


class TestRefactorTask:
    """Test refactoring plans"""

    @pytest.mark.asyncio
    async def test_files_required(self, model_manager, github, task_context, fake_provider):
        result = await RefactorTask(model_manager, github).execute(task_context)

        assert result.success is False
        assert "files" in result.message
        assert fake_provider.calls == []

    @pytest.mark.asyncio
    async def test_unreadable_files(self, model_manager, github, task_context, fake_provider):
        result = await RefactorTask(model_manager, github).execute(
            task_context.with_params({"files": ["missing.py"]})
        )

        assert result.success is False
        assert fake_provider.calls == []

    @pytest.mark.asyncio
    async def test_plan_returned_without_writing(self, model_manager, github, task_context, fake_provider, tmp_path):
        (tmp_path / "legacy.py").write_text("def f(x):\n    return x+1\n")
        plan = {
            "refactoringPlan": {"overview": "Tidy names", "benefits": [], "risks": []},
            "changes": [{"file": "legacy.py", "refactoredContent": "def increment(x):\n    return x + 1\n"}],
        }
        fake_provider.responses["fast-cheap"] = json.dumps(plan)

        result = await RefactorTask(model_manager, github).execute(
            task_context.with_params({"files": ["legacy.py"]})
        )

        assert result.success is True
        assert result.data == plan
        assert result.next_tasks == ["test-generation"]
        assert "return x+1" in fake_provider.calls[0]["prompt"]
        assert (tmp_path / "legacy.py").read_text() == "def f(x):\n    return x+1\n"

    @pytest.mark.asyncio
    async def test_auto_implement_rewrites_files(self, model_manager, github, task_context, fake_provider, tmp_path):
        (tmp_path / "legacy.py").write_text("def f(x):\n    return x+1\n")
        fake_provider.responses["fast-cheap"] = json.dumps({
            "changes": [
                {"file": "legacy.py", "refactoredContent": "def increment(x):\n    return x + 1\n"},
                {"file": "other.py"},
            ],
        })

        result = await RefactorTask(model_manager, github).execute(
            task_context.with_params({"files": ["legacy.py"], "autoImplement": True})
        )

        assert result.files_modified == ["legacy.py"]
        assert (tmp_path / "legacy.py").read_text() == "def increment(x):\n    return x + 1\n"
