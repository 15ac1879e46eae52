"""Resolution tasks: fix, feature and refactoring plans and documentation updates"""

from typing import Dict, Any, List

from ....models.task import TaskCategory, TaskPriority, TaskContext, TaskResult
from ....utils import parse_json_response
from ..base_task import BaseTask
from ..task_decorators import register_task
from .analysis_tasks import label_names

CONTEXT_FILES = [
    "README.md",
    "pyproject.toml",
    "setup.py",
    "package.json",
    "src/main.py",
    "src/index.ts",
]

DOCUMENTATION_FILES = [
    "README.md",
    "CHANGELOG.md",
    "API.md",
    "docs/README.md",
    "docs/API.md",
]

BUG_FIX_PROMPT = """Propose a fix for this GitHub issue:

Title: {title}
Description: {body}

Relevant files:
{files}

Return ONLY valid JSON (no markdown, no code blocks, no extra text) in this exact format:
{{
  "rootCause": "what causes the bug",
  "solution": "how the fix works",
  "codeChanges": [
    {{
      "file": "relative/path",
      "action": "create|modify|delete",
      "content": "complete new file content",
      "explanation": "why this change"
    }}
  ],
  "testCases": ["test case description"],
  "risks": ["risk"]
}}
Ensure all strings are properly escaped for JSON.
"""

FEATURE_PROMPT = """Create an implementation plan for this feature request:

Title: {title}
Requirements: {body}
Labels: {labels}

Return ONLY valid JSON (no markdown, no code blocks, no extra text) in this exact format:
{{
  "featureName": "clear feature name",
  "implementationPlan": {{
    "overview": "high-level approach",
    "phases": [
      {{"name": "phase name", "description": "what it accomplishes", "tasks": ["task"], "estimatedHours": number}}
    ]
  }},
  "technicalSpecs": {{
    "architecture": "architectural decisions",
    "dependencies": ["new dependency"],
    "apiChanges": "API modifications needed",
    "databaseChanges": "schema changes if any"
  }},
  "codeImplementation": [
    {{"file": "path/to/file", "content": "implementation code", "explanation": "design decisions"}}
  ],
  "testingStrategy": {{"unitTests": ["test"], "integrationTests": ["test"]}},
  "deploymentPlan": "how to deploy safely",
  "rollbackPlan": "rollback strategy"
}}
Ensure all strings are properly escaped for JSON.
"""

REFACTOR_PROMPT = """Refactor these files for maintainability, performance and code quality:

{files}

Return ONLY valid JSON (no markdown, no code blocks, no extra text) in this exact format:
{{
  "refactoringPlan": {{"overview": "what will be improved", "benefits": ["benefit"], "risks": ["risk"]}},
  "changes": [
    {{
      "file": "relative/path",
      "refactoredContent": "complete improved file content",
      "improvements": ["what was improved"],
      "explanation": "why the change improves the code"
    }}
  ],
  "testingNeeded": ["area to test after refactoring"],
  "migrationSteps": ["step"]
}}
Ensure all strings are properly escaped for JSON.
"""

DOCUMENTATION_PROMPT = """Update documentation for these changes:
{changes}

Current documentation files:
{files}

Return ONLY valid JSON (no markdown, no code blocks, no extra text) in this exact format:
{{
  "updates": [
    {{"file": "file path", "content": "updated content", "changesSummary": "what changed and why"}}
  ],
  "newFiles": [
    {{"file": "new file path", "content": "new file content", "purpose": "why this file is needed"}}
  ],
  "changelog": {{"version": "version number", "date": "YYYY-MM-DD", "changes": ["change"]}}
}}
Ensure all strings are properly escaped for JSON.
"""


def format_files(files: List[Dict[str, str]]) -> str:
    if not files:
        return "(none found)"
    return "\n\n".join(
        f"{f['path']}:\n```{f['extension']}\n{f['content']}\n```" for f in files
    )


def format_fix_comment(plan: Dict[str, Any], model: str) -> str:
    lines = [
        "## Proposed Fix",
        "",
        f"**Root cause:** {plan.get('rootCause', 'unknown')}",
        "",
        f"**Solution:** {plan.get('solution', '')}",
    ]
    changes = plan.get("codeChanges") or []
    if changes:
        lines += ["", "### Changes"] + [
            f"- `{c.get('file')}` ({c.get('action', 'modify')}): {c.get('explanation', '')}"
            for c in changes
            if isinstance(c, dict)
        ]
    tests = plan.get("testCases") or []
    if tests:
        lines += ["", "### Test cases"] + [f"- {t}" for t in tests]
    lines += ["", f"_Generated by {model}_"]
    return "\n".join(lines)


def _phases(plan: Dict[str, Any]) -> List[Dict[str, Any]]:
    implementation = plan.get("implementationPlan")
    if not isinstance(implementation, dict):
        return []
    return [phase for phase in implementation.get("phases") or [] if isinstance(phase, dict)]


def estimated_hours(plan: Dict[str, Any]) -> float:
    """Sum of phase estimates; unparseable estimates count as zero"""
    total = 0.0
    for phase in _phases(plan):
        try:
            total += float(phase.get("estimatedHours") or 0)
        except (TypeError, ValueError):
            continue
    return total


def effort_level(plan: Dict[str, Any]) -> str:
    hours = estimated_hours(plan)
    if hours < 8:
        return "small"
    if hours < 24:
        return "medium"
    return "large"


def format_feature_comment(plan: Dict[str, Any], model: str) -> str:
    implementation = plan.get("implementationPlan")
    overview = implementation.get("overview") if isinstance(implementation, dict) else None
    lines = [
        f"## Feature Implementation Plan: {plan.get('featureName', 'unnamed feature')}",
        "",
        f"**Total estimated hours:** {estimated_hours(plan):g}",
        "",
        "### Overview",
        str(overview or "No overview provided"),
    ]
    phases = _phases(plan)
    if phases:
        lines += ["", "### Phases"]
        for index, phase in enumerate(phases, 1):
            tasks = ", ".join(str(t) for t in phase.get("tasks") or []) or "No tasks specified"
            lines += [
                "",
                f"**Phase {index}: {phase.get('name', '')}** ({phase.get('estimatedHours', '?')}h)",
                str(phase.get("description", "")),
                f"Tasks: {tasks}",
            ]
    specs = plan.get("technicalSpecs")
    if isinstance(specs, dict):
        lines += [
            "",
            "### Technical specifications",
            f"- **Architecture:** {specs.get('architecture') or 'Not specified'}",
            f"- **API changes:** {specs.get('apiChanges') or 'None'}",
            f"- **Database changes:** {specs.get('databaseChanges') or 'None'}",
        ]
    lines += ["", f"_Generated by {model}_"]
    return "\n".join(lines)


def _auto_implement(params: Dict[str, Any]) -> bool:
    return bool(params.get("autoImplement") or params.get("auto_implement"))


@register_task("bug-fix")
class BugFixTask(BaseTask):
    """Generate a fix plan for an issue and optionally write the changes"""

    description = "Generate a bug fix for an issue"
    category = TaskCategory.RESOLUTION
    priority = TaskPriority.HIGH
    triggers = ("bug", "fix", "error", "crash", "broken")
    dependencies = ("analyze-issue",)
    input_schema = {
        "files": {"type": "list", "required": False},
        "autoImplement": {"type": "bool", "required": False, "default": False},
    }

    async def execute(self, context: TaskContext) -> TaskResult:
        if context.issue_number is None:
            return self.failure(context, "Issue number required")

        params = context.additional_params
        try:
            self.validate_params(params)
        except ValueError as e:
            return self.failure(context, str(e))

        issue = await self.github.get_issue(context.issue_number)
        files = await self.read_files(
            context.working_directory,
            params.get("files") or CONTEXT_FILES
        )
        prompt = self.prepare_prompt(
            BUG_FIX_PROMPT,
            title=issue.get("title", ""),
            body=issue.get("body") or "No description provided",
            files=format_files(files),
        )
        outcome = await self.call_model(context, prompt)
        plan = parse_json_response(outcome.response)
        if not isinstance(plan, dict):
            return self.failure(context, "Model returned no fix plan", data=plan)

        await self.github.add_comment(context.issue_number, format_fix_comment(plan, outcome.model))

        files_modified = []
        if _auto_implement(params):
            files_modified = await self.write_files(
                context.working_directory,
                plan.get("codeChanges") or []
            )

        return self.completed(
            f"Fix generated for issue #{context.issue_number}",
            outcome,
            data=plan,
            files_modified=files_modified,
            next_tasks=["test-generation"] if files_modified else [],
        )


@register_task("feature-implementation")
class FeatureImplementationTask(BaseTask):
    """Plan a feature request, comment the plan and label its effort"""

    description = "Generate a feature implementation plan from an issue"
    category = TaskCategory.RESOLUTION
    priority = TaskPriority.MEDIUM
    triggers = ("feature", "enhancement", "implement", "add")
    dependencies = ("analyze-issue",)
    input_schema = {
        "autoImplement": {"type": "bool", "required": False, "default": False},
    }

    async def execute(self, context: TaskContext) -> TaskResult:
        if context.issue_number is None:
            return self.failure(context, "Issue number required")

        params = context.additional_params
        try:
            self.validate_params(params)
        except ValueError as e:
            return self.failure(context, str(e))

        issue = await self.github.get_issue(context.issue_number)
        prompt = self.prepare_prompt(
            FEATURE_PROMPT,
            title=issue.get("title", ""),
            body=issue.get("body") or "No description provided",
            labels=", ".join(label_names(issue)) or "none",
        )
        outcome = await self.call_model(context, prompt)
        plan = parse_json_response(outcome.response)
        if not isinstance(plan, dict):
            return self.failure(context, "Model returned no implementation plan", data=plan)

        await self.github.add_comment(context.issue_number, format_feature_comment(plan, outcome.model))
        await self.github.add_labels(
            context.issue_number,
            ["implementation-ready", f"effort-{effort_level(plan)}"]
        )

        files_modified = []
        if _auto_implement(params):
            files_modified = await self.write_files(
                context.working_directory,
                [
                    {"file": c.get("file"), "action": "create", "content": c.get("content", "")}
                    for c in plan.get("codeImplementation") or []
                    if isinstance(c, dict)
                ]
            )

        return self.completed(
            f"Feature implementation plan generated for issue #{context.issue_number}",
            outcome,
            data=plan,
            files_modified=files_modified,
            next_tasks=["test-generation", "documentation-update"],
        )


@register_task("refactor")
class RefactorTask(BaseTask):
    description = "Refactor code for better maintainability and performance"
    category = TaskCategory.RESOLUTION
    priority = TaskPriority.LOW
    triggers = ("refactor", "cleanup", "optimize", "improve")
    input_schema = {
        "files": {"type": "list", "required": True},
        "autoImplement": {"type": "bool", "required": False, "default": False},
    }

    async def execute(self, context: TaskContext) -> TaskResult:
        params = context.additional_params
        try:
            self.validate_params(params)
        except ValueError as e:
            return self.failure(context, str(e))

        files = await self.read_files(context.working_directory, params["files"], max_chars=6000)
        if not files:
            return self.failure(context, "None of the requested files could be read")

        outcome = await self.call_model(
            context,
            self.prepare_prompt(REFACTOR_PROMPT, files=format_files(files))
        )
        plan = parse_json_response(outcome.response)
        if not isinstance(plan, dict):
            return self.failure(context, "Model returned no refactoring plan", data=plan)

        files_modified = []
        if _auto_implement(params):
            files_modified = await self.write_files(
                context.working_directory,
                [
                    {"file": c.get("file"), "action": "modify", "content": c["refactoredContent"]}
                    for c in plan.get("changes") or []
                    if isinstance(c, dict) and isinstance(c.get("refactoredContent"), str)
                ]
            )

        return self.completed(
            f"Refactoring plan generated for {len(files)} file(s)",
            outcome,
            data=plan,
            files_modified=files_modified,
            next_tasks=["test-generation"],
        )


@register_task("documentation-update")
class DocumentationUpdateTask(BaseTask):
    description = "Update documentation for code changes"
    category = TaskCategory.RESOLUTION
    priority = TaskPriority.MEDIUM
    triggers = ("documentation", "docs", "readme", "api")

    async def execute(self, context: TaskContext) -> TaskResult:
        params = context.additional_params
        changes = params.get("changes") or "Recent project updates"
        if context.issue_number is not None:
            issue = await self.github.get_issue(context.issue_number)
            changes = f"{issue.get('title', '')}\n{issue.get('body') or ''}"

        docs = await self.read_files(
            context.working_directory,
            DOCUMENTATION_FILES,
            max_chars=3000
        )
        prompt = self.prepare_prompt(
            DOCUMENTATION_PROMPT,
            changes=changes,
            files=format_files(docs),
        )
        outcome = await self.call_model(context, prompt)
        update = parse_json_response(outcome.response)
        if not isinstance(update, dict):
            return self.failure(context, "Model returned no documentation plan", data=update)

        files_modified = []
        if _auto_implement(params) or params.get("autoUpdate"):
            changes_to_apply = [
                {"file": u.get("file"), "action": "modify", "content": u.get("content", "")}
                for u in update.get("updates") or []
                if isinstance(u, dict)
            ] + [
                {"file": n.get("file"), "action": "create", "content": n.get("content", "")}
                for n in update.get("newFiles") or []
                if isinstance(n, dict)
            ]
            files_modified = await self.write_files(context.working_directory, changes_to_apply)

        return self.completed(
            "Documentation update plan generated",
            outcome,
            data=update,
            files_modified=files_modified,
        )
