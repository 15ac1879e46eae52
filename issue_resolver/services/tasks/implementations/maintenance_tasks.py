"""Maintenance tasks: security review and test generation"""

import os
from pathlib import Path
from typing import Dict, Any, List

from ....models.task import TaskCategory, TaskPriority, TaskContext, TaskResult
from ....utils import parse_json_response
from ..base_task import BaseTask
from ..task_decorators import register_task
from .resolution_tasks import format_files

SOURCE_SUFFIXES = {".py", ".js", ".ts", ".go", ".rb", ".java", ".php"}
SKIPPED_DIRS = {".git", ".venv", "venv", "node_modules", "__pycache__", "dist", "build"}
MAX_SCAN_FILES = 10

SECURITY_PROMPT = """Review these source files for security vulnerabilities:

{files}

Return ONLY valid JSON (no markdown, no code blocks, no extra text) in this exact format:
{{
  "findings": [
    {{
      "file": "relative/path",
      "severity": "critical|high|medium|low",
      "issue": "what is wrong",
      "recommendation": "how to fix it"
    }}
  ]
}}
Return an empty list when nothing is found.
"""

TEST_PROMPT = """Write {framework} tests for these source files:

{files}

Return ONLY valid JSON (no markdown, no code blocks, no extra text) in this exact format:
{{
  "tests": [
    {{"file": "relative/path/of/test", "content": "complete test file", "description": "what is covered"}}
  ],
  "coverage": {{"functions": ["covered function"], "notes": "gaps left uncovered"}}
}}
Ensure all strings are properly escaped for JSON.
"""


def discover_source_files(working_directory: str, limit: int = MAX_SCAN_FILES) -> List[str]:
    """Relative paths of up to ``limit`` source files

    Hidden and dependency directories are pruned during the walk. Each
    directory's files come sorted, before those of its subdirectories.
    """
    root = Path(working_directory)
    found = []
    for current, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(
            d for d in dirnames if d not in SKIPPED_DIRS and not d.startswith(".")
        )
        for filename in sorted(filenames):
            path = Path(current) / filename
            if path.suffix in SOURCE_SUFFIXES:
                found.append(path.relative_to(root).as_posix())
                if len(found) >= limit:
                    return found
    return found


def format_security_report(critical: List[Dict[str, Any]]) -> str:
    lines = [
        "## Security Scan Report",
        "",
        f"The automated scan found {len(critical)} critical finding(s).",
        "",
    ]
    for finding in critical:
        lines += [
            f"### `{finding.get('file', 'unknown')}`",
            f"**Issue:** {finding.get('issue', '')}",
            f"**Recommendation:** {finding.get('recommendation', '')}",
            "",
        ]
    return "\n".join(lines)


@register_task("security-scan")
class SecurityScanTask(BaseTask):
    """Model-driven security review of the working tree

    Critical findings are filed as a new labelled issue unless
    ``createIssue`` is false.
    """

    description = "Perform security analysis on the codebase"
    category = TaskCategory.MAINTENANCE
    priority = TaskPriority.CRITICAL
    triggers = ("security", "vulnerability", "scan", "audit")
    input_schema = {
        "files": {"type": "list", "required": False},
        "createIssue": {"type": "bool", "required": False, "default": True},
    }

    async def execute(self, context: TaskContext) -> TaskResult:
        params = context.additional_params
        try:
            self.validate_params(params)
        except ValueError as e:
            return self.failure(context, str(e))

        paths = params.get("files") or discover_source_files(context.working_directory)
        files = await self.read_files(context.working_directory, paths, max_chars=3000)
        if not files:
            return self.completed("No source files to scan", data={"findings": [], "criticalIssues": []})

        outcome = await self.call_model(
            context,
            self.prepare_prompt(SECURITY_PROMPT, files=format_files(files))
        )
        reply = parse_json_response(outcome.response)
        findings = [
            f for f in (reply.get("findings", []) if isinstance(reply, dict) else [])
            if isinstance(f, dict)
        ]
        critical = [f for f in findings if str(f.get("severity", "")).lower() == "critical"]

        issue_number = None
        if critical and params.get("createIssue", True):
            issue_number = await self.github.create_issue(
                f"Security Alert: {len(critical)} critical vulnerabilities found",
                format_security_report(critical),
                ["security", "critical", "automated"]
            )
            self.logger.warning(
                f"Created security issue #{issue_number} with {len(critical)} critical findings"
            )

        return self.completed(
            f"Security scan completed. Found {len(critical)} critical issues",
            outcome,
            data={
                "scannedFiles": [f["path"] for f in files],
                "findings": findings,
                "criticalIssues": critical,
                "issueNumber": issue_number,
            },
        )


@register_task("test-generation")
class TestGenerationTask(BaseTask):
    description = "Generate tests for the given source files"
    category = TaskCategory.MAINTENANCE
    priority = TaskPriority.HIGH
    triggers = ("test", "testing", "coverage")
    input_schema = {
        "files": {"type": "list", "required": True},
        "framework": {"type": "str", "required": False, "default": "pytest"},
        "autoImplement": {"type": "bool", "required": False, "default": False},
    }

    async def execute(self, context: TaskContext) -> TaskResult:
        params = context.additional_params
        try:
            self.validate_params(params)
        except ValueError as e:
            return self.failure(context, str(e))

        files = await self.read_files(context.working_directory, params["files"], max_chars=4000)
        if not files:
            return self.failure(context, "None of the requested files could be read")

        outcome = await self.call_model(
            context,
            self.prepare_prompt(
                TEST_PROMPT,
                framework=params.get("framework", "pytest"),
                files=format_files(files),
            ),
        )
        plan = parse_json_response(outcome.response)
        if not isinstance(plan, dict):
            return self.failure(context, "Model returned no tests", data=plan)

        files_modified = []
        if params.get("autoImplement") or params.get("autoCreate"):
            files_modified = await self.write_files(
                context.working_directory,
                [
                    {"file": t.get("file"), "action": "create", "content": t.get("content", "")}
                    for t in plan.get("tests") or []
                    if isinstance(t, dict)
                ]
            )

        return self.completed(
            f"Generated {len(plan.get('tests') or [])} test file(s)",
            outcome,
            data=plan,
            files_modified=files_modified,
        )
