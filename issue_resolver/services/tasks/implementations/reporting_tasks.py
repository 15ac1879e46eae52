"""Reporting tasks: project reports and metrics"""

import json
from collections import Counter
from datetime import datetime, timezone
from typing import Dict, Any, List

from ....models.task import TaskCategory, TaskPriority, TaskContext, TaskResult
from ..base_task import BaseTask
from ..task_decorators import register_task
from .analysis_tasks import label_names

REPORT_PROMPT = """Write a concise markdown status report for the repository {repository}.

Open issue statistics:
{stats}

Model usage so far:
{usage}

Include an overview, the most pressing problems, and recommended next
steps. Return only the markdown document.
"""


def collect_issue_stats(issues: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Counts by label plus the oldest open issue"""
    by_label = Counter()
    unlabeled = 0
    for issue in issues:
        names = label_names(issue)
        if not names:
            unlabeled += 1
        by_label.update(names)

    oldest = min(issues, key=lambda issue: issue.get("created_at", ""), default=None)
    return {
        "open": len(issues),
        "bugs": by_label.get("bug", 0),
        "unlabeled": unlabeled,
        "byLabel": dict(by_label.most_common()),
        "oldest": {
            "number": oldest["number"],
            "title": oldest.get("title", ""),
            "created_at": oldest.get("created_at"),
        } if oldest else None,
    }


@register_task("generate-report")
class GenerateReportTask(BaseTask):
    """Write a markdown project report into the working directory"""

    description = "Generate a project status report"
    category = TaskCategory.REPORTING
    priority = TaskPriority.LOW
    triggers = ("report", "summary", "status")
    input_schema = {
        "output": {"type": "str", "required": False},
        "save": {"type": "bool", "required": False, "default": True},
    }

    async def execute(self, context: TaskContext) -> TaskResult:
        params = context.additional_params
        try:
            self.validate_params(params)
        except ValueError as e:
            return self.failure(context, str(e))

        issues = await self.github.get_open_issues()
        stats = collect_issue_stats(issues)
        prompt = self.prepare_prompt(
            REPORT_PROMPT,
            repository=context.full_name,
            stats=json.dumps(stats, indent=2),
            usage=json.dumps(self.model_manager.get_usage_stats(), indent=2),
        )
        outcome = await self.call_model(context, prompt, max_tokens=4000)
        report = outcome.response.strip()
        if not report:
            return self.failure(context, "Model returned an empty report")

        files_modified = []
        if params.get("save", True):
            output = params.get("output") or (
                f"project-report-{datetime.now(timezone.utc).strftime('%Y-%m-%d')}.md"
            )
            files_modified = await self.write_files(
                context.working_directory,
                [{"file": output, "action": "create", "content": report + "\n"}]
            )

        return self.completed(
            "Project report generated",
            outcome,
            data={"report": report, "stats": stats},
            files_modified=files_modified,
        )


@register_task("metrics")
class MetricsTask(BaseTask):
    """Issue and model usage metrics; makes no model call"""

    description = "Collect issue and model usage metrics"
    category = TaskCategory.REPORTING
    priority = TaskPriority.MEDIUM
    triggers = ("metrics", "analytics", "stats")

    async def execute(self, context: TaskContext) -> TaskResult:
        issues = await self.github.get_open_issues()
        stats = collect_issue_stats(issues)
        return self.completed(
            f"Collected metrics for {stats['open']} open issues",
            data={
                "issues": stats,
                "modelUsage": self.model_manager.get_usage_stats(),
                "totalCost": self.model_manager.total_cost(),
            },
        )
