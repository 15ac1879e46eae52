"""Issue analysis tasks: single-issue analysis, triage and duplicate detection"""

from typing import Dict, Any, List

from ....core.exceptions import ProviderCallError, ResponseParseError
from ....models.ai_model import ExecutionOutcome
from ....models.task import TaskCategory, TaskPriority, TaskContext, TaskResult
from ....utils import parse_json_response
from ..base_task import BaseTask
from ..task_decorators import register_task


ANALYZE_PROMPT = """Analyze this GitHub issue and provide a structured analysis:

Title: {title}
Description: {body}
Labels: {labels}
Author: {author}
Created: {created}

Return ONLY valid JSON (no markdown, no code blocks, no extra text) in this exact format:
{{
  "severity": "critical|high|medium|low",
  "complexity": "high|medium|low",
  "estimatedHours": number,
  "approach": "detailed step-by-step approach",
  "relatedFiles": ["path/to/file"],
  "risks": ["risk"],
  "tags": ["bug", "frontend", "api"],
  "priority": 1-10
}}

Consider bug severity and impact, the code complexity required, side
effects, and testing and documentation needs.
"""

TRIAGE_PROMPT = """Triage this GitHub issue:

#{number}: {title}
{body}

Current labels: {labels}

Return ONLY valid JSON in this exact format:
{{
  "priority": 1-10,
  "labels": ["label"],
  "category": "bug|feature|documentation|question|maintenance",
  "summary": "one sentence summary"
}}
"""

DUPLICATES_PROMPT = """Find duplicate issues among these open GitHub issues:

{issues}

Return ONLY valid JSON in this exact format:
{{
  "duplicates": [
    {{
      "primary": issue number to keep,
      "duplicates": [issue numbers duplicating it],
      "confidence": 0.0-1.0,
      "reason": "why they are duplicates"
    }}
  ]
}}
Return an empty list when no issues are duplicates.
"""


def label_names(issue: Dict[str, Any]) -> List[str]:
    return [label["name"] if isinstance(label, dict) else str(label) for label in issue.get("labels", [])]


def _as_number(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def fallback_analysis(issue: Dict[str, Any]) -> Dict[str, Any]:
    """Heuristic analysis used when the model reply cannot be parsed"""
    labels = [name.lower() for name in label_names(issue)]
    is_bug = "bug" in labels or "bug" in issue.get("title", "").lower()
    return {
        "severity": "high" if is_bug else "medium",
        "complexity": "medium",
        "estimatedHours": 4,
        "approach": "Manual review required; automated analysis could not be parsed",
        "relatedFiles": [],
        "risks": ["Automated analysis unavailable"],
        "tags": ["bug"] if is_bug else ["needs-triage"],
        "priority": 8 if is_bug else 5,
    }


def suggest_next_tasks(analysis: Dict[str, Any]) -> List[str]:
    tags = [str(tag).lower() for tag in analysis.get("tags") or []]
    next_tasks = []
    if "bug" in tags:
        next_tasks.append("bug-fix")
    elif "enhancement" in tags or "feature" in tags:
        next_tasks.append("feature-implementation")
    if "security" in tags:
        next_tasks.append("security-scan")
    if "documentation" in tags or "docs" in tags:
        next_tasks.append("documentation-update")
    if "testing" in tags or "tests" in tags:
        next_tasks.append("test-generation")
    return next_tasks


def format_analysis_comment(analysis: Dict[str, Any], outcome: ExecutionOutcome) -> str:
    lines = [
        "## Automated Issue Analysis",
        "",
        f"**Severity:** {analysis.get('severity', 'unknown')}",
        f"**Complexity:** {analysis.get('complexity', 'unknown')}",
        f"**Estimated effort:** {analysis.get('estimatedHours', '?')} hours",
        f"**Priority:** {analysis.get('priority', '?')}/10",
        "",
        "### Approach",
        str(analysis.get("approach", "")),
    ]
    related = analysis.get("relatedFiles") or []
    if related:
        lines += ["", "### Related files"] + [f"- `{path}`" for path in related]
    risks = analysis.get("risks") or []
    if risks:
        lines += ["", "### Risks"] + [f"- {risk}" for risk in risks]
    lines += ["", f"_Analyzed by {outcome.model} ({outcome.tokens_used} tokens)_"]
    return "\n".join(lines)


@register_task("analyze-issue")
class AnalyzeIssueTask(BaseTask):
    """Analyse one issue, comment the analysis and apply suggested labels"""

    description = "Analyze a GitHub issue for severity, complexity and resolution approach"
    category = TaskCategory.ANALYSIS
    priority = TaskPriority.HIGH
    triggers = ("analyze", "issue", "severity", "complexity")

    async def execute(self, context: TaskContext) -> TaskResult:
        if context.issue_number is None:
            return self.failure(context, "Issue number required")

        issue = await self.github.get_issue(context.issue_number)
        prompt = self.prepare_prompt(
            ANALYZE_PROMPT,
            title=issue.get("title", ""),
            body=issue.get("body") or "No description provided",
            labels=", ".join(label_names(issue)) or "none",
            author=(issue.get("user") or {}).get("login", "unknown"),
            created=issue.get("created_at", "unknown"),
        )
        outcome = await self.call_model(context, prompt)

        try:
            analysis = parse_json_response(outcome.response)
        except ResponseParseError:
            analysis = None
        if not isinstance(analysis, dict):
            self.logger.warning("Failed to parse model analysis, using heuristic analysis")
            analysis = fallback_analysis(issue)

        await self.github.add_comment(
            context.issue_number,
            format_analysis_comment(analysis, outcome)
        )
        tags = [str(tag) for tag in analysis.get("tags") or []]
        if tags:
            await self.github.add_labels(context.issue_number, tags)

        return self.completed(
            f"Issue #{context.issue_number} analyzed successfully",
            outcome,
            data=analysis,
            next_tasks=suggest_next_tasks(analysis),
        )


@register_task("triage-issues")
class TriageIssuesTask(BaseTask):
    """Prioritise open issues one model call at a time

    A failure on one issue is logged and skipped; the task fails only when
    every issue it attempted failed.
    """

    description = "Triage and prioritize open issues"
    category = TaskCategory.ANALYSIS
    priority = TaskPriority.MEDIUM
    triggers = ("triage", "prioritize", "organize")
    input_schema = {
        "limit": {"type": "int", "required": False, "default": 20},
        "autoLabel": {"type": "bool", "required": False, "default": False},
    }

    async def execute(self, context: TaskContext) -> TaskResult:
        params = context.additional_params
        try:
            self.validate_params(params)
        except ValueError as e:
            return self.failure(context, str(e))

        issues = await self.github.get_open_issues(limit=params.get("limit", 20))
        if not issues:
            return self.completed("No open issues to triage", data={"triaged": [], "failed": []})

        triaged = []
        failed = []
        tokens_used = 0
        cost = 0.0

        for issue in issues:
            prompt = self.prepare_prompt(
                TRIAGE_PROMPT,
                number=issue["number"],
                title=issue.get("title", ""),
                body=(issue.get("body") or "")[:1000],
                labels=", ".join(label_names(issue)) or "none",
            )
            try:
                outcome = await self.call_model(context, prompt, max_tokens=500)
                tokens_used += outcome.tokens_used
                cost += outcome.cost
                result = parse_json_response(outcome.response)
                if not isinstance(result, dict):
                    raise ResponseParseError("Triage reply is not a JSON object", outcome.response)
            except (ProviderCallError, ResponseParseError) as e:
                self.logger.warning(f"Failed to triage issue #{issue['number']}: {str(e)}")
                failed.append(issue["number"])
                continue

            entry = {
                "number": issue["number"],
                "title": issue.get("title", ""),
                "priority": result.get("priority", 5),
                "labels": [str(label) for label in result.get("labels") or []],
                "category": result.get("category"),
                "summary": result.get("summary", ""),
            }
            if params.get("autoLabel") and entry["labels"]:
                await self.github.add_labels(issue["number"], entry["labels"])
            triaged.append(entry)

        data = {
            "triaged": sorted(triaged, key=lambda entry: -_as_number(entry["priority"])),
            "failed": failed,
        }
        if not triaged:
            return TaskResult(
                success=False,
                message=f"Failed to triage any of {len(issues)} issues",
                data=data,
                model_used=context.selected_model,
                tokens_used=tokens_used,
                cost=cost,
            )

        return TaskResult(
            success=True,
            message=f"Triaged {len(triaged)} of {len(issues)} issues",
            data=data,
            model_used=context.selected_model,
            tokens_used=tokens_used,
            cost=cost,
        )


@register_task("find-duplicates")
class FindDuplicatesTask(BaseTask):
    """Group open issues that describe the same problem"""

    description = "Find duplicate or closely related issues"
    category = TaskCategory.ANALYSIS
    priority = TaskPriority.LOW
    triggers = ("duplicate", "similar")
    input_schema = {
        "limit": {"type": "int", "required": False, "default": 50},
        "minConfidence": {"type": "float", "required": False, "default": 0.8},
        "autoLabel": {"type": "bool", "required": False, "default": False},
    }

    async def execute(self, context: TaskContext) -> TaskResult:
        params = context.additional_params
        try:
            self.validate_params(params)
        except ValueError as e:
            return self.failure(context, str(e))

        issues = await self.github.get_open_issues(limit=params.get("limit", 50))
        if len(issues) < 2:
            return self.completed(
                "Not enough open issues to compare",
                data={"duplicates": []}
            )

        listing = "\n\n".join(
            f"#{issue['number']}: {issue.get('title', '')}\n{(issue.get('body') or '')[:200]}"
            for issue in issues
        )
        outcome = await self.call_model(
            context,
            self.prepare_prompt(DUPLICATES_PROMPT, issues=listing)
        )
        reply = parse_json_response(outcome.response)
        groups = reply.get("duplicates", []) if isinstance(reply, dict) else []

        open_numbers = {issue["number"] for issue in issues}
        min_confidence = params.get("minConfidence", 0.8)
        confident = []
        for group in groups:
            if not isinstance(group, dict):
                continue
            primary = group.get("primary")
            duplicates = [n for n in group.get("duplicates") or [] if n in open_numbers and n != primary]
            if primary not in open_numbers or not duplicates:
                continue
            if _as_number(group.get("confidence")) < min_confidence:
                continue
            confident.append({**group, "duplicates": duplicates})

        if params.get("autoLabel"):
            for group in confident:
                for number in group["duplicates"]:
                    await self.github.add_comment(
                        number,
                        f"This issue looks like a duplicate of #{group['primary']}: "
                        f"{group.get('reason', '')}"
                    )
                    await self.github.add_labels(number, ["duplicate"])

        return self.completed(
            f"Found {len(confident)} duplicate group(s) among {len(issues)} issues",
            outcome,
            data={"duplicates": confident},
        )
