"""Command-line interface for the issue resolver."""

import asyncio
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import typer
from rich.console import Console
from rich.prompt import Confirm, Prompt
from rich.table import Table

from . import __version__
from .core.config import Settings, get_settings
from .core.exceptions import ConfigurationError, NotFoundError
from .core.telemetry import setup_telemetry
from .models.task import ModelSelection, TaskContext, TaskResult
from .services.github_client import GitHubClient
from .services.llm.model_manager import ModelManager
from .services.task_service import TaskService
from .utils import parse_issue_url, parse_repo_url

console = Console()
app = typer.Typer(help="Multi-model AI GitHub issue resolver.")


def load_settings(config: Optional[Path] = None) -> Settings:
    if config is not None:
        return Settings.load_from_yaml(str(config))
    return get_settings()


def resolve_repository(repo: Optional[str], settings: Settings) -> Tuple[str, str]:
    """``--repo`` value, else the configured owner and repository"""
    if repo:
        reference = parse_repo_url(repo)
        if reference is None:
            raise ConfigurationError(
                f"Invalid repository format: {repo}. Use 'owner/repo' or a GitHub URL"
            )
        return reference.owner, reference.repo
    return settings.github.owner, settings.github.repo


def build_task_service(settings: Settings, owner: str, repo: str) -> TaskService:
    """Wire a task service for one repository from settings

    Raises:
        ConfigurationError: No provider credential is configured
    """
    setup_telemetry(settings)

    manager = ModelManager.from_settings(settings)
    if not manager.has_providers:
        raise ConfigurationError(
            "No model providers configured. Set OPENAI_API_KEY, "
            "ANTHROPIC_API_KEY or LOCAL_LLM_URL"
        )

    github = GitHubClient(
        token=settings.github.token,
        owner=owner,
        repo=repo,
        base_url=settings.github.api_url,
        timeout=settings.github.timeout
    )
    context = TaskContext(
        owner=owner,
        repository=repo,
        working_directory=os.getcwd(),
        model_selection=ModelSelection(
            primary=settings.llm.default_model,
            fallback=settings.llm.fallback_model
        )
    )
    return TaskService(context, manager, github)


def _service(ctx: typer.Context, repo: Optional[str] = None) -> TaskService:
    """Task service for the command, exiting on configuration errors"""
    try:
        settings = load_settings(ctx.obj.get("config"))
        owner, name = resolve_repository(repo or ctx.obj.get("repo"), settings)
        return build_task_service(settings, owner, name)
    except ConfigurationError as exc:
        console.print(f"[red]Error:[/] {exc}")
        raise typer.Exit(1) from exc


def _mark(flag: bool) -> str:
    return "[green]yes[/]" if flag else "[dim]no[/]"


def _print_models(service: TaskService) -> None:
    table = Table(title="Available Models", show_edge=False, header_style="bold cyan")
    table.add_column("Name")
    table.add_column("Provider")
    table.add_column("Cost/token", justify="right")
    table.add_column("Max tokens", justify="right")
    table.add_column("Coding")
    table.add_column("Vision")
    table.add_column("Functions")
    for model in service.model_manager.list_available_models():
        table.add_row(
            model.name,
            model.provider,
            f"{model.cost_per_token:.8f}",
            str(model.max_tokens),
            _mark(model.supports.code_generation),
            _mark(model.supports.vision),
            _mark(model.supports.function_calling),
        )
    console.print(table)


def _print_tasks(service: TaskService) -> None:
    table = Table(title="Available Tasks", show_edge=False, header_style="bold cyan")
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Priority")
    table.add_column("Description")
    for task in service.list_tasks():
        table.add_row(task.name, task.category.value, task.priority.value, task.description)
    console.print(table)


def _print_usage(service: TaskService) -> None:
    table = Table(title="Usage Statistics", show_edge=False, header_style="bold cyan")
    table.add_column("Model")
    table.add_column("Calls", justify="right")
    table.add_column("Tokens", justify="right")
    table.add_column("Cost", justify="right")
    for row in service.get_usage_stats():
        table.add_row(row["model"], str(row["calls"]), str(row["tokens"]), f"${row['cost']:.6f}")
    console.print(table)
    console.print(f"[green]Total cost: ${service.model_manager.total_cost():.6f}[/]")


def _print_result(result: TaskResult) -> None:
    if result.success:
        console.print("[green]Task completed successfully[/]")
        console.print(f"[dim]Model used: {result.model_used}[/]")
        if result.cost:
            console.print(f"[dim]Cost: ${result.cost:.6f} ({result.tokens_used} tokens)[/]")
        console.print(result.message, markup=False)
        if result.files_modified:
            console.print("[bold]Files modified:[/]")
            for path in result.files_modified:
                console.print(f" - {path}")
        if result.next_tasks:
            console.print(f"[bold]Suggested next tasks:[/] {', '.join(result.next_tasks)}")
        if result.data is not None:
            console.print_json(data=result.data)
    else:
        console.print("[red]Task failed[/]")
        console.print(result.message, markup=False)


async def _run_task(service: TaskService, task_name: str, params: Dict[str, Any]) -> TaskResult:
    try:
        with console.status(f"Executing task: {task_name}"):
            return await service.execute_with_optimal_model(task_name, params)
    finally:
        await service.shutdown()


@app.callback()
def main(
    ctx: typer.Context,
    repo: Optional[str] = typer.Option(
        None,
        "--repo",
        "-r",
        help="GitHub repository URL or owner/repo.",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        help="YAML settings file (defaults to $CONFIG_PATH).",
    ),
) -> None:
    """Select AI models and run repository tasks against GitHub issues."""
    ctx.obj = {"repo": repo, "config": config}


@app.command()
def version() -> None:
    """Show the installed version."""
    console.print(__version__)


@app.command()
def models(ctx: typer.Context) -> None:
    """List available AI models."""
    _print_models(_service(ctx))


@app.command()
def tasks(ctx: typer.Context) -> None:
    """List available tasks."""
    _print_tasks(_service(ctx))


@app.command()
def execute(
    ctx: typer.Context,
    task_name: str = typer.Argument(..., help="Task to run, e.g. analyze-issue"),
    issue: Optional[str] = typer.Option(
        None, "--issue", "-i", help="Issue number or GitHub issue URL."
    ),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Force a specific model."),
    vision: bool = typer.Option(False, "--vision", help="Require a vision-capable model."),
    function_calling: bool = typer.Option(
        False, "--function-calling", help="Require function-calling support."
    ),
    max_cost: Optional[float] = typer.Option(
        None, "--max-cost", min=0.0, help="Maximum cost per token."
    ),
    prefer_speed: bool = typer.Option(
        False, "--prefer-speed", help="Break ties in favour of cheaper models."
    ),
    auto_implement: bool = typer.Option(
        False, "--auto-implement", help="Write generated files into the working directory."
    ),
    files: Optional[List[str]] = typer.Option(
        None, "--file", "-f", help="File to include; repeat for several."
    ),
    changes: Optional[str] = typer.Option(
        None, "--changes", "-c", help="Description of changes (documentation-update)."
    ),
) -> None:
    """Execute a task with the best available model."""
    params: Dict[str, Any] = {}
    repo = None

    if issue:
        reference = parse_issue_url(issue)
        if reference is not None:
            params["issueNumber"] = reference.issue_number
            repo = f"{reference.owner}/{reference.repo}"
            console.print(f"[yellow]Using issue from {repo}[/]")
        elif issue.isdigit():
            params["issueNumber"] = int(issue)
        else:
            console.print(f"[red]Error:[/] Invalid issue reference: {issue}")
            raise typer.Exit(1)

    if model:
        params["model"] = model
    if vision:
        params["needsVision"] = True
    if function_calling:
        params["needsFunctionCalling"] = True
    if max_cost is not None:
        params["maxCost"] = max_cost
    if prefer_speed:
        params["preferSpeed"] = True
    if auto_implement:
        params["autoImplement"] = True
    if files:
        params["files"] = list(files)
    if changes:
        params["changes"] = changes

    service = _service(ctx, repo)
    result = asyncio.run(_run_task(service, task_name, params))
    _print_result(result)
    if not result.success:
        raise typer.Exit(1)


@app.command()
def suggest(
    ctx: typer.Context,
    text: List[str] = typer.Argument(..., help="Free-text description of what you need"),
) -> None:
    """Suggest tasks matching a description."""
    suggestions = _service(ctx).suggest_tasks(" ".join(text))
    if not suggestions:
        console.print("[yellow]No task suggestions found[/]")
        return

    console.print("[bold]Suggested tasks:[/]")
    for task in suggestions:
        console.print(f" - {task.name} [dim]({task.priority.value})[/] {task.description}")


@app.command()
def usage(ctx: typer.Context) -> None:
    """Show model usage statistics for this process."""
    _print_usage(_service(ctx))


@app.command("set-model")
def set_model(
    ctx: typer.Context,
    task_name: str = typer.Argument(..., help="Task name"),
    model_name: str = typer.Argument(..., help="Preferred model for the task"),
) -> None:
    """Set the preferred model for a task."""
    service = _service(ctx)
    service.set_task_model(task_name, model_name)
    if service.model_manager.get_model_info(model_name) is None:
        console.print(f"[yellow]Model '{model_name}' is not registered; selection will ignore it[/]")
    console.print(f"[green]Preferred model for {task_name}: {model_name}[/]")


@app.command()
def switch(
    ctx: typer.Context,
    model_name: str = typer.Argument(..., help="New primary model"),
) -> None:
    """Switch the primary model."""
    service = _service(ctx)
    try:
        service.switch_primary_model(model_name)
    except NotFoundError as exc:
        console.print(f"[red]Error:[/] {exc}")
        raise typer.Exit(1) from exc
    console.print(f"[green]Switched primary model to: {model_name}[/]")


async def _interactive_loop(service: TaskService) -> None:
    actions = ["execute", "models", "tasks", "switch", "usage", "exit"]
    try:
        while True:
            action = Prompt.ask("What would you like to do?", choices=actions, default="execute")
            if action == "exit":
                break
            if action == "models":
                _print_models(service)
            elif action == "tasks":
                _print_tasks(service)
            elif action == "usage":
                _print_usage(service)
            elif action == "switch":
                model_name = Prompt.ask("Model name")
                try:
                    service.switch_primary_model(model_name)
                    console.print(f"[green]Switched primary model to: {model_name}[/]")
                except NotFoundError as exc:
                    console.print(f"[red]Error:[/] {exc}")
            else:
                task_names = [task.name for task in service.list_tasks()]
                task_name = Prompt.ask("Task", choices=task_names)
                params: Dict[str, Any] = {}
                issue = Prompt.ask("Issue number (blank for none)", default="")
                if issue.isdigit():
                    params["issueNumber"] = int(issue)
                if Confirm.ask("Apply generated changes?", default=False):
                    params["autoImplement"] = True
                with console.status(f"Executing task: {task_name}"):
                    result = await service.execute_with_optimal_model(task_name, params)
                _print_result(result)
    finally:
        await service.shutdown()


@app.command()
def interactive(ctx: typer.Context) -> None:
    """Start an interactive session; usage accumulates across tasks."""
    service = _service(ctx)
    console.print("[bold]GitHub Issue Resolver interactive mode[/]")
    asyncio.run(_interactive_loop(service))


if __name__ == "__main__":
    app()
