"""Task executor: model resolution, dispatch and single fallback retry"""

from typing import Dict, Any, Optional, List

from ..core.exceptions import NotFoundError
from ..models.ai_model import SelectionConstraints
from ..models.task import ModelSelection, TaskContext, TaskResult
from .base_service import BaseService
from .github_client import GitHubClient
from .llm.model_manager import ModelManager
from .tasks import BaseTask, TaskMetadata, TaskRegistry


class TaskService(BaseService):
    """Runs named tasks against one repository

    ``execute_with_optimal_model`` never raises: unknown tasks, task
    exceptions and failure results all come back as a ``TaskResult``
    with ``success=False``.
    """

    def __init__(
        self,
        context: TaskContext,
        model_manager: ModelManager,
        github: GitHubClient,
        registry: Optional[TaskRegistry] = None
    ):
        """Initialize task service

        Args:
            context: Base context; per-call parameters are layered on top
            model_manager: Manager used for selection and model calls
            github: Client bound to ``context``'s repository
            registry: Task registry; defaults to every built-in task
        """
        super().__init__("TaskService")
        self.context = context
        self.model_manager = model_manager
        self.github = github
        self.registry = registry or TaskRegistry(model_manager, github)

    def _context_for(self, params: Dict[str, Any]) -> TaskContext:
        """Base context with the call's parameters and issue number"""
        context = self.context.with_params(params)
        issue = params.get("issueNumber", params.get("issue_number"))
        if issue is not None:
            context = context.model_copy(update={"issue_number": int(issue)})
        return context

    async def _run(self, task: BaseTask, params: Dict[str, Any]) -> TaskResult:
        """Run a task once, turning exceptions into failure results"""
        model = params.get("selectedModel") or self.context.model_selection.primary

        with self.traced_operation("execute_task", task=task.name, model=model) as span:
            try:
                result = await task.execute(self._context_for(params))
            except Exception as e:
                self.logger.error(f"Task {task.name} raised with {model}: {str(e)}")
                result = TaskResult(
                    success=False,
                    message=f"Task '{task.name}' failed: {str(e)}",
                    model_used=model,
                )
            span.set_attribute("task.success", result.success)

        if result.model_used is None:
            result = result.model_copy(update={"model_used": model})
        return result

    async def execute(self, task_name: str, params: Optional[Dict[str, Any]] = None) -> TaskResult:
        """Run a task with the context's primary model, without selection"""
        try:
            task = self.registry.get(task_name)
        except NotFoundError as e:
            return TaskResult(success=False, message=str(e))

        return await self._run(task, dict(params or {}))

    async def execute_with_optimal_model(
        self,
        task_name: str,
        params: Optional[Dict[str, Any]] = None
    ) -> TaskResult:
        """Run a task with the best model, retrying once with the fallback

        Args:
            task_name: Registered task name
            params: Task parameters; ``model`` forces a model, and
                ``needsVision``, ``needsFunctionCalling``, ``maxCost`` and
                ``preferSpeed`` constrain selection

        Returns:
            Task result; the retry result when the fallback succeeded
        """
        params = dict(params or {})
        try:
            task = self.registry.get(task_name)
        except NotFoundError as e:
            self.logger.warning(str(e))
            return TaskResult(success=False, message=str(e))

        try:
            model = params.get("model") or self.model_manager.get_optimal_model(
                task.category.value,
                SelectionConstraints.from_params(params),
                task_name=task_name
            )
        except (TypeError, ValueError) as e:
            self.logger.warning(f"Invalid selection parameters for {task_name}: {str(e)}")
            return TaskResult(success=False, message=f"Invalid selection parameters: {str(e)}")
        self.logger.info(f"Executing {task_name} with {model}")

        result = await self._run(task, {**params, "selectedModel": model})
        if result.success:
            return result

        fallback = self.context.model_selection.fallback
        if not fallback or fallback == model:
            return result

        self.logger.warning(
            f"Task {task_name} failed with {model}: {result.message}. "
            f"Retrying with fallback {fallback}"
        )
        retry = await self._run(task, {**params, "selectedModel": fallback})
        if retry.success:
            return retry

        return TaskResult(
            success=False,
            message=(
                f"Task '{task_name}' failed with {model} ({result.message}) "
                f"and with fallback {fallback} ({retry.message})"
            ),
            data=retry.data,
            model_used=fallback,
            tokens_used=result.tokens_used + retry.tokens_used,
            cost=result.cost + retry.cost,
        )

    def list_tasks(self) -> List[TaskMetadata]:
        return self.registry.list_tasks()

    def suggest_tasks(self, text: str) -> List[TaskMetadata]:
        """Tasks whose trigger keywords appear in the text, highest priority first"""
        return self.registry.find_matching(text)

    def switch_primary_model(self, model_name: str) -> None:
        """Make a registered model the primary model for later calls

        Raises:
            NotFoundError: Model not registered
        """
        self.model_manager.require_model(model_name)
        selection = ModelSelection(
            primary=model_name,
            fallback=self.context.model_selection.fallback
        )
        self.context = self.context.model_copy(update={"model_selection": selection})
        self.logger.info(f"Primary model switched to {model_name}")

    def set_task_model(self, task_name: str, model_name: str) -> None:
        self.model_manager.set_task_preference(task_name, model_name)

    def get_usage_stats(self) -> List[Dict[str, Any]]:
        return self.model_manager.get_usage_stats()

    async def shutdown(self) -> None:
        await self.github.aclose()
        await self.model_manager.shutdown()
