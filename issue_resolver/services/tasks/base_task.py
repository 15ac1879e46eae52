"""Base class for all repository tasks"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, Optional, List, Tuple, TYPE_CHECKING

import aiofiles
import aiofiles.os

from ...core.logger import CentralizedLogger
from ...models.ai_model import ExecutionOutcome
from ...models.task import TaskCategory, TaskPriority, TaskContext, TaskResult

if TYPE_CHECKING:
    from ..github_client import GitHubClient
    from ..llm.model_manager import ModelManager


@dataclass
class TaskMetadata:
    """Descriptive metadata about a task"""
    name: str
    description: str
    category: TaskCategory
    priority: TaskPriority
    triggers: List[str] = field(default_factory=list)
    dependencies: List[str] = field(default_factory=list)
    input_schema: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "category": self.category.value,
            "priority": self.priority.value,
            "triggers": list(self.triggers),
            "dependencies": list(self.dependencies),
        }


class BaseTask(ABC):
    """Abstract base class for all tasks

    A task encapsulates one unit of repository work (analyse an issue,
    propose a fix, write a report). Subclasses set the descriptive class
    attributes and implement :meth:`execute`; the name is assigned by the
    ``@register_task`` decorator.
    """

    name: str = ""
    description: str = ""
    category: TaskCategory = TaskCategory.ANALYSIS
    priority: TaskPriority = TaskPriority.MEDIUM
    triggers: Tuple[str, ...] = ()
    dependencies: Tuple[str, ...] = ()
    input_schema: Dict[str, Dict[str, Any]] = {}

    def __init__(self, model_manager: "ModelManager", github: "GitHubClient"):
        """Initialize the task

        Args:
            model_manager: Manager used for every model call
            github: Client bound to the target repository
        """
        self.model_manager = model_manager
        self.github = github
        self.logger = CentralizedLogger(f"Task.{self.name or self.__class__.__name__}")

    @abstractmethod
    async def execute(self, context: TaskContext) -> TaskResult:
        """Run the task

        Args:
            context: Repository, issue and parameters for this invocation

        Returns:
            Task result; a task may also raise, in which case the executor
            reports the failure
        """
        pass

    def get_metadata(self) -> TaskMetadata:
        return TaskMetadata(
            name=self.name,
            description=self.description,
            category=self.category,
            priority=self.priority,
            triggers=list(self.triggers),
            dependencies=list(self.dependencies),
            input_schema=dict(self.input_schema),
        )

    def matches(self, text: str) -> bool:
        """Whether any trigger keyword occurs in the text"""
        lowered = text.lower()
        return any(trigger in lowered for trigger in self.triggers)

    def validate_params(self, params: Dict[str, Any]) -> bool:
        """Validate parameters against the task's input schema

        Returns:
            True if valid, raises ValueError otherwise
        """
        for name, schema in self.input_schema.items():
            if schema.get("required", False) and not params.get(name):
                raise ValueError(f"Required parameter '{name}' missing")

            if name in params and "type" in schema:
                expected_type = schema["type"]
                value = params[name]

                if expected_type == "str" and not isinstance(value, str):
                    raise ValueError(f"Parameter '{name}' must be a string")
                elif expected_type == "int" and not isinstance(value, int):
                    raise ValueError(f"Parameter '{name}' must be an integer")
                elif expected_type == "float" and not isinstance(value, (int, float)):
                    raise ValueError(f"Parameter '{name}' must be a number")
                elif expected_type == "bool" and not isinstance(value, bool):
                    raise ValueError(f"Parameter '{name}' must be a boolean")
                elif expected_type == "list" and not isinstance(value, list):
                    raise ValueError(f"Parameter '{name}' must be a list")

        return True

    def prepare_prompt(self, template: str, **kwargs) -> str:
        return template.format(**kwargs)

    async def call_model(
        self,
        context: TaskContext,
        prompt: str,
        **options
    ) -> ExecutionOutcome:
        """Call the model resolved for this invocation"""
        return await self.model_manager.execute_with_model(
            prompt,
            context.selected_model,
            options
        )

    def failure(self, context: TaskContext, message: str, data: Any = None) -> TaskResult:
        return TaskResult(
            success=False,
            message=message,
            data=data,
            model_used=context.selected_model,
        )

    def completed(
        self,
        message: str,
        outcome: Optional[ExecutionOutcome] = None,
        **fields
    ) -> TaskResult:
        """Successful result, carrying accounting from the model call if any"""
        if outcome is not None:
            fields.setdefault("model_used", outcome.model)
            fields.setdefault("tokens_used", outcome.tokens_used)
            fields.setdefault("cost", outcome.cost)
        return TaskResult(success=True, message=message, **fields)

    def _resolve(self, working_directory: str, relative_path: str) -> Optional[Path]:
        """Path inside the working directory, or None if it escapes it"""
        root = Path(working_directory).resolve()
        target = (root / relative_path).resolve()
        if not target.is_relative_to(root):
            self.logger.warning(f"Refusing path outside working directory: {relative_path}")
            return None
        return target

    async def read_files(
        self,
        working_directory: str,
        paths: List[str],
        max_chars: int = 2000
    ) -> List[Dict[str, str]]:
        """Read the first ``max_chars`` of each existing file"""
        files = []
        for relative_path in paths:
            target = self._resolve(working_directory, relative_path)
            if target is None:
                continue
            try:
                async with aiofiles.open(target, "r", encoding="utf-8", errors="replace") as f:
                    content = await f.read()
            except (FileNotFoundError, IsADirectoryError):
                self.logger.debug(f"Skipping missing file: {relative_path}")
                continue
            files.append({
                "path": relative_path,
                "content": content[:max_chars],
                "extension": target.suffix.lstrip(".") or "txt",
            })
        return files

    async def write_files(
        self,
        working_directory: str,
        changes: List[Dict[str, Any]]
    ) -> List[str]:
        """Apply ``{"file", "action", "content"}`` changes

        Actions are ``create``, ``modify`` and ``delete``. Failures are
        logged per file and the file is left out of the returned list;
        entries that are not dicts are skipped.

        Returns:
            Relative paths actually written or deleted
        """
        modified = []
        for change in changes:
            if not isinstance(change, dict):
                self.logger.warning(f"Skipping malformed change entry: {change!r}")
                continue
            relative_path = change.get("file")
            action = change.get("action", "modify")
            if not relative_path:
                continue
            target = self._resolve(working_directory, relative_path)
            if target is None:
                continue

            try:
                if action in ("create", "modify"):
                    await aiofiles.os.makedirs(target.parent, exist_ok=True)
                    async with aiofiles.open(target, "w", encoding="utf-8") as f:
                        await f.write(change.get("content", ""))
                    self.logger.info(
                        f"{'Created' if action == 'create' else 'Modified'} file: {relative_path}"
                    )
                elif action == "delete":
                    await aiofiles.os.remove(target)
                    self.logger.info(f"Deleted file: {relative_path}")
                else:
                    self.logger.warning(f"Unknown change action '{action}' for {relative_path}")
                    continue
            except OSError as e:
                self.logger.error(f"Failed to {action} file {relative_path}: {str(e)}")
                continue

            modified.append(relative_path)
        return modified

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(name={self.name})>"
