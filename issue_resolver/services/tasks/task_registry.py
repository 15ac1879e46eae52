"""Registry of task instances bound to one manager and repository"""

from typing import Dict, Type, Optional, List, TYPE_CHECKING

from ...core.exceptions import NotFoundError
from ...core.logger import CentralizedLogger
from .base_task import BaseTask, TaskMetadata
from .task_decorators import load_task_classes

if TYPE_CHECKING:
    from ..github_client import GitHubClient
    from ..llm.model_manager import ModelManager


class TaskRegistry:
    """Task name to task instance

    Instances share the model manager and GitHub client they were built
    with. Iteration order follows registration order.
    """

    def __init__(
        self,
        model_manager: "ModelManager",
        github: "GitHubClient",
        task_classes: Optional[Dict[str, Type[BaseTask]]] = None
    ):
        """Initialize the registry

        Args:
            model_manager: Manager handed to every task
            github: Repository client handed to every task
            task_classes: Task classes to instantiate; defaults to every
                ``@register_task`` class in the package
        """
        self.logger = CentralizedLogger("TaskRegistry")
        if task_classes is None:
            task_classes = load_task_classes()

        self._tasks: Dict[str, BaseTask] = {}
        for name, task_class in task_classes.items():
            self.register(name, task_class(model_manager, github))

    def register(self, name: str, task: BaseTask) -> None:
        if name in self._tasks:
            self.logger.warning(f"Replacing task: {name}")
        self._tasks[name] = task
        self.logger.debug(f"Registered task: {name}")

    def get(self, name: str) -> BaseTask:
        task = self._tasks.get(name)
        if task is None:
            raise NotFoundError("task", name)
        return task

    def contains(self, name: str) -> bool:
        return name in self._tasks

    def list_tasks(self) -> List[TaskMetadata]:
        return [task.get_metadata() for task in self._tasks.values()]

    def find_matching(self, text: str) -> List[TaskMetadata]:
        """Tasks whose triggers occur in the text, highest priority first"""
        matching = [task for task in self._tasks.values() if task.matches(text)]
        matching.sort(key=lambda task: -task.priority.rank)
        return [task.get_metadata() for task in matching]

    def __len__(self) -> int:
        return len(self._tasks)
