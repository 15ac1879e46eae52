"""Repository tasks and their registry"""

from .base_task import BaseTask, TaskMetadata
from .task_decorators import register_task, load_task_classes
from .task_registry import TaskRegistry

__all__ = [
    "BaseTask",
    "TaskMetadata",
    "register_task",
    "load_task_classes",
    "TaskRegistry",
]
