"""Services module for the issue resolver"""

from .base_service import BaseService
from .github_client import GitHubClient
from .llm import ModelManager
from .task_service import TaskService

__all__ = [
    # Base classes
    "BaseService",

    # Services
    "GitHubClient",
    "ModelManager",
    "TaskService",
]
