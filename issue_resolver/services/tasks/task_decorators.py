"""Task registration decorators for automatic discovery"""

from typing import Type, Dict, List

from ...core.logger import CentralizedLogger
from .base_task import BaseTask


# Registry for decorated task classes, in declaration order
_decorated_tasks: Dict[str, Type[BaseTask]] = {}

logger = CentralizedLogger("TaskDecorators")


def register_task(name: str):
    """Decorator to register a task class under a unique name

    Example:
        @register_task("analyze-issue")
        class AnalyzeIssueTask(BaseTask):
            pass
    """
    def decorator(cls: Type[BaseTask]) -> Type[BaseTask]:
        if not issubclass(cls, BaseTask):
            raise ValueError(f"{cls.__name__} must inherit from BaseTask")

        if name in _decorated_tasks and _decorated_tasks[name] is not cls:
            logger.warning(f"Task '{name}' redefined by {cls.__name__}")
        _decorated_tasks[name] = cls
        cls.name = name
        return cls

    return decorator


def get_decorated_tasks() -> Dict[str, Type[BaseTask]]:
    return _decorated_tasks.copy()


def scan_and_import_tasks(package_path: str = None) -> List[str]:
    """Import all ``*_tasks.py`` modules so their decorators run

    Returns:
        List of imported module names
    """
    import importlib
    from pathlib import Path

    package_path = package_path or f"{__package__}.implementations"
    imported_modules = []

    base_path = Path(__file__).parent / "implementations"
    if not base_path.exists():
        return imported_modules

    for file_path in sorted(base_path.glob("*_tasks.py")):
        full_module_path = f"{package_path}.{file_path.stem}"
        importlib.import_module(full_module_path)
        imported_modules.append(full_module_path)

    return imported_modules


def load_task_classes() -> Dict[str, Type[BaseTask]]:
    """Every task class shipped with the package, keyed by name"""
    scan_and_import_tasks()
    return get_decorated_tasks()
