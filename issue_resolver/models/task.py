"""Task models: categories, execution context and results"""

from typing import Optional, Dict, Any, List
from enum import Enum
from pydantic import BaseModel, Field


class TaskCategory(str, Enum):
    ANALYSIS = "analysis"
    RESOLUTION = "resolution"
    MAINTENANCE = "maintenance"
    REPORTING = "reporting"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return {"low": 1, "medium": 2, "high": 3, "critical": 4}[self.value]


class ModelSelection(BaseModel):
    """Primary and fallback models for task execution"""
    primary: str
    fallback: Optional[str] = None


class TaskContext(BaseModel):
    """Everything a task needs to run against one repository"""
    owner: str = ""
    repository: str = ""
    issue_number: Optional[int] = None
    working_directory: str = "."
    model_selection: ModelSelection
    additional_params: Dict[str, Any] = Field(default_factory=dict)

    @property
    def selected_model(self) -> str:
        """Model resolved for this invocation, else the primary model"""
        return self.additional_params.get("selectedModel") or self.model_selection.primary

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repository}"

    def with_params(self, params: Dict[str, Any]) -> "TaskContext":
        """Copy of this context carrying a fresh parameter bag"""
        return self.model_copy(update={"additional_params": dict(params)})


class TaskResult(BaseModel):
    """Outcome reported by a task implementation"""
    success: bool
    message: str
    data: Optional[Any] = None
    next_tasks: List[str] = Field(default_factory=list)
    files_modified: List[str] = Field(default_factory=list)
    model_used: Optional[str] = None
    tokens_used: int = 0
    cost: float = 0.0
