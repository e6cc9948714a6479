"""Models package."""

from .project import Project, ProjectForm, ProjectSummary
from .records import BatchResponse, FetchResponse, FieldError, GetResponse, RecordResult
from .task import (
    Task,
    TaskForm,
    TaskListResponse,
    TaskPriority,
    TaskStats,
    TaskStatus,
)

__all__ = [
    "TaskPriority",
    "TaskStatus",
    "Task",
    "TaskForm",
    "TaskStats",
    "TaskListResponse",
    "Project",
    "ProjectForm",
    "ProjectSummary",
    "BatchResponse",
    "FetchResponse",
    "FieldError",
    "GetResponse",
    "RecordResult",
]
