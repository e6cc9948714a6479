"""Entity services package."""

from .base import BatchOperationError, DeleteResult, EntityService, RecordFailure
from .projects import ProjectService
from .tasks import TaskService

__all__ = [
    "BatchOperationError",
    "DeleteResult",
    "EntityService",
    "RecordFailure",
    "ProjectService",
    "TaskService",
]
