"""Pydantic models for tasks."""

import logging
from collections.abc import Iterable, Mapping
from datetime import date
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from .fields import join_tags, lookup_id, split_tags

logger = logging.getLogger(__name__)


class TaskPriority(str, Enum):
    """Task priority enumeration."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @classmethod
    def from_record(cls, raw: str | None) -> "TaskPriority":
        try:
            return cls(raw)
        except ValueError:
            return cls.MEDIUM


class TaskStatus(str, Enum):
    """Task status enumeration.

    ``in-progress`` only matters for stats; any status may follow any other.
    """

    TODO = "todo"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"

    @classmethod
    def from_record(cls, raw: str | None) -> "TaskStatus":
        try:
            return cls(raw)
        except ValueError:
            return cls.TODO

    def toggled(self) -> "TaskStatus":
        """Status after a completion toggle."""
        if self is TaskStatus.COMPLETED:
            return TaskStatus.TODO
        return TaskStatus.COMPLETED


def _coerce_date(value: Any) -> Any:
    if value == "":
        return None
    # The record service may send a full timestamp for date fields.
    if isinstance(value, str) and len(value) > 10:
        return value[:10]
    return value


def _record_date(value: Any) -> date | None:
    """Parse a due date from the record service; unreadable values become ``None``."""
    value = _coerce_date(value)
    if value is None or isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        logger.warning("Ignoring unreadable due date %r", value)
        return None


class Task(BaseModel):
    """A task as held by the board."""

    id: str
    title: str
    description: str = ""
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.TODO
    due_date: date | None = None
    project_id: str | None = None
    tags: list[str] = Field(default_factory=list)
    created_at: str | None = None
    updated_at: str | None = None

    @field_validator("due_date", mode="before")
    @classmethod
    def normalize_due_date(cls, value: Any) -> Any:
        return _record_date(value)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Task":
        """Build a task from a wire-format record."""
        return cls(
            id=str(record["Id"]),
            title=record.get("title") or record.get("Name") or "",
            description=record.get("description") or "",
            priority=TaskPriority.from_record(record.get("priority")),
            status=TaskStatus.from_record(record.get("status")),
            due_date=record.get("due_date") or None,
            project_id=lookup_id(record.get("project_id")),
            tags=split_tags(record.get("Tags")),
            created_at=record.get("CreatedOn"),
            updated_at=record.get("ModifiedOn"),
        )

    def to_record(self) -> dict[str, Any]:
        """Wire-format view of the task, including server-managed fields."""
        return {
            "Id": self.id,
            "Name": self.title,
            "title": self.title,
            "description": self.description,
            "priority": self.priority.value,
            "status": self.status.value,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "project_id": self.project_id,
            "Tags": join_tags(self.tags),
            "CreatedOn": self.created_at,
            "ModifiedOn": self.updated_at,
        }

    def is_overdue(self, today: date) -> bool:
        """True when the task is not completed and its due date has passed."""
        return (
            self.status is not TaskStatus.COMPLETED
            and self.due_date is not None
            and self.due_date < today
        )


class TaskForm(BaseModel):
    """Data entered in the task form.

    Tags are kept as the raw comma separated text the user typed. Blank titles are
    accepted here and rejected by the board.
    """

    title: str = Field("", max_length=500)
    description: str = ""
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: date | None = None
    project_id: str | None = None
    tags: str = ""

    @field_validator("due_date", mode="before")
    @classmethod
    def normalize_due_date(cls, value: Any) -> Any:
        return _coerce_date(value)

    @classmethod
    def from_task(cls, task: Task) -> "TaskForm":
        """Prefill the form for editing ``task``."""
        return cls(
            title=task.title,
            description=task.description,
            priority=task.priority,
            due_date=task.due_date,
            project_id=task.project_id,
            tags=", ".join(task.tags),
        )

    def tag_list(self) -> list[str]:
        return split_tags(self.tags)

    def to_record(self, status: TaskStatus | None = None) -> dict[str, Any]:
        """Wire-format fields for a create or update call."""
        record: dict[str, Any] = {
            "Name": self.title.strip(),
            "title": self.title.strip(),
            "description": self.description,
            "priority": self.priority.value,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "project_id": self.project_id,
            "Tags": join_tags(self.tag_list()),
        }
        if status is not None:
            record["status"] = status.value
        return record


class TaskStats(BaseModel):
    """Aggregate counts over a task collection."""

    total: int = 0
    completed: int = 0
    in_progress: int = 0
    overdue: int = 0

    @classmethod
    def from_tasks(cls, tasks: Iterable[Task], today: date) -> "TaskStats":
        tasks = list(tasks)
        return cls(
            total=len(tasks),
            completed=sum(1 for t in tasks if t.status is TaskStatus.COMPLETED),
            in_progress=sum(1 for t in tasks if t.status is TaskStatus.IN_PROGRESS),
            overdue=sum(1 for t in tasks if t.is_overdue(today)),
        )


class TaskListResponse(BaseModel):
    """Response model for task list."""

    tasks: list[Task]
    count: int
