"""Pydantic models for projects."""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field

from .fields import join_tags, lookup_id, split_tags

DEFAULT_PROJECT_COLOR = "#6366f1"


class Project(BaseModel):
    """A project as held by the board."""

    id: str
    name: str
    color: str = DEFAULT_PROJECT_COLOR
    tags: list[str] = Field(default_factory=list)
    owner: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Project":
        """Build a project from a wire-format record."""
        return cls(
            id=str(record["Id"]),
            name=record.get("Name") or "",
            color=record.get("color") or DEFAULT_PROJECT_COLOR,
            tags=split_tags(record.get("Tags")),
            owner=lookup_id(record.get("Owner")),
            created_at=record.get("CreatedOn"),
            updated_at=record.get("ModifiedOn"),
        )


class ProjectForm(BaseModel):
    """Request model for creating a project."""

    name: str = Field(..., min_length=1, max_length=200)
    color: str = DEFAULT_PROJECT_COLOR
    tags: list[str] = Field(default_factory=list)
    owner: str | None = None

    def to_record(self) -> dict[str, Any]:
        return {
            "Name": self.name.strip(),
            "color": self.color,
            "Tags": join_tags(split_tags(self.tags)),
            "Owner": self.owner,
        }


class ProjectSummary(BaseModel):
    """A project with task counts derived from the board's task collection."""

    project: Project
    task_count: int
    completed_count: int
