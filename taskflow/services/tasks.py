"""Task table service."""

from typing import Any

from .base import SERVER_MANAGED_FIELDS, EntityService

TASK_WRITABLE_FIELDS = (
    "Name",
    "Tags",
    "Owner",
    "title",
    "description",
    "priority",
    "status",
    "due_date",
    "project_id",
)


class TaskService(EntityService):
    """Reads and writes records of the ``task`` table."""

    table_name = "task"
    label = "task"
    fields = ("Name", "Tags", "Owner", *SERVER_MANAGED_FIELDS, *TASK_WRITABLE_FIELDS[3:])
    writable_fields = TASK_WRITABLE_FIELDS
    lookup_fields = frozenset({"Owner", "project_id"})
    omit_blank = True

    def __init__(self, client, *, page_size: int = 100) -> None:
        super().__init__(client, page_size=page_size)

    async def list_by_project(self, project_id: int | str) -> list[dict[str, Any]]:
        """Fetch the tasks that belong to ``project_id``."""
        return await self.list_by("project_id", project_id)
