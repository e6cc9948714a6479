"""Project table service."""

from typing import Any

from .base import SERVER_MANAGED_FIELDS, EntityService


class ProjectService(EntityService):
    """Reads and writes records of the ``project`` table."""

    table_name = "project"
    label = "project"
    fields = ("Name", "Tags", "Owner", *SERVER_MANAGED_FIELDS, "color")
    writable_fields = ("Name", "Tags", "Owner", "color")

    def __init__(self, client, *, page_size: int = 50) -> None:
        super().__init__(client, page_size=page_size)

    async def list_by_owner(self, owner_id: int | str) -> list[dict[str, Any]]:
        """Fetch the projects owned by ``owner_id``."""
        return await self.list_by("Owner", owner_id)
