"""Shared translation layer between board data and record service tables."""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar

from ..db import RecordAPI, RecordClientError
from ..models.fields import join_tags, parse_int
from ..models.records import BatchResponse, FieldError, RecordResult

logger = logging.getLogger(__name__)

SERVER_MANAGED_FIELDS = ("CreatedOn", "CreatedBy", "ModifiedOn", "ModifiedBy")


@dataclass(slots=True)
class RecordFailure:
    """A batch item the record service rejected."""

    record_id: int | str | None
    message: str | None
    errors: list[FieldError] = field(default_factory=list)


class BatchOperationError(Exception):
    """Raised when a create/update/delete batch fails in whole or in part."""

    def __init__(self, message: str, failures: list[RecordFailure] | None = None) -> None:
        super().__init__(message)
        self.failures = failures or []


@dataclass(slots=True)
class DeleteResult:
    """Per-id outcome of a bulk delete."""

    succeeded: list[str] = field(default_factory=list)
    failed: list[RecordFailure] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.succeeded)


class EntityService:
    """Stateless CRUD translation for one record service table.

    Subclasses declare the table, the projected fields, the writable
    allowlist and which fields are lookups holding numeric ids.
    """

    table_name: ClassVar[str]
    label: ClassVar[str]
    fields: ClassVar[tuple[str, ...]]
    writable_fields: ClassVar[tuple[str, ...]]
    lookup_fields: ClassVar[frozenset[str]] = frozenset({"Owner"})
    # Tasks omit empty strings as well as missing values.
    omit_blank: ClassVar[bool] = False

    def __init__(self, client: RecordAPI, *, page_size: int) -> None:
        self.client = client
        self.page_size = page_size

    # =========================================================================
    # Reads
    # =========================================================================

    def default_params(self) -> dict[str, Any]:
        return {
            "fields": list(self.fields),
            "orderBy": [{"fieldName": "CreatedOn", "SortType": "DESC"}],
            "pagingInfo": {"limit": self.page_size, "offset": 0},
        }

    async def fetch_all(self, params: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        """Fetch records, newest first, merged with caller overrides."""
        merged = {**self.default_params(), **(params or {})}
        try:
            response = await self.client.fetch_records(self.table_name, merged)
        except Exception:
            logger.exception("Error fetching %ss", self.label)
            raise
        if not response.success:
            logger.error("Fetching %ss failed: %s", self.label, response.message)
            raise RecordClientError(response.message or f"Fetching {self.label}s failed")
        return response.data or []

    async def get_by_id(
        self, record_id: int | str, params: Mapping[str, Any] | None = None
    ) -> dict[str, Any] | None:
        """Fetch one record; ``None`` when it does not exist."""
        merged = {"fields": list(self.fields), **(params or {})}
        try:
            response = await self.client.get_record_by_id(self.table_name, record_id, merged)
        except Exception:
            logger.exception("Error fetching %s with ID %s", self.label, record_id)
            raise
        if not response.success:
            logger.error("Fetching %s %s failed: %s", self.label, record_id, response.message)
            raise RecordClientError(response.message or f"Fetching {self.label} {record_id} failed")
        return response.data or None

    async def list_by(self, field_name: str, value: Any) -> list[dict[str, Any]]:
        """Fetch records whose ``field_name`` exactly matches ``value``."""
        if field_name in self.lookup_fields:
            value = parse_int(value)
        params = {
            "where": [{"fieldName": field_name, "operator": "ExactMatch", "values": [value]}],
        }
        try:
            return await self.fetch_all(params)
        except Exception:
            logger.exception("Error fetching %ss by %s=%s", self.label, field_name, value)
            raise

    # =========================================================================
    # Writes
    # =========================================================================

    def prepare(self, data: Mapping[str, Any]) -> dict[str, Any]:
        """Filter ``data`` to the writable allowlist and coerce wire types."""
        dropped = [key for key in data if key not in self.writable_fields]
        if dropped:
            logger.debug("Dropping non-writable %s fields: %s", self.label, dropped)

        prepared: dict[str, Any] = {}
        for name in self.writable_fields:
            if name not in data:
                continue
            value = data[name]
            if value is None or (self.omit_blank and value == ""):
                continue
            if name == "Tags" and isinstance(value, (list, tuple)):
                value = join_tags(value)
            elif name in self.lookup_fields:
                value = parse_int(value)
                if value is None:
                    continue
            prepared[name] = value
        return prepared

    async def create(self, data: Mapping[str, Any]) -> dict[str, Any] | None:
        """Create one record and return its data."""
        params = {"records": [self.prepare(data)]}
        try:
            response = await self.client.create_record(self.table_name, params)
            results = self._check_batch(response, "create")
        except Exception:
            logger.exception("Error creating %s", self.label)
            raise
        return results[0].data if results else None

    async def update(self, record_id: int | str, data: Mapping[str, Any]) -> dict[str, Any] | None:
        """Update one record and return its data."""
        numeric_id = parse_int(record_id)
        if numeric_id is None:
            raise ValueError(f"Invalid {self.label} id: {record_id!r}")
        params = {"records": [{"Id": numeric_id, **self.prepare(data)}]}
        try:
            response = await self.client.update_record(self.table_name, params)
            results = self._check_batch(response, "update")
        except Exception:
            logger.exception("Error updating %s %s", self.label, record_id)
            raise
        return results[0].data if results else None

    async def delete(self, record_id: int | str) -> bool:
        """Delete one record; raises unless the deletion succeeded."""
        params = {"RecordIds": [parse_int(record_id)]}
        try:
            response = await self.client.delete_record(self.table_name, params)
            results = self._check_batch(response, "delete", ids=[record_id])
        except Exception:
            logger.exception("Error deleting %s %s", self.label, record_id)
            raise
        return len(results) > 0

    async def delete_many(self, record_ids: Iterable[int | str]) -> DeleteResult:
        """Delete several records, reporting partial failure per id."""
        ids = [str(record_id) for record_id in record_ids]
        params = {"RecordIds": [parse_int(record_id) for record_id in ids]}
        try:
            response = await self.client.delete_record(self.table_name, params)
        except Exception:
            logger.exception("Error deleting %ss", self.label)
            raise
        if not response.success or response.results is None:
            logger.error("Bulk %s deletion failed: %s", self.label, response.message)
            raise BatchOperationError(response.message or f"Bulk {self.label} deletion failed")

        outcome = DeleteResult()
        for record_id, result in zip(ids, response.results):
            if result.success:
                outcome.succeeded.append(record_id)
            else:
                outcome.failed.append(self._failure(result, record_id))
        if outcome.failed:
            logger.warning("Failed to delete %d %ss", len(outcome.failed), self.label)
        return outcome

    # =========================================================================
    # Helpers
    # =========================================================================

    def _check_batch(
        self,
        response: BatchResponse,
        action: str,
        ids: list[int | str] | None = None,
    ) -> list[RecordResult]:
        """Return the successful results, raising if any item failed."""
        if not response.success or response.results is None:
            raise BatchOperationError(
                response.message or f"{self.label.capitalize()} {action} failed"
            )

        failures = []
        for index, result in enumerate(response.results):
            if result.success:
                continue
            record_id = ids[index] if ids and index < len(ids) else None
            failures.append(self._failure(result, record_id))

        if failures:
            for failure in failures:
                logger.error(
                    "Failed to %s %s: %s",
                    action,
                    self.label,
                    failure.message or f"{self.label} {action} failed",
                )
                for error in failure.errors:
                    logger.error("Field: %s, Error: %s", error.field_label, error.message)
            raise BatchOperationError(
                f"Failed to {action} {len(failures)} {self.label}(s)", failures
            )
        return [result for result in response.results if result.success]

    @staticmethod
    def _failure(result: RecordResult, record_id: int | str | None) -> RecordFailure:
        return RecordFailure(record_id=record_id, message=result.message, errors=list(result.errors))
