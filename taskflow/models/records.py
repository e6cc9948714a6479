"""Pydantic models for record service responses."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class FieldError(_WireModel):
    """Field-level validation error reported for one record."""

    field_label: str = Field("", alias="fieldLabel")
    message: str = ""


class RecordResult(_WireModel):
    """Outcome of one item in a batch create/update/delete."""

    success: bool
    data: dict[str, Any] | None = None
    errors: list[FieldError] = Field(default_factory=list)
    message: str | None = None


class BatchResponse(_WireModel):
    """Response of a batch create/update/delete call."""

    success: bool
    results: list[RecordResult] | None = None
    message: str | None = None


class FetchResponse(_WireModel):
    """Response of a fetch (query) call."""

    success: bool = True
    data: list[dict[str, Any]] | None = None
    total: int | None = None
    message: str | None = None


class GetResponse(_WireModel):
    """Response of a single-record lookup."""

    success: bool = True
    data: dict[str, Any] | None = None
    message: str | None = None
