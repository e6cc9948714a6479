"""Conversions between wire field values and Python values."""

import re
from collections.abc import Iterable
from typing import Any

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def split_tags(raw: str | Iterable[str] | None) -> list[str]:
    """Split a comma separated tag string into a list of trimmed, non-empty tags.

    Lists are trimmed the same way, so values already decoded by the record
    service pass through unchanged.
    """
    if raw is None:
        return []
    parts = raw.split(",") if isinstance(raw, str) else list(raw)
    return [str(part).strip() for part in parts if str(part).strip()]


def join_tags(tags: Iterable[str]) -> str:
    """Encode tags as the comma separated string the record service stores."""
    return ",".join(tags)


def parse_int(value: Any) -> int | None:
    """Parse the leading integer of ``value``; ``None`` when there is none.

    ``"12"`` and ``"12abc"`` both give 12, ``"abc"`` gives ``None``.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if not isinstance(value, str):
        return None
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def lookup_id(value: Any) -> str | None:
    """Return the string id of a lookup field.

    The record service returns lookups either as the bare numeric id or as an
    object like ``{"Id": 3, "Name": "Website"}``.
    """
    if isinstance(value, dict):
        value = value.get("Id")
    if value is None or value == "":
        return None
    return str(value)
