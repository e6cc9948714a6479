"""Transient user-facing notifications."""

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

logger = logging.getLogger(__name__)


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Notification:
    level: NotificationLevel
    message: str


class Notifier(Protocol):
    """Where the board reports outcomes meant for the user."""

    def success(self, message: str) -> None: ...
    def warning(self, message: str) -> None: ...
    def error(self, message: str) -> None: ...


class NotificationQueue:
    """Bounded in-memory notifier drained by the UI."""

    def __init__(self, maxlen: int = 50) -> None:
        self._items: deque[Notification] = deque(maxlen=maxlen)

    def success(self, message: str) -> None:
        self._push(NotificationLevel.SUCCESS, message)

    def warning(self, message: str) -> None:
        self._push(NotificationLevel.WARNING, message)

    def error(self, message: str) -> None:
        self._push(NotificationLevel.ERROR, message)

    def pending(self) -> list[Notification]:
        return list(self._items)

    def drain(self) -> list[Notification]:
        """Return and forget every pending notification."""
        items = list(self._items)
        self._items.clear()
        return items

    def _push(self, level: NotificationLevel, message: str) -> None:
        logger.debug("notify %s: %s", level.value, message)
        self._items.append(Notification(level, message))
