"""Board view state package."""

from .board import (
    ALL_PROJECTS,
    TITLE_REQUIRED,
    BoardState,
    BoardView,
    FormMode,
    FormState,
    TaskValidationError,
)
from .notifications import Notification, NotificationLevel, NotificationQueue, Notifier

__all__ = [
    "ALL_PROJECTS",
    "TITLE_REQUIRED",
    "BoardState",
    "BoardView",
    "FormMode",
    "FormState",
    "Notification",
    "NotificationLevel",
    "NotificationQueue",
    "Notifier",
    "TaskValidationError",
]
