"""Record service client package."""

from .client import RecordAPI, RecordClient, RecordClientError

__all__ = [
    "RecordAPI",
    "RecordClient",
    "RecordClientError",
]
