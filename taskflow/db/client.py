"""HTTP client for the hosted record storage service."""

import logging
from typing import Any, Protocol

import httpx
from pydantic import ValidationError

from ..config import Settings
from ..models.records import BatchResponse, FetchResponse, GetResponse

logger = logging.getLogger(__name__)


class RecordClientError(Exception):
    """Raised when the record service cannot be reached or answers badly."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RecordAPI(Protocol):
    """Table-keyed CRUD operations offered by the record service."""

    async def fetch_records(self, table: str, params: dict[str, Any]) -> FetchResponse: ...

    async def get_record_by_id(
        self, table: str, record_id: int | str, params: dict[str, Any]
    ) -> GetResponse: ...

    async def create_record(self, table: str, params: dict[str, Any]) -> BatchResponse: ...

    async def update_record(self, table: str, params: dict[str, Any]) -> BatchResponse: ...

    async def delete_record(self, table: str, params: dict[str, Any]) -> BatchResponse: ...


class RecordClient:
    """Async client for the record service REST endpoints.

    Create and update take ``{"records": [...]}``, delete takes
    ``{"RecordIds": [...]}``. Batch calls answer with per-item results.
    """

    def __init__(
        self,
        base_url: str,
        project_id: str,
        public_key: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={
                "X-Project-Id": project_id,
                "X-Public-Key": public_key,
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "RecordClient":
        return cls(
            settings.record_api_url,
            settings.project_id,
            settings.public_key,
            timeout=settings.request_timeout,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "RecordClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def fetch_records(self, table: str, params: dict[str, Any]) -> FetchResponse:
        payload = await self._send("POST", f"/tables/{table}/query", params)
        return self._parse(FetchResponse, payload)

    async def get_record_by_id(
        self, table: str, record_id: int | str, params: dict[str, Any]
    ) -> GetResponse:
        """Fetch one record; a 404 gives a response with no data."""
        try:
            payload = await self._send("POST", f"/tables/{table}/records/{record_id}/query", params)
        except RecordClientError as exc:
            if exc.status_code == httpx.codes.NOT_FOUND:
                return GetResponse(success=True, data=None)
            raise
        return self._parse(GetResponse, payload)

    async def create_record(self, table: str, params: dict[str, Any]) -> BatchResponse:
        payload = await self._send("POST", f"/tables/{table}/records", params)
        return self._parse(BatchResponse, payload)

    async def update_record(self, table: str, params: dict[str, Any]) -> BatchResponse:
        payload = await self._send("PATCH", f"/tables/{table}/records", params)
        return self._parse(BatchResponse, payload)

    async def delete_record(self, table: str, params: dict[str, Any]) -> BatchResponse:
        payload = await self._send("DELETE", f"/tables/{table}/records", params)
        return self._parse(BatchResponse, payload)

    async def _send(self, method: str, path: str, body: dict[str, Any]) -> Any:
        logger.debug("%s %s", method, path)
        try:
            response = await self._http.request(method, path, json=body)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise RecordClientError(
                f"{method} {path} failed with status {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise RecordClientError(f"{method} {path} failed: {exc}") from exc

        try:
            return response.json()
        except ValueError as exc:
            raise RecordClientError(f"{method} {path} returned invalid JSON") from exc

    @staticmethod
    def _parse(model: type, payload: Any):
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise RecordClientError(f"Unexpected response shape: {exc}") from exc
