"""Async HTTP client for the database viewer backend."""

import logging
import time
from pathlib import Path
from typing import Any, Callable
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from ..config import settings
from ..schema.errors import SchemaValidationError
from ..schema.loader import parse_rows, parse_snapshot
from ..schema.models import ColumnType, SchemaSnapshot
from .errors import ResponseFormatError, TransportError
from .payloads import (
    AddColumnRequest,
    DeleteRowRequest,
    InsertRowRequest,
    QueryRequest,
    QueryResponse,
    UpdateCellRequest,
)

logger = logging.getLogger(__name__)

CACHE_BUSTER_PARAM = "_t"


def _epoch_millis() -> int:
    return int(time.time() * 1000)


class DbViewerClient:
    """Typed request/response client for the viewer REST API.

    Every method is a single call: no retry, no backoff, and the httpx
    default timeout. Failures raise TransportError.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], int] = _epoch_millis,
    ):
        """Initialize the client.

        Args:
            base_url: Backend root URL. Defaults to the configured api_url.
            transport: Optional httpx transport, e.g. a MockTransport in tests.
            clock: Source of cache-busting values for uncacheable GETs.
        """
        self.base_url = (base_url or settings.api_url).rstrip("/")
        self._clock = clock
        self._client = httpx.AsyncClient(base_url=self.base_url, transport=transport)

    async def __aenter__(self) -> "DbViewerClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._client.aclose()

    # -------------------------------------------------------------------------
    # Schema and queries
    # -------------------------------------------------------------------------

    async def fetch_schema(self) -> SchemaSnapshot:
        """Fetch the current tables and relationships.

        Raises:
            TransportError: If the request fails.
            ResponseFormatError: If the body is not a valid schema payload.
        """
        response = await self._request("GET", "/db-info", params=self._cache_buster())
        try:
            return parse_snapshot(self._json(response))
        except SchemaValidationError as e:
            raise ResponseFormatError(f"Invalid schema payload: {e}", e.errors) from e

    async def run_query(self, query: str) -> list[dict[str, Any]]:
        """Run an ad-hoc query and return its rows."""
        response = await self._request("POST", "/query", json=_body(QueryRequest(query=query)))
        try:
            return QueryResponse.model_validate(self._json(response)).data
        except ValidationError as e:
            raise ResponseFormatError(f"Invalid query response: {e}") from e

    async def upload_file(
        self, file: str | Path | bytes, filename: str | None = None
    ) -> dict[str, Any]:
        """Upload a data file as the multipart field ``file``.

        Args:
            file: A path to read, or the raw file content.
            filename: Name sent with the upload. Required when ``file`` is bytes.

        Returns:
            The decoded response body, or an empty dict when it is not a mapping.
        """
        if isinstance(file, bytes):
            if not filename:
                raise ValueError("filename is required when uploading raw bytes")
            content = file
        else:
            path = Path(file)
            content = path.read_bytes()
            filename = filename or path.name

        response = await self._request(
            "POST", "/upload", files={"file": (filename, content)}
        )
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    # -------------------------------------------------------------------------
    # Table data and mutations
    # -------------------------------------------------------------------------

    async def add_column(
        self, table_name: str, column_name: str, column_type: ColumnType | str
    ) -> None:
        """Add a column to a table."""
        request = AddColumnRequest(
            table_name=table_name,
            column_name=column_name,
            column_type=ColumnType.parse(column_type),
        )
        await self._request("POST", "/alter-table", json=_body(request))

    async def fetch_table_rows(self, table_name: str) -> list[dict[str, Any]]:
        """Fetch every row of a table."""
        response = await self._request(
            "GET",
            f"/table-data/{quote(table_name, safe='')}",
            params=self._cache_buster(),
        )
        try:
            return parse_rows(self._json(response))
        except SchemaValidationError as e:
            raise ResponseFormatError(f"Invalid row payload: {e}", e.errors) from e

    async def update_cell(
        self, table_name: str, record_id: Any, column_name: str, new_value: Any
    ) -> None:
        """Set one cell of the row identified by ``record_id``."""
        request = UpdateCellRequest(
            table_name=table_name,
            record_id=str(record_id),
            column_name=column_name,
            new_value="" if new_value is None else str(new_value),
        )
        await self._request("POST", "/update-cell", json=_body(request))

    async def insert_row(self, table_name: str) -> None:
        """Insert a row with server-assigned defaults."""
        await self._request(
            "POST", "/insert-row", json=_body(InsertRowRequest(table_name=table_name))
        )

    async def delete_row(self, table_name: str, record_id: Any) -> None:
        """Delete the row identified by ``record_id``."""
        request = DeleteRowRequest(table_name=table_name, record_id=str(record_id))
        await self._request("POST", "/delete-row", json=_body(request))

    def export_url(self, table_name: str) -> str:
        """Build the CSV download link for a table."""
        url = httpx.URL(
            f"{self.base_url}/export/{quote(table_name, safe='')}",
            params=self._cache_buster(),
        )
        return str(url)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _cache_buster(self) -> dict[str, str]:
        return {CACHE_BUSTER_PARAM: str(self._clock())}

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.debug("%s %s failed: %s", method, path, e)
            raise TransportError(f"{method} {path} failed: {e}") from e

        if response.is_error:
            server_message = _error_message(response)
            logger.debug(
                "%s %s returned %d: %s", method, path, response.status_code, server_message
            )
            raise TransportError(
                f"{method} {path} returned HTTP {response.status_code}",
                status_code=response.status_code,
                server_message=server_message,
            )

        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise ResponseFormatError(f"Response is not JSON: {e}") from e


def _body(request: BaseModel) -> dict[str, Any]:
    return request.model_dump(mode="json")


def _error_message(response: httpx.Response) -> str | None:
    """Extract the ``error`` field of a JSON error body, if there is one."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return None
