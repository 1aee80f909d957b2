"""Optimistic row and cell editing for a single table."""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncIterator

from ..events import ColumnAdded, EventBus
from ..notices import NoticeLog, NoticeStyle
from ..transport.client import DbViewerClient
from ..transport.errors import TransportError

logger = logging.getLogger(__name__)

ID_COLUMN = "id"


class SessionState(str, Enum):
    """Lifecycle of a table-editing session."""

    CLOSED = "closed"
    LOADING = "loading"
    READY = "ready"
    MUTATING = "mutating"
    FAILED = "failed"


@dataclass
class EditingCell:
    """The cell currently open for editing."""

    record_id: Any
    column: str
    value: str = ""


def same_record(row: dict[str, Any], record_id: Any) -> bool:
    """Whether a row has the given id.

    Ids are compared by string form, since they travel as strings on the
    wire while the backend may report them as numbers.
    """
    return str(row.get(ID_COLUMN)) == str(record_id)


class TableEditSession:
    """Editable row-set for one table.

    Cell edits and deletes are applied to ``rows`` before the backend
    confirms them. When the backend call fails, a notice is posted and the
    whole row-set is reloaded from the server rather than patched locally.
    Inserts wait for the backend and then reload.

    Once closed, the session ignores the outcome of any request still in
    flight.
    """

    def __init__(
        self,
        client: DbViewerClient,
        table_name: str,
        notices: NoticeLog | None = None,
        bus: EventBus | None = None,
    ):
        self.client = client
        self.table_name = table_name
        self.notices = notices if notices is not None else NoticeLog()
        self.rows: list[dict[str, Any]] = []
        self.columns: list[str] = []
        self.state = SessionState.CLOSED
        self.editing: EditingCell | None = None
        self.pending_delete: Any | None = None
        self._bus = bus
        self._unsubscribe = None
        self._in_flight = 0
        # Bumped on close; responses tagged with an older generation are stale
        self._generation = 0

    @property
    def is_open(self) -> bool:
        return self.state != SessionState.CLOSED

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def open(self) -> bool:
        """Open the session and load the table's rows.

        Returns:
            True if the rows were loaded.
        """
        if self.is_open:
            return self.state in (SessionState.READY, SessionState.MUTATING)

        if self._bus is not None:
            self._unsubscribe = self._bus.subscribe(ColumnAdded, self._on_column_added)

        self.state = SessionState.LOADING
        return await self._load()

    async def retry(self) -> bool:
        """Retry loading after a failed load."""
        if self.state != SessionState.FAILED:
            return False
        self.state = SessionState.LOADING
        return await self._load()

    async def reload(self) -> bool:
        """Replace the local row-set with the server's."""
        if not self.is_open:
            return False
        return await self._load()

    def close(self) -> None:
        """Close the session and discard its rows."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

        self._generation += 1
        self.state = SessionState.CLOSED
        self.rows = []
        self.columns = []
        self.editing = None
        self.pending_delete = None

    # -------------------------------------------------------------------------
    # Cell edits
    # -------------------------------------------------------------------------

    def begin_edit(self, record_id: Any, column: str) -> bool:
        """Open a cell for editing.

        The id column cannot be edited; asking for it is a no-op.
        """
        if column == ID_COLUMN:
            return False

        row = self.find_row(record_id)
        if row is None:
            return False

        value = row.get(column)
        self.editing = EditingCell(
            record_id=record_id,
            column=column,
            value="" if value is None else str(value),
        )
        return True

    def cancel_edit(self) -> None:
        self.editing = None

    async def save_edit(self, value: str | None = None) -> bool:
        """Save the cell opened by begin_edit.

        Args:
            value: The new value. Defaults to the value held by the cursor.
        """
        if self.editing is None:
            return False

        editing, self.editing = self.editing, None
        new_value = editing.value if value is None else value
        return await self.edit_cell(editing.record_id, editing.column, new_value)

    async def edit_cell(self, record_id: Any, column: str, value: str) -> bool:
        """Set a cell optimistically.

        Args:
            record_id: The row's id.
            column: Column to change; must not be the id column.
            value: The new value, sent as a raw string.

        Returns:
            True if the backend accepted the change.
        """
        if column == ID_COLUMN:
            logger.warning(
                "Refusing to edit immutable column %r of %s", column, self.table_name
            )
            return False

        if not self._can_mutate():
            return False

        row = self.find_row(record_id)
        if row is not None:
            row[column] = value

        generation = self._generation
        async with self._mutating():
            try:
                await self.client.update_cell(self.table_name, record_id, column, value)
            except TransportError as e:
                if self._is_stale(generation):
                    return False
                self._report("save-cell", "Failed to save value", e)
                await self._load()
                return False

        return True

    # -------------------------------------------------------------------------
    # Row inserts and deletes
    # -------------------------------------------------------------------------

    async def insert_row(self) -> bool:
        """Insert a row with server defaults, then reload."""
        if not self._can_mutate():
            return False

        generation = self._generation
        async with self._mutating():
            try:
                await self.client.insert_row(self.table_name)
            except TransportError as e:
                if not self._is_stale(generation):
                    self._report("insert-row", "Failed to add row", e)
                return False

            if self._is_stale(generation):
                return False
            return await self._load()

    def request_delete(self, record_id: Any) -> None:
        """Ask for confirmation before deleting a row."""
        self.pending_delete = record_id

    def cancel_delete(self) -> None:
        self.pending_delete = None

    async def confirm_delete(self) -> bool:
        """Delete the row awaiting confirmation."""
        if self.pending_delete is None:
            return False

        record_id, self.pending_delete = self.pending_delete, None
        return await self.delete_row(record_id)

    async def delete_row(self, record_id: Any) -> bool:
        """Delete a row optimistically.

        The row leaves ``rows`` at once. If the backend refuses, the row-set
        is reloaded and the row comes back.

        Returns:
            True if the backend accepted the delete.
        """
        if not self._can_mutate():
            return False

        self.rows = [row for row in self.rows if not same_record(row, record_id)]
        if self.editing is not None and str(self.editing.record_id) == str(record_id):
            self.editing = None

        generation = self._generation
        async with self._mutating():
            try:
                await self.client.delete_row(self.table_name, record_id)
            except TransportError as e:
                if self._is_stale(generation):
                    return False
                self._report("delete-row", "Failed to delete row", e)
                await self._load()
                return False

        return True

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def find_row(self, record_id: Any) -> dict[str, Any] | None:
        """Get the local row with the given id."""
        for row in self.rows:
            if same_record(row, record_id):
                return row
        return None

    async def _load(self) -> bool:
        generation = self._generation
        try:
            rows = await self.client.fetch_table_rows(self.table_name)
        except TransportError as e:
            if self._is_stale(generation):
                return False
            logger.warning("Loading rows of %s failed: %s", self.table_name, e)
            self.state = SessionState.FAILED
            self.notices.post(
                "load-rows",
                "Failed to load table data",
                NoticeStyle.INLINE,
                detail=e.server_message or str(e),
            )
            return False

        if self._is_stale(generation):
            logger.debug("Ignoring rows of %s for a closed session", self.table_name)
            return False

        self.rows = rows
        # An empty table reports no keys; keep the last known columns
        if rows:
            self.columns = list(rows[0].keys())
        self.state = SessionState.MUTATING if self._in_flight else SessionState.READY
        return True

    @asynccontextmanager
    async def _mutating(self) -> AsyncIterator[None]:
        self._in_flight += 1
        self._settle()
        try:
            yield
        finally:
            self._in_flight -= 1
            self._settle()

    def _settle(self) -> None:
        if self.state not in (SessionState.READY, SessionState.MUTATING):
            return
        self.state = SessionState.MUTATING if self._in_flight else SessionState.READY

    def _can_mutate(self) -> bool:
        if self.state in (SessionState.READY, SessionState.MUTATING):
            return True
        logger.warning(
            "Ignoring mutation on %s while session is %s",
            self.table_name,
            self.state.value,
        )
        return False

    def _is_stale(self, generation: int) -> bool:
        return generation != self._generation

    def _report(self, action: str, message: str, error: TransportError) -> None:
        logger.warning("%s on %s failed: %s", action, self.table_name, error)
        self.notices.post(
            action,
            message,
            NoticeStyle.ALERT,
            detail=error.server_message or str(error),
        )

    async def _on_column_added(self, event: ColumnAdded) -> None:
        if event.table_name != self.table_name:
            return
        if self.state == SessionState.FAILED:
            await self.retry()
        else:
            await self.reload()
