"""Schema mutations: adding columns to tables."""

import logging

from ..events import ColumnAdded, EventBus, SchemaRefreshRequested
from ..notices import NoticeLog, NoticeStyle
from ..schema.models import ColumnType
from ..transport.client import DbViewerClient
from ..transport.errors import TransportError

logger = logging.getLogger(__name__)


class ColumnMutations:
    """Adds columns and announces the schema change on the event bus.

    Column additions are not applied locally. On success the bus carries a
    ColumnAdded event, so open editing sessions for the table reload their
    rows, and a SchemaRefreshRequested event, so the graph picks up the
    new column.
    """

    def __init__(
        self,
        client: DbViewerClient,
        notices: NoticeLog | None = None,
        bus: EventBus | None = None,
    ):
        self.client = client
        self.notices = notices if notices is not None else NoticeLog()
        self._bus = bus

    async def add_column(
        self,
        table_name: str,
        column_name: str,
        column_type: ColumnType | str = ColumnType.VARCHAR,
    ) -> bool:
        """Add a column to a table.

        Args:
            table_name: The table to alter.
            column_name: Name of the new column. A blank name is rejected
                without contacting the backend.
            column_type: One of the ColumnType values or an alias of one.

        Returns:
            True if the backend added the column.

        Raises:
            ValueError: If the column type is not supported.
        """
        name = column_name.strip()
        if not name:
            logger.warning("Ignoring add-column on %s with an empty name", table_name)
            return False

        column_type = ColumnType.parse(column_type)

        try:
            await self.client.add_column(table_name, name, column_type)
        except TransportError as e:
            logger.warning("add-column on %s failed: %s", table_name, e)
            self.notices.post(
                "add-column",
                "Failed to add column",
                NoticeStyle.ALERT,
                detail=e.server_message or str(e),
            )
            return False

        logger.info("Added column %s %s to %s", name, column_type.value, table_name)
        if self._bus is not None:
            await self._bus.publish(ColumnAdded(table_name=table_name, column_name=name))
            await self._bus.publish(
                SchemaRefreshRequested(reason="column-added", table_name=table_name)
            )
        return True
