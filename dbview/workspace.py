"""Top-level state container: the schema graph, uploads, and editors."""

import logging
from pathlib import Path

from .events import EventBus, SchemaRefreshRequested
from .graph.builder import build_graph
from .graph.changes import connect, move_node, remove_edge
from .graph.elements import GraphEdge, GraphNode
from .graph.schema_graph import SchemaGraph
from .graph.synchronizer import synchronize
from .mutations.columns import ColumnMutations
from .mutations.session import TableEditSession
from .notices import NoticeLog, NoticeStyle
from .query.runner import QueryRunner
from .transport.client import DbViewerClient
from .transport.errors import TransportError

logger = logging.getLogger(__name__)

UPLOAD_FAILED_MESSAGE = "Upload failed"


class SchemaWorkspace:
    """Owns the graph view of the schema and everything that feeds it.

    The workspace subscribes to SchemaRefreshRequested on its bus, so any
    component holding the bus can ask for a graph reload.
    """

    def __init__(
        self,
        client: DbViewerClient,
        bus: EventBus | None = None,
        notices: NoticeLog | None = None,
        default_query: str | None = None,
    ):
        self.client = client
        self.bus = bus if bus is not None else EventBus()
        self.notices = notices if notices is not None else NoticeLog()
        self.nodes: list[GraphNode] = []
        self.edges: list[GraphEdge] = []
        self.is_uploading = False
        self.columns = ColumnMutations(client, self.notices, self.bus)
        self.query_runner = QueryRunner(client, default_query)
        self._unsubscribe = self.bus.subscribe(
            SchemaRefreshRequested, self._on_refresh_requested
        )

    @property
    def graph(self) -> SchemaGraph:
        """A networkx-backed view of the current nodes and edges."""
        return build_graph(self.nodes, self.edges)

    def get_node(self, name: str) -> GraphNode | None:
        for node in self.nodes:
            if node.name == name:
                return node
        return None

    # -------------------------------------------------------------------------
    # Schema refresh
    # -------------------------------------------------------------------------

    async def refresh(self) -> bool:
        """Fetch the schema and merge it into the graph.

        On failure the graph is left as it was.

        Returns:
            True if the graph was updated.
        """
        try:
            snapshot = await self.client.fetch_schema()
        except TransportError as e:
            logger.error("Failed to fetch schema: %s", e)
            self.notices.post(
                "refresh-schema",
                "Failed to fetch schema",
                NoticeStyle.INLINE,
                detail=e.server_message or str(e),
            )
            return False

        self.nodes, self.edges = synchronize(self.nodes, self.edges, snapshot)
        logger.debug(
            "Schema synchronized: %d table(s), %d edge(s)",
            len(self.nodes),
            len(self.edges),
        )
        return True

    async def request_refresh(self, reason: str = "requested") -> None:
        """Ask every subscriber, this workspace included, to reload the schema."""
        await self.bus.publish(SchemaRefreshRequested(reason=reason))

    async def _on_refresh_requested(self, event: SchemaRefreshRequested) -> None:
        logger.debug("Refreshing schema (%s)", event.reason)
        await self.refresh()

    # -------------------------------------------------------------------------
    # Uploads
    # -------------------------------------------------------------------------

    async def upload(self, file: str | Path | bytes, filename: str | None = None) -> bool:
        """Upload a data file, then refresh the schema.

        A failed upload posts a dismissible notice carrying the server's
        message.
        """
        self.is_uploading = True
        try:
            await self.client.upload_file(file, filename)
        except TransportError as e:
            logger.warning("Upload failed: %s", e)
            self.notices.post(
                "upload",
                e.server_message or UPLOAD_FAILED_MESSAGE,
                NoticeStyle.MODAL,
            )
            return False
        else:
            return await self.refresh()
        finally:
            self.is_uploading = False

    # -------------------------------------------------------------------------
    # Graph edits
    # -------------------------------------------------------------------------

    def move_node(self, name: str, x: float, y: float) -> None:
        """Move a table on the canvas. The position survives refreshes."""
        self.nodes = move_node(self.nodes, name, x, y)

    def connect(self, source: str, target: str) -> GraphEdge:
        """Draw a user connection. It lasts until the next refresh."""
        self.edges = connect(self.nodes, self.edges, source, target)
        return self.edges[-1]

    def remove_edge(self, edge_id: str) -> None:
        self.edges = remove_edge(self.edges, edge_id)

    # -------------------------------------------------------------------------
    # Table editing
    # -------------------------------------------------------------------------

    async def open_table(self, table_name: str) -> TableEditSession:
        """Open an editing session on a table.

        The session is returned even when its first load fails; check its
        state and call ``retry`` as needed.
        """
        session = TableEditSession(self.client, table_name, self.notices, self.bus)
        await session.open()
        return session

    def export_url(self, table_name: str) -> str:
        return self.client.export_url(table_name)

    def close(self) -> None:
        """Stop listening for refresh requests."""
        self._unsubscribe()
