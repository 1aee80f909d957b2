"""SchemaGraph wrapper around networkx for database schemas."""

from typing import Any, Iterator

import networkx as nx

from ..schema.models import Column
from .elements import GraphEdge, GraphNode, Position
from .node_types import EdgeOrigin, NodeType


class SchemaGraph:
    """A graph representation of the current schema view.

    Wraps a networkx MultiDiGraph so that several relationships between the
    same pair of tables are kept as separate edges, keyed by edge id.
    """

    def __init__(self):
        """Initialize an empty schema graph."""
        self._graph = nx.MultiDiGraph()

    @property
    def graph(self) -> nx.MultiDiGraph:
        """Get the underlying networkx graph."""
        return self._graph

    # -------------------------------------------------------------------------
    # Node and edge management
    # -------------------------------------------------------------------------

    def add_table(
        self,
        name: str,
        position: Position,
        columns: list[Column] | tuple[Column, ...] = (),
    ) -> str:
        """Add a table node to the graph.

        Args:
            name: The table name, which is also the node ID.
            position: Canvas position of the node.
            columns: Columns in server order.

        Returns:
            The node ID.
        """
        self._graph.add_node(
            name,
            node_type=NodeType.TABLE,
            name=name,
            position=position,
            columns=tuple(columns),
        )
        return name

    def add_edge(
        self,
        edge_id: str,
        source: str,
        target: str,
        source_column: str | None = None,
        origin: EdgeOrigin = EdgeOrigin.RELATIONSHIP,
    ) -> None:
        """Add a directed edge between two tables.

        Args:
            edge_id: Rendering key of the edge, used as the multigraph key.
            source: The source table name.
            target: The target table name.
            source_column: The referencing column, if any.
            origin: Whether the edge comes from the schema or the user.
        """
        self._graph.add_edge(
            source,
            target,
            key=edge_id,
            source_column=source_column,
            origin=origin,
        )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_table_names(self) -> list[str]:
        """Get all table names in insertion order."""
        return [
            data["name"]
            for _, data in self._graph.nodes(data=True)
            if data.get("node_type") == NodeType.TABLE
        ]

    def get_table_node(self, name: str) -> dict[str, Any] | None:
        """Get a table node's attributes by name."""
        if self._graph.has_node(name):
            return dict(self._graph.nodes[name])
        return None

    def has_any_relationships(self, table_name: str) -> bool:
        """Check if a table has any schema relationships (in or out)."""
        if not self._graph.has_node(table_name):
            return False

        for _, _, data in self._graph.out_edges(table_name, data=True):
            if data.get("origin") == EdgeOrigin.RELATIONSHIP:
                return True

        for _, _, data in self._graph.in_edges(table_name, data=True):
            if data.get("origin") == EdgeOrigin.RELATIONSHIP:
                return True

        return False

    def get_relationships_for_table(self, table_name: str) -> list[dict[str, Any]]:
        """Get all schema relationships for a table (both directions)."""
        relationships = []

        if not self._graph.has_node(table_name):
            return relationships

        for _, target, data in self._graph.out_edges(table_name, data=True):
            if data.get("origin") == EdgeOrigin.RELATIONSHIP:
                relationships.append({
                    "table": target,
                    "column": data.get("source_column"),
                    "direction": "outgoing",
                })

        for source, _, data in self._graph.in_edges(table_name, data=True):
            if data.get("origin") == EdgeOrigin.RELATIONSHIP:
                relationships.append({
                    "table": source,
                    "column": data.get("source_column"),
                    "direction": "incoming",
                })

        return relationships

    def get_isolated_tables(self) -> list[str]:
        """Get tables that take part in no schema relationship."""
        return [
            name
            for name in self.get_table_names()
            if not self.has_any_relationships(name)
        ]

    def iter_relationships(self) -> Iterator[tuple[str, str, str | None]]:
        """Iterate over schema relationships.

        Yields:
            Tuples of (source_table, target_table, source_column).
        """
        for source, target, data in self._graph.edges(data=True):
            if data.get("origin") == EdgeOrigin.RELATIONSHIP:
                yield source, target, data.get("source_column")

    def iter_user_edges(self) -> Iterator[tuple[str, str, str]]:
        """Iterate over user-drawn connections.

        Yields:
            Tuples of (edge_id, source_table, target_table).
        """
        for source, target, key, data in self._graph.edges(keys=True, data=True):
            if data.get("origin") == EdgeOrigin.USER:
                yield key, source, target

    def to_nodes(self) -> list[GraphNode]:
        """Convert graph nodes back to GraphNode values."""
        return [
            GraphNode(
                name=data["name"],
                position=data["position"],
                columns=data["columns"],
            )
            for _, data in self._graph.nodes(data=True)
            if data.get("node_type") == NodeType.TABLE
        ]

    def to_edges(self) -> list[GraphEdge]:
        """Convert graph edges back to GraphEdge values."""
        return [
            GraphEdge(
                id=key,
                source=source,
                target=target,
                source_column=data.get("source_column"),
                origin=data.get("origin", EdgeOrigin.RELATIONSHIP),
            )
            for source, target, key, data in self._graph.edges(keys=True, data=True)
        ]
