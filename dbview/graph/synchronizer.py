"""Synchronization of graph state with a freshly fetched schema snapshot."""

import logging
from typing import Iterable

from ..schema.models import SchemaSnapshot
from .elements import GraphEdge, GraphNode, Position
from .node_types import EdgeOrigin

logger = logging.getLogger(__name__)

GRID_COLUMNS = 3
GRID_X_SPACING = 250
GRID_Y_OFFSET = 100
GRID_Y_SPACING = 300


def grid_position(index: int) -> Position:
    """Initial position of the table at ordinal ``index`` in the snapshot.

    Tables are laid out left to right in rows of three.
    """
    return Position(
        GRID_X_SPACING * (index % GRID_COLUMNS),
        GRID_Y_OFFSET + GRID_Y_SPACING * (index // GRID_COLUMNS),
    )


def edge_id(index: int) -> str:
    """Rendering key of the ``index``-th relationship in server order."""
    return f"e-{index}"


def synchronize(
    previous_nodes: Iterable[GraphNode],
    previous_edges: Iterable[GraphEdge],
    snapshot: SchemaSnapshot,
) -> tuple[list[GraphNode], list[GraphEdge]]:
    """Rebuild graph state from a schema snapshot.

    Nodes are matched to tables by name. A matched node keeps its position;
    a new table is placed on the grid by its index in the snapshot. Columns
    always come from the snapshot. Nodes whose table is gone are dropped.

    Edges are re-derived from the snapshot's relationships, one per
    relationship in order. Previous edges, including user-drawn connections,
    are not carried over.

    Args:
        previous_nodes: Graph nodes before this refresh.
        previous_edges: Graph edges before this refresh.
        snapshot: The schema as currently reported by the backend.

    Returns:
        A (nodes, edges) tuple of new lists. The inputs are not modified.
    """
    positions = {node.name: node.position for node in previous_nodes}

    nodes = []
    for index, table in enumerate(snapshot.tables):
        position = positions.get(table.name)
        if position is None:
            position = grid_position(index)
        nodes.append(
            GraphNode(
                name=table.name,
                position=position,
                columns=tuple(table.columns),
            )
        )

    dropped = set(positions) - {node.name for node in nodes}
    if dropped:
        logger.debug("Dropping nodes for removed tables: %s", sorted(dropped))

    user_edges = sum(1 for edge in previous_edges if edge.origin == EdgeOrigin.USER)
    if user_edges:
        logger.debug("Discarding %d user-drawn connection(s) on refresh", user_edges)

    edges = [
        GraphEdge(
            id=edge_id(index),
            source=rel.source_table,
            target=rel.target_table,
            source_column=rel.source_column,
        )
        for index, rel in enumerate(snapshot.relationships)
    ]

    return nodes, edges
