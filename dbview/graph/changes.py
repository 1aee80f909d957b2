"""User edits to graph state: moving nodes and drawing connections."""

from typing import Sequence

from .elements import GraphEdge, GraphNode
from .errors import GraphEditError
from .node_types import EdgeOrigin


def move_node(
    nodes: Sequence[GraphNode], name: str, x: float, y: float
) -> list[GraphNode]:
    """Return the node list with one node repositioned.

    Raises:
        GraphEditError: If no node has that name.
    """
    if not any(node.name == name for node in nodes):
        raise GraphEditError(f"No table named {name!r} in the graph", name)

    return [node.moved_to(x, y) if node.name == name else node for node in nodes]


def connect(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    source: str,
    target: str,
) -> list[GraphEdge]:
    """Return the edge list with a user-drawn connection appended.

    Args:
        nodes: Current graph nodes, used to check both endpoints exist.
        edges: Current graph edges.
        source: Source table name.
        target: Target table name.

    Returns:
        A new edge list.

    Raises:
        GraphEditError: If either endpoint is not in the graph.
    """
    names = {node.name for node in nodes}
    for endpoint in (source, target):
        if endpoint not in names:
            raise GraphEditError(f"No table named {endpoint!r} in the graph", endpoint)

    taken = {edge.id for edge in edges}
    n = 0
    while f"user-{source}-{target}-{n}" in taken:
        n += 1

    edge = GraphEdge(
        id=f"user-{source}-{target}-{n}",
        source=source,
        target=target,
        origin=EdgeOrigin.USER,
    )
    return [*edges, edge]


def remove_edge(edges: Sequence[GraphEdge], edge_id: str) -> list[GraphEdge]:
    """Return the edge list without the given edge.

    Removing an unknown id is a no-op.
    """
    return [edge for edge in edges if edge.id != edge_id]
