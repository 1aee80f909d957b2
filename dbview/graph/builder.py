"""Builder for converting graph state into a SchemaGraph."""

from typing import Iterable

from .elements import GraphEdge, GraphNode
from .schema_graph import SchemaGraph


def build_graph(nodes: Iterable[GraphNode], edges: Iterable[GraphEdge]) -> SchemaGraph:
    """Build a SchemaGraph from node and edge lists.

    Args:
        nodes: Table nodes, in display order.
        edges: Relationship and user edges.

    Returns:
        A SchemaGraph for querying the current view.
    """
    graph = SchemaGraph()

    # Add all tables first
    for node in nodes:
        graph.add_table(node.name, node.position, node.columns)

    # Edges to tables missing from the node list are skipped; networkx
    # would otherwise create bare nodes for them
    for edge in edges:
        if graph.get_table_node(edge.source) is None:
            continue
        if graph.get_table_node(edge.target) is None:
            continue
        graph.add_edge(
            edge.id,
            edge.source,
            edge.target,
            source_column=edge.source_column,
            origin=edge.origin,
        )

    return graph
