"""Graph layer: schema snapshots as positioned, editable graphs."""

from .node_types import NodeType, EdgeOrigin
from .elements import GraphEdge, GraphNode, Position
from .errors import GraphEditError
from .schema_graph import SchemaGraph
from .builder import build_graph
from .synchronizer import edge_id, grid_position, synchronize
from .changes import connect, move_node, remove_edge

__all__ = [
    "NodeType",
    "EdgeOrigin",
    "GraphEdge",
    "GraphNode",
    "Position",
    "GraphEditError",
    "SchemaGraph",
    "build_graph",
    "edge_id",
    "grid_position",
    "synchronize",
    "connect",
    "move_node",
    "remove_edge",
]
