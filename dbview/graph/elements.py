"""Graph nodes and edges as held in workspace state."""

from dataclasses import dataclass
from typing import NamedTuple

from ..schema.models import Column
from .node_types import EdgeOrigin, NodeType


class Position(NamedTuple):
    """A 2-D canvas position."""

    x: float
    y: float


@dataclass(frozen=True)
class GraphNode:
    """A table on the canvas.

    The table name is the node identity. Columns come from the server on
    every refresh; the position belongs to the user once placed.
    """

    name: str
    position: Position
    columns: tuple[Column, ...] = ()
    node_type: NodeType = NodeType.TABLE

    @property
    def id(self) -> str:
        return self.name

    def moved_to(self, x: float, y: float) -> "GraphNode":
        """Return a copy of this node at a new position."""
        return GraphNode(
            name=self.name,
            position=Position(x, y),
            columns=self.columns,
            node_type=self.node_type,
        )


@dataclass(frozen=True)
class GraphEdge:
    """A directed link between two table nodes."""

    id: str
    source: str
    target: str
    source_column: str | None = None
    origin: EdgeOrigin = EdgeOrigin.RELATIONSHIP

    @property
    def is_user_edge(self) -> bool:
        return self.origin == EdgeOrigin.USER
