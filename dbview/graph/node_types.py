"""Node and edge type definitions for the schema graph."""

from enum import Enum


class NodeType(str, Enum):
    """Types of nodes in the schema graph."""

    TABLE = "table"


class EdgeOrigin(str, Enum):
    """Where an edge in the schema graph came from."""

    RELATIONSHIP = "relationship"  # Derived from a server relationship
    USER = "user"  # Drawn by the user, not backed by the schema
