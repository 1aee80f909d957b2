"""Text and JSON rendering of workspace state."""

from .formatter import format_graph, format_notices, format_rows

__all__ = ["format_graph", "format_notices", "format_rows"]
