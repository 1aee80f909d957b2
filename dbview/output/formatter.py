"""Output formatting for graph state, row sets, and notices."""

import json
from typing import Any, Literal, Sequence

from ..graph.builder import build_graph
from ..graph.elements import GraphEdge, GraphNode
from ..notices import Notice, NoticeStyle

OutputFormat = Literal["text", "json"]

EMPTY_RESULT_MESSAGE = "Run a query to see results"


def format_graph(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    format: OutputFormat = "text",
) -> str:
    """Format graph state for output.

    Args:
        nodes: Table nodes.
        edges: Relationship and user edges.
        format: Output format ("text" or "json").

    Returns:
        Formatted string representation.
    """
    if format == "json":
        return _format_graph_json(nodes, edges)
    return _format_graph_text(nodes, edges)


def _format_graph_text(nodes: Sequence[GraphNode], edges: Sequence[GraphEdge]) -> str:
    """Format graph state as human-readable text."""
    lines: list[str] = []

    # Tables section
    lines.append("TABLES:")
    if nodes:
        for node in nodes:
            x, y = node.position
            lines.append(f"  {node.name} @ ({x:g}, {y:g})")
            for col in node.columns:
                marker = "⚷" if col.looks_like_key else " "
                lines.append(f"    {marker} {col.name}: {col.type}")
    else:
        lines.append("  (none)")

    lines.append("")

    # Relationships section
    lines.append("RELATIONSHIPS:")
    if edges:
        for edge in edges:
            via = f" via {edge.source_column}" if edge.source_column else ""
            lines.append(f"  {edge.id}: {edge.source} -> {edge.target}{via}")
    else:
        lines.append("  (none)")

    isolated = build_graph(nodes, edges).get_isolated_tables()
    if isolated:
        lines.append("")
        lines.append(f"Unrelated tables: {', '.join(isolated)}")

    lines.append("")
    lines.append(f"{len(nodes)} table(s), {len(edges)} relationship(s)")

    return "\n".join(lines)


def _format_graph_json(nodes: Sequence[GraphNode], edges: Sequence[GraphEdge]) -> str:
    """Format graph state as JSON."""
    data = {
        "nodes": [
            {
                "id": node.id,
                "position": {"x": node.position.x, "y": node.position.y},
                "columns": [col.model_dump() for col in node.columns],
            }
            for node in nodes
        ],
        "edges": [
            {
                "id": edge.id,
                "source": edge.source,
                "target": edge.target,
                "source_column": edge.source_column,
                "origin": edge.origin.value,
            }
            for edge in edges
        ],
    }
    return json.dumps(data, indent=2)


def format_rows(
    rows: Sequence[dict[str, Any]],
    error: str = "",
    format: OutputFormat = "text",
) -> str:
    """Format a row set, or the error that replaced it.

    Columns are taken from the first row.
    """
    if format == "json":
        return json.dumps({"data": list(rows), "error": error}, indent=2, default=str)

    if error:
        return f"Error: {error}"

    if not rows:
        return EMPTY_RESULT_MESSAGE

    columns = list(rows[0].keys())
    table = [[_cell(row.get(col)) for col in columns] for row in rows]
    widths = [
        max(len(col), *(len(r[i]) for r in table)) for i, col in enumerate(columns)
    ]

    lines = [
        "  ".join(col.ljust(widths[i]) for i, col in enumerate(columns)).rstrip(),
        "  ".join("-" * w for w in widths),
    ]
    for r in table:
        lines.append("  ".join(v.ljust(widths[i]) for i, v in enumerate(r)).rstrip())

    lines.append("")
    lines.append(f"{len(rows)} row(s)")
    return "\n".join(lines)


def _cell(value: Any) -> str:
    if value is None or value == "":
        return "null"
    return str(value)


def format_notices(notices: Sequence[Notice]) -> str:
    """Format notices as text, one per line."""
    lines = []
    for notice in notices:
        if notice.style == NoticeStyle.MODAL:
            symbol = "✘"
        elif notice.style == NoticeStyle.INLINE:
            symbol = "ℹ"
        else:
            symbol = "⚠"
        line = f"{symbol} {notice.message}"
        if notice.detail:
            line += f": {notice.detail}"
        lines.append(line)
    return "\n".join(lines)
