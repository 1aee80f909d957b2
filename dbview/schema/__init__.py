"""Schema layer for parsing and validating backend schema payloads."""

from .errors import SchemaLoadError, SchemaValidationError
from .models import (
    Column,
    ColumnType,
    Relationship,
    SchemaSnapshot,
    Table,
)
from .loader import (
    load_snapshot,
    parse_rows,
    parse_snapshot,
    parse_snapshot_from_string,
)

__all__ = [
    "SchemaLoadError",
    "SchemaValidationError",
    "Column",
    "ColumnType",
    "Relationship",
    "SchemaSnapshot",
    "Table",
    "load_snapshot",
    "parse_rows",
    "parse_snapshot",
    "parse_snapshot_from_string",
]
