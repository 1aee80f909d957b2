"""Mutation layer: optimistic row edits and schema changes."""

from .columns import ColumnMutations
from .session import (
    ID_COLUMN,
    EditingCell,
    SessionState,
    TableEditSession,
    same_record,
)

__all__ = [
    "ColumnMutations",
    "ID_COLUMN",
    "EditingCell",
    "SessionState",
    "TableEditSession",
    "same_record",
]
