"""Query console."""

from .runner import QUERY_FAILED_MESSAGE, QueryRunner

__all__ = ["QUERY_FAILED_MESSAGE", "QueryRunner"]
