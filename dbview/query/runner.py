"""Ad-hoc query console state."""

import logging
from typing import Any

from ..config import settings
from ..transport.client import DbViewerClient
from ..transport.errors import TransportError

logger = logging.getLogger(__name__)

QUERY_FAILED_MESSAGE = "Query execution failed"


class QueryRunner:
    """Runs queries and holds the latest result or error.

    Each run clears the previous result and error before the request goes
    out. Runs are not cancelled or serialized: when two overlap, whichever
    response arrives last decides the final state.
    """

    def __init__(self, client: DbViewerClient, default_query: str | None = None):
        self.client = client
        self.query = settings.default_query if default_query is None else default_query
        self.results: list[dict[str, Any]] = []
        self.error = ""
        self.is_loading = False

    async def run(self, query_text: str | None = None) -> bool:
        """Run a query.

        Args:
            query_text: Query to run. Defaults to the current ``query``.

        Returns:
            True if the query succeeded.
        """
        if query_text is not None:
            self.query = query_text

        self.is_loading = True
        self.error = ""
        self.results = []

        try:
            rows = await self.client.run_query(self.query)
        except TransportError as e:
            logger.info("Query failed: %s", e)
            self.results = []
            self.error = e.server_message or QUERY_FAILED_MESSAGE
            return False
        else:
            self.results = rows
            self.error = ""
            return True
        finally:
            self.is_loading = False

    @property
    def columns(self) -> list[str]:
        """Column names of the result set, taken from its first row."""
        if not self.results:
            return []
        return list(self.results[0].keys())
