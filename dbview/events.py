"""Typed event bus for decoupled refresh notifications.

Components that change the schema publish events here instead of holding a
reference to the workspace; the workspace and open editing sessions
subscribe to the topics they care about.
"""

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

Handler = Callable[[Any], "Awaitable[None] | None"]


@dataclass(frozen=True)
class Event:
    """Base class for bus events."""


@dataclass(frozen=True)
class SchemaRefreshRequested(Event):
    """Raised when the schema graph should be reloaded from the backend."""

    reason: str = "requested"
    table_name: str | None = None


@dataclass(frozen=True)
class ColumnAdded(Event):
    """Raised after a column was added to a table on the backend."""

    table_name: str
    column_name: str


class EventBus:
    """Publish/subscribe registry keyed by event type."""

    def __init__(self):
        self._subscribers: dict[type[Event], list[Handler]] = {}

    def subscribe(self, event_type: type[Event], handler: Handler) -> Callable[[], None]:
        """Subscribe a handler to an event type.

        Handlers may be plain callables or coroutine functions.

        Returns:
            A callable that removes this subscription.
        """
        self._subscribers.setdefault(event_type, []).append(handler)

        def unsubscribe() -> None:
            handlers = self._subscribers.get(event_type, [])
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    async def publish(self, event: Event) -> None:
        """Deliver an event to every subscriber of its exact type.

        A handler that raises is logged and skipped; the remaining handlers
        still run.
        """
        # Copy: handlers may unsubscribe while being delivered to
        handlers = list(self._subscribers.get(type(event), []))
        logger.debug("Publishing %s to %d handler(s)", event, len(handlers))

        for handler in handlers:
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Event handler failed for %s", type(event).__name__)

    def subscriber_count(self, event_type: type[Event]) -> int:
        return len(self._subscribers.get(event_type, []))

    def clear(self) -> None:
        """Remove all subscriptions."""
        self._subscribers = {}
