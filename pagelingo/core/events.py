"""
Event system for the translation engine.

The host environment reports document mutations through a change feed,
which batches them and publishes `content.changed` events on the bus. The
incremental scheduler subscribes to those events instead of polling the
document directly.
"""

from __future__ import annotations

import fnmatch
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Iterable

from pagelingo.core.utils import utc_now

logger = logging.getLogger(__name__)

# Type for event handlers
EventHandler = Callable[["Event"], Awaitable[None]]

CONTENT_CHANGED = "content.changed"


@dataclass
class Event:
    """
    An event in the system.

    Events are records of something that happened to a document. The
    payload may carry live node references, so events are not serialized.
    """

    event_type: str  # e.g., "content.changed"
    source: str  # Document context that produced the event
    payload: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=utc_now)


@dataclass
class Subscription:
    """A subscription to events matching a pattern."""

    pattern: str  # e.g., "content.*"
    handler: EventHandler
    source: str | None = None

    def matches(self, event: Event) -> bool:
        """Check if this subscription matches the given event."""
        if not fnmatch.fnmatch(event.event_type, self.pattern):
            return False
        return self.source is None or event.source == self.source


class EventBus:
    """
    In-memory event bus.

    Handlers run sequentially on the caller's event loop; a failing handler
    is logged and does not stop the others.
    """

    def __init__(self):
        self._subscriptions: list[Subscription] = []

    def subscribe(
        self,
        pattern: str,
        handler: EventHandler,
        source: str | None = None,
    ) -> Subscription:
        """
        Subscribe to events matching a pattern.

        Args:
            pattern: Event type pattern (supports wildcards like "content.*")
            handler: Async function to handle matching events
            source: Only deliver events from this document context

        Returns:
            The subscription object (can be used to unsubscribe)
        """
        subscription = Subscription(pattern=pattern, handler=handler, source=source)
        self._subscriptions.append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        """Remove a subscription."""
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    async def publish(self, event: Event) -> int:
        """
        Deliver an event to every matching subscription.

        Returns:
            The number of handlers that ran without raising
        """
        delivered = 0
        for subscription in [s for s in self._subscriptions if s.matches(event)]:
            try:
                await subscription.handler(event)
                delivered += 1
            except Exception:
                logger.exception("Error in event handler for %s", event.event_type)
        return delivered


# =============================================================================
# Change feed
# =============================================================================


class ChangeFeed:
    """
    Buffered feed of document mutations.

    The host records added/removed nodes as they happen; `flush()` delivers
    everything recorded since the last flush as one `content.changed` event.
    The scheduler flushes on every consolidation tick. `take_records()`
    drops pending records without delivering them, which the engine uses
    to hide its own substitutions.
    """

    def __init__(self, bus: EventBus | None = None, source: str = "document"):
        self.bus = bus or EventBus()
        self.source = source
        self._added: list[Any] = []
        self._removed: list[Any] = []

    @property
    def has_pending(self) -> bool:
        return bool(self._added or self._removed)

    def record(self, added: Iterable[Any] = (), removed: Iterable[Any] = ()) -> None:
        """Record a mutation reported by the host environment."""
        self._added.extend(added)
        self._removed.extend(removed)

    def take_records(self) -> tuple[list[Any], list[Any]]:
        """Return and clear pending records without publishing them."""
        added, removed = self._added, self._removed
        self._added, self._removed = [], []
        return added, removed

    async def flush(self) -> Event | None:
        """Publish pending records as a single batch, if there are any."""
        if not self.has_pending:
            return None
        added, removed = self.take_records()
        event = content_changed(self.source, added, removed)
        await self.bus.publish(event)
        return event

    def subscribe(self, handler: EventHandler) -> Subscription:
        """Subscribe to mutation batches of this feed's document."""
        return self.bus.subscribe(CONTENT_CHANGED, handler, source=self.source)

    def unsubscribe(self, subscription: Subscription) -> None:
        self.bus.unsubscribe(subscription)


def content_changed(source: str, added: list[Any], removed: list[Any]) -> Event:
    """Create a content.changed event."""
    return Event(
        event_type=CONTENT_CHANGED,
        source=source,
        payload={"added": list(added), "removed": list(removed)},
    )
