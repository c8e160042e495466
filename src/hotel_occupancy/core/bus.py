"""
Event Bus implementation for property-aware event routing.

The Event Bus is a simple, synchronous dispatcher for domain events.
"""

from dataclasses import dataclass, field
from datetime import datetime, UTC
from typing import Optional, Dict, Any, Callable, List

import logging

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    """Get current UTC time (for default factory)."""
    return datetime.now(UTC)


@dataclass
class Event:
    """
    A domain event in the hotel-occupancy system.

    Attributes:
        type: Event type (e.g., "state.changed", "notification.created")
        source: Event source (e.g., "state", "bookings", "sync")
        property_id: Optional property this event relates to ("sweetheart", "roygan")
        room_id: Optional room ID this event relates to
        payload: Event-specific data
        timestamp: When the event occurred
    """

    type: str
    source: str
    property_id: Optional[str] = None
    room_id: Optional[int] = None
    payload: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=_utc_now)


class EventFilter:
    """
    Filter for event subscriptions.

    Allows subscribers to filter events by type and property.
    """

    def __init__(
        self,
        event_type: Optional[str] = None,
        property_id: Optional[str] = None,
    ):
        """
        Initialize an event filter.

        Args:
            event_type: Filter by event type (None = all types)
            property_id: Filter by property (None = all properties)
        """
        self.event_type = event_type
        self.property_id = property_id

    def matches(self, event: Event) -> bool:
        """
        Check if an event matches this filter.

        Events without a property match any property filter, since
        whole-state events concern every property.

        Args:
            event: The event to check

        Returns:
            True if the event matches the filter
        """
        if self.event_type and event.type != self.event_type:
            return False

        if self.property_id and event.property_id:
            return event.property_id == self.property_id

        return True

    def __repr__(self) -> str:
        return f"EventFilter(event_type={self.event_type!r}, property_id={self.property_id!r})"


EventHandler = Callable[[Event], None]


class EventBus:
    """
    Simple, synchronous event bus for hotel-occupancy events.

    Handlers are wrapped in try/except so one failing subscriber
    (e.g. a full disk in persistence) cannot break the others.
    """

    def __init__(self) -> None:
        """Initialize the event bus."""
        self._handlers: List[tuple[EventFilter, EventHandler]] = []

    def subscribe(
        self,
        handler: EventHandler,
        event_filter: Optional[EventFilter] = None,
    ) -> None:
        """
        Subscribe to events.

        Args:
            handler: Callable that receives Event objects
            event_filter: Optional filter for events (None = receive all events)
        """
        if event_filter is None:
            event_filter = EventFilter()

        self._handlers.append((event_filter, handler))
        logger.debug(f"Subscribed handler {handler.__name__} with filter {event_filter}")

    def publish(self, event: Event) -> None:
        """
        Publish an event to all matching subscribers.

        Handlers are called synchronously and wrapped in try/except.

        Args:
            event: The event to publish
        """
        logger.debug(f"Publishing event: {event.type} from {event.source}")

        for event_filter, handler in list(self._handlers):
            if event_filter.matches(event):
                try:
                    handler(event)
                except Exception as e:
                    logger.error(
                        f"Error in event handler {handler.__name__} "
                        f"for event {event.type}: {e}",
                        exc_info=True,
                    )

    def unsubscribe(self, handler: EventHandler) -> None:
        """
        Unsubscribe a handler from all events.

        Args:
            handler: The handler to unsubscribe
        """
        self._handlers = [(f, h) for f, h in self._handlers if h != handler]
        logger.debug(f"Unsubscribed handler {handler.__name__}")
