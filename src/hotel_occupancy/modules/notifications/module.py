"""NotificationModule - stay expiry alerts for the front desk.

This module wraps the notification engine and integrates it with the
hotel-occupancy kernel (EventBus, HotelState).
"""

import logging
from datetime import datetime, timedelta, UTC
from typing import Any, Dict, List, Optional

from hotel_occupancy.core.bus import Event, EventBus, EventFilter
from hotel_occupancy.core.state import HotelState, STATE_CHANGED
from hotel_occupancy.modules.base import HotelModule

from .engine import NotificationEngine
from .models import Notification, NotificationKind

logger = logging.getLogger(__name__)

NOTIFICATION_CREATED = "notification.created"
NOTIFICATION_DISMISSED = "notification.dismissed"


class NotificationModule(HotelModule):
    """
    Stay expiry notifications.

    Features:
    - At most one warning and one expiry per occupancy period
    - Flags reset on every new occupancy period, including synced ones
    - Most recent notifications first
    - Individual and bulk dismissal

    Note: This module does NOT schedule scans internally.
    The host (HotelApp, test suite, etc.) calls check_expirations(now)
    on a fixed cadence.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        self.config = {**self.default_config(), **(config or {})}
        self._bus: Optional[EventBus] = None
        self._state: Optional[HotelState] = None
        self._engine: Optional[NotificationEngine] = None
        self._notifications: List[Notification] = []

    @property
    def id(self) -> str:
        return "notifications"

    def attach(self, bus: EventBus, state: HotelState) -> None:
        """Attach to the kernel and initialize engine."""
        logger.info("Attaching NotificationModule")
        self._bus = bus
        self._state = state

        messages = {}
        if self.config.get("warning_message"):
            messages[NotificationKind.WARNING] = self.config["warning_message"]
        if self.config.get("expiry_message"):
            messages[NotificationKind.EXPIRY] = self.config["expiry_message"]

        self._engine = NotificationEngine(
            warning_threshold=timedelta(seconds=self.config["warning_threshold"]),
            messages=messages,
        )
        self._engine.track(state.rooms())

        bus.subscribe(self._on_state_changed, EventFilter(event_type=STATE_CHANGED))

    def detach(self) -> None:
        if self._bus is not None:
            self._bus.unsubscribe(self._on_state_changed)

    def default_config(self) -> Dict:
        """Default configuration."""
        return {
            "warning_threshold": 300,  # 5 minutes
            "warning_message": None,
            "expiry_message": None,
        }

    def _on_state_changed(self, event: Event) -> None:
        """Reset flags for rooms whose occupancy period changed."""
        assert self._engine is not None
        snapshot = event.payload["snapshot"]
        self._engine.track(snapshot.rooms)

    @property
    def notifications(self) -> List[Notification]:
        """Current notifications, most recent first."""
        return list(self._notifications)

    def check_expirations(self, now: Optional[datetime] = None) -> List[Notification]:
        """
        Scan occupied rooms and raise due alerts.

        Args:
            now: Current time (defaults to datetime.now(UTC))

        Returns:
            Notifications raised by this tick, in emission order
        """
        if not self._engine or not self._state:
            return []

        if now is None:
            now = datetime.now(UTC)

        logger.debug(f"Checking expirations at {now}")
        result = self._engine.scan(self._state.rooms(), now)
        if result.skipped:
            logger.debug(f"Rooms occupied without an end time: {result.skipped}")

        if result.notifications:
            self._notifications = list(result.notifications) + self._notifications
            for notification in result.notifications:
                self._emit_created(notification)

        return list(result.notifications)

    def dismiss(self, notification_id: str) -> None:
        """
        Dismiss one notification. Unknown ids are ignored.

        Args:
            notification_id: The notification ID
        """
        remaining = [n for n in self._notifications if n.id != notification_id]
        if len(remaining) == len(self._notifications):
            logger.debug(f"Dismiss ignored, unknown notification: {notification_id}")
            return

        self._notifications = remaining
        self._emit_dismissed([notification_id])

    def dismiss_all(self) -> None:
        """Dismiss every notification."""
        if not self._notifications:
            return

        dismissed = [n.id for n in self._notifications]
        self._notifications = []
        logger.info(f"Dismissed {len(dismissed)} notifications")
        self._emit_dismissed(dismissed)

    def _emit_created(self, notification: Notification) -> None:
        assert self._bus is not None and self._state is not None
        room = self._state.get_room(notification.room_id)
        self._bus.publish(
            Event(
                type=NOTIFICATION_CREATED,
                source="notifications",
                property_id=room.property_id.value if room else None,
                room_id=notification.room_id,
                payload={
                    "id": notification.id,
                    "kind": notification.kind.value,
                    "room_number": notification.room_number,
                    "property_name": notification.property_name,
                    "message": notification.message,
                },
                timestamp=notification.timestamp,
            )
        )

    def _emit_dismissed(self, notification_ids: List[str]) -> None:
        assert self._bus is not None
        self._bus.publish(
            Event(
                type=NOTIFICATION_DISMISSED,
                source="notifications",
                payload={"ids": notification_ids},
            )
        )
