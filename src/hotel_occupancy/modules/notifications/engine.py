"""The Core Logic Engine for stay notifications.

This module contains the pure business logic. It accepts room snapshots and
time, and returns the alerts to raise. It never mutates room state.

The per-room flags live in an ephemeral side table keyed by room id and
tagged with the occupancy period they belong to. A new period (new start or
end time) resets them; leaving OCCUPIED drops them. Nothing here is
persisted.

Licensed under MIT License
"""

import logging
from datetime import datetime, timedelta
from typing import Iterable

from hotel_occupancy.core.room import Room, RoomStatus, to_millis

from .models import (
    DEFAULT_MESSAGES,
    WARNING_THRESHOLD,
    AlertFlags,
    Notification,
    NotificationKind,
    ScanResult,
    StayPeriod,
)

_LOGGER = logging.getLogger(__name__)


class NotificationEngine:
    """The functional core of the notification system."""

    def __init__(
        self,
        warning_threshold: timedelta = WARNING_THRESHOLD,
        messages: dict[NotificationKind, str] | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            warning_threshold: How long before the end a warning is raised.
            messages: Optional message text per kind.
        """
        self.warning_threshold = warning_threshold
        self.messages = {**DEFAULT_MESSAGES, **(messages or {})}
        self.flags: dict[int, tuple[StayPeriod, AlertFlags]] = {}

    def track(self, rooms: Iterable[Room]) -> None:
        """Apply the flag reset rule to a new set of rooms.

        Called whenever state is replaced (local mutation, sync, restore), so a
        new occupancy period starts with clean flags even if no scan ran in
        between.

        Args:
            rooms: The rooms of the new snapshot.
        """
        for room in rooms:
            self._flags_for(room)

    def flags_for(self, room_id: int) -> AlertFlags | None:
        """Get the flags of a room's current period, or None if not tracked."""
        entry = self.flags.get(room_id)
        return entry[1] if entry else None

    def scan(self, rooms: Iterable[Room], now: datetime) -> ScanResult:
        """Raise at most one alert per room for this tick.

        Args:
            rooms: Current rooms.
            now: Current datetime.

        Returns:
            ScanResult with new notifications in emission order.
        """
        notifications: list[Notification] = []
        skipped: list[int] = []

        for room in rooms:
            flags = self._flags_for(room)
            if flags is None:
                continue

            if room.end_time is None:
                # Occupied without an end time: nothing to measure against
                _LOGGER.debug(f"  Room {room.id}: Skipped (occupied without end time)")
                skipped.append(room.id)
                continue

            remaining = room.end_time - now

            if remaining <= timedelta(0) and not flags.expiry_fired:
                notifications.append(self._build(room, NotificationKind.EXPIRY, now))
                self._set_flags(room, AlertFlags(
                    warning_fired=flags.warning_fired,
                    expiry_fired=True,
                    one_hour_fired=flags.one_hour_fired,
                ))
            elif (
                timedelta(0) < remaining <= self.warning_threshold
                and not flags.warning_fired
            ):
                notifications.append(self._build(room, NotificationKind.WARNING, now))
                self._set_flags(room, AlertFlags(
                    warning_fired=True,
                    expiry_fired=flags.expiry_fired,
                    one_hour_fired=flags.one_hour_fired,
                ))

        for notification in notifications:
            _LOGGER.info(
                f"  Room {notification.room_number} ({notification.property_name}): "
                f"{notification.kind.value}"
            )

        return ScanResult(notifications=notifications, skipped=skipped)

    def _flags_for(self, room: Room) -> AlertFlags | None:
        """Get flags for the room's current period, resetting on a new period.

        Returns None (and forgets the room) if it is not OCCUPIED.
        """
        if room.status != RoomStatus.OCCUPIED:
            if self.flags.pop(room.id, None) is not None:
                _LOGGER.debug(f"  Room {room.id}: Flags dropped (left OCCUPIED)")
            return None

        period = StayPeriod(start_time=room.start_time, end_time=room.end_time)
        entry = self.flags.get(room.id)
        if entry is None or entry[0] != period:
            if entry is not None:
                _LOGGER.debug(f"  Room {room.id}: Flags reset (new occupancy period)")
            entry = (period, AlertFlags())
            self.flags[room.id] = entry
        return entry[1]

    def _set_flags(self, room: Room, flags: AlertFlags) -> None:
        period = StayPeriod(start_time=room.start_time, end_time=room.end_time)
        self.flags[room.id] = (period, flags)

    def _build(self, room: Room, kind: NotificationKind, now: datetime) -> Notification:
        return Notification(
            id=f"{room.id}-{kind.value}-{to_millis(now)}",
            room_id=room.id,
            room_number=room.room_number,
            property_name=room.property_id.display_name,
            kind=kind,
            message=self.messages[kind],
            timestamp=now,
        )
