"""BookingModule - the mutation API used by the front desk.

This module wraps the booking engine and integrates it with the
hotel-occupancy kernel (EventBus, HotelState).
"""

import logging
from datetime import datetime, UTC
from typing import Optional

from hotel_occupancy.core.bus import Event, EventBus
from hotel_occupancy.core.room import Room
from hotel_occupancy.core.state import HotelState, Snapshot, ORIGIN_LOCAL
from hotel_occupancy.modules.base import HotelModule

from .engine import BookingEngine, validate_stay
from .models import StayDuration

logger = logging.getLogger(__name__)

ROOM_CHANGED = "room.changed"


class BookingModule(HotelModule):
    """
    Check-in, reservation and check-out operations.

    Every operation:
    1. Locates the room by id (unknown ids are ignored, nothing is published)
    2. Computes the next snapshot with the pure BookingEngine
    3. Commits it through HotelState.replace(), which triggers
       persistence and broadcast via "state.changed"
    4. Emits a semantic "room.changed" event
    """

    def __init__(self) -> None:
        self._bus: Optional[EventBus] = None
        self._state: Optional[HotelState] = None
        self._engine = BookingEngine()

    @property
    def id(self) -> str:
        return "bookings"

    def attach(self, bus: EventBus, state: HotelState) -> None:
        """Attach to the kernel."""
        logger.info("Attaching BookingModule")
        self._bus = bus
        self._state = state

    def commit_stay(
        self,
        room_id: int,
        guest_name: str,
        duration: StayDuration,
        now: Optional[datetime] = None,
    ) -> Snapshot:
        """
        Check a guest in, or update the stay of an occupied/reserved room.

        Args:
            room_id: Target room
            guest_name: Guest name (blank becomes "Anonymous Guest")
            duration: HourlyStay for hourly units, OvernightStay for overnight rooms
            now: Current time (defaults to datetime.now(UTC))

        Returns:
            The snapshot after the operation (unchanged if the room is unknown)

        Raises:
            InvalidStayError: If the duration is invalid; state is not touched
        """
        assert self._state is not None
        if now is None:
            now = datetime.now(UTC)

        current = self._state.snapshot(now)
        room = current.get_room(room_id)
        if room is not None:
            validate_stay(room, duration)

        next_snapshot = self._engine.commit_stay(current, room_id, guest_name, duration, now)
        return self._commit(current, next_snapshot, room_id, "commit_stay", now)

    def reserve(
        self,
        room_id: int,
        guest_name: str,
        now: Optional[datetime] = None,
    ) -> Snapshot:
        """
        Reserve a room for a guest.

        Args:
            room_id: Target room
            guest_name: Guest name
            now: Current time (defaults to datetime.now(UTC))

        Returns:
            The snapshot after the operation (unchanged if the room is unknown)
        """
        assert self._state is not None
        if now is None:
            now = datetime.now(UTC)

        current = self._state.snapshot(now)
        next_snapshot = self._engine.reserve(current, room_id, guest_name)
        return self._commit(current, next_snapshot, room_id, "reserve", now)

    def check_out(self, room_id: int, now: Optional[datetime] = None) -> Snapshot:
        """
        Check the guest out and free the room.

        Args:
            room_id: Target room
            now: Current time (defaults to datetime.now(UTC))

        Returns:
            The snapshot after the operation (unchanged if the room is unknown)
        """
        assert self._state is not None
        if now is None:
            now = datetime.now(UTC)

        current = self._state.snapshot(now)
        next_snapshot = self._engine.check_out(current, room_id)
        return self._commit(current, next_snapshot, room_id, "check_out", now)

    def _commit(
        self,
        current: Snapshot,
        next_snapshot: Optional[Snapshot],
        room_id: int,
        action: str,
        now: datetime,
    ) -> Snapshot:
        """Replace state with the engine result and announce the room change."""
        assert self._state is not None
        if next_snapshot is None:
            return current

        committed = self._state.replace(next_snapshot, origin=ORIGIN_LOCAL, now=now)

        previous_room = current.get_room(room_id)
        new_room = committed.get_room(room_id)
        if previous_room is not None and new_room is not None:
            self._emit_room_changed(previous_room, new_room, action)
        return committed

    def _emit_room_changed(self, previous: Room, room: Room, action: str) -> None:
        """Emit semantic room.changed event."""
        assert self._bus is not None
        self._bus.publish(
            Event(
                type=ROOM_CHANGED,
                source="bookings",
                property_id=room.property_id.value,
                room_id=room.id,
                payload={
                    "action": action,
                    "room_number": room.room_number,
                    "status": room.status.value,
                    "previous_status": previous.status.value,
                    "guest_name": room.guest_name,
                    "expires_at": room.end_time.isoformat() if room.end_time else None,
                },
            )
        )
