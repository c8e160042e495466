"""The Core Logic Engine for bookings.

This module contains the pure business logic. It accepts a snapshot, an
operation and the current time, and returns the next snapshot. It never
touches the bus, storage or the clock.

Licensed under MIT License
"""

import logging
from dataclasses import replace
from datetime import datetime, time, timedelta, UTC

from hotel_occupancy.core.errors import InvalidStayError
from hotel_occupancy.core.room import PropertyId, Room, RoomStatus, truncate_to_millis
from hotel_occupancy.core.state import Snapshot

from .models import DEFAULT_GUEST_NAME, HourlyStay, OvernightStay, StayDuration

_LOGGER = logging.getLogger(__name__)


def overnight_checkout(now: datetime, stay: OvernightStay) -> datetime:
    """Compute the checkout instant of an overnight stay.

    Checkout is on the local date of now plus stay.days, at 12:00 local
    time (14:00 with late check-out).

    Args:
        now: Check-in time (timezone-aware).
        stay: The overnight stay.

    Returns:
        Checkout instant in UTC.
    """
    checkout_day = now.astimezone().date() + timedelta(days=stay.days)
    # Naive local wall time; astimezone() resolves it in the local zone (DST aware)
    local_checkout = datetime.combine(checkout_day, time(hour=stay.checkout_hour))
    return local_checkout.astimezone().astimezone(UTC)


def validate_stay(room: Room, duration: StayDuration) -> None:
    """Reject durations that cannot be booked on this room.

    A fresh check-in (room neither OCCUPIED nor RESERVED) needs a positive
    duration. Editing an existing stay accepts a non-positive hourly
    duration, which frees the room.

    Raises:
        InvalidStayError: If the duration is invalid for this room.
    """
    if room.property_id == PropertyId.ROYGAN and not isinstance(duration, OvernightStay):
        raise InvalidStayError(
            f"Room {room.room_number} ({room.property_id.value}) takes an OvernightStay, "
            f"got {type(duration).__name__}"
        )
    if room.property_id == PropertyId.SWEETHEART and not isinstance(duration, HourlyStay):
        raise InvalidStayError(
            f"Room {room.room_number} ({room.property_id.value}) takes an HourlyStay, "
            f"got {type(duration).__name__}"
        )

    is_editing = room.status in (RoomStatus.OCCUPIED, RoomStatus.RESERVED)
    if is_editing:
        return

    if isinstance(duration, HourlyStay) and duration.total_minutes <= 0:
        raise InvalidStayError("Please enter a valid stay duration.")
    if isinstance(duration, OvernightStay) and duration.days <= 0:
        raise InvalidStayError("Please enter a valid number of nights.")


def freed(room: Room) -> Room:
    """Return the room as FREE with every occupancy field cleared."""
    return replace(
        room,
        status=RoomStatus.FREE,
        guest_name=None,
        start_time=None,
        end_time=None,
        early_check_in=None,
        late_check_out=None,
    )


class BookingEngine:
    """The functional core of the mutation API."""

    def commit_stay(
        self,
        snapshot: Snapshot,
        room_id: int,
        guest_name: str,
        duration: StayDuration,
        now: datetime,
    ) -> Snapshot | None:
        """Check a guest in, or update the current stay.

        Args:
            snapshot: Current state.
            room_id: Target room.
            guest_name: Guest name (blank becomes "Anonymous Guest").
            duration: HourlyStay or OvernightStay matching the room's property.
            now: Current datetime (timezone-aware).

        Returns:
            The next snapshot, or None if the room does not exist.
        """
        room = snapshot.get_room(room_id)
        if room is None:
            _LOGGER.warning(f"commit_stay for unknown room: {room_id}")
            return None

        now = truncate_to_millis(now.astimezone(UTC))
        guest_name = (guest_name or "").strip() or DEFAULT_GUEST_NAME
        stats = snapshot.daily_stats

        if isinstance(duration, OvernightStay):
            checkout = overnight_checkout(now, duration)
            if room.status != RoomStatus.OCCUPIED:
                stats = stats.record_overnight_booking(room.room_number)
                _LOGGER.info(
                    f"  Overnight booking #{stats.roygan_bookings} today: room {room.room_number}"
                )
            new_room = replace(
                room,
                status=RoomStatus.OCCUPIED,
                guest_name=guest_name,
                start_time=now,
                end_time=checkout,
                early_check_in=duration.early_check_in,
                late_check_out=duration.late_check_out,
            )

        elif duration.total_minutes > 0:
            stats = stats.add_hours(room.room_number, duration.hours)
            new_room = replace(
                room,
                status=RoomStatus.OCCUPIED,
                guest_name=guest_name,
                start_time=now,
                end_time=now + timedelta(minutes=duration.total_minutes),
                early_check_in=None,
                late_check_out=None,
            )

        else:
            # Non-positive duration on an existing stay: cancel without booking
            new_room = freed(room)

        _LOGGER.info(
            f"Room {room.room_number} ({room.property_id.value}): "
            f"{room.status.value} -> {new_room.status.value}"
        )
        return Snapshot(
            rooms=snapshot.with_room(new_room).rooms,
            daily_stats=stats,
        )

    def reserve(self, snapshot: Snapshot, room_id: int, guest_name: str) -> Snapshot | None:
        """Mark a room RESERVED for a guest. Daily stats are not touched.

        Returns:
            The next snapshot, or None if the room does not exist.
        """
        room = snapshot.get_room(room_id)
        if room is None:
            _LOGGER.warning(f"reserve for unknown room: {room_id}")
            return None

        guest_name = (guest_name or "").strip() or DEFAULT_GUEST_NAME
        new_room = replace(freed(room), status=RoomStatus.RESERVED, guest_name=guest_name)
        _LOGGER.info(
            f"Room {room.room_number} ({room.property_id.value}): "
            f"{room.status.value} -> RESERVED"
        )
        return snapshot.with_room(new_room)

    def check_out(self, snapshot: Snapshot, room_id: int) -> Snapshot | None:
        """Free a room. Daily stats are not decremented.

        Returns:
            The next snapshot, or None if the room does not exist.
        """
        room = snapshot.get_room(room_id)
        if room is None:
            _LOGGER.warning(f"check_out for unknown room: {room_id}")
            return None

        _LOGGER.info(
            f"Room {room.room_number} ({room.property_id.value}): {room.status.value} -> FREE"
        )
        return snapshot.with_room(freed(room))
