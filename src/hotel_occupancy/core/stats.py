"""Daily statistics and the day rollover rule.

Licensed under MIT License
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple


def local_date(now: datetime) -> str:
    """Return the local calendar date of an instant as YYYY-MM-DD."""
    return now.astimezone().date().isoformat()


@dataclass(frozen=True)
class DailyStats:
    """Booking activity for one calendar day (Immutable).

    Totals record "activity occurred today", not "currently occupied":
    checking a guest out never decrements them.

    Attributes:
        date: Day this record applies to (YYYY-MM-DD, local time).
        roygan_bookings: Number of overnight bookings made today.
        roygan_booked_rooms: Room numbers booked today, duplicates collapsed.
        sweetheart_room_hours: Room number -> hours sold today.
    """

    date: str
    roygan_bookings: int = 0
    roygan_booked_rooms: Tuple[str, ...] = ()
    sweetheart_room_hours: Mapping[str, float] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self) -> None:
        # Freeze the hours mapping so snapshots can be shared between readers
        if not isinstance(self.sweetheart_room_hours, MappingProxyType):
            object.__setattr__(
                self, "sweetheart_room_hours", MappingProxyType(dict(self.sweetheart_room_hours))
            )
        object.__setattr__(self, "roygan_booked_rooms", tuple(self.roygan_booked_rooms))

    @classmethod
    def fresh(cls, day: str) -> "DailyStats":
        """Create an empty record for the given day."""
        return cls(date=day)

    @property
    def total_sweetheart_hours(self) -> float:
        """Total hours sold across all hourly units today."""
        return sum(self.sweetheart_room_hours.values())

    def is_current(self, now: datetime) -> bool:
        """Check if this record applies to the local date of now."""
        return self.date == local_date(now)

    def record_overnight_booking(self, room_number: str) -> "DailyStats":
        """Count a new overnight booking for a room."""
        booked = self.roygan_booked_rooms
        if room_number not in booked:
            booked = booked + (room_number,)
        return DailyStats(
            date=self.date,
            roygan_bookings=self.roygan_bookings + 1,
            roygan_booked_rooms=booked,
            sweetheart_room_hours=self.sweetheart_room_hours,
        )

    def add_hours(self, room_number: str, hours: float) -> "DailyStats":
        """Accumulate hourly-unit hours for a room."""
        hours_map = dict(self.sweetheart_room_hours)
        hours_map[room_number] = hours_map.get(room_number, 0) + hours
        return DailyStats(
            date=self.date,
            roygan_bookings=self.roygan_bookings,
            roygan_booked_rooms=self.roygan_booked_rooms,
            sweetheart_room_hours=hours_map,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the persisted/synced layout."""
        return {
            "date": self.date,
            "royganBookings": self.roygan_bookings,
            "royganBookedRooms": list(self.roygan_booked_rooms),
            "sweetheartRoomHours": dict(self.sweetheart_room_hours),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DailyStats":
        """Build a DailyStats from its serialized form.

        Raises:
            KeyError: If the date is missing.
            ValueError: If the date is not YYYY-MM-DD or a number is invalid.
            TypeError: If a field has the wrong type.
        """
        if not isinstance(data, dict):
            raise TypeError(f"Stats record must be an object, got {type(data).__name__}")

        day = data["date"]
        # Validates the format, the string form is what we keep
        date.fromisoformat(day)

        bookings = data.get("royganBookings", 0)
        if isinstance(bookings, bool) or not isinstance(bookings, int):
            raise TypeError(f"royganBookings must be an integer, got {type(bookings).__name__}")
        if bookings < 0:
            raise ValueError(f"royganBookings must not be negative, got {bookings}")

        booked = data.get("royganBookedRooms", [])
        if not isinstance(booked, list):
            raise TypeError("royganBookedRooms must be a list")

        booked_rooms: Tuple[str, ...] = ()
        for number in booked:
            if str(number) not in booked_rooms:
                booked_rooms = booked_rooms + (str(number),)

        hours = data.get("sweetheartRoomHours", {})
        if not isinstance(hours, dict):
            raise TypeError("sweetheartRoomHours must be an object")

        room_hours: Dict[str, float] = {}
        for number, value in hours.items():
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise TypeError(f"Hours for room {number} must be a number")
            try:
                value = float(value)
            except OverflowError as e:
                raise ValueError(f"Hours for room {number} out of range") from e
            if not math.isfinite(value) or value < 0:
                raise ValueError(f"Hours for room {number} must be finite and not negative")
            room_hours[str(number)] = value

        return cls(
            date=day,
            roygan_bookings=bookings,
            roygan_booked_rooms=booked_rooms,
            sweetheart_room_hours=room_hours,
        )


def roll_over(stats: DailyStats, now: datetime) -> DailyStats:
    """Return stats unchanged if current, otherwise a fresh record for today.

    Prior totals are discarded, never carried forward.
    """
    if stats.is_current(now):
        return stats
    return DailyStats.fresh(local_date(now))
