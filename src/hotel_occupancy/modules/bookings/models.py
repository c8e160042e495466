"""Data models for the bookings module.

A stay duration is property specific: hourly units book minutes, overnight
rooms book nights with optional early/late flags.

Licensed under MIT License
"""

from dataclasses import dataclass
from typing import Union

DEFAULT_GUEST_NAME = "Anonymous Guest"

# Checkout time of day for overnight rooms (local time)
STANDARD_CHECKOUT_HOUR = 12
LATE_CHECKOUT_HOUR = 14


@dataclass(frozen=True)
class HourlyStay:
    """Duration of a stay in an hourly unit.

    Attributes:
        total_minutes: Length of the stay. Zero or less frees the room
            when editing an existing stay.
    """

    total_minutes: int

    @classmethod
    def from_parts(cls, days: int = 0, hours: int = 0, minutes: int = 0) -> "HourlyStay":
        """Build from the days/hours/minutes fields of the check-in form."""
        return cls(total_minutes=days * 24 * 60 + hours * 60 + minutes)

    @property
    def hours(self) -> float:
        """Length of the stay in (fractional) hours."""
        return self.total_minutes / 60


@dataclass(frozen=True)
class OvernightStay:
    """Duration of a stay in an overnight room.

    Attributes:
        days: Number of nights.
        early_check_in: Guest checked in before the standard time.
        late_check_out: Guest leaves at 14:00 instead of 12:00.
    """

    days: int
    early_check_in: bool = False
    late_check_out: bool = False

    @property
    def checkout_hour(self) -> int:
        """Local hour of day the stay ends."""
        return LATE_CHECKOUT_HOUR if self.late_check_out else STANDARD_CHECKOUT_HOUR


StayDuration = Union[HourlyStay, OvernightStay]
