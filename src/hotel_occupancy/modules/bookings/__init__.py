"""
Bookings module for hotel-occupancy.

The mutation API called by the front desk.

Features:
- Hourly check-in with per-room hour accumulation (first property)
- Overnight check-in with 12:00 / 14:00 checkout (second property)
- Reservation and check-out
- Validation of fresh check-ins before any state change
- Unknown room ids are ignored
"""

from .module import BookingModule
from .models import HourlyStay, OvernightStay, StayDuration, DEFAULT_GUEST_NAME
from .engine import BookingEngine, overnight_checkout, validate_stay

__all__ = [
    "BookingModule",
    "BookingEngine",
    "HourlyStay",
    "OvernightStay",
    "StayDuration",
    "DEFAULT_GUEST_NAME",
    "overnight_checkout",
    "validate_stay",
]
