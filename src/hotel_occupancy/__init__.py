"""
hotel-occupancy: room occupancy state and alerts for a two-property hotel.

This library provides the core behind the front-desk dashboard:
- Canonical room and daily-statistics state with day rollover
- Check-in, reservation and check-out operations
- Deduplicated "about to expire" and "expired" alerts
- Full-snapshot sync between sibling instances on one device
"""

from hotel_occupancy.core.bus import Event, EventBus, EventFilter
from hotel_occupancy.core.room import PropertyId, Room, RoomStatus
from hotel_occupancy.core.stats import DailyStats
from hotel_occupancy.core.state import HotelState, Snapshot
from hotel_occupancy.config import HotelConfig
from hotel_occupancy.app import HotelApp

__version__ = "0.1.0"

__all__ = [
    "Event",
    "EventBus",
    "EventFilter",
    "PropertyId",
    "Room",
    "RoomStatus",
    "DailyStats",
    "HotelState",
    "Snapshot",
    "HotelConfig",
    "HotelApp",
]
