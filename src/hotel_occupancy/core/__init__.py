"""
Core components of the hotel-occupancy kernel.

This package contains:
- bus: Event Bus implementation
- room: Room dataclass, property and status enums
- stats: DailyStats and the day rollover rule
- catalog: Fixed room catalog of both properties
- state: HotelState container and Snapshot
- persistence: JSON file key-value store
"""

from hotel_occupancy.core.bus import Event, EventBus, EventFilter
from hotel_occupancy.core.room import PropertyId, Room, RoomStatus
from hotel_occupancy.core.stats import DailyStats
from hotel_occupancy.core.state import HotelState, OccupancyStats, Snapshot
from hotel_occupancy.core.persistence import JsonFileStore

__all__ = [
    "Event",
    "EventBus",
    "EventFilter",
    "PropertyId",
    "Room",
    "RoomStatus",
    "DailyStats",
    "HotelState",
    "OccupancyStats",
    "Snapshot",
    "JsonFileStore",
]
