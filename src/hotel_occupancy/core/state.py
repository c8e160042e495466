"""
HotelState: the single owned container for rooms and daily statistics.

HotelState owns the current snapshot, not the booking behavior. Every change
replaces the snapshot wholesale and is announced on the EventBus as a
"state.changed" event; persistence and sync subscribe to it.
"""

from dataclasses import dataclass
from datetime import datetime, UTC
from typing import Any, Dict, List, Optional, Tuple
import logging

from hotel_occupancy.core.bus import Event, EventBus
from hotel_occupancy.core.catalog import initial_rooms, roygan_room_types
from hotel_occupancy.core.room import PropertyId, Room, RoomStatus
from hotel_occupancy.core.stats import DailyStats, local_date, roll_over

logger = logging.getLogger(__name__)

STATE_CHANGED = "state.changed"

# Origins of a state change
ORIGIN_LOCAL = "local"
ORIGIN_SYNC = "sync"
ORIGIN_ROLLOVER = "rollover"
ORIGIN_RESTORE = "restore"


@dataclass(frozen=True)
class Snapshot:
    """The complete value of (rooms, daily stats) at one instant (Immutable)."""

    rooms: Tuple[Room, ...]
    daily_stats: DailyStats

    def get_room(self, room_id: int) -> Optional[Room]:
        """Find a room by id, or None."""
        for room in self.rooms:
            if room.id == room_id:
                return room
        return None

    def with_room(self, new_room: Room) -> "Snapshot":
        """Return a copy with one room replaced (matched by id)."""
        return Snapshot(
            rooms=tuple(new_room if r.id == new_room.id else r for r in self.rooms),
            daily_stats=self.daily_stats,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to {"rooms": [...], "dailyStats": {...}}."""
        return {
            "rooms": [room.to_dict() for room in self.rooms],
            "dailyStats": self.daily_stats.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Snapshot":
        """
        Build a Snapshot from its serialized form.

        Raises:
            KeyError, ValueError, TypeError: If the data is malformed
        """
        rooms = data["rooms"]
        if not isinstance(rooms, list):
            raise TypeError("rooms must be a list")
        return cls(
            rooms=tuple(Room.from_dict(r) for r in rooms),
            daily_stats=DailyStats.from_dict(data["dailyStats"]),
        )

    @classmethod
    def initial(cls, now: datetime) -> "Snapshot":
        """Fresh catalog with empty stats for the local date of now."""
        return cls(rooms=initial_rooms(), daily_stats=DailyStats.fresh(local_date(now)))


@dataclass(frozen=True)
class OccupancyStats:
    """Occupancy summary for one property."""

    total: int
    occupied: int
    free: int
    occupancy_rate: float


class HotelState:
    """
    Holds the canonical snapshot and announces every replacement.

    Responsibilities:
    - Keep exactly one live Snapshot
    - Replace it wholesale (never edit in place)
    - Roll daily stats over when the local date changes
    - Provide room queries (by property, by type, grouped)

    Does NOT implement check-in, sync or notification logic.
    """

    def __init__(
        self,
        bus: EventBus,
        snapshot: Optional[Snapshot] = None,
        now: Optional[datetime] = None,
    ) -> None:
        """
        Initialize the state container.

        Args:
            bus: EventBus used to announce changes
            snapshot: Initial snapshot (defaults to the fresh catalog)
            now: Current time (defaults to datetime.now(UTC))
        """
        if now is None:
            now = datetime.now(UTC)
        self._bus = bus
        self._snapshot = snapshot if snapshot is not None else Snapshot.initial(now)
        logger.info(f"HotelState initialized with {len(self._snapshot.rooms)} rooms")

    def snapshot(self, now: Optional[datetime] = None) -> Snapshot:
        """
        Get the current snapshot, rolling daily stats over first if stale.

        Args:
            now: Current time (defaults to datetime.now(UTC))

        Returns:
            The current Snapshot
        """
        self._check_rollover(now)
        return self._snapshot

    def daily_stats(self, now: Optional[datetime] = None) -> DailyStats:
        """Get today's stats (rolled over if stale)."""
        return self.snapshot(now).daily_stats

    def replace(
        self,
        snapshot: Snapshot,
        origin: str = ORIGIN_LOCAL,
        now: Optional[datetime] = None,
    ) -> Snapshot:
        """
        Replace the whole snapshot in one step and announce it.

        Args:
            snapshot: The new snapshot
            origin: Who caused the change ("local", "sync", "rollover", "restore")
            now: Current time (defaults to datetime.now(UTC))

        Returns:
            The live snapshot after the replacement (and any rollover)
        """
        previous = self._snapshot
        self._snapshot = snapshot
        logger.debug(f"State replaced (origin={origin})")
        self._publish(previous, snapshot, origin)

        self._check_rollover(now)
        return self._snapshot

    def _check_rollover(self, now: Optional[datetime]) -> None:
        """Replace stale daily stats with a fresh record for today."""
        if now is None:
            now = datetime.now(UTC)

        stats = self._snapshot.daily_stats
        rolled = roll_over(stats, now)
        if rolled is stats:
            return

        logger.info(f"Daily stats rolled over: {stats.date} -> {rolled.date}")
        previous = self._snapshot
        self._snapshot = Snapshot(rooms=previous.rooms, daily_stats=rolled)
        self._publish(previous, self._snapshot, ORIGIN_ROLLOVER)

    def _publish(self, previous: Snapshot, snapshot: Snapshot, origin: str) -> None:
        self._bus.publish(
            Event(
                type=STATE_CHANGED,
                source="state",
                payload={
                    "snapshot": snapshot,
                    "previous": previous,
                    "origin": origin,
                },
            )
        )

    # --- Queries ---

    def get_room(self, room_id: int) -> Optional[Room]:
        """
        Get a room by ID.

        Args:
            room_id: The room ID

        Returns:
            The Room or None if not found
        """
        return self._snapshot.get_room(room_id)

    def rooms(
        self,
        property_id: Optional[PropertyId] = None,
        room_type: Optional[str] = None,
    ) -> List[Room]:
        """
        Get rooms, optionally filtered by property and type.

        Args:
            property_id: Only rooms of this property (None = all)
            room_type: Only rooms of this type (None = all)

        Returns:
            List of Rooms in catalog order
        """
        return [
            room
            for room in self._snapshot.rooms
            if (property_id is None or room.property_id == property_id)
            and (room_type is None or room.room_type == room_type)
        ]

    def grouped_rooms(self, property_id: PropertyId) -> Dict[str, List[Room]]:
        """
        Group a property's rooms by type.

        Rooms inside a group are sorted by numeric room number. Overnight
        groups follow catalog order; rooms without a type land in "Other".

        Args:
            property_id: The property

        Returns:
            Ordered dict of room type -> rooms
        """
        groups: Dict[str, List[Room]] = {}
        for room in self.rooms(property_id):
            groups.setdefault(room.room_type or "Other", []).append(room)

        for members in groups.values():
            members.sort(key=_room_number_key)

        if property_id == PropertyId.ROYGAN:
            order = roygan_room_types()
            return dict(
                sorted(
                    groups.items(),
                    key=lambda item: order.index(item[0]) if item[0] in order else len(order),
                )
            )
        return groups

    def occupancy_stats(self, property_id: PropertyId) -> OccupancyStats:
        """
        Compute the occupancy summary for a property.

        Args:
            property_id: The property

        Returns:
            OccupancyStats (rate is a percentage, 0 when the property has no rooms)
        """
        property_rooms = self.rooms(property_id)
        total = len(property_rooms)
        occupied = len([r for r in property_rooms if r.status == RoomStatus.OCCUPIED])
        rate = (occupied / total) * 100 if total > 0 else 0.0
        return OccupancyStats(total=total, occupied=occupied, free=total - occupied, occupancy_rate=rate)


def _room_number_key(room: Room) -> tuple[int, str]:
    try:
        return (int(room.room_number), room.room_number)
    except ValueError:
        return (0, room.room_number)
