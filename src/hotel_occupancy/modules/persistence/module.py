"""PersistenceModule - durable copy of rooms and daily stats.

Reads both records once at startup and writes both on every state change.
Bad or missing data never stops startup: it falls back to the fixed catalog
and a fresh stats record.
"""

import logging
from datetime import datetime, UTC
from typing import Optional, Tuple

from hotel_occupancy.core.bus import Event, EventBus, EventFilter
from hotel_occupancy.core.catalog import initial_rooms
from hotel_occupancy.core.errors import StorageError
from hotel_occupancy.core.persistence import JsonFileStore
from hotel_occupancy.core.room import Room
from hotel_occupancy.core.state import HotelState, Snapshot, STATE_CHANGED
from hotel_occupancy.core.stats import DailyStats, local_date
from hotel_occupancy.modules.base import HotelModule

logger = logging.getLogger(__name__)

ROOMS_KEY = "hotel_rooms_v2"
DAILY_STATS_KEY = "hotel_daily_stats_v2"


class PersistenceModule(HotelModule):
    """
    Writes the full (rooms, daily stats) pair on every "state.changed".

    Host platform calls load_snapshot() once before building HotelState.
    """

    def __init__(self, store: JsonFileStore) -> None:
        self.store = store
        self._bus: Optional[EventBus] = None

    @property
    def id(self) -> str:
        return "persistence"

    def attach(self, bus: EventBus, state: HotelState) -> None:
        """Attach to the kernel and start writing state changes."""
        logger.info("Attaching PersistenceModule")
        self._bus = bus
        bus.subscribe(self._on_state_changed, EventFilter(event_type=STATE_CHANGED))

    def detach(self) -> None:
        if self._bus is not None:
            self._bus.unsubscribe(self._on_state_changed)

    def _on_state_changed(self, event: Event) -> None:
        self.save(event.payload["snapshot"])

    def save(self, snapshot: Snapshot) -> None:
        """
        Write both records.

        Write failures are logged; the in-memory state stays authoritative.

        Args:
            snapshot: The snapshot to persist
        """
        data = snapshot.to_dict()
        try:
            self.store.set(ROOMS_KEY, data["rooms"])
            self.store.set(DAILY_STATS_KEY, data["dailyStats"])
        except StorageError as e:
            logger.error(f"Failed to persist state: {e}")
            return
        logger.debug("Persisted rooms and daily stats")

    def load_snapshot(self, now: Optional[datetime] = None) -> Snapshot:
        """
        Read the stored snapshot, falling back where data is unusable.

        - Missing or malformed rooms -> fixed catalog
        - Missing, malformed or stale (not today) stats -> fresh record

        Args:
            now: Current time (defaults to datetime.now(UTC))

        Returns:
            The Snapshot to start from
        """
        if now is None:
            now = datetime.now(UTC)

        rooms = self._load_rooms()
        stats = self._load_stats(now)
        return Snapshot(rooms=rooms, daily_stats=stats)

    def _load_rooms(self) -> Tuple[Room, ...]:
        try:
            data = self.store.get(ROOMS_KEY)
        except StorageError as e:
            logger.warning(f"Stored rooms unreadable, using catalog: {e}")
            return initial_rooms()

        if data is None:
            logger.info("No stored rooms, seeding from catalog")
            return initial_rooms()

        try:
            if not isinstance(data, list) or not data:
                raise TypeError("rooms record must be a non-empty list")
            rooms = tuple(Room.from_dict(item) for item in data)
        except (KeyError, ValueError, TypeError) as e:
            logger.warning(f"Stored rooms malformed, using catalog: {e}")
            return initial_rooms()

        if len({room.id for room in rooms}) != len(rooms):
            logger.warning("Stored rooms contain duplicate ids, using catalog")
            return initial_rooms()

        logger.info(f"Restored {len(rooms)} rooms from storage")
        return rooms

    def _load_stats(self, now: datetime) -> DailyStats:
        today = local_date(now)
        try:
            data = self.store.get(DAILY_STATS_KEY)
        except StorageError as e:
            logger.warning(f"Stored daily stats unreadable, starting fresh: {e}")
            return DailyStats.fresh(today)

        if data is None:
            return DailyStats.fresh(today)

        try:
            stats = DailyStats.from_dict(data)
        except (KeyError, ValueError, TypeError) as e:
            logger.warning(f"Stored daily stats malformed, starting fresh: {e}")
            return DailyStats.fresh(today)

        if stats.date != today:
            logger.info(f"Stored daily stats are for {stats.date}, starting fresh for {today}")
            return DailyStats.fresh(today)

        return stats
