"""
Tests for JsonFileStore and PersistenceModule.

Tests verify:
- Records are written atomically and read back
- Every state change persists both records
- Missing, corrupted or malformed data falls back to the catalog
- Stats for another day are discarded on load
"""

import logging
import pytest
from datetime import datetime, timedelta

from hotel_occupancy import DailyStats, EventBus, HotelState, RoomStatus
from hotel_occupancy.core.catalog import initial_rooms
from hotel_occupancy.core.errors import StorageError
from hotel_occupancy.core.persistence import JsonFileStore
from hotel_occupancy.core.state import Snapshot
from hotel_occupancy.core.stats import local_date
from hotel_occupancy.modules.bookings import BookingModule, HourlyStay
from hotel_occupancy.modules.persistence import (
    DAILY_STATS_KEY,
    ROOMS_KEY,
    PersistenceModule,
)

# Configure logging for verbose test output
logging.basicConfig(
    level=logging.DEBUG, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


@pytest.fixture
def now():
    """Local 09:00 on a fixed day."""
    return datetime(2026, 10, 19, 9, 0).astimezone()


@pytest.fixture
def event_bus_state(now):
    bus = EventBus()
    return bus, HotelState(bus, now=now)


@pytest.fixture
def store(tmp_path):
    return JsonFileStore(tmp_path / "store")


@pytest.fixture
def persistence(store):
    return PersistenceModule(store)


class TestJsonFileStore:
    """Test suite for the file-backed key-value store."""

    def test_missing_key(self, store):
        assert store.get("nothing") is None

    def test_set_get(self, store):
        store.set("record", {"a": [1, 2, 3]})
        assert store.get("record") == {"a": [1, 2, 3]}
        assert (store.directory / "record.json").exists()

    def test_overwrite_leaves_no_temp_files(self, store):
        store.set("record", 1)
        store.set("record", 2)

        assert store.get("record") == 2
        assert [p.name for p in store.directory.iterdir()] == ["record.json"]

    def test_corrupted_record_raises(self, store):
        store.directory.mkdir(parents=True)
        (store.directory / "record.json").write_text("{not json", encoding="utf-8")

        with pytest.raises(StorageError):
            store.get("record")

    def test_unserializable_value_raises(self, store):
        with pytest.raises(StorageError):
            store.set("record", {"when": datetime.now()})
        assert store.get("record") is None

    def test_delete(self, store):
        store.set("record", 1)
        store.delete("record")
        store.delete("record")
        assert store.get("record") is None

    def test_invalid_keys(self, store):
        for key in ("", "../escape", ".hidden", "a/b"):
            with pytest.raises(ValueError):
                store.get(key)


class TestLoadSnapshot:
    """Test suite for startup restore."""

    def test_first_run_uses_catalog(self, persistence, now):
        snapshot = persistence.load_snapshot(now)

        assert snapshot.rooms == initial_rooms()
        assert snapshot.daily_stats == DailyStats.fresh(local_date(now))

    def test_round_trip(self, event_bus_state, persistence, now):
        """Test that a saved state is restored on the next start."""
        bus, state = event_bus_state
        bookings = BookingModule()
        bookings.attach(bus, state)
        persistence.attach(bus, state)

        bookings.commit_stay(1, "Juan", HourlyStay(90), now)

        restored = persistence.load_snapshot(now + timedelta(minutes=5))
        assert restored == state.snapshot(now)
        assert restored.get_room(1).status == RoomStatus.OCCUPIED
        assert restored.daily_stats.sweetheart_room_hours["1"] == 1.5

    def test_corrupted_rooms_fall_back(self, store, persistence, now):
        store.directory.mkdir(parents=True)
        (store.directory / f"{ROOMS_KEY}.json").write_text("garbage", encoding="utf-8")

        assert persistence.load_snapshot(now).rooms == initial_rooms()

    @pytest.mark.parametrize(
        "data",
        [
            [],
            {"rooms": []},
            [{"id": 1}],
            [{"id": 1, "propertyId": "nowhere", "roomNumber": "1", "status": "FREE"}],
            [
                {"id": 1, "propertyId": "sweetheart", "roomNumber": "1", "status": "FREE"},
                {"id": 1, "propertyId": "sweetheart", "roomNumber": "2", "status": "FREE"},
            ],
        ],
    )
    def test_malformed_rooms_fall_back(self, store, persistence, now, data):
        store.set(ROOMS_KEY, data)
        assert persistence.load_snapshot(now).rooms == initial_rooms()

    def test_stored_rooms_kept_when_stats_malformed(self, store, persistence, now):
        rooms = [r.to_dict() for r in initial_rooms()]
        rooms[0].update(status="RESERVED", guestName="Ana")
        store.set(ROOMS_KEY, rooms)
        store.set(DAILY_STATS_KEY, {"date": "yesterday"})

        snapshot = persistence.load_snapshot(now)
        assert snapshot.get_room(1).status == RoomStatus.RESERVED
        assert snapshot.daily_stats == DailyStats.fresh(local_date(now))

    @pytest.mark.parametrize(
        "overrides",
        [
            {"endTime": 10**20},
            {"startTime": -(10**20)},
            {"endTime": float("inf")},
            {"id": float("inf")},
            {"endTime": "soon"},
        ],
    )
    def test_out_of_range_room_numbers_fall_back(self, store, persistence, now, overrides):
        """Test that timestamps beyond the datetime range do not crash the load."""
        rooms = [r.to_dict() for r in initial_rooms()]
        rooms[0].update(status="OCCUPIED", guestName="Juan", startTime=0, endTime=0)
        rooms[0].update(overrides)
        store.set(ROOMS_KEY, rooms)

        assert persistence.load_snapshot(now).rooms == initial_rooms()

    @pytest.mark.parametrize(
        "overrides",
        [
            {"royganBookedRooms": "206"},
            {"royganBookedRooms": {"206": True}},
            {"royganBookings": True},
            {"royganBookings": 1.5},
            {"royganBookings": "2"},
            {"royganBookings": -1},
            {"sweetheartRoomHours": ["4"]},
            {"sweetheartRoomHours": {"4": "two"}},
            {"sweetheartRoomHours": {"4": 10**400}},
            {"sweetheartRoomHours": {"4": float("nan")}},
        ],
    )
    def test_malformed_stats_fall_back(self, store, persistence, now, overrides):
        stats = {
            "date": local_date(now),
            "royganBookings": 1,
            "royganBookedRooms": ["206"],
            "sweetheartRoomHours": {"4": 2},
        }
        stats.update(overrides)
        store.set(DAILY_STATS_KEY, stats)

        assert persistence.load_snapshot(now).daily_stats == DailyStats.fresh(local_date(now))

    def test_stale_stats_discarded(self, store, persistence, now):
        """Test that stats from another day are not restored."""
        yesterday = local_date(now - timedelta(days=1))
        store.set(DAILY_STATS_KEY, {"date": yesterday, "royganBookings": 4})

        stats = persistence.load_snapshot(now).daily_stats
        assert stats.date == local_date(now)
        assert stats.roygan_bookings == 0

    def test_current_stats_restored(self, store, persistence, now):
        store.set(
            DAILY_STATS_KEY,
            {
                "date": local_date(now),
                "royganBookings": 2,
                "royganBookedRooms": ["206"],
                "sweetheartRoomHours": {"4": 2},
            },
        )

        stats = persistence.load_snapshot(now).daily_stats
        assert stats.roygan_bookings == 2
        assert stats.roygan_booked_rooms == ("206",)
        assert stats.sweetheart_room_hours["4"] == 2.0


class TestSaveOnChange:
    """Test suite for writes on state changes."""

    def test_every_change_writes_both_records(self, event_bus_state, store, persistence, now):
        bus, state = event_bus_state
        persistence.attach(bus, state)
        bookings = BookingModule()
        bookings.attach(bus, state)

        bookings.reserve(100, "Maria", now)

        rooms = store.get(ROOMS_KEY)
        assert {"id": 100, "status": "RESERVED", "guestName": "Maria"}.items() <= next(
            r for r in rooms if r["id"] == 100
        ).items()
        assert store.get(DAILY_STATS_KEY)["date"] == local_date(now)

    def test_rollover_is_persisted(self, event_bus_state, store, persistence, now):
        bus, state = event_bus_state
        persistence.attach(bus, state)

        tomorrow = now + timedelta(days=1)
        state.snapshot(tomorrow)

        assert store.get(DAILY_STATS_KEY)["date"] == local_date(tomorrow)

    def test_write_failure_does_not_raise(self, monkeypatch, persistence, now):
        def failing_set(key, value):
            raise StorageError("disk full")

        monkeypatch.setattr(persistence.store, "set", failing_set)

        persistence.save(Snapshot.initial(now))

