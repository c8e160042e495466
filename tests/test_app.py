"""
Integration tests for HotelApp and HotelConfig.

Tests verify:
- Two instances on one channel converge
- A restarted instance restores rooms and today's stats
- The scheduler drains the sync inbox on its own
- Report generation runs off the event loop
- Configuration from the environment
"""

import asyncio
import logging
import uuid
import pytest
from datetime import datetime, timedelta

from hotel_occupancy import HotelApp, HotelConfig, PropertyId, RoomStatus
from hotel_occupancy.modules.bookings import HourlyStay, OvernightStay
from hotel_occupancy.modules.reports import ReportGenerator

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
def make_config(tmp_path):
    channel_name = f"test-app-{uuid.uuid4().hex}"

    def factory(name, **overrides):
        return HotelConfig(
            storage_dir=tmp_path / name,
            channel_name=channel_name,
            **overrides,
        )

    return factory


@pytest.fixture
def apps():
    created = []
    yield created
    for app in created:
        app.stop()


class TestHotelApp:
    """Test suite for a running instance."""

    def test_initial_state_persisted(self, make_config, apps, now):
        config = make_config("a")
        app = HotelApp(config, now=now)
        apps.append(app)

        assert len(app.rooms()) == 39
        assert (config.storage_dir / "hotel_rooms_v2.json").exists()
        assert (config.storage_dir / "hotel_daily_stats_v2.json").exists()

    def test_startup_is_not_broadcast(self, make_config, apps, now):
        a = HotelApp(make_config("a"), now=now)
        apps.append(a)
        b = HotelApp(make_config("b"), now=now)
        apps.append(b)

        assert a.sync.process_inbound(now) == 0

    def test_two_instances_converge(self, make_config, apps, now):
        """Test that a check-in on one tab shows up on the other."""
        logger.info("=" * 80)
        logger.info("TEST: Two app instances converge")
        logger.info("=" * 80)

        a = HotelApp(make_config("a"), now=now)
        b = HotelApp(make_config("b"), now=now)
        apps.extend([a, b])

        a.commit_stay(1, "Juan", HourlyStay(60), now)
        a.commit_stay(100, "Maria", OvernightStay(days=1), now)
        b.sync.process_inbound(now)

        assert b.state.snapshot(now) == a.state.snapshot(now)
        assert b.occupancy_stats(PropertyId.SWEETHEART).occupied == 1
        assert b.daily_stats(now).roygan_bookings == 1
        assert b.last_synced_at == now

        # b persisted what it received
        restored = b.persistence.load_snapshot(now)
        assert restored.get_room(100).guest_name == "Maria"

    def test_restart_restores_state(self, make_config, apps, now):
        config = make_config("a")
        first = HotelApp(config, now=now)
        first.commit_stay(3, "Juan", HourlyStay(90), now)
        first.reserve(101, "Ana", now)
        first.stop()

        second = HotelApp(config, now=now + timedelta(hours=1))
        apps.append(second)

        assert second.state.get_room(3).status == RoomStatus.OCCUPIED
        assert second.state.get_room(101).status == RoomStatus.RESERVED
        assert second.daily_stats(now).sweetheart_room_hours["3"] == 1.5

    def test_restart_next_day_discards_stats(self, make_config, apps, now):
        config = make_config("a")
        first = HotelApp(config, now=now)
        first.commit_stay(100, "Maria", OvernightStay(days=2), now)
        first.stop()

        tomorrow = now + timedelta(days=1)
        second = HotelApp(config, now=tomorrow)
        apps.append(second)

        assert second.state.get_room(100).status == RoomStatus.OCCUPIED
        assert second.daily_stats(tomorrow).roygan_bookings == 0

    def test_notifications_and_dismissal(self, make_config, apps, now):
        app = HotelApp(make_config("a"), now=now)
        apps.append(app)

        app.commit_stay(1, "Juan", HourlyStay(3), now)
        app.notifications.check_expirations(now + timedelta(minutes=1))
        app.notifications.check_expirations(now + timedelta(minutes=4))

        assert len(app.notification_list) == 2
        app.dismiss_notification(app.notification_list[0].id)
        assert len(app.notification_list) == 1
        app.dismiss_all_notifications()
        assert app.notification_list == []

    def test_grouped_rooms(self, make_config, apps, now):
        app = HotelApp(make_config("a"), now=now)
        apps.append(app)

        groups = app.grouped_rooms(PropertyId.ROYGAN)
        assert sum(len(members) for members in groups.values()) == 23


class TestScheduler:
    """Test suite for the periodic jobs."""

    def test_scheduler_drains_sync_inbox(self, make_config, apps, now):
        a = HotelApp(make_config("a", sync_poll_interval=0.05, scan_interval=0.05), now=now)
        b = HotelApp(make_config("b", sync_poll_interval=0.05, scan_interval=0.05), now=now)
        apps.extend([a, b])

        async def run():
            b.start()
            assert b.running
            a.commit_stay(1, "Juan", HourlyStay(60))
            await asyncio.sleep(0.5)
            b.stop()
            assert not b.running

        asyncio.run(run())

        assert b.state.get_room(1).guest_name == "Juan"

    def test_start_twice_is_noop(self, make_config, apps, now):
        app = HotelApp(make_config("a"), now=now)
        apps.append(app)

        async def run():
            app.start()
            scheduler = app._scheduler
            app.start()
            assert app._scheduler is scheduler
            assert {job.id for job in scheduler.get_jobs()} == {"notification_scan", "sync_inbound"}
            app.stop()

        asyncio.run(run())


class FakeModel:
    def __init__(self):
        self.prompts = []

    def generate_content(self, prompt, generation_config=None):
        self.prompts.append(prompt)

        class Response:
            text = "Quiet morning."

        return Response()


class TestReports:
    """Test suite for report generation through the app."""

    def test_generate_report(self, make_config, apps, now):
        model = FakeModel()
        app = HotelApp(make_config("a"), report_generator=ReportGenerator(model=model), now=now)
        apps.append(app)

        app.commit_stay(100, "Maria", OvernightStay(days=1), now)
        text = asyncio.run(app.generate_report(PropertyId.ROYGAN))

        assert text == "Quiet morning."
        assert '"guest": "Maria"' in model.prompts[0]
        # Only the requested property is summarized
        assert '"room": "1"' not in model.prompts[0]

    def test_generate_report_without_key(self, make_config, apps, now):
        app = HotelApp(make_config("a"), now=now)
        apps.append(app)

        text = asyncio.run(app.generate_report(PropertyId.SWEETHEART))
        assert text == "Could not generate AI insights at the moment."


class TestHotelConfig:
    """Test suite for configuration."""

    def test_defaults(self):
        config = HotelConfig()
        assert config.channel == "local"
        assert config.scan_interval == 5.0
        assert config.warning_threshold == 300

    @pytest.mark.parametrize(
        "overrides",
        [{"channel": "carrier-pigeon"}, {"scan_interval": 0}, {"warning_threshold": -1}],
    )
    def test_invalid(self, overrides):
        with pytest.raises(ValueError):
            HotelConfig(**overrides)

    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOTEL_STORAGE_DIR", str(tmp_path))
        monkeypatch.setenv("HOTEL_SCAN_INTERVAL", "2.5")
        monkeypatch.setenv("HOTEL_WARNING_THRESHOLD", "600")
        monkeypatch.setenv("HOTEL_SYNC_CHANNEL", "udp")
        monkeypatch.setenv("HOTEL_UDP_PORT", "50600")
        monkeypatch.setenv("GEMINI_API_KEY", "")
        monkeypatch.delenv("HOTEL_INSTANCE_ID", raising=False)

        config = HotelConfig.from_env()

        assert config.storage_dir == tmp_path
        assert config.scan_interval == 2.5
        assert config.warning_threshold == 600
        assert config.channel == "udp"
        assert config.udp_port == 50600
        assert config.gemini_api_key is None
        assert config.instance_id is None

    def test_instance_id_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOTEL_STORAGE_DIR", str(tmp_path))
        monkeypatch.setenv("HOTEL_INSTANCE_ID", "front-desk")
        monkeypatch.setenv("HOTEL_SYNC_CHANNEL", "local")
        monkeypatch.setenv("HOTEL_CHANNEL_NAME", f"test-app-{uuid.uuid4().hex}")

        config = HotelConfig.from_env()
        assert config.instance_id == "front-desk"

        app = HotelApp(config)
        try:
            assert app.sync.instance_id == "front-desk"
        finally:
            app.stop()

    def test_blank_instance_id_is_random(self, monkeypatch):
        monkeypatch.setenv("HOTEL_INSTANCE_ID", "")
        assert HotelConfig.from_env().instance_id is None
