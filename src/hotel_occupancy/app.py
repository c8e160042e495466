"""
HotelApp: one running instance of the front-desk core.

Wires the kernel (EventBus, HotelState) to its modules and drives the two
periodic activities on the asyncio event loop:
- the notification scan (every scan_interval seconds)
- the sync inbox drain (every sync_poll_interval seconds)

Usage:
    app = HotelApp(HotelConfig.from_env())

    # inside a running event loop
    app.start()
    ...
    app.stop()
"""

import asyncio
import logging
from datetime import datetime, UTC
from typing import Dict, List, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from hotel_occupancy.config import HotelConfig
from hotel_occupancy.core.bus import EventBus
from hotel_occupancy.core.persistence import JsonFileStore
from hotel_occupancy.core.room import PropertyId, Room
from hotel_occupancy.core.state import HotelState, OccupancyStats, Snapshot, ORIGIN_RESTORE
from hotel_occupancy.core.stats import DailyStats
from hotel_occupancy.modules.base import HotelModule
from hotel_occupancy.modules.bookings import BookingModule, StayDuration
from hotel_occupancy.modules.notifications import Notification, NotificationModule
from hotel_occupancy.modules.persistence import PersistenceModule
from hotel_occupancy.modules.reports import ReportGenerator
from hotel_occupancy.modules.sync import LocalChannel, SyncChannel, SyncModule, UdpChannel

logger = logging.getLogger(__name__)


def build_channel(config: HotelConfig) -> SyncChannel:
    """Create the sync transport named by the config."""
    if config.channel == "udp":
        return UdpChannel(group=config.udp_group, port=config.udp_port)
    return LocalChannel(config.channel_name)


class HotelApp:
    """
    One application instance: state, modules and their timers.

    All work happens on one event loop thread. Mutations are synchronous:
    the snapshot is replaced in one step before persistence and broadcast run.
    """

    def __init__(
        self,
        config: Optional[HotelConfig] = None,
        channel: Optional[SyncChannel] = None,
        report_generator: Optional[ReportGenerator] = None,
        now: Optional[datetime] = None,
    ) -> None:
        """
        Build the instance and restore persisted state.

        Args:
            config: Instance configuration (defaults to HotelConfig())
            channel: Sync transport (defaults to the one named by config)
            report_generator: Summary generator (defaults to Gemini from config)
            now: Current time (defaults to datetime.now(UTC))
        """
        self.config = config or HotelConfig()
        if now is None:
            now = datetime.now(UTC)

        self.bus = EventBus()
        self.persistence = PersistenceModule(JsonFileStore(self.config.storage_dir))
        self.state = HotelState(self.bus, self.persistence.load_snapshot(now), now)

        self.bookings = BookingModule()
        self.notifications = NotificationModule(
            {"warning_threshold": self.config.warning_threshold}
        )
        self.sync = SyncModule(
            channel or build_channel(self.config),
            instance_id=self.config.instance_id,
        )
        self.reports = report_generator or ReportGenerator(
            api_key=self.config.gemini_api_key,
            model_name=self.config.gemini_model,
        )

        self.modules: Dict[str, HotelModule] = {}
        for module in (self.persistence, self.bookings, self.notifications, self.sync):
            module.attach(self.bus, self.state)
            self.modules[module.id] = module

        # Announce the restored snapshot: persisted (first run leaves both
        # records on disk), tracked for alerts, not broadcast
        self.state.replace(self.state.snapshot(now), origin=ORIGIN_RESTORE, now=now)

        self._scheduler: Optional[AsyncIOScheduler] = None
        logger.info(f"HotelApp ready ({len(self.state.rooms())} rooms, sync={self.config.channel})")

    # --- Lifecycle ---

    def start(self) -> None:
        """
        Start the periodic scan and sync jobs.

        Must be called from within a running event loop.
        """
        if self._scheduler is not None:
            return

        self._scheduler = AsyncIOScheduler()
        self._scheduler.add_job(
            self._scan_job,
            trigger=IntervalTrigger(seconds=self.config.scan_interval),
            id="notification_scan",
            name="Notification scan",
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        self._scheduler.add_job(
            self._sync_job,
            trigger=IntervalTrigger(seconds=self.config.sync_poll_interval),
            id="sync_inbound",
            name="Sync inbound",
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        self._scheduler.start()
        logger.info(
            f"Scheduler started: scan every {self.config.scan_interval}s, "
            f"sync every {self.config.sync_poll_interval}s"
        )

    def stop(self) -> None:
        """Stop the timers and release every module."""
        if self._scheduler is not None:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("Scheduler stopped")

        for module in self.modules.values():
            module.detach()

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    async def _scan_job(self) -> None:
        self.notifications.check_expirations()

    async def _sync_job(self) -> None:
        self.sync.process_inbound()

    # --- Mutation entry points ---

    def commit_stay(
        self,
        room_id: int,
        guest_name: str,
        duration: StayDuration,
        now: Optional[datetime] = None,
    ) -> Snapshot:
        """Check a guest in or update a stay. See BookingModule.commit_stay."""
        return self.bookings.commit_stay(room_id, guest_name, duration, now)

    def reserve(self, room_id: int, guest_name: str, now: Optional[datetime] = None) -> Snapshot:
        """Reserve a room. See BookingModule.reserve."""
        return self.bookings.reserve(room_id, guest_name, now)

    def check_out(self, room_id: int, now: Optional[datetime] = None) -> Snapshot:
        """Check a guest out. See BookingModule.check_out."""
        return self.bookings.check_out(room_id, now)

    def dismiss_notification(self, notification_id: str) -> None:
        self.notifications.dismiss(notification_id)

    def dismiss_all_notifications(self) -> None:
        self.notifications.dismiss_all()

    # --- Read entry points ---

    def rooms(
        self,
        property_id: Optional[PropertyId] = None,
        room_type: Optional[str] = None,
    ) -> List[Room]:
        return self.state.rooms(property_id, room_type)

    def grouped_rooms(self, property_id: PropertyId) -> Dict[str, List[Room]]:
        return self.state.grouped_rooms(property_id)

    def occupancy_stats(self, property_id: PropertyId) -> OccupancyStats:
        return self.state.occupancy_stats(property_id)

    def daily_stats(self, now: Optional[datetime] = None) -> DailyStats:
        return self.state.daily_stats(now)

    @property
    def notification_list(self) -> List[Notification]:
        """Current notifications, most recent first."""
        return self.notifications.notifications

    @property
    def last_synced_at(self) -> Optional[datetime]:
        return self.sync.last_synced_at

    async def generate_report(self, property_id: PropertyId) -> str:
        """
        Summarize the rooms of one property.

        The model call runs off the event loop so timers keep ticking.

        Returns:
            Summary text, or a fixed fallback message
        """
        rooms = self.state.rooms(property_id)
        return await asyncio.to_thread(self.reports.generate, rooms)
