"""SyncModule - keeps sibling instances on the same state.

Policy is last-write-wins by full snapshot replacement: every local change is
broadcast whole, and every snapshot received replaces local state
unconditionally. There is no merge and no conflict detection.
"""

import logging
import uuid
from datetime import datetime, UTC
from typing import Any, Dict, Optional

from hotel_occupancy.core.bus import Event, EventBus, EventFilter
from hotel_occupancy.core.state import (
    HotelState,
    Snapshot,
    STATE_CHANGED,
    ORIGIN_LOCAL,
    ORIGIN_SYNC,
)
from hotel_occupancy.modules.base import HotelModule

from .channel import SyncChannel

logger = logging.getLogger(__name__)

SYNC_STATE = "SYNC_STATE"
SYNC_RECEIVED = "sync.received"


class SyncModule(HotelModule):
    """
    Full-snapshot sync over a SyncChannel.

    - Local changes (origin "local") are sent as SYNC_STATE messages
    - process_inbound() applies received snapshots with origin "sync",
      which are persisted but never re-broadcast
    - last_synced_at moves on every send and every receive

    Note: This module does NOT poll the channel internally.
    The host calls process_inbound() on a short interval.
    """

    def __init__(self, channel: SyncChannel, instance_id: Optional[str] = None) -> None:
        self.channel = channel
        self.instance_id = instance_id or uuid.uuid4().hex
        self.last_synced_at: Optional[datetime] = None
        self._bus: Optional[EventBus] = None
        self._state: Optional[HotelState] = None

    @property
    def id(self) -> str:
        return "sync"

    def attach(self, bus: EventBus, state: HotelState) -> None:
        """Attach to the kernel and start broadcasting local changes."""
        logger.info(f"Attaching SyncModule (instance {self.instance_id[:8]})")
        self._bus = bus
        self._state = state
        self.last_synced_at = datetime.now(UTC)
        bus.subscribe(self._on_state_changed, EventFilter(event_type=STATE_CHANGED))

    def detach(self) -> None:
        """Stop broadcasting and close the channel."""
        if self._bus is not None:
            self._bus.unsubscribe(self._on_state_changed)
        self.channel.close()

    def _on_state_changed(self, event: Event) -> None:
        """Broadcast snapshots produced by local mutations only."""
        if event.payload.get("origin") != ORIGIN_LOCAL:
            return
        self.broadcast(event.payload["snapshot"])

    def broadcast(self, snapshot: Snapshot, now: Optional[datetime] = None) -> None:
        """
        Send a full snapshot to every sibling instance.

        Args:
            snapshot: The snapshot to send
            now: Current time (defaults to datetime.now(UTC))
        """
        message: Dict[str, Any] = {"type": SYNC_STATE, "sender": self.instance_id}
        message.update(snapshot.to_dict())
        self.channel.post(message)
        self.last_synced_at = now or datetime.now(UTC)
        logger.debug(f"Broadcast snapshot ({len(snapshot.rooms)} rooms)")

    def process_inbound(self, now: Optional[datetime] = None) -> int:
        """
        Apply every pending snapshot from sibling instances, in arrival order.

        Args:
            now: Current time (defaults to datetime.now(UTC))

        Returns:
            Number of snapshots applied
        """
        assert self._state is not None
        if now is None:
            now = datetime.now(UTC)

        applied = 0
        for message in self.channel.receive_pending():
            if message.get("type") != SYNC_STATE:
                logger.debug(f"Ignoring sync message of type {message.get('type')!r}")
                continue
            if message.get("sender") == self.instance_id:
                continue

            try:
                snapshot = Snapshot.from_dict(message)
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(f"Malformed sync snapshot dropped: {e}")
                continue

            self._state.replace(snapshot, origin=ORIGIN_SYNC, now=now)
            self.last_synced_at = now
            applied += 1
            self._emit_received(message.get("sender"))

        if applied:
            logger.info(f"Applied {applied} snapshot(s) from sibling instances")
        return applied

    def _emit_received(self, sender: Optional[str]) -> None:
        assert self._bus is not None
        self._bus.publish(
            Event(
                type=SYNC_RECEIVED,
                source="sync",
                payload={"sender": sender, "last_synced_at": self.last_synced_at},
            )
        )
