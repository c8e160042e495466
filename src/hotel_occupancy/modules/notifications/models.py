"""Data models for the notifications module.

All classes are frozen (immutable). Flag records are replaced, never edited.

Licensed under MIT License
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum


class NotificationKind(Enum):
    """The lifecycle alert raised for a stay.

    WARNING: Stay ends within the warning threshold.
    EXPIRY: Stay end time has passed.
    """

    WARNING = "warning"
    EXPIRY = "expiry"


WARNING_THRESHOLD = timedelta(minutes=5)

DEFAULT_MESSAGES: dict[NotificationKind, str] = {
    NotificationKind.WARNING: "Only 5 minutes remaining for this guest.",
    NotificationKind.EXPIRY: "The stay for this room has expired.",
}


@dataclass(frozen=True)
class Notification:
    """An alert shown to the operator until dismissed.

    Attributes:
        id: Unique id, "{room_id}-{kind}-{emitted_ms}".
        room_id: Room the alert is about.
        room_number: Room number for display.
        property_name: Property display name.
        kind: WARNING or EXPIRY.
        message: Human-readable message.
        timestamp: Emission time.
    """

    id: str
    room_id: int
    room_number: str
    property_name: str
    kind: NotificationKind
    message: str
    timestamp: datetime


@dataclass(frozen=True)
class AlertFlags:
    """Which alerts have fired for one occupancy period.

    Attributes:
        warning_fired: The warning was emitted.
        expiry_fired: The expiry was emitted.
        one_hour_fired: Reserved for a one-hour tier; no threshold uses it yet.
    """

    warning_fired: bool = False
    expiry_fired: bool = False
    one_hour_fired: bool = False


@dataclass(frozen=True)
class StayPeriod:
    """Identity of one occupancy period: its start and end instants."""

    start_time: datetime | None
    end_time: datetime | None


@dataclass(frozen=True)
class ScanResult:
    """Outcome of one scan tick, in emission order."""

    notifications: list[Notification] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)
