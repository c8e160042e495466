"""
Notifications module for hotel-occupancy.

Raises "about to expire" and "expired" alerts for occupied rooms.

Features:
- Fixed-cadence scan driven by the host
- Exactly one warning and one expiry per occupancy period
- Ephemeral per-room flags, reset on every new occupancy period
- Individual and bulk dismissal
"""

from .module import NotificationModule, NOTIFICATION_CREATED, NOTIFICATION_DISMISSED
from .models import (
    AlertFlags,
    Notification,
    NotificationKind,
    ScanResult,
    StayPeriod,
    WARNING_THRESHOLD,
)
from .engine import NotificationEngine

__all__ = [
    "NotificationModule",
    "NotificationEngine",
    "AlertFlags",
    "Notification",
    "NotificationKind",
    "ScanResult",
    "StayPeriod",
    "WARNING_THRESHOLD",
    "NOTIFICATION_CREATED",
    "NOTIFICATION_DISMISSED",
]
