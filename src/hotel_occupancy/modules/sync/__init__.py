"""
Sync module for hotel-occupancy.

Keeps every open instance on one device converged on the same state.

Features:
- Last-write-wins full snapshot replacement
- In-process named channels and loopback UDP multicast
- Ingested snapshots are never re-broadcast
- "Last synchronized at" timestamp for display
"""

from .module import SyncModule, SYNC_STATE, SYNC_RECEIVED
from .channel import SyncChannel, LocalChannel, UdpChannel

__all__ = [
    "SyncModule",
    "SyncChannel",
    "LocalChannel",
    "UdpChannel",
    "SYNC_STATE",
    "SYNC_RECEIVED",
]
