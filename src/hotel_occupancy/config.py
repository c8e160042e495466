"""
Instance configuration for hotel-occupancy.

Defaults work out of the box; HotelConfig.from_env() lets a deployment
override them with HOTEL_* variables (a .env file is honored).
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from hotel_occupancy.modules.reports import DEFAULT_MODEL


@dataclass
class HotelConfig:
    """
    Configuration for one application instance.

    Attributes:
        storage_dir: Directory of the persisted records
        channel: Sync transport, "local" (in-process) or "udp" (sibling processes)
        channel_name: Name of the in-process channel
        udp_group: Multicast group of the UDP channel
        udp_port: Port of the UDP channel
        scan_interval: Seconds between notification scans
        sync_poll_interval: Seconds between sync inbox drains
        warning_threshold: Seconds before the end of a stay a warning is raised
        gemini_api_key: API key for report generation (None disables it)
        gemini_model: Gemini model name
        instance_id: Sync sender id (random when None)
    """

    storage_dir: Path = field(default_factory=lambda: Path.home() / ".hotel_occupancy")
    channel: str = "local"
    channel_name: str = "hotel_sync_channel_v1"
    udp_group: str = "239.255.42.99"
    udp_port: int = 50555
    scan_interval: float = 5.0
    sync_poll_interval: float = 0.5
    warning_threshold: int = 300
    gemini_api_key: Optional[str] = None
    gemini_model: str = DEFAULT_MODEL
    instance_id: Optional[str] = None

    def __post_init__(self) -> None:
        self.storage_dir = Path(self.storage_dir)
        if self.channel not in ("local", "udp"):
            raise ValueError(f"Unknown sync channel '{self.channel}' (expected 'local' or 'udp')")
        if self.scan_interval <= 0 or self.sync_poll_interval <= 0:
            raise ValueError("Scan and sync intervals must be positive")
        if self.warning_threshold <= 0:
            raise ValueError("warning_threshold must be positive")

    @classmethod
    def from_env(cls) -> "HotelConfig":
        """
        Build a config from environment variables.

        Reads HOTEL_STORAGE_DIR, HOTEL_SYNC_CHANNEL, HOTEL_CHANNEL_NAME,
        HOTEL_UDP_GROUP, HOTEL_UDP_PORT, HOTEL_SCAN_INTERVAL,
        HOTEL_SYNC_POLL_INTERVAL, HOTEL_WARNING_THRESHOLD, HOTEL_INSTANCE_ID,
        GEMINI_API_KEY and GEMINI_MODEL. Unset variables keep their defaults.

        Raises:
            ValueError: If a variable holds an invalid value
        """
        load_dotenv()
        defaults = cls()

        return cls(
            storage_dir=Path(os.getenv("HOTEL_STORAGE_DIR", str(defaults.storage_dir))),
            channel=os.getenv("HOTEL_SYNC_CHANNEL", defaults.channel),
            channel_name=os.getenv("HOTEL_CHANNEL_NAME", defaults.channel_name),
            udp_group=os.getenv("HOTEL_UDP_GROUP", defaults.udp_group),
            udp_port=int(os.getenv("HOTEL_UDP_PORT", defaults.udp_port)),
            scan_interval=float(os.getenv("HOTEL_SCAN_INTERVAL", defaults.scan_interval)),
            sync_poll_interval=float(
                os.getenv("HOTEL_SYNC_POLL_INTERVAL", defaults.sync_poll_interval)
            ),
            warning_threshold=int(os.getenv("HOTEL_WARNING_THRESHOLD", defaults.warning_threshold)),
            instance_id=os.getenv("HOTEL_INSTANCE_ID") or None,
            gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
            gemini_model=os.getenv("GEMINI_MODEL", defaults.gemini_model),
        )
