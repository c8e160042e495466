"""
Sync channels between sibling instances on one device.

A channel carries JSON messages to every *other* open endpoint with the same
name. Delivery is at-most-once and unordered; receivers poll with
receive_pending().
"""

import json
import logging
import socket
import struct
from abc import ABC, abstractmethod
from collections import deque
from typing import Any, Deque, Dict, List

from hotel_occupancy.core.errors import SyncError

logger = logging.getLogger(__name__)

MAX_DATAGRAM = 65507


class SyncChannel(ABC):
    """Transport for full-state sync messages."""

    @abstractmethod
    def post(self, message: Dict[str, Any]) -> None:
        """Send a message to every other endpoint of this channel."""
        pass

    @abstractmethod
    def receive_pending(self) -> List[Dict[str, Any]]:
        """Drain and return messages received since the last call, oldest first."""
        pass

    def close(self) -> None:
        """Release the channel. Default does nothing."""
        pass


class LocalChannel(SyncChannel):
    """
    In-process named channel.

    Endpoints created with the same name see each other's posts, like
    browser BroadcastChannels. Messages are JSON-encoded on post so
    receivers never share objects with the sender.
    """

    _endpoints: Dict[str, List["LocalChannel"]] = {}

    def __init__(self, name: str) -> None:
        self.name = name
        self._inbox: Deque[str] = deque()
        self._closed = False
        LocalChannel._endpoints.setdefault(name, []).append(self)
        logger.debug(f"Opened local channel '{name}'")

    def post(self, message: Dict[str, Any]) -> None:
        if self._closed:
            logger.warning(f"Post on closed channel '{self.name}' dropped")
            return

        data = json.dumps(message)
        for peer in LocalChannel._endpoints.get(self.name, []):
            if peer is not self:
                peer._inbox.append(data)

    def receive_pending(self) -> List[Dict[str, Any]]:
        messages = []
        while self._inbox:
            messages.append(json.loads(self._inbox.popleft()))
        return messages

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        peers = LocalChannel._endpoints.get(self.name, [])
        if self in peers:
            peers.remove(self)
        if not peers:
            LocalChannel._endpoints.pop(self.name, None)
        self._inbox.clear()
        logger.debug(f"Closed local channel '{self.name}'")


class UdpChannel(SyncChannel):
    """
    Multicast channel for sibling processes on the same device.

    Uses a TTL of 0 so datagrams never leave the host. Every endpoint
    also receives its own posts; SyncModule filters them by sender id.
    """

    def __init__(self, group: str = "239.255.42.99", port: int = 50555) -> None:
        self.group = group
        self.port = port
        self.sock = None
        self.setup_socket()

    def setup_socket(self) -> None:
        """Initialize the multicast socket (non-blocking)."""
        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            if hasattr(socket, "SO_REUSEPORT"):
                sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEPORT, 1)
            sock.bind(("", self.port))

            membership = struct.pack("4s4s", socket.inet_aton(self.group), socket.inet_aton("0.0.0.0"))
            sock.setsockopt(socket.IPPROTO_IP, socket.IP_ADD_MEMBERSHIP, membership)
            sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, 0)
            sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_LOOP, 1)
            sock.setblocking(False)
        except OSError as e:
            raise SyncError(f"Failed to setup sync socket on {self.group}:{self.port}: {e}") from e

        self.sock = sock
        logger.info(f"UDP sync channel listening on {self.group}:{self.port}")

    def post(self, message: Dict[str, Any]) -> None:
        if self.sock is None:
            logger.warning("Post on closed UDP channel dropped")
            return

        payload = json.dumps(message).encode("utf-8")
        if len(payload) > MAX_DATAGRAM:
            logger.error(f"Sync message too large ({len(payload)} bytes), dropped")
            return

        try:
            self.sock.sendto(payload, (self.group, self.port))
        except OSError as e:
            logger.warning(f"Failed to send sync message: {e}")

    def receive_pending(self) -> List[Dict[str, Any]]:
        messages: List[Dict[str, Any]] = []
        if self.sock is None:
            return messages

        while True:
            try:
                data, addr = self.sock.recvfrom(MAX_DATAGRAM)
            except (BlockingIOError, InterruptedError):
                break
            except OSError as e:
                logger.warning(f"Failed to receive sync message: {e}")
                break

            try:
                message = json.loads(data.decode("utf-8"))
            except (UnicodeDecodeError, json.JSONDecodeError):
                logger.warning(f"Undecodable sync datagram from {addr} dropped")
                continue

            if isinstance(message, dict):
                messages.append(message)

        return messages

    def close(self) -> None:
        if self.sock is None:
            return
        try:
            self.sock.close()
        except OSError as e:
            logger.debug(f"Error closing sync socket: {e}")
        self.sock = None
        logger.info("UDP sync channel closed")
