"""
Room dataclass and helpers.

A Room is one rentable unit of a property. Rooms are created once from the
catalog and only ever change status.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, UTC
from enum import Enum
from typing import Any, Dict, Optional


class PropertyId(Enum):
    """The two properties managed by the system.

    SWEETHEART: first property, rooms rented by the hour.
    ROYGAN: second property, rooms rented by the night.
    """

    SWEETHEART = "sweetheart"
    ROYGAN = "roygan"

    @property
    def display_name(self) -> str:
        """Human-readable property name."""
        return PROPERTY_NAMES[self]


PROPERTY_NAMES: Dict[PropertyId, str] = {
    PropertyId.SWEETHEART: "Sweet Heart Inn",
    PropertyId.ROYGAN: "Roygan Hotel",
}


class RoomStatus(Enum):
    """Occupancy status of a room."""

    FREE = "FREE"
    OCCUPIED = "OCCUPIED"
    RESERVED = "RESERVED"


EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def to_millis(value: datetime) -> int:
    """Convert an aware datetime to integer milliseconds since epoch."""
    return (value - EPOCH) // timedelta(milliseconds=1)


def from_millis(value: int) -> datetime:
    """Convert integer milliseconds since epoch to an aware UTC datetime.

    Raises:
        ValueError: If the value is outside the datetime range
    """
    try:
        return EPOCH + timedelta(milliseconds=value)
    except OverflowError as e:
        raise ValueError(f"Timestamp out of range: {value!r}") from e


def _millis_field(data: Dict[str, Any], key: str) -> Optional[datetime]:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{key} must be a number, got {type(value).__name__}")
    return from_millis(int(value))


def truncate_to_millis(value: datetime) -> datetime:
    """Drop sub-millisecond precision so the value survives serialization unchanged."""
    return value.replace(microsecond=value.microsecond - value.microsecond % 1000)


@dataclass(frozen=True)
class Room:
    """
    A room in one of the two properties (Immutable).

    Attributes:
        id: Unique identifier, stable for the lifetime of the process
        property_id: Property this room belongs to
        room_number: Room number, unique within a property
        status: FREE, OCCUPIED or RESERVED
        room_type: Category label (e.g., "Deluxe Room")
        guest_name: Guest name (OCCUPIED, optionally RESERVED)
        start_time: Start of the current stay (OCCUPIED only)
        end_time: Instant the current stay expires (OCCUPIED only)
        early_check_in: Early check-in flag (second property only)
        late_check_out: Late check-out flag (second property only)
    """

    id: int
    property_id: PropertyId
    room_number: str
    status: RoomStatus = RoomStatus.FREE
    room_type: Optional[str] = None
    guest_name: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    early_check_in: Optional[bool] = None
    late_check_out: Optional[bool] = None

    @property
    def is_occupied(self) -> bool:
        """Check if the room is currently occupied."""
        return self.status == RoomStatus.OCCUPIED

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the persisted/synced layout. Absent fields are omitted."""
        data: Dict[str, Any] = {
            "id": self.id,
            "propertyId": self.property_id.value,
            "roomNumber": self.room_number,
            "status": self.status.value,
        }
        if self.room_type is not None:
            data["roomType"] = self.room_type
        if self.guest_name is not None:
            data["guestName"] = self.guest_name
        if self.start_time is not None:
            data["startTime"] = to_millis(self.start_time)
        if self.end_time is not None:
            data["endTime"] = to_millis(self.end_time)
        if self.early_check_in is not None:
            data["earlyCheckIn"] = self.early_check_in
        if self.late_check_out is not None:
            data["lateCheckOut"] = self.late_check_out
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Room":
        """
        Build a Room from its serialized form.

        Raises:
            KeyError: If a required field is missing
            ValueError: If a field holds an unknown enum value or an out-of-range timestamp
            TypeError: If a field has the wrong type
        """
        if not isinstance(data, dict):
            raise TypeError(f"Room record must be an object, got {type(data).__name__}")

        try:
            return cls(
                id=int(data["id"]),
                property_id=PropertyId(data["propertyId"]),
                room_number=str(data["roomNumber"]),
                status=RoomStatus(data["status"]),
                room_type=data.get("roomType"),
                guest_name=data.get("guestName"),
                start_time=_millis_field(data, "startTime"),
                end_time=_millis_field(data, "endTime"),
                early_check_in=data.get("earlyCheckIn"),
                late_check_out=data.get("lateCheckOut"),
            )
        except OverflowError as e:
            # int() of an infinite float (JSON Infinity or 1e400)
            raise ValueError(f"Room record holds an out-of-range number: {e}") from e
