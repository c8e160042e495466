"""
Fixed room catalog for both properties.

The catalog seeds the room table on first run and whenever stored rooms
cannot be read back.
"""

from typing import List, Tuple

from hotel_occupancy.core.room import PropertyId, Room, RoomStatus

HOURLY_UNIT_COUNT = 16
HOURLY_UNIT_TYPE = "Hourly Unit"

# (room type, room numbers) in display order
ROYGAN_ROOM_CONFIG: List[Tuple[str, List[str]]] = [
    ("Single Standard", ["206", "302", "209"]),
    ("Single Premier", ["300", "304", "308", "309"]),
    ("Double Standard", ["204", "205", "305", "306", "307"]),
    ("Deluxe Room", ["105", "208", "303"]),
    ("Super Deluxe", ["216", "220"]),
    ("Suite Room", ["214", "215", "217", "218"]),
    ("Executive Suite", ["210", "211"]),
]


def roygan_room_types() -> List[str]:
    """Room types of the second property, in display order."""
    return [room_type for room_type, _ in ROYGAN_ROOM_CONFIG]


def initial_rooms() -> Tuple[Room, ...]:
    """
    Build the initial room table, all rooms FREE.

    Hourly units get ids 1..16. Overnight rooms get
    100 + 100 * group index + index within the group.

    Returns:
        Tuple of Rooms for both properties
    """
    rooms: List[Room] = [
        Room(
            id=i + 1,
            property_id=PropertyId.SWEETHEART,
            room_number=str(i + 1),
            status=RoomStatus.FREE,
            room_type=HOURLY_UNIT_TYPE,
        )
        for i in range(HOURLY_UNIT_COUNT)
    ]

    for group_idx, (room_type, numbers) in enumerate(ROYGAN_ROOM_CONFIG):
        for room_idx, number in enumerate(numbers):
            rooms.append(
                Room(
                    id=100 + group_idx * 100 + room_idx,
                    property_id=PropertyId.ROYGAN,
                    room_number=number,
                    status=RoomStatus.FREE,
                    room_type=room_type,
                )
            )

    return tuple(rooms)
