#!/usr/bin/env python3
"""
Quick example demonstrating hotel-occupancy basic usage.

Two front-desk instances share one in-process sync channel: a check-in on
the first shows up on the second.

Run with: PYTHONPATH=src python3 example.py
"""

import tempfile
from datetime import datetime, timedelta, UTC

from hotel_occupancy import HotelApp, HotelConfig, PropertyId
from hotel_occupancy.modules.bookings import HourlyStay, OvernightStay

print("=" * 60)
print("hotel-occupancy Example")
print("=" * 60)

# 1. Two instances on the same channel
print("\n1. Creating two instances...")
front_desk = HotelApp(HotelConfig(storage_dir=tempfile.mkdtemp(), channel_name="example"))
back_office = HotelApp(HotelConfig(storage_dir=tempfile.mkdtemp(), channel_name="example"))
print(f"   ✓ {len(front_desk.rooms())} rooms per instance")

# 2. Hourly check-in at the first property
print("\n2. Checking in hourly unit 3 for 90 minutes...")
now = datetime.now(UTC)
front_desk.commit_stay(3, "Juan Dela Cruz", HourlyStay.from_parts(hours=1, minutes=30), now=now)
print(f"   ✓ Hours sold today: {front_desk.daily_stats().sweetheart_room_hours}")

# 3. Overnight check-in at the second property
print("\n3. Checking in Roygan room 206 for 2 nights, late check-out...")
front_desk.commit_stay(100, "Maria Santos", OvernightStay(days=2, late_check_out=True), now=now)
room = front_desk.state.get_room(100)
print(f"   ✓ Checkout at {room.end_time.astimezone():%Y-%m-%d %H:%M}")

# 4. Sync to the second instance
print("\n4. Draining the sync inbox of the second instance...")
applied = back_office.sync.process_inbound()
print(f"   ✓ Applied {applied} snapshot(s)")
print(f"   ✓ Room 3 on back office: {back_office.state.get_room(3).status.value}")

# 5. Alerts
print("\n5. Scanning 86 minutes later...")
alerts = front_desk.notifications.check_expirations(now + timedelta(minutes=86))
for alert in alerts:
    print(f"   ✓ [{alert.kind.value}] Room {alert.room_number} ({alert.property_name}): {alert.message}")

# 6. Occupancy summary
print("\n6. Occupancy by property...")
for property_id in PropertyId:
    stats = front_desk.occupancy_stats(property_id)
    print(
        f"   ✓ {property_id.display_name}: {stats.occupied}/{stats.total} occupied "
        f"({stats.occupancy_rate:.1f}%)"
    )

front_desk.stop()
back_office.stop()

print("\n" + "=" * 60)
print("Example complete!")
print("=" * 60)
