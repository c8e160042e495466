"""
Exception types raised by the hotel-occupancy kernel.

Not-found room ids are not errors: mutations on unknown rooms are ignored.
"""


class HotelError(Exception):
    """Base class for hotel-occupancy errors."""


class InvalidStayError(HotelError, ValueError):
    """Raised when a check-in carries a duration that cannot be booked."""


class StorageError(HotelError):
    """Raised when the persistent store cannot read or write a record."""


class SyncError(HotelError):
    """Raised when a sync channel cannot be set up."""
