"""
Modules package for hotel-occupancy.

Modules are plug-ins that add behavior on top of the shared state.
"""

from hotel_occupancy.modules.base import HotelModule

__all__ = ["HotelModule"]
