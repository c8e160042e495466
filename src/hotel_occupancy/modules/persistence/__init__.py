"""
Persistence module for hotel-occupancy.

Stores the room table and today's stats as two named records.
"""

from .module import PersistenceModule, ROOMS_KEY, DAILY_STATS_KEY

__all__ = ["PersistenceModule", "ROOMS_KEY", "DAILY_STATS_KEY"]
