"""
Reports module for hotel-occupancy.

Short AI-written occupancy summaries with fixed fallbacks.
"""

from .generator import (
    ReportGenerator,
    build_prompt,
    DEFAULT_MODEL,
    EMPTY_REPORT,
    FAILED_REPORT,
)

__all__ = [
    "ReportGenerator",
    "build_prompt",
    "DEFAULT_MODEL",
    "EMPTY_REPORT",
    "FAILED_REPORT",
]
