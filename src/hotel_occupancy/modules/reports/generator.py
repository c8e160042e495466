"""
Executive summary of current occupancy, written by a Gemini model.

The generator is a collaborator of the core: any failure turns into a fixed
fallback sentence, never an exception.
"""

import json
import logging
from datetime import datetime, UTC
from typing import Any, Iterable, List, Optional

import google.generativeai as genai

from hotel_occupancy.core.room import Room, to_millis

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"
EMPTY_REPORT = "Report unavailable at this time."
FAILED_REPORT = "Could not generate AI insights at the moment."

SYSTEM_INSTRUCTION = "You are a concise hotel management AI. Keep responses brief and professional."

PROMPT_TEMPLATE = """
As a professional hotel operations manager, provide a very brief (2-3 sentences) executive summary of the current room occupancy status.
Current Data: {room_data}
Highlight if the hotel is nearly full or mostly empty, and maybe a professional tip for the front desk.
"""


def build_prompt(rooms: Iterable[Room], now: datetime) -> str:
    """
    Build the summary prompt for a set of rooms.

    Each room contributes its number, status, guest (or "N/A") and the
    milliseconds left on its stay (0 when none or already expired).
    """
    now_ms = to_millis(now)
    room_data: List[dict] = []
    for room in rooms:
        time_left = 0
        if room.end_time is not None:
            time_left = max(0, to_millis(room.end_time) - now_ms)
        room_data.append(
            {
                "room": room.room_number,
                "status": room.status.value,
                "guest": room.guest_name or "N/A",
                "timeLeft": time_left,
            }
        )
    return PROMPT_TEMPLATE.format(room_data=json.dumps(room_data))


class ReportGenerator:
    """Generates a short natural-language occupancy summary."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: str = DEFAULT_MODEL,
        temperature: float = 0.7,
        model: Optional[Any] = None,
    ) -> None:
        """
        Initialize the generator.

        Args:
            api_key: Gemini API key (None disables generation)
            model_name: Gemini model name
            temperature: Sampling temperature
            model: Pre-built model object exposing generate_content() (for tests)
        """
        self.api_key = api_key
        self.model_name = model_name
        self.temperature = temperature
        self._model = model

    def _get_model(self) -> Any:
        if self._model is None:
            genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(
                self.model_name,
                system_instruction=SYSTEM_INSTRUCTION,
            )
        return self._model

    def generate(self, rooms: Iterable[Room], now: Optional[datetime] = None) -> str:
        """
        Summarize the given rooms.

        Args:
            rooms: Rooms of the active property
            now: Current time (defaults to datetime.now(UTC))

        Returns:
            The summary, or a fixed fallback message on any failure
        """
        if now is None:
            now = datetime.now(UTC)

        if self._model is None and not self.api_key:
            logger.warning("No Gemini API key configured, report skipped")
            return FAILED_REPORT

        prompt = build_prompt(rooms, now)
        try:
            response = self._get_model().generate_content(
                prompt,
                generation_config={"temperature": self.temperature},
            )
            text = (response.text or "").strip()
        except Exception as e:
            logger.error(f"Report generation failed: {e}", exc_info=True)
            return FAILED_REPORT

        return text or EMPTY_REPORT
