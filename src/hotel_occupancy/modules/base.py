"""
Base classes and protocols for hotel-occupancy modules.

Modules are plug-ins that add behavior on top of the shared HotelState.
"""

from abc import ABC, abstractmethod
from typing import Dict


class HotelModule(ABC):
    """
    Base class for hotel modules.

    A module:
    - Receives events from the Event Bus
    - Reads and replaces state through the HotelState container
    - Maintains its own runtime state
    - Emits semantic events that other modules can consume
    """

    @property
    @abstractmethod
    def id(self) -> str:
        """Unique identifier for this module type."""
        pass

    @abstractmethod
    def attach(self, bus, state) -> None:
        """
        Attach the module to the kernel.

        Register event subscriptions and capture references to bus and state.

        Args:
            bus: EventBus instance
            state: HotelState instance
        """
        pass

    def default_config(self) -> Dict:
        """
        Get default configuration for this module.

        Default implementation has no settings.
        Override to declare module settings; user config is merged over it.

        Returns:
            Default configuration dict
        """
        return {}

    def detach(self) -> None:
        """
        Release resources held by the module.

        Called when the owning instance shuts down. Default does nothing.
        """
        pass
