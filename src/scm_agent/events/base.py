"""
Base event type.

Every message batch the platform hands to the agent travels as an event.
Events carry a unique ``event_id``, a ``timestamp`` and the simulation
``day`` they belong to, and can summarise themselves for logging and the
bus's recording feature.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict


@dataclass(kw_only=True)
class BaseEvent(ABC):
    """
    Abstract base class for all agent events.

    Attributes:
        event_id (str): Unique identifier for this event instance.
        timestamp (datetime): Wall-clock time the event was created.
        day (int): Simulation day the event belongs to.
    """

    event_id: str
    timestamp: datetime
    day: int

    def __post_init__(self):
        if not self.event_id:
            raise ValueError("Event ID cannot be empty")
        if not isinstance(self.timestamp, datetime):
            raise TypeError("Timestamp must be a datetime object")
        if self.day < 0:
            raise ValueError(f"Day must be non-negative, but got {self.day}.")

    @abstractmethod
    def to_summary_dict(self) -> Dict[str, Any]:
        """Return a concise, JSON-serialisable view of the event."""
        raise NotImplementedError("Subclasses must implement to_summary_dict")

    def _base_summary(self) -> Dict[str, Any]:
        return {
            "event_id": self.event_id,
            "timestamp": self.timestamp.isoformat(),
            "day": self.day,
        }
