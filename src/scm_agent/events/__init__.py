"""Event types and the in-process event bus."""

from scm_agent.events.base import BaseEvent
from scm_agent.events.bus import EventBus, InMemoryEventBus
from scm_agent.events.simulation import (
    CustomerOrdersEvent,
    CustomerRFQsEvent,
    SimulationEndedEvent,
    SimulationStartedEvent,
    SimulationStatusEvent,
    SupplierOffersEvent,
)

__all__ = [
    "BaseEvent",
    "EventBus",
    "InMemoryEventBus",
    "CustomerOrdersEvent",
    "CustomerRFQsEvent",
    "SimulationEndedEvent",
    "SimulationStartedEvent",
    "SimulationStatusEvent",
    "SupplierOffersEvent",
]
