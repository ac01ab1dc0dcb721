"""
Events delivered to the agent during a simulation.

One event per inbound batch, in the order the platform delivers them each
day: customer RFQs, customer orders, supplier offers (one event per
supplier) and finally the simulation status that closes the day.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from scm_agent.events.base import BaseEvent
from scm_agent.models import RFQ, CustomerOrder, StartInfo, SupplierOffer


@dataclass(kw_only=True)
class SimulationStartedEvent(BaseEvent):
    start_info: StartInfo

    def to_summary_dict(self) -> Dict[str, Any]:
        return {**self._base_summary(), "start_info": self.start_info.model_dump()}


@dataclass(kw_only=True)
class CustomerRFQsEvent(BaseEvent):
    rfqs: List[RFQ] = field(default_factory=list)

    def to_summary_dict(self) -> Dict[str, Any]:
        return {**self._base_summary(), "rfq_count": len(self.rfqs)}


@dataclass(kw_only=True)
class CustomerOrdersEvent(BaseEvent):
    orders: List[CustomerOrder] = field(default_factory=list)

    def to_summary_dict(self) -> Dict[str, Any]:
        return {
            **self._base_summary(),
            "order_ids": [order.order_id for order in self.orders],
        }


@dataclass(kw_only=True)
class SupplierOffersEvent(BaseEvent):
    supplier: str
    offers: List[SupplierOffer] = field(default_factory=list)

    def __post_init__(self):
        super().__post_init__()
        if not self.supplier:
            raise ValueError("Supplier cannot be empty for SupplierOffersEvent.")

    def to_summary_dict(self) -> Dict[str, Any]:
        return {
            **self._base_summary(),
            "supplier": self.supplier,
            "offer_count": len(self.offers),
        }


@dataclass(kw_only=True)
class SimulationStatusEvent(BaseEvent):
    """All messages for ``day`` have been delivered; the next event is for day + 1."""

    def to_summary_dict(self) -> Dict[str, Any]:
        return self._base_summary()


@dataclass(kw_only=True)
class SimulationEndedEvent(BaseEvent):
    def to_summary_dict(self) -> Dict[str, Any]:
        return self._base_summary()
