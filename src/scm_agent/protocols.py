"""
Capabilities the agent consumes from the simulation platform.

The agent never talks to the simulation host directly. Everything it needs
(the clock, static product data, the order book, the next-day inventory
projection and the execution primitives) is reached through the protocols
below. ``scm_agent.platform.InMemoryPlatform`` is the reference
implementation; tests provide scripted fakes.
"""

from __future__ import annotations

from typing import List, Protocol, Sequence, runtime_checkable

from scm_agent.models import (
    RFQ,
    BOMBundle,
    ComponentCatalog,
    CustomerOrder,
    StartInfo,
    SupplierOffer,
)


class InventoryView(Protocol):
    """Read access to the next-day inventory projection."""

    def quantity(self, product_id: int) -> int:
        ...


class OrderStore(Protocol):
    """The customer order book."""

    def get_active_orders(self) -> Sequence[CustomerOrder]:
        """Return a snapshot of all orders still in the ACTIVE state."""
        ...


@runtime_checkable
class AgentPlatform(Protocol):
    """
    Everything the decision engine needs from the platform.

    Execution primitives (``add_delivery_request``, ``add_production_request``
    and ``reserve_inventory_for_next_day``) are all-or-nothing: they return
    True after committing their effect to the next-day projection, or False
    leaving every piece of state unchanged.

    Outbound traffic is staged with an ``add_*`` call and sent with the
    matching ``send_*`` call once per day.
    """

    # Clock and static configuration -------------------------------------

    def get_current_date(self) -> int:
        ...

    def get_start_info(self) -> StartInfo:
        ...

    def get_days_before_void(self) -> int:
        ...

    def get_bom_bundle(self) -> BOMBundle:
        ...

    def get_component_catalog(self) -> ComponentCatalog:
        ...

    # Order book and inventory -------------------------------------------

    def get_customer_orders(self) -> OrderStore:
        ...

    def get_inventory_for_next_day(self) -> InventoryView:
        ...

    # Execution primitives -----------------------------------------------

    def add_delivery_request(self, order: CustomerOrder) -> bool:
        ...

    def add_production_request(self, product_id: int, quantity: int) -> bool:
        ...

    def reserve_inventory_for_next_day(self, product_id: int, quantity: int) -> bool:
        ...

    def send_factory_schedules(self) -> None:
        ...

    # Outbound batches ---------------------------------------------------

    def add_customer_offer(self, rfq: RFQ, unit_price: int) -> None:
        ...

    def send_customer_offers(self) -> None:
        ...

    def add_supplier_rfq(
        self,
        supplier: str,
        product_id: int,
        quantity: int,
        reserve_price: int,
        due_date: int,
    ) -> None:
        ...

    def send_supplier_rfqs(self) -> None:
        ...

    def add_supplier_order(self, offer: SupplierOffer) -> None:
        ...

    def send_supplier_orders(self) -> None:
        ...


__all__: List[str] = ["AgentPlatform", "InventoryView", "OrderStore"]
