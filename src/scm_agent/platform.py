"""
InMemoryPlatform

Reference implementation of ``AgentPlatform`` used by the market simulation
and the integration tests. It keeps:

- the customer order book
- physical stock (components and finished products)
- the next-day inventory projection and the factory's free cycles, which the
  execution primitives commit against
- staged outbound items and, once flushed, the day's sent batches
- supplier deliveries scheduled by accepted supplier orders

Contract:
- ``begin_day(day)`` opens a day: clears staged items and rebuilds the
  projection from stock plus tomorrow's supplier arrivals.
- Execution primitives are all-or-nothing.
- ``advance_day()`` executes the flushed factory schedule (shipments and
  production), lands tomorrow's supplier deliveries and moves the clock on.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set

from scm_agent.exceptions import UnknownOrderError
from scm_agent.models import (
    RFQ,
    BOMBundle,
    ComponentCatalog,
    CustomerOffer,
    CustomerOrder,
    DeliveryRequest,
    InventoryStatus,
    ProductionRequest,
    StartInfo,
    SupplierOffer,
    SupplierOrder,
    SupplierRFQ,
)

logger = logging.getLogger(__name__)


class OrderBook:
    """Customer orders keyed by id, in arrival order."""

    def __init__(self) -> None:
        self._orders: Dict[int, CustomerOrder] = {}

    def add(self, order: CustomerOrder) -> None:
        if order.order_id in self._orders:
            raise ValueError(f"Duplicate customer order id {order.order_id}")
        self._orders[order.order_id] = order

    def get(self, order_id: int) -> CustomerOrder:
        try:
            return self._orders[order_id]
        except KeyError:
            raise UnknownOrderError(order_id) from None

    def get_active_orders(self) -> List[CustomerOrder]:
        return [order for order in self._orders.values() if order.is_active]

    def all_orders(self) -> List[CustomerOrder]:
        return list(self._orders.values())

    def __len__(self) -> int:
        return len(self._orders)


@dataclass
class PendingArrival:
    arrival_day: int
    supplier: str
    product_id: int
    quantity: int
    unit_price: int


@dataclass
class FactorySchedule:
    """Flushed production and deliveries, executed when the day advances."""

    day: int
    production: List[ProductionRequest] = field(default_factory=list)
    deliveries: List[DeliveryRequest] = field(default_factory=list)


class InMemoryPlatform:
    def __init__(
        self,
        start_info: StartInfo,
        bom: BOMBundle,
        catalog: ComponentCatalog,
        initial_stock: Optional[Dict[int, int]] = None,
    ) -> None:
        self._start_info = start_info
        self._bom = bom
        self._catalog = catalog
        self._day = 0

        self.orders = OrderBook()
        self.stock = InventoryStatus(initial_stock)
        self._next_day = self.stock.copy()
        self._free_cycles = start_info.factory_capacity

        self._staged_customer_offers: List[CustomerOffer] = []
        self._staged_supplier_rfqs: List[SupplierRFQ] = []
        self._staged_supplier_orders: List[SupplierOrder] = []
        self._staged_production: List[ProductionRequest] = []
        self._staged_deliveries: List[DeliveryRequest] = []

        # Flushed batches for the current day, read by the market
        self.sent_customer_offers: List[CustomerOffer] = []
        self.sent_supplier_rfqs: List[SupplierRFQ] = []
        self.sent_supplier_orders: List[SupplierOrder] = []
        self.schedule: Optional[FactorySchedule] = None

        self._pending_arrivals: List[PendingArrival] = []
        self._ordered_supplier_rfqs: Set[int] = set()
        self._next_rfq_id = 1
        self._flush_counts: Dict[str, int] = defaultdict(int)

    # Clock and static configuration -------------------------------------

    def get_current_date(self) -> int:
        return self._day

    def get_start_info(self) -> StartInfo:
        return self._start_info

    def get_days_before_void(self) -> int:
        return self._start_info.days_before_void

    def get_bom_bundle(self) -> BOMBundle:
        return self._bom

    def get_component_catalog(self) -> ComponentCatalog:
        return self._catalog

    def get_customer_orders(self) -> OrderBook:
        return self.orders

    def get_inventory_for_next_day(self) -> InventoryStatus:
        return self._next_day

    @property
    def free_cycles(self) -> int:
        return self._free_cycles

    # Day lifecycle ------------------------------------------------------

    def begin_day(self, day: int) -> None:
        self._day = day
        self.sent_customer_offers = []
        self.sent_supplier_rfqs = []
        self.sent_supplier_orders = []
        self.schedule = None
        self._next_day = self.stock.copy()
        for arrival in self._pending_arrivals:
            if arrival.arrival_day == day + 1:
                self._next_day.add_inventory(arrival.product_id, arrival.quantity)
        self._free_cycles = self._start_info.factory_capacity

    def advance_day(self) -> FactorySchedule:
        """
        Execute the flushed schedule and move to the next day.

        Returns the executed schedule (empty if nothing was flushed).
        """
        tomorrow = self._day + 1
        executed = self.schedule or FactorySchedule(day=self._day)

        landed = [a for a in self._pending_arrivals if a.arrival_day <= tomorrow]
        self._pending_arrivals = [a for a in self._pending_arrivals if a.arrival_day > tomorrow]
        for arrival in landed:
            self.stock.add_inventory(arrival.product_id, arrival.quantity)

        for request in executed.production:
            for component in self._bom.components_for(request.product_id) or ():
                self.stock.add_inventory(component, -request.quantity)
            self.stock.add_inventory(request.product_id, request.quantity)

        for delivery in executed.deliveries:
            self.stock.add_inventory(delivery.product_id, -delivery.quantity)

        logger.debug(
            "Day %d executed: %d production runs, %d deliveries, %d supplier arrivals",
            self._day,
            len(executed.production),
            len(executed.deliveries),
            len(landed),
        )
        self.begin_day(tomorrow)
        return executed

    # Execution primitives -----------------------------------------------

    def add_delivery_request(self, order: CustomerOrder) -> bool:
        known = self.orders.get(order.order_id)
        if not known.is_active:
            return False
        if self._next_day.quantity(order.product_id) < order.quantity:
            return False
        self._next_day.add_inventory(order.product_id, -order.quantity)
        known.mark_delivered()
        self._staged_deliveries.append(
            DeliveryRequest(order.order_id, order.product_id, order.quantity)
        )
        return True

    def add_production_request(self, product_id: int, quantity: int) -> bool:
        if quantity <= 0:
            return False
        components = self._bom.components_for(product_id)
        if components is None:
            return False
        cycles = quantity * self._bom.cycles_per_unit(product_id)
        if cycles > self._free_cycles:
            return False
        if any(self._next_day.quantity(c) < quantity for c in components):
            return False

        for component in components:
            self._next_day.add_inventory(component, -quantity)
        self._free_cycles -= cycles
        self._staged_production.append(ProductionRequest(product_id, quantity, cycles))
        return True

    def reserve_inventory_for_next_day(self, product_id: int, quantity: int) -> bool:
        if quantity < 0 or self._next_day.quantity(product_id) < quantity:
            return False
        self._next_day.add_inventory(product_id, -quantity)
        return True

    def send_factory_schedules(self) -> None:
        self.schedule = FactorySchedule(
            day=self._day,
            production=self._staged_production,
            deliveries=self._staged_deliveries,
        )
        self._staged_production = []
        self._staged_deliveries = []
        self._flush_counts["factory_schedules"] += 1

    # Outbound batches ---------------------------------------------------

    def add_customer_offer(self, rfq: RFQ, unit_price: int) -> None:
        self._staged_customer_offers.append(
            CustomerOffer(
                rfq_id=rfq.rfq_id,
                product_id=rfq.product_id,
                quantity=rfq.quantity,
                due_date=rfq.due_date,
                unit_price=unit_price,
            )
        )

    def send_customer_offers(self) -> None:
        self.sent_customer_offers.extend(self._staged_customer_offers)
        self._staged_customer_offers = []
        self._flush_counts["customer_offers"] += 1

    def add_supplier_rfq(
        self,
        supplier: str,
        product_id: int,
        quantity: int,
        reserve_price: int,
        due_date: int,
    ) -> None:
        self._staged_supplier_rfqs.append(
            SupplierRFQ(
                supplier=supplier,
                product_id=product_id,
                quantity=quantity,
                reserve_price=reserve_price,
                due_date=due_date,
                rfq_id=self._next_rfq_id,
            )
        )
        self._next_rfq_id += 1

    def send_supplier_rfqs(self) -> None:
        self.sent_supplier_rfqs.extend(self._staged_supplier_rfqs)
        self._staged_supplier_rfqs = []
        self._flush_counts["supplier_rfqs"] += 1

    def add_supplier_order(self, offer: SupplierOffer) -> None:
        self._staged_supplier_orders.append(SupplierOrder.from_offer(offer))

    def send_supplier_orders(self) -> None:
        """
        Send staged supplier orders. Only the first order placed against a
        supplier RFQ is honoured; later ones are dropped.
        """
        for order in self._staged_supplier_orders:
            if order.rfq_id is not None:
                if order.rfq_id in self._ordered_supplier_rfqs:
                    logger.debug(
                        "Ignoring second order for supplier RFQ %d (offer %d)",
                        order.rfq_id,
                        order.offer_id,
                    )
                    continue
                self._ordered_supplier_rfqs.add(order.rfq_id)
            self.sent_supplier_orders.append(order)
            self._pending_arrivals.append(
                PendingArrival(
                    arrival_day=max(order.due_date, self._day + 1),
                    supplier=order.supplier,
                    product_id=order.product_id,
                    quantity=order.quantity,
                    unit_price=order.unit_price,
                )
            )
        self._staged_supplier_orders = []
        self._flush_counts["supplier_orders"] += 1

    # Introspection helpers (useful for tests/metrics) --------------------

    def get_pending_arrivals(self) -> List[PendingArrival]:
        return list(self._pending_arrivals)

    def get_flush_counts(self) -> Dict[str, int]:
        return dict(self._flush_counts)

    def staged_counts(self) -> Dict[str, int]:
        return {
            "customer_offers": len(self._staged_customer_offers),
            "supplier_rfqs": len(self._staged_supplier_rfqs),
            "supplier_orders": len(self._staged_supplier_orders),
            "production": len(self._staged_production),
            "deliveries": len(self._staged_deliveries),
        }


def supplier_offer_bundle(offers: Sequence[SupplierOffer]) -> Dict[str, List[SupplierOffer]]:
    """Group offers by supplier, keeping each supplier's order."""
    grouped: Dict[str, List[SupplierOffer]] = defaultdict(list)
    for offer in offers:
        grouped[offer.supplier].append(offer)
    return dict(grouped)
