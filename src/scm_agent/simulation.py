"""
Reference market simulation.

Drives one ``SCMAgent`` through a whole game on an ``InMemoryPlatform``,
publishing the day's batches on an ``InMemoryEventBus`` in the fixed daily
order: customer RFQs, customer orders, supplier offers, simulation status.

- Customers send RFQs every day (seeded randomness) and turn some of the
  previous day's bids into orders.
- Suppliers answer the previous day's RFQs with an optional partial offer
  followed by a complete one, or with a price quote only.
- Revenue, component spend and penalties are tallied as the factory
  schedule executes.
"""

from __future__ import annotations

import logging
import random
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from scm_agent.agent import SCMAgent
from scm_agent.config import AgentSettings
from scm_agent.events import (
    CustomerOrdersEvent,
    CustomerRFQsEvent,
    InMemoryEventBus,
    SimulationEndedEvent,
    SimulationStartedEvent,
    SimulationStatusEvent,
    SupplierOffersEvent,
)
from scm_agent.models import (
    RFQ,
    CustomerOffer,
    CustomerOrder,
    OrderStatus,
    StartInfo,
    SupplierOffer,
    SupplierRFQ,
)
from scm_agent.platform import FactorySchedule, InMemoryPlatform, supplier_offer_bundle
from scm_agent.scenario import Scenario, default_scenario, load_scenario

logger = logging.getLogger(__name__)


class MarketSimulation:
    """
    Stateful day-by-day market around a single agent.

    Args:
        settings: Agent and simulation settings.
        scenario: Product structure; defaults to ``settings.simulation.scenario_path``
            or the built-in scenario.
        seed: Overrides ``settings.simulation.seed``. The market and the agent
            draw from separate streams derived from it.
    """

    def __init__(
        self,
        settings: Optional[AgentSettings] = None,
        scenario: Optional[Scenario] = None,
        seed: Optional[int] = None,
    ) -> None:
        self.settings = settings or AgentSettings()
        sim = self.settings.simulation
        if scenario is None:
            scenario = load_scenario(sim.scenario_path) if sim.scenario_path else default_scenario()
        self.scenario = scenario

        self._seed = seed if seed is not None else sim.seed
        self._rng = random.Random(self._seed)
        agent_rng = random.Random(None if self._seed is None else self._seed + 1)

        start_info = StartInfo(
            number_of_days=sim.days,
            days_before_void=sim.days_before_void,
            factory_capacity=sim.factory_capacity,
        )
        initial_stock = {
            component: sim.initial_component_stock
            for component in scenario.catalog.component_ids
        }
        self.platform = InMemoryPlatform(start_info, scenario.bom, scenario.catalog, initial_stock)
        self.agent = SCMAgent(self.platform, settings=self.settings, rng=agent_rng)
        self.bus = InMemoryEventBus()

        self._rfqs: Dict[int, RFQ] = {}
        self._open_bids: List[CustomerOffer] = []
        self._open_supplier_rfqs: List[SupplierRFQ] = []
        self._next_rfq_id = 1
        self._next_offer_id = 1
        self._stats: Dict[str, Any] = {
            "days": 0,
            "customer_rfqs": 0,
            "bids": 0,
            "orders": 0,
            "delivered": 0,
            "late_deliveries": 0,
            "canceled": 0,
            "revenue": 0,
            "component_cost": 0,
            "penalties": 0.0,
        }

    async def run(self) -> Dict[str, Any]:
        """Play every day of the game and return the final statistics."""
        days = self.settings.simulation.days
        await self.bus.start()
        await self.agent.start(self.bus)

        self.platform.begin_day(0)
        await self.bus.publish(
            SimulationStartedEvent(
                **self._event_fields("start", 0), start_info=self.platform.get_start_info()
            )
        )
        for day in range(days):
            await self.step(day)

        self._charge_cancellations()
        await self.bus.publish(SimulationEndedEvent(**self._event_fields("end", days)))
        await self.agent.stop(self.bus)
        await self.bus.stop()
        logger.info("Simulation finished: %s", self._stats)
        return self.get_statistics()

    async def step(self, day: int) -> FactorySchedule:
        """Deliver one day's batches to the agent and execute its schedule."""
        if self.platform.get_current_date() != day:
            self.platform.begin_day(day)

        new_orders = self._accept_bids(day)
        answered_rfqs, self._open_supplier_rfqs = self._open_supplier_rfqs, []

        rfqs = self._generate_rfqs(day)
        await self.bus.publish(CustomerRFQsEvent(**self._event_fields("rfqs", day), rfqs=rfqs))
        self._open_bids = list(self.platform.sent_customer_offers)
        self._stats["bids"] += len(self._open_bids)

        if new_orders:
            await self.bus.publish(
                CustomerOrdersEvent(**self._event_fields("orders", day), orders=new_orders)
            )
            self._open_supplier_rfqs = list(self.platform.sent_supplier_rfqs)

        offers = self._supplier_offers(answered_rfqs)
        for supplier, bundle in supplier_offer_bundle(offers).items():
            await self.bus.publish(
                SupplierOffersEvent(
                    **self._event_fields(f"offers-{supplier}", day),
                    supplier=supplier,
                    offers=bundle,
                )
            )
        for order in self.platform.sent_supplier_orders:
            self._stats["component_cost"] += order.unit_price * order.quantity

        await self.bus.publish(SimulationStatusEvent(**self._event_fields("status", day)))
        executed = self.platform.advance_day()
        self._settle(executed)
        self._stats["days"] = day + 1
        return executed

    def get_statistics(self) -> Dict[str, Any]:
        stats = dict(self._stats)
        stats["profit"] = stats["revenue"] - stats["component_cost"] - stats["penalties"]
        stats["agent"] = self.agent.get_statistics()
        return stats

    # Customers ---------------------------------------------------------------

    def _generate_rfqs(self, day: int) -> List[RFQ]:
        sim = self.settings.simulation
        bom = self.scenario.bom
        product_ids = bom.product_ids
        rfqs: List[RFQ] = []
        if not product_ids:
            return rfqs

        for _ in range(sim.rfqs_per_day):
            product_id = self._rng.choice(product_ids)
            quantity = self._rng.randint(1, sim.max_rfq_quantity)
            reserve = int(bom.base_price(product_id) * self._rng.uniform(0.9, 1.5))
            rfq = RFQ(
                rfq_id=self._next_rfq_id,
                product_id=product_id,
                quantity=quantity,
                due_date=day + self._rng.randint(sim.min_due_offset, sim.max_due_offset),
                reserve_price_per_unit=reserve,
                penalty=round(reserve * quantity * self._rng.uniform(0.05, 0.15), 2),
            )
            self._next_rfq_id += 1
            self._rfqs[rfq.rfq_id] = rfq
            rfqs.append(rfq)

        self._stats["customer_rfqs"] += len(rfqs)
        return rfqs

    def _accept_bids(self, day: int) -> List[CustomerOrder]:
        rate = self.settings.simulation.customer_acceptance_rate
        orders: List[CustomerOrder] = []
        for bid in self._open_bids:
            rfq = self._rfqs.get(bid.rfq_id)
            if rfq is None or bid.unit_price > rfq.reserve_price_per_unit:
                continue
            if self._rng.random() >= rate:
                continue
            order = CustomerOrder(
                order_id=rfq.rfq_id,
                product_id=rfq.product_id,
                quantity=rfq.quantity,
                due_date=rfq.due_date,
                penalty=rfq.penalty,
                unit_price=bid.unit_price,
                rfq_id=rfq.rfq_id,
            )
            self.platform.orders.add(order)
            orders.append(order)
        self._open_bids = []
        self._stats["orders"] += len(orders)
        return orders

    # Suppliers ---------------------------------------------------------------

    def _supplier_offers(self, rfqs: List[SupplierRFQ]) -> List[SupplierOffer]:
        sim = self.settings.simulation
        offers: List[SupplierOffer] = []
        for rfq in rfqs:
            unit_price = int(
                self.scenario.catalog.base_price(rfq.product_id) * self._rng.uniform(0.85, 1.15)
            )
            if self._rng.random() < sim.supplier_quote_only_probability:
                offers.append(self._offer(rfq, 0, unit_price, rfq.due_date))
                continue
            partial = int(rfq.quantity * sim.supplier_partial_ratio)
            if partial > 0 and self._rng.random() < sim.supplier_partial_probability:
                offers.append(self._offer(rfq, partial, unit_price, rfq.due_date))
                complete_due = rfq.due_date + sim.supplier_lead_time
            else:
                complete_due = rfq.due_date
            offers.append(self._offer(rfq, rfq.quantity, unit_price, complete_due))
        return offers

    def _offer(self, rfq: SupplierRFQ, quantity: int, unit_price: int, due_date: int) -> SupplierOffer:
        offer = SupplierOffer(
            offer_id=self._next_offer_id,
            supplier=rfq.supplier,
            product_id=rfq.product_id,
            quantity=quantity,
            unit_price=unit_price,
            due_date=due_date,
            rfq_id=rfq.rfq_id,
        )
        self._next_offer_id += 1
        return offer

    # Accounting --------------------------------------------------------------

    def _settle(self, executed: FactorySchedule) -> None:
        shipped_on = executed.day + 1
        for delivery in executed.deliveries:
            order = self.platform.orders.get(delivery.order_id)
            self._stats["delivered"] += 1
            self._stats["revenue"] += order.unit_price * order.quantity
            days_late = shipped_on - order.due_date
            if days_late > 0:
                self._stats["late_deliveries"] += 1
                self._stats["penalties"] += order.penalty * days_late

    def _charge_cancellations(self) -> None:
        void = self.settings.simulation.days_before_void
        canceled = [
            o for o in self.platform.orders.all_orders() if o.status is OrderStatus.CANCELED
        ]
        self._stats["canceled"] = len(canceled)
        self._stats["penalties"] += sum(o.penalty * void for o in canceled)

    @staticmethod
    def _event_fields(kind: str, day: int) -> Dict[str, Any]:
        return {
            "event_id": f"{kind}-{day}",
            "timestamp": datetime.now(timezone.utc),
            "day": day,
        }
