"""
SCMAgent: daily decision engine of a supply-chain trading participant.

The agent reacts to the platform's inbound batches, one category at a time:

    customer RFQs      -> BiddingPolicy          -> customer offers
    customer orders    -> ProcurementPlanner     -> supplier RFQs
    supplier offers    -> OfferAcceptancePolicy  -> supplier orders
    simulation status  -> FulfillmentScheduler   -> factory schedules

Usage:
    agent = SCMAgent(platform, settings=get_settings(), rng=random.Random(42))
    await agent.start(event_bus)          # subscribe to simulation events

    # or drive it directly
    agent.simulation_started()
    agent.handle_customer_rfqs(rfqs)
    agent.handle_simulation_status()
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from scm_agent.config import AgentSettings
from scm_agent.events import (
    CustomerOrdersEvent,
    CustomerRFQsEvent,
    EventBus,
    SimulationEndedEvent,
    SimulationStartedEvent,
    SimulationStatusEvent,
    SupplierOffersEvent,
)
from scm_agent.ledger import ComponentDemandLedger
from scm_agent.models import RFQ, CustomerOrder, SupplierOffer
from scm_agent.policies import (
    BidDecision,
    BiddingPolicy,
    FulfillmentScheduler,
    OfferAcceptancePolicy,
    ProcurementPlanner,
    ScheduleAction,
    ScheduleReport,
)
from scm_agent.protocols import AgentPlatform

logger = logging.getLogger(__name__)


@dataclass
class AgentState:
    """
    Mutable per-agent state handed to each decision.

    Attributes:
        ledger: Outstanding component demand of confirmed orders.
        rng: Random source for bid pricing; seed it for reproducible runs.
        last_bid_due_date: Latest due date we still bid for (set at start).
    """

    ledger: ComponentDemandLedger = field(default_factory=ComponentDemandLedger)
    rng: random.Random = field(default_factory=random.Random)
    last_bid_due_date: int = 0


class SCMAgent:
    """Facade wiring the platform, the per-agent state and the policies."""

    def __init__(
        self,
        platform: AgentPlatform,
        settings: Optional[AgentSettings] = None,
        rng: Optional[random.Random] = None,
        state: Optional[AgentState] = None,
    ) -> None:
        self.platform = platform
        self.settings = settings or AgentSettings()
        self.state = state or AgentState(rng=rng or random.Random(self.settings.simulation.seed))

        self.bidding = BiddingPolicy.from_settings(self.settings.bidding)
        self.procurement = ProcurementPlanner.from_settings(self.settings.procurement)
        self.offer_acceptance = OfferAcceptancePolicy()
        self.scheduler = FulfillmentScheduler()

        # one inbound category at a time; the daily schedule runs inside it too
        self._lock = asyncio.Lock()
        self._subscriptions: List[Any] = []
        self._stats: Dict[str, int] = {
            "rfqs_seen": 0,
            "bids_sent": 0,
            "orders_received": 0,
            "supplier_rfqs_sent": 0,
            "supplier_orders_sent": 0,
            "deliveries": 0,
            "cancellations": 0,
        }

    # Lifecycle ---------------------------------------------------------------

    def simulation_started(self) -> None:
        info = self.platform.get_start_info()
        self.state.ledger.restrict_to(self.platform.get_bom_bundle().component_ids)
        self.state.last_bid_due_date = (
            info.number_of_days - self.settings.bidding.bid_cutoff_margin
        )
        logger.info(
            "Simulation started: %d days, last bid due date %d",
            info.number_of_days,
            self.state.last_bid_due_date,
        )

    def simulation_ended(self) -> Dict[str, int]:
        stats = self.get_statistics()
        logger.info("Simulation ended: %s", stats)
        self.state.ledger.clear()
        return stats

    async def start(self, event_bus: EventBus) -> None:
        """Subscribe the agent's handlers to the simulation events."""
        if self._subscriptions:
            return
        routes = (
            (SimulationStartedEvent, self._on_simulation_started),
            (CustomerRFQsEvent, self._on_customer_rfqs),
            (CustomerOrdersEvent, self._on_customer_orders),
            (SupplierOffersEvent, self._on_supplier_offers),
            (SimulationStatusEvent, self._on_simulation_status),
            (SimulationEndedEvent, self._on_simulation_ended),
        )
        for event_type, handler in routes:
            self._subscriptions.append(await event_bus.subscribe(event_type, handler))
        logger.info("SCMAgent subscribed to %d simulation event types.", len(routes))

    async def stop(self, event_bus: EventBus) -> None:
        for handle in self._subscriptions:
            await event_bus.unsubscribe(handle)
        self._subscriptions.clear()

    # Inbound batches -----------------------------------------------------------

    def handle_customer_rfqs(self, rfqs: Sequence[RFQ]) -> List[BidDecision]:
        """Evaluate every RFQ, stage the bids and send them as one batch."""
        current_day = self.platform.get_current_date()
        bom = self.platform.get_bom_bundle()
        decisions: List[BidDecision] = []

        for rfq in rfqs:
            decision = self.bidding.evaluate(
                rfq,
                current_day,
                self.state.last_bid_due_date,
                bom.base_price(rfq.product_id),
                self.state.rng,
            )
            decisions.append(decision)
            if decision.bid:
                self.platform.add_customer_offer(rfq, decision.unit_price)

        self.platform.send_customer_offers()

        bids = sum(1 for d in decisions if d.bid)
        self._stats["rfqs_seen"] += len(decisions)
        self._stats["bids_sent"] += bids
        logger.debug(
            "Bid on %d of %d customer RFQs", bids, len(decisions), extra={"day": current_day}
        )
        return decisions

    def handle_customer_orders(self, orders: Sequence[CustomerOrder]) -> None:
        """Book the component demand of new orders and request the components."""
        bom = self.platform.get_bom_bundle()
        self.procurement.register_orders(self.state.ledger, orders, bom)
        issued = self.procurement.plan(
            self.state.ledger,
            self.platform.get_component_catalog(),
            self.platform,
            self.platform.get_current_date(),
        )
        self._stats["orders_received"] += len(orders)
        self._stats["supplier_rfqs_sent"] += len(issued)

    def handle_supplier_offers(self, supplier: str, offers: Sequence[SupplierOffer]) -> None:
        """Order every orderable offer of one supplier, most complete first."""
        accepted = self.offer_acceptance.select(offers)
        for offer in accepted:
            self.platform.add_supplier_order(offer)
        self.platform.send_supplier_orders()
        self._stats["supplier_orders_sent"] += len(accepted)
        logger.debug("Ordered %d offers from %s", len(accepted), supplier)

    def handle_simulation_status(self) -> ScheduleReport:
        """Produce the day's production and delivery schedule."""
        report = self.scheduler.run(self.platform, self.state.ledger, self.procurement)
        counts = report.counts()
        self._stats["deliveries"] += counts.get(ScheduleAction.DELIVER, 0)
        self._stats["cancellations"] += counts.get(ScheduleAction.CANCEL, 0)
        return report

    def get_statistics(self) -> Dict[str, int]:
        return dict(self._stats)

    # Event handlers --------------------------------------------------------------

    async def _on_simulation_started(self, event: SimulationStartedEvent) -> None:
        async with self._lock:
            self.simulation_started()

    async def _on_customer_rfqs(self, event: CustomerRFQsEvent) -> None:
        async with self._lock:
            self.handle_customer_rfqs(event.rfqs)

    async def _on_customer_orders(self, event: CustomerOrdersEvent) -> None:
        async with self._lock:
            self.handle_customer_orders(event.orders)

    async def _on_supplier_offers(self, event: SupplierOffersEvent) -> None:
        async with self._lock:
            self.handle_supplier_offers(event.supplier, event.offers)

    async def _on_simulation_status(self, event: SimulationStatusEvent) -> None:
        async with self._lock:
            self.handle_simulation_status()

    async def _on_simulation_ended(self, event: SimulationEndedEvent) -> None:
        async with self._lock:
            self.simulation_ended()
