"""
Daily order-fulfillment scheduler.

Once per day, after every inbound message has been handled, each active
customer order goes through an ordered list of guarded transitions. The
first transition whose guard holds decides the order's fate for the day:

    DELIVER   due tomorrow or earlier, not yet void, and the delivery request
              succeeds (the platform marks the order delivered)
    CANCEL    the due date is at or before the void threshold
    RESERVE   tomorrow's stock covers the order; set it aside
    PRODUCE   the factory accepts production of the shortfall; any stock on
              hand is set aside as well
    DEFER     nothing can be done today

All of today's reservations, production and deliveries are committed against
the same next-day inventory projection, so one order's reservation is
already invisible to the next.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from scm_agent.ledger import ComponentDemandLedger
from scm_agent.models import BOMBundle, CustomerOrder
from scm_agent.policies.procurement import ProcurementPlanner
from scm_agent.protocols import AgentPlatform, InventoryView

logger = logging.getLogger(__name__)


class ScheduleAction(str, Enum):
    DELIVER = "deliver"
    CANCEL = "cancel"
    RESERVE = "reserve"
    PRODUCE = "produce"
    DEFER = "defer"


@dataclass(frozen=True)
class ScheduleDecision:
    """What happened to one order in one daily pass."""

    order_id: int
    action: ScheduleAction
    produced: int = 0
    reserved: int = 0


@dataclass
class DayContext:
    """Everything the transitions read or commit against for one day."""

    current_date: int
    latest_due_date: int
    platform: AgentPlatform
    inventory: InventoryView
    ledger: ComponentDemandLedger
    bom: BOMBundle
    planner: ProcurementPlanner


@dataclass
class ScheduleReport:
    day: int
    decisions: List[ScheduleDecision] = field(default_factory=list)

    def counts(self) -> Dict[ScheduleAction, int]:
        return dict(Counter(decision.action for decision in self.decisions))

    def for_order(self, order_id: int) -> Optional[ScheduleDecision]:
        for decision in self.decisions:
            if decision.order_id == order_id:
                return decision
        return None


Transition = Callable[[DayContext, CustomerOrder], Optional[ScheduleDecision]]


def _try_deliver(ctx: DayContext, order: CustomerOrder) -> Optional[ScheduleDecision]:
    if ctx.current_date < order.due_date - 1 or order.due_date < ctx.latest_due_date:
        return None
    if not ctx.platform.add_delivery_request(order):
        return None
    return ScheduleDecision(order.order_id, ScheduleAction.DELIVER)


def _try_cancel(ctx: DayContext, order: CustomerOrder) -> Optional[ScheduleDecision]:
    if order.due_date > ctx.latest_due_date:
        return None
    logger.info(
        "Canceling too late order %d (dueDate=%d, date=%d)",
        order.order_id,
        order.due_date,
        ctx.current_date,
        extra={"day": ctx.current_date},
    )
    order.mark_canceled()
    # the components bought for this order are free for other orders now
    ctx.planner.reverse_order(ctx.ledger, order, ctx.bom)
    return ScheduleDecision(order.order_id, ScheduleAction.CANCEL)


def _try_reserve(ctx: DayContext, order: CustomerOrder) -> Optional[ScheduleDecision]:
    on_hand = ctx.inventory.quantity(order.product_id)
    if on_hand < order.quantity:
        return None
    if not ctx.platform.reserve_inventory_for_next_day(order.product_id, order.quantity):
        return None
    return ScheduleDecision(order.order_id, ScheduleAction.RESERVE, reserved=order.quantity)


def _try_produce(ctx: DayContext, order: CustomerOrder) -> Optional[ScheduleDecision]:
    on_hand = max(0, ctx.inventory.quantity(order.product_id))
    shortfall = order.quantity - on_hand
    if not ctx.platform.add_production_request(order.product_id, shortfall):
        return None
    reserved = 0
    if on_hand > 0 and ctx.platform.reserve_inventory_for_next_day(order.product_id, on_hand):
        reserved = on_hand
    return ScheduleDecision(
        order.order_id, ScheduleAction.PRODUCE, produced=shortfall, reserved=reserved
    )


def _defer(ctx: DayContext, order: CustomerOrder) -> Optional[ScheduleDecision]:
    return ScheduleDecision(order.order_id, ScheduleAction.DEFER)


TRANSITIONS: Tuple[Tuple[ScheduleAction, Transition], ...] = (
    (ScheduleAction.DELIVER, _try_deliver),
    (ScheduleAction.CANCEL, _try_cancel),
    (ScheduleAction.RESERVE, _try_reserve),
    (ScheduleAction.PRODUCE, _try_produce),
    (ScheduleAction.DEFER, _defer),
)


class FulfillmentScheduler:
    """Run the daily decision list over the active order book."""

    def __init__(self, transitions: Sequence[Tuple[ScheduleAction, Transition]] = TRANSITIONS):
        self.transitions = tuple(transitions)

    @staticmethod
    def latest_due_date(current_date: int, days_before_void: int) -> int:
        return current_date - days_before_void + 2

    def decide(self, ctx: DayContext, order: CustomerOrder) -> ScheduleDecision:
        for _action, transition in self.transitions:
            decision = transition(ctx, order)
            if decision is not None:
                return decision
        raise RuntimeError(f"no transition matched order {order.order_id}")

    def run(
        self,
        platform: AgentPlatform,
        ledger: ComponentDemandLedger,
        planner: ProcurementPlanner,
    ) -> ScheduleReport:
        """Decide every active order, then flush the day's factory schedule."""
        current_date = platform.get_current_date()
        ctx = DayContext(
            current_date=current_date,
            latest_due_date=self.latest_due_date(
                current_date, platform.get_days_before_void()
            ),
            platform=platform,
            inventory=platform.get_inventory_for_next_day(),
            ledger=ledger,
            bom=platform.get_bom_bundle(),
            planner=planner,
        )
        report = ScheduleReport(day=current_date)

        orders = platform.get_customer_orders().get_active_orders() or ()
        for order in orders:
            decision = self.decide(ctx, order)
            report.decisions.append(decision)
            logger.debug(
                "Order %d (product=%d qty=%d due=%d): %s",
                order.order_id,
                order.product_id,
                order.quantity,
                order.due_date,
                decision.action.value,
                extra={"day": current_date},
            )

        platform.send_factory_schedules()
        return report
