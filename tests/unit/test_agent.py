import random
from datetime import datetime, timezone

import pytest

from scm_agent import AgentSettings, AgentState, SCMAgent
from scm_agent.config import BiddingSettings, ProcurementSettings
from scm_agent.events import (
    CustomerOrdersEvent,
    CustomerRFQsEvent,
    InMemoryEventBus,
    SimulationEndedEvent,
    SimulationStartedEvent,
    SimulationStatusEvent,
    SupplierOffersEvent,
)
from scm_agent.exceptions import UnknownProductError
from scm_agent.models import RFQ, CustomerOrder, OrderStatus, SupplierOffer
from scm_agent.policies import ScheduleAction


def rfq(rfq_id: int, due_date: int, reserve: int = 200, penalty: float = 100.0) -> RFQ:
    return RFQ(
        rfq_id=rfq_id,
        product_id=1,
        quantity=2,
        due_date=due_date,
        reserve_price_per_unit=reserve,
        penalty=penalty,
    )


def settings(**procurement) -> AgentSettings:
    return AgentSettings(
        bidding=BiddingSettings(discount_factor=0.0),
        procurement=ProcurementSettings(**procurement),
    )


@pytest.fixture
def platform(make_platform):
    return make_platform(number_of_days=20)


@pytest.fixture
def agent(platform) -> SCMAgent:
    a = SCMAgent(platform, settings=settings(decrement_mode="once"), rng=random.Random(1))
    a.simulation_started()
    return a


def test_simulation_start_sets_bid_cutoff(agent):
    assert agent.state.last_bid_due_date == 18


def test_rfqs_are_bid_and_sent_as_one_batch(agent, platform):
    decisions = agent.handle_customer_rfqs([rfq(1, 10), rfq(2, 3), rfq(3, 19), rfq(4, 12)])

    assert [d.rfq_id for d in decisions if d.bid] == [1, 4]
    assert platform.called("add_customer_offer") == [(1, 200), (4, 200)]
    assert [name for name, _ in platform.calls][-1] == "send_customer_offers"
    assert agent.get_statistics()["rfqs_seen"] == 4
    assert agent.get_statistics()["bids_sent"] == 2


def test_empty_rfq_batch_still_flushes(agent, platform):
    assert agent.handle_customer_rfqs([]) == []
    assert platform.called("send_customer_offers") == [()]


def test_orders_become_supplier_rfqs(agent, platform):
    orders = [CustomerOrder(order_id=1, product_id=1, quantity=3, due_date=12)]
    agent.handle_customer_orders(orders)

    assert platform.called("add_supplier_rfq") == [
        ("alpha", 10, 3, 0, 2),
        ("beta", 10, 3, 0, 2),
        ("gamma", 20, 3, 0, 2),
    ]
    assert agent.state.ledger.snapshot() == {10: 0, 20: 0}
    assert agent.get_statistics()["supplier_rfqs_sent"] == 3


def test_supplier_offers_are_ordered_complete_first(agent, platform):
    offers = [
        SupplierOffer(offer_id=1, supplier="alpha", product_id=10, quantity=2, unit_price=40, due_date=4),
        SupplierOffer(offer_id=2, supplier="alpha", product_id=10, quantity=0, unit_price=40, due_date=4),
        SupplierOffer(offer_id=3, supplier="alpha", product_id=10, quantity=5, unit_price=40, due_date=6),
    ]
    agent.handle_supplier_offers("alpha", offers)

    assert platform.called("add_supplier_order") == [(3,), (1,)]
    assert platform.called("send_supplier_orders") == [()]
    assert agent.get_statistics()["supplier_orders_sent"] == 2


def test_status_runs_the_scheduler(agent, platform):
    deliver = CustomerOrder(order_id=1, product_id=1, quantity=1, due_date=1)
    late = CustomerOrder(order_id=2, product_id=2, quantity=1, due_date=0)
    platform.day = 10
    platform.orders = [deliver, late]
    platform.inventory.set_inventory(1, 1)

    # due 1 is void on day 10, both are canceled
    report = agent.handle_simulation_status()
    assert report.counts() == {ScheduleAction.CANCEL: 2}
    assert agent.get_statistics()["cancellations"] == 2

    platform.day = 0
    fresh = CustomerOrder(order_id=3, product_id=1, quantity=1, due_date=1)
    platform.orders = [fresh]
    report = agent.handle_simulation_status()
    assert report.for_order(3).action is ScheduleAction.DELIVER
    assert fresh.status is OrderStatus.DELIVERED
    assert agent.get_statistics()["deliveries"] == 1


def test_simulation_end_clears_the_ledger(agent):
    agent.state.ledger.add_demand(10, 4)
    stats = agent.simulation_ended()
    assert stats["rfqs_seen"] == 0
    assert len(agent.state.ledger) == 0


def test_state_is_per_agent(make_platform):
    first = SCMAgent(make_platform())
    second = SCMAgent(make_platform())
    first.state.ledger.add_demand(10, 1)
    assert second.state.ledger.quantity(10) == 0

    state = AgentState(last_bid_due_date=5)
    assert SCMAgent(make_platform(), state=state).state is state


def test_seeded_agents_bid_the_same(make_platform):
    rfqs = [rfq(i, 10) for i in range(10)]
    prices = []
    for _ in range(2):
        a = SCMAgent(make_platform(), rng=random.Random(9))
        a.simulation_started()
        prices.append([d.unit_price for d in a.handle_customer_rfqs(rfqs)])
    assert prices[0] == prices[1]


def event_fields(kind: str, day: int = 0):
    return {"event_id": f"{kind}-{day}", "timestamp": datetime.now(timezone.utc), "day": day}


@pytest.mark.asyncio
async def test_agent_reacts_to_bus_events(platform):
    agent = SCMAgent(platform, settings=settings(), rng=random.Random(1))
    bus = InMemoryEventBus()
    await agent.start(bus)
    await agent.start(bus)  # second start is a no-op
    assert bus.get_stats()["subscribers"] == 6

    await bus.publish(SimulationStartedEvent(**event_fields("start"), start_info=platform.start_info))
    await bus.publish(CustomerRFQsEvent(**event_fields("rfqs"), rfqs=[rfq(1, 10)]))
    order = CustomerOrder(order_id=1, product_id=2, quantity=1, due_date=10)
    platform.orders.append(order)
    await bus.publish(CustomerOrdersEvent(**event_fields("orders"), orders=[order]))
    await bus.publish(
        SupplierOffersEvent(
            **event_fields("offers"),
            supplier="gamma",
            offers=[
                SupplierOffer(offer_id=1, supplier="gamma", product_id=30, quantity=1, unit_price=9, due_date=2)
            ],
        )
    )
    await bus.publish(SimulationStatusEvent(**event_fields("status")))

    names = [name for name, _ in platform.calls]
    for flush in ("send_customer_offers", "send_supplier_rfqs", "send_supplier_orders", "send_factory_schedules"):
        assert names.count(flush) == 1
    assert agent.state.last_bid_due_date == 18
    assert bus.get_stats()["handler_errors"] == 0

    await bus.publish(SimulationEndedEvent(**event_fields("end", 1)))
    assert len(agent.state.ledger) == 0

    await agent.stop(bus)
    assert bus.get_stats()["subscribers"] == 0


def test_started_agent_validates_component_ids(agent, bom):
    assert bom.component_ids == [10, 20, 30]
    agent.state.ledger.add_demand(30, 1)
    with pytest.raises(UnknownProductError):
        agent.state.ledger.add_demand(99, 1)
