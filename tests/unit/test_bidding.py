import random

import pytest

from scm_agent.config import BiddingSettings
from scm_agent.models import RFQ
from scm_agent.policies import BidOutcome, BiddingPolicy


def make_rfq(**overrides) -> RFQ:
    fields = dict(
        rfq_id=1, product_id=1, quantity=2, due_date=20, reserve_price_per_unit=200, penalty=1000.0
    )
    fields.update(overrides)
    return RFQ(**fields)


@pytest.fixture
def policy() -> BiddingPolicy:
    return BiddingPolicy()


def test_short_lead_time_is_rejected(policy, stub_rng):
    decision = policy.evaluate(make_rfq(due_date=15), 10, 200, 100, stub_rng(0.0))
    assert decision.outcome is BidOutcome.LEAD_TIME_TOO_SHORT
    assert not decision.bid
    assert decision.unit_price is None


def test_lead_time_of_exactly_six_days_is_accepted(policy, stub_rng):
    decision = policy.evaluate(make_rfq(due_date=16), 10, 200, 100, stub_rng(0.0))
    assert decision.bid


def test_due_after_cutoff_is_rejected(policy, stub_rng):
    decision = policy.evaluate(make_rfq(due_date=20), 0, 19, 100, stub_rng(0.0))
    assert decision.outcome is BidOutcome.PAST_BID_CUTOFF

    decision = policy.evaluate(make_rfq(due_date=19), 0, 19, 100, stub_rng(0.0))
    assert decision.bid


def test_offer_price_discounts_reserve(policy, stub_rng):
    assert policy.offer_price(200, stub_rng(0.0)) == 200
    assert policy.offer_price(200, stub_rng(0.5)) == 180


def test_bid_requires_profit_over_risk_threshold(policy, stub_rng):
    # price 200, base 100, quantity 2 -> profit 200
    decision = policy.evaluate(make_rfq(penalty=1000.0), 0, 200, 100, stub_rng(0.0))
    assert decision.bid
    assert decision.unit_price == 200
    assert decision.expected_profit == 200.0

    # 200 / 2000 == 0.1 is not above the threshold
    decision = policy.evaluate(make_rfq(penalty=2000.0), 0, 200, 100, stub_rng(0.0))
    assert decision.outcome is BidOutcome.INSUFFICIENT_PROFIT
    assert decision.unit_price == 200


def test_zero_penalty_bids_only_at_a_profit(policy, stub_rng):
    assert policy.evaluate(make_rfq(penalty=0.0), 0, 200, 100, stub_rng(0.0)).bid
    assert not policy.evaluate(make_rfq(penalty=0.0), 0, 200, 250, stub_rng(0.0)).bid


def test_accepted_prices_stay_within_reserve(policy):
    rng = random.Random(42)
    rfqs = [make_rfq(rfq_id=i, reserve_price_per_unit=150 + i) for i in range(200)]
    for rfq in rfqs:
        decision = policy.evaluate(rfq, 0, 200, 100, rng)
        if decision.bid:
            assert 0 <= decision.unit_price <= rfq.reserve_price_per_unit


def test_same_seed_gives_same_prices(policy):
    rfqs = [make_rfq(rfq_id=i) for i in range(20)]
    first = [policy.evaluate(r, 0, 200, 100, random.Random(3)).unit_price for r in rfqs]
    second = [policy.evaluate(r, 0, 200, 100, random.Random(3)).unit_price for r in rfqs]
    assert first == second


def test_discount_factor_is_bounded():
    with pytest.raises(ValueError):
        BiddingPolicy(discount_factor=1.5)


def test_from_settings():
    policy = BiddingPolicy.from_settings(
        BiddingSettings(discount_factor=0.1, min_lead_time=4, risk_threshold=0.3)
    )
    assert (policy.discount_factor, policy.min_lead_time, policy.risk_threshold) == (0.1, 4, 0.3)
