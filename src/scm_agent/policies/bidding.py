"""
Customer RFQ bidding policy.

Each RFQ is judged on its own:

1. Skip it if the lead time is too short to procure and produce
   (``due_date - current_day < min_lead_time``) or if the order would fall
   due after the last day on which we still bid.
2. Otherwise draw a discount ``r * discount_factor`` (``r`` uniform in
   [0, 1)) off the customer's reserve price. The random margin keeps
   competitors from predicting our price exactly.
3. Bid only when the expected profit outweighs the penalty exposure:
   ``(price - base_price) * quantity / penalty > risk_threshold``.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from scm_agent.config import BiddingSettings
from scm_agent.models import RFQ

logger = logging.getLogger(__name__)


class BidOutcome(str, Enum):
    BID = "bid"
    LEAD_TIME_TOO_SHORT = "lead_time_too_short"
    PAST_BID_CUTOFF = "past_bid_cutoff"
    INSUFFICIENT_PROFIT = "insufficient_profit"


@dataclass(frozen=True)
class BidDecision:
    rfq_id: int
    outcome: BidOutcome
    unit_price: Optional[int] = None
    expected_profit: Optional[float] = None

    @property
    def bid(self) -> bool:
        return self.outcome is BidOutcome.BID


class BiddingPolicy:
    """
    Decide whether and at what unit price to answer a customer RFQ.

    Attributes:
        discount_factor: Largest fraction taken off the reserve price.
        min_lead_time: Fewest days between today and the due date we accept.
        risk_threshold: Minimum ratio of expected profit to penalty.
    """

    def __init__(
        self,
        discount_factor: float = 0.2,
        min_lead_time: int = 6,
        risk_threshold: float = 0.1,
    ) -> None:
        if not 0.0 <= discount_factor <= 1.0:
            raise ValueError(f"discount_factor must be in [0, 1], got {discount_factor}")
        self.discount_factor = discount_factor
        self.min_lead_time = min_lead_time
        self.risk_threshold = risk_threshold

    @classmethod
    def from_settings(cls, settings: BiddingSettings) -> "BiddingPolicy":
        return cls(
            discount_factor=settings.discount_factor,
            min_lead_time=settings.min_lead_time,
            risk_threshold=settings.risk_threshold,
        )

    def offer_price(self, reserve_price: int, rng: random.Random) -> int:
        return int(reserve_price * (1.0 - rng.random() * self.discount_factor))

    def evaluate(
        self,
        rfq: RFQ,
        current_day: int,
        last_bid_due_date: int,
        base_price: int,
        rng: random.Random,
    ) -> BidDecision:
        if rfq.due_date - current_day < self.min_lead_time:
            return BidDecision(rfq.rfq_id, BidOutcome.LEAD_TIME_TOO_SHORT)
        if rfq.due_date > last_bid_due_date:
            return BidDecision(rfq.rfq_id, BidOutcome.PAST_BID_CUTOFF)

        price = self.offer_price(rfq.reserve_price_per_unit, rng)
        profit = float((price - base_price) * rfq.quantity)
        if self._worth_the_risk(profit, rfq.penalty):
            return BidDecision(rfq.rfq_id, BidOutcome.BID, price, profit)
        return BidDecision(rfq.rfq_id, BidOutcome.INSUFFICIENT_PROFIT, price, profit)

    def _worth_the_risk(self, profit: float, penalty: float) -> bool:
        # without a penalty there is nothing at risk; any profit will do
        if penalty <= 0:
            return profit > 0
        return profit / penalty > self.risk_threshold
