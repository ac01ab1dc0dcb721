"""Daily decision policies of the agent."""

from scm_agent.policies.bidding import BidDecision, BidOutcome, BiddingPolicy
from scm_agent.policies.offers import OfferAcceptancePolicy
from scm_agent.policies.procurement import ProcurementPlanner
from scm_agent.policies.scheduler import (
    FulfillmentScheduler,
    ScheduleAction,
    ScheduleDecision,
    ScheduleReport,
)

__all__ = [
    "BidDecision",
    "BidOutcome",
    "BiddingPolicy",
    "OfferAcceptancePolicy",
    "ProcurementPlanner",
    "FulfillmentScheduler",
    "ScheduleAction",
    "ScheduleDecision",
    "ScheduleReport",
]
