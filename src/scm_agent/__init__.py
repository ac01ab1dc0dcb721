"""
scm-agent: daily decision engine for a supply-chain trading agent.

Usage:
    import random
    from scm_agent import SCMAgent, get_settings

    agent = SCMAgent(platform, settings=get_settings(), rng=random.Random(7))
    agent.simulation_started()
    agent.handle_customer_rfqs(rfqs)
    agent.handle_customer_orders(orders)
    agent.handle_supplier_offers("pintel", offers)
    report = agent.handle_simulation_status()
"""

from scm_agent.agent import AgentState, SCMAgent
from scm_agent.config import AgentSettings, DecrementMode, get_settings, load_settings
from scm_agent.exceptions import SCMAgentError
from scm_agent.ledger import ComponentDemandLedger

__all__ = [
    "AgentSettings",
    "AgentState",
    "ComponentDemandLedger",
    "DecrementMode",
    "SCMAgent",
    "SCMAgentError",
    "get_settings",
    "load_settings",
]
__version__ = "0.1.0"
