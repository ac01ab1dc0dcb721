"""
Order intake and procurement planning.

Confirmed customer orders are expanded into component demand on the ledger.
After each intake batch the ledger is scanned once and every component with
outstanding demand is requested from its suppliers; each request is charged
against the ledger immediately, before the next component is read.
"""

from __future__ import annotations

import logging
from typing import Iterable, List

from scm_agent.config import DecrementMode, ProcurementSettings
from scm_agent.ledger import ComponentDemandLedger
from scm_agent.models import BOMBundle, ComponentCatalog, CustomerOrder, SupplierRFQ
from scm_agent.protocols import AgentPlatform

logger = logging.getLogger(__name__)


class ProcurementPlanner:
    """
    Translate customer commitments into supplier RFQs.

    Args:
        supplier_due_offset: Days from today until requested components are due.
        reserve_price: Reserve price put on supplier RFQs (0 = any price).
        decrement_mode: Ledger charging rule for components with several
            suppliers, see ``DecrementMode``.
    """

    def __init__(
        self,
        supplier_due_offset: int = 2,
        reserve_price: int = 0,
        decrement_mode: DecrementMode = DecrementMode.PER_SUPPLIER,
    ) -> None:
        self.supplier_due_offset = supplier_due_offset
        self.reserve_price = reserve_price
        self.decrement_mode = DecrementMode(decrement_mode)

    @classmethod
    def from_settings(cls, settings: ProcurementSettings) -> "ProcurementPlanner":
        return cls(
            supplier_due_offset=settings.supplier_due_offset,
            reserve_price=settings.reserve_price,
            decrement_mode=settings.decrement_mode,
        )

    def register_orders(
        self,
        ledger: ComponentDemandLedger,
        orders: Iterable[CustomerOrder],
        bom: BOMBundle,
    ) -> None:
        """Add each order's quantity to the demand of every component it needs."""
        for order in orders:
            components = bom.components_for(order.product_id)
            if not components:
                continue
            for component in components:
                ledger.add_demand(component, order.quantity)

    def reverse_order(
        self,
        ledger: ComponentDemandLedger,
        order: CustomerOrder,
        bom: BOMBundle,
    ) -> None:
        """Give back the component demand of an order that will not be produced."""
        components = bom.components_for(order.product_id)
        if not components:
            return
        for component in components:
            ledger.add_demand(component, -order.quantity)

    def plan(
        self,
        ledger: ComponentDemandLedger,
        catalog: ComponentCatalog,
        platform: AgentPlatform,
        current_day: int,
    ) -> List[SupplierRFQ]:
        """
        Stage supplier RFQs for all outstanding demand and flush them as one batch.

        Returns the RFQs that were staged, in the order they were issued.
        """
        due_date = current_day + self.supplier_due_offset
        issued: List[SupplierRFQ] = []

        for product_id, quantity in ledger.positive_entries():
            suppliers = catalog.suppliers_for(product_id)
            if not suppliers:
                # every component is sold by at least one supplier in a valid catalog
                logger.error(
                    "No suppliers for product %d; %d units left unrequested",
                    product_id,
                    quantity,
                )
                continue

            for supplier in suppliers:
                platform.add_supplier_rfq(
                    supplier, product_id, quantity, self.reserve_price, due_date
                )
                issued.append(
                    SupplierRFQ(supplier, product_id, quantity, self.reserve_price, due_date)
                )
                if self.decrement_mode is DecrementMode.PER_SUPPLIER:
                    ledger.add_demand(product_id, -quantity)

            if self.decrement_mode is DecrementMode.ONCE:
                ledger.add_demand(product_id, -quantity)

        platform.send_supplier_rfqs()
        logger.debug("Issued %d supplier RFQs due on day %d", len(issued), due_date)
        return issued
