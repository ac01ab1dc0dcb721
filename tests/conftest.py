import logging
import random
from typing import Any, Dict, List, Optional, Tuple

import pytest

from scm_agent.config import get_settings
from scm_agent.ledger import ComponentDemandLedger
from scm_agent.models import (
    RFQ,
    BOMBundle,
    ComponentCatalog,
    CustomerOrder,
    InventoryStatus,
    StartInfo,
    SupplierOffer,
)


class StubRandom(random.Random):
    """random.Random whose ``random()`` replays a fixed sequence (last value repeats)."""

    def __init__(self, *values: float):
        super().__init__(0)
        self._values = list(values) or [0.0]

    def random(self) -> float:
        if len(self._values) > 1:
            return self._values.pop(0)
        return self._values[0]


class ScriptedPlatform:
    """
    Recording fake of AgentPlatform.

    Execution primitives commit against ``inventory`` like the real platform,
    unless a ``*_ok`` flag forces a failure. Every call is appended to
    ``calls`` as ``(name, args)``.
    """

    def __init__(
        self,
        bom: BOMBundle,
        catalog: ComponentCatalog,
        *,
        day: int = 0,
        number_of_days: int = 220,
        days_before_void: int = 5,
        orders: Optional[List[CustomerOrder]] = None,
        inventory: Optional[Dict[int, int]] = None,
    ) -> None:
        self.bom = bom
        self.catalog = catalog
        self.day = day
        self.start_info = StartInfo(number_of_days=number_of_days, days_before_void=days_before_void)
        self.orders = list(orders or [])
        self.inventory = InventoryStatus(inventory)
        self.deliver_ok = True
        self.produce_ok = True
        self.reserve_ok = True
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []

    # clock and static data
    def get_current_date(self) -> int:
        return self.day

    def get_start_info(self) -> StartInfo:
        return self.start_info

    def get_days_before_void(self) -> int:
        return self.start_info.days_before_void

    def get_bom_bundle(self) -> BOMBundle:
        return self.bom

    def get_component_catalog(self) -> ComponentCatalog:
        return self.catalog

    def get_customer_orders(self) -> "ScriptedPlatform":
        return self

    def get_active_orders(self) -> List[CustomerOrder]:
        return [o for o in self.orders if o.is_active]

    def get_inventory_for_next_day(self) -> InventoryStatus:
        return self.inventory

    # execution primitives
    def add_delivery_request(self, order: CustomerOrder) -> bool:
        self.calls.append(("add_delivery_request", (order.order_id,)))
        if not self.deliver_ok or self.inventory.quantity(order.product_id) < order.quantity:
            return False
        self.inventory.add_inventory(order.product_id, -order.quantity)
        order.mark_delivered()
        return True

    def add_production_request(self, product_id: int, quantity: int) -> bool:
        self.calls.append(("add_production_request", (product_id, quantity)))
        return self.produce_ok

    def reserve_inventory_for_next_day(self, product_id: int, quantity: int) -> bool:
        self.calls.append(("reserve_inventory_for_next_day", (product_id, quantity)))
        if not self.reserve_ok or self.inventory.quantity(product_id) < quantity:
            return False
        self.inventory.add_inventory(product_id, -quantity)
        return True

    def send_factory_schedules(self) -> None:
        self.calls.append(("send_factory_schedules", ()))

    # outbound batches
    def add_customer_offer(self, rfq: RFQ, unit_price: int) -> None:
        self.calls.append(("add_customer_offer", (rfq.rfq_id, unit_price)))

    def send_customer_offers(self) -> None:
        self.calls.append(("send_customer_offers", ()))

    def add_supplier_rfq(self, supplier, product_id, quantity, reserve_price, due_date) -> None:
        self.calls.append(
            ("add_supplier_rfq", (supplier, product_id, quantity, reserve_price, due_date))
        )

    def send_supplier_rfqs(self) -> None:
        self.calls.append(("send_supplier_rfqs", ()))

    def add_supplier_order(self, offer: SupplierOffer) -> None:
        self.calls.append(("add_supplier_order", (offer.offer_id,)))

    def send_supplier_orders(self) -> None:
        self.calls.append(("send_supplier_orders", ()))

    def called(self, name: str) -> List[Tuple[Any, ...]]:
        return [args for call, args in self.calls if call == name]


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def bom() -> BOMBundle:
    # product 1 = components 10 + 20, product 2 = components 10 + 30
    return BOMBundle.model_validate(
        {
            "products": [
                {"product_id": 1, "components": [10, 20], "base_price": 100, "cycles_per_unit": 2},
                {"product_id": 2, "components": [10, 30], "base_price": 150, "cycles_per_unit": 3},
            ]
        }
    )


@pytest.fixture
def catalog() -> ComponentCatalog:
    return ComponentCatalog.model_validate(
        {
            "components": [
                {"product_id": 10, "suppliers": ["alpha", "beta"], "base_price": 40},
                {"product_id": 20, "suppliers": ["gamma"], "base_price": 60},
                {"product_id": 30, "suppliers": ["gamma"], "base_price": 110},
            ]
        }
    )


@pytest.fixture
def ledger() -> ComponentDemandLedger:
    return ComponentDemandLedger()


@pytest.fixture
def make_platform(bom, catalog):
    def _make(**kwargs) -> ScriptedPlatform:
        return ScriptedPlatform(bom, catalog, **kwargs)

    return _make


@pytest.fixture
def stub_rng():
    """Factory for a random source with scripted ``random()`` draws."""
    return StubRandom


@pytest.fixture
def isolated_logging():
    """Undo root-logger changes made by configure_logging."""
    from scm_agent import logging as scm_logging

    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    configured = scm_logging._configured
    yield
    for h in list(root.handlers):
        root.removeHandler(h)
        if h not in handlers:
            h.close()
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)
    scm_logging._configured = configured
