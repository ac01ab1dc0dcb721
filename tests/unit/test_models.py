import pytest
from pydantic import ValidationError

from scm_agent.exceptions import InvalidOrderTransition
from scm_agent.models import (
    RFQ,
    BOMBundle,
    ComponentCatalog,
    CustomerOrder,
    InventoryStatus,
    OrderStatus,
    StartInfo,
    SupplierOffer,
    SupplierOrder,
)


class TestCustomerOrder:
    def test_new_order_is_active(self):
        order = CustomerOrder(order_id=1, product_id=1, quantity=3, due_date=10)
        assert order.status is OrderStatus.ACTIVE
        assert order.is_active

    @pytest.mark.parametrize("quantity", [0, -2])
    def test_quantity_must_be_positive(self, quantity):
        with pytest.raises(ValueError):
            CustomerOrder(order_id=1, product_id=1, quantity=quantity, due_date=10)

    def test_penalty_must_be_non_negative(self):
        with pytest.raises(ValueError):
            CustomerOrder(order_id=1, product_id=1, quantity=1, due_date=10, penalty=-1.0)

    def test_terminal_states_are_final(self):
        order = CustomerOrder(order_id=7, product_id=1, quantity=1, due_date=10)
        order.mark_delivered()
        assert order.status is OrderStatus.DELIVERED

        with pytest.raises(InvalidOrderTransition) as excinfo:
            order.mark_canceled()
        assert excinfo.value.code == "INVALID_TRANSITION"
        assert excinfo.value.details["current"] == "delivered"
        assert order.status is OrderStatus.DELIVERED

    def test_summary_dict(self):
        order = CustomerOrder(order_id=2, product_id=1, quantity=4, due_date=9, penalty=12.5)
        order.mark_canceled()
        summary = order.to_summary_dict()
        assert summary["status"] == "canceled"
        assert summary["penalty"] == 12.5


def test_rfq_validates_quantity_and_reserve():
    with pytest.raises(ValueError):
        RFQ(rfq_id=1, product_id=1, quantity=0, due_date=5, reserve_price_per_unit=10, penalty=1)
    with pytest.raises(ValueError):
        RFQ(rfq_id=1, product_id=1, quantity=1, due_date=5, reserve_price_per_unit=-1, penalty=1)


def test_quote_only_offer_is_not_orderable():
    quote = SupplierOffer(offer_id=1, supplier="a", product_id=10, quantity=0, unit_price=5, due_date=3)
    assert not quote.is_orderable

    offer = SupplierOffer(
        offer_id=2, supplier="a", product_id=10, quantity=4, unit_price=5, due_date=3, rfq_id=9
    )
    order = SupplierOrder.from_offer(offer)
    assert (order.offer_id, order.quantity, order.rfq_id) == (2, 4, 9)


class TestCatalog:
    def test_bom_lookups(self, bom):
        assert bom.components_for(1) == (10, 20)
        assert bom.components_for(99) is None
        assert bom.base_price(2) == 150
        assert bom.base_price(99) == 0
        assert bom.cycles_per_unit(2) == 3
        assert bom.product_ids == [1, 2]

    def test_bom_rejects_duplicate_products(self):
        with pytest.raises(ValidationError):
            BOMBundle.model_validate(
                {"products": [{"product_id": 1, "components": [10]}, {"product_id": 1}]}
            )

    def test_catalog_without_suppliers_reports_none(self, catalog):
        assert catalog.suppliers_for(10) == ("alpha", "beta")
        assert catalog.suppliers_for(99) is None

        bare = ComponentCatalog.model_validate({"components": [{"product_id": 5}]})
        assert bare.suppliers_for(5) is None

    def test_catalog_suppliers_and_components(self, catalog):
        assert catalog.component_ids == [10, 20, 30]
        assert catalog.suppliers == ["alpha", "beta", "gamma"]
        assert catalog.base_price(30) == 110

    def test_start_info_requires_positive_days(self):
        with pytest.raises(ValidationError):
            StartInfo(number_of_days=0)


def test_inventory_defaults_to_zero_and_copies_independently():
    inventory = InventoryStatus({1: 5})
    assert inventory.quantity(2) == 0

    projection = inventory.copy()
    projection.add_inventory(1, -5)
    projection.set_inventory(3, 2)

    assert inventory.quantity(1) == 5
    assert 3 not in inventory
    assert list(projection.items()) == [(1, 0), (3, 2)]
