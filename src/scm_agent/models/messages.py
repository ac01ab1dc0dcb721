"""
Messages exchanged with customers and suppliers.

All message types are immutable: an RFQ or an offer received on a given day
is read-only input to the policies, and the outbound items are staged by the
platform until the day's batch is flushed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RFQ:
    """
    A customer's request for quote.

    Attributes:
        rfq_id: Identifier used to match the bid and the resulting order.
        product_id: Requested finished product.
        quantity: Requested units.
        due_date: Day by which the units must be delivered.
        reserve_price_per_unit: Highest unit price the customer will accept.
        penalty: Late-delivery penalty attached to the eventual order.
    """

    rfq_id: int
    product_id: int
    quantity: int
    due_date: int
    reserve_price_per_unit: int
    penalty: float

    def __post_init__(self):
        if self.quantity <= 0:
            raise ValueError(f"RFQ quantity must be positive, but got {self.quantity}.")
        if self.reserve_price_per_unit < 0:
            raise ValueError(
                f"Reserve price must be non-negative, but got {self.reserve_price_per_unit}."
            )


@dataclass(frozen=True)
class CustomerOffer:
    """A bid staged in reply to a customer RFQ."""

    rfq_id: int
    product_id: int
    quantity: int
    due_date: int
    unit_price: int


@dataclass(frozen=True)
class SupplierRFQ:
    """A request for quote sent to a component supplier."""

    supplier: str
    product_id: int
    quantity: int
    reserve_price: int
    due_date: int
    rfq_id: Optional[int] = None


@dataclass(frozen=True)
class SupplierOffer:
    """
    A supplier's reply to one of our RFQs.

    A quantity of zero carries a price quote only and cannot be ordered.
    """

    offer_id: int
    supplier: str
    product_id: int
    quantity: int
    unit_price: int
    due_date: int
    rfq_id: Optional[int] = None

    @property
    def is_orderable(self) -> bool:
        return self.quantity > 0


@dataclass(frozen=True)
class SupplierOrder:
    """A binding purchase order for one supplier offer."""

    supplier: str
    offer_id: int
    product_id: int
    quantity: int
    unit_price: int
    due_date: int
    rfq_id: Optional[int] = None

    @classmethod
    def from_offer(cls, offer: SupplierOffer) -> "SupplierOrder":
        return cls(
            supplier=offer.supplier,
            offer_id=offer.offer_id,
            product_id=offer.product_id,
            quantity=offer.quantity,
            unit_price=offer.unit_price,
            due_date=offer.due_date,
            rfq_id=offer.rfq_id,
        )


@dataclass(frozen=True)
class ProductionRequest:
    product_id: int
    quantity: int
    cycles: int


@dataclass(frozen=True)
class DeliveryRequest:
    order_id: int
    product_id: int
    quantity: int
