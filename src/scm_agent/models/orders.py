"""Customer orders and their lifecycle."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from scm_agent.exceptions import InvalidOrderTransition


class OrderStatus(str, Enum):
    """Lifecycle states of a customer order."""

    ACTIVE = "active"
    DELIVERED = "delivered"
    CANCELED = "canceled"


@dataclass
class CustomerOrder:
    """
    A confirmed customer order.

    Created by order intake in the ACTIVE state. It moves to DELIVERED after a
    successful delivery request or to CANCELED once its due date has passed the
    void threshold. Terminal states are final.

    Attributes:
        order_id: Unique identifier assigned by the customer.
        product_id: Finished product to deliver.
        quantity: Number of units ordered (> 0).
        due_date: Day index by which the units must be delivered.
        penalty: Penalty charged per day of late delivery (used in bidding risk).
        unit_price: Agreed price per unit (the winning bid).
        rfq_id: RFQ this order originated from, when known.
    """

    order_id: int
    product_id: int
    quantity: int
    due_date: int
    penalty: float = 0.0
    unit_price: int = 0
    rfq_id: int | None = None
    status: OrderStatus = field(default=OrderStatus.ACTIVE)

    def __post_init__(self):
        if self.quantity <= 0:
            raise ValueError(
                f"Order quantity must be positive, but got {self.quantity}."
            )
        if self.penalty < 0:
            raise ValueError(f"Order penalty must be non-negative, but got {self.penalty}.")

    @property
    def is_active(self) -> bool:
        return self.status is OrderStatus.ACTIVE

    def mark_delivered(self) -> None:
        self._transition(OrderStatus.DELIVERED)

    def mark_canceled(self) -> None:
        self._transition(OrderStatus.CANCELED)

    def _transition(self, target: OrderStatus) -> None:
        if not self.is_active:
            raise InvalidOrderTransition(
                self.order_id, current=self.status.value, requested=target.value
            )
        self.status = target

    def to_summary_dict(self) -> dict:
        return {
            "order_id": self.order_id,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "due_date": self.due_date,
            "penalty": self.penalty,
            "unit_price": self.unit_price,
            "status": self.status.value,
        }
