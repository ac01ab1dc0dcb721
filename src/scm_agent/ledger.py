"""
Component demand bookkeeping.

The ledger counts, per component, the units owed to confirmed customer
orders that are not yet covered by a supplier request. Order intake adds to
it, procurement planning consumes it as supplier RFQs are issued, and the
scheduler gives demand back when it cancels an order.

Every read of an entry that leads to a supplier request must be followed by
the matching ``add_demand(product_id, -quantity)`` before the next entry is
read; otherwise the same demand is requested twice.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, Optional, Tuple

from scm_agent.exceptions import UnknownProductError

logger = logging.getLogger(__name__)


class ComponentDemandLedger:
    """
    Signed per-component demand counter.

    Args:
        known_products: Optional set of valid component ids. When given,
            ``add_demand`` rejects ids outside it with ``UnknownProductError``.
    """

    def __init__(self, known_products: Optional[Iterable[int]] = None) -> None:
        self._demand: Dict[int, int] = {}
        self._known = frozenset(known_products) if known_products is not None else None

    def add_demand(self, product_id: int, delta: int) -> None:
        """Add (or, with a negative delta, remove) outstanding demand."""
        if self._known is not None and product_id not in self._known:
            raise UnknownProductError(product_id)
        self._demand[product_id] = self._demand.get(product_id, 0) + delta
        logger.debug(
            "Ledger demand for product %d changed by %+d to %d",
            product_id,
            delta,
            self._demand[product_id],
        )

    def restrict_to(self, known_products: Iterable[int]) -> None:
        """
        Reject ids outside ``known_products`` from now on.

        Raises ``UnknownProductError`` if an existing entry is already outside it.
        """
        known = frozenset(known_products)
        for product_id in sorted(self._demand):
            if product_id not in known:
                raise UnknownProductError(product_id)
        self._known = known

    def quantity(self, product_id: int) -> int:
        return self._demand.get(product_id, 0)

    def positive_entries(self) -> Iterator[Tuple[int, int]]:
        """
        Yield ``(product_id, quantity)`` for every entry with quantity > 0.

        Entries come in ascending product-id order. Quantities are read when
        each pair is produced, so changes made by the consumer between steps
        are seen by the remaining steps. Calling the method again starts a
        fresh scan.
        """
        for product_id in sorted(self._demand):
            quantity = self._demand[product_id]
            if quantity > 0:
                yield product_id, quantity

    def is_non_negative(self) -> bool:
        return all(quantity >= 0 for quantity in self._demand.values())

    def snapshot(self) -> Dict[int, int]:
        return dict(self._demand)

    def clear(self) -> None:
        self._demand.clear()

    def __len__(self) -> int:
        return len(self._demand)

    def __repr__(self) -> str:
        return f"ComponentDemandLedger({self._demand!r})"
