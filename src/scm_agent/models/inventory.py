"""Per-product quantity bookkeeping."""

from __future__ import annotations

from typing import Dict, Iterator, Mapping, Optional, Tuple


class InventoryStatus:
    """
    Mapping of product id to a quantity.

    Used by the platform for stock and for the next-day projection that the
    scheduler commits against. Products never seen report zero.
    """

    def __init__(self, quantities: Optional[Mapping[int, int]] = None) -> None:
        self._quantities: Dict[int, int] = dict(quantities or {})

    def quantity(self, product_id: int) -> int:
        return self._quantities.get(product_id, 0)

    def add_inventory(self, product_id: int, delta: int) -> None:
        self._quantities[product_id] = self._quantities.get(product_id, 0) + delta

    def set_inventory(self, product_id: int, quantity: int) -> None:
        self._quantities[product_id] = quantity

    def copy(self) -> "InventoryStatus":
        return InventoryStatus(self._quantities)

    def items(self) -> Iterator[Tuple[int, int]]:
        for product_id in sorted(self._quantities):
            yield product_id, self._quantities[product_id]

    def to_dict(self) -> Dict[int, int]:
        return dict(self._quantities)

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._quantities

    def __len__(self) -> int:
        return len(self._quantities)

    def __repr__(self) -> str:
        return f"InventoryStatus({self._quantities!r})"
