"""
Static product structure: bills of materials, supplier catalog and the
simulation start parameters.

These are loaded once per run (from the platform or a scenario file) and
never change while the simulation is running.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_validator


class ProductSpec(BaseModel):
    """Bill of materials entry for one finished product."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    product_id: int = Field(ge=0)
    components: Tuple[int, ...] = Field(default_factory=tuple)
    base_price: int = Field(default=0, ge=0, description="Sum of nominal component prices")
    cycles_per_unit: int = Field(default=1, ge=0, description="Factory cycles per unit")


class BOMBundle(BaseModel):
    """Product → components lookup with base prices."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    products: Tuple[ProductSpec, ...] = Field(default_factory=tuple)

    _by_id: Dict[int, ProductSpec] = PrivateAttr(default_factory=dict)

    @model_validator(mode="after")
    def _index_products(self) -> "BOMBundle":
        seen: Dict[int, ProductSpec] = {}
        for spec in self.products:
            if spec.product_id in seen:
                raise ValueError(f"Duplicate product id in BOM: {spec.product_id}")
            seen[spec.product_id] = spec
        self._by_id = seen
        return self

    def get(self, product_id: int) -> Optional[ProductSpec]:
        return self._by_id.get(product_id)

    def components_for(self, product_id: int) -> Optional[Tuple[int, ...]]:
        """Return the components of a product, or None for unknown products."""
        spec = self._by_id.get(product_id)
        return spec.components if spec is not None else None

    def base_price(self, product_id: int) -> int:
        spec = self._by_id.get(product_id)
        return spec.base_price if spec is not None else 0

    def cycles_per_unit(self, product_id: int) -> int:
        spec = self._by_id.get(product_id)
        return spec.cycles_per_unit if spec is not None else 0

    @property
    def product_ids(self) -> List[int]:
        return sorted(self._by_id)

    @property
    def component_ids(self) -> List[int]:
        return sorted({c for spec in self.products for c in spec.components})


class ComponentEntry(BaseModel):
    """Suppliers able to deliver one component, and its nominal unit price."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    product_id: int = Field(ge=0)
    suppliers: Tuple[str, ...] = Field(default_factory=tuple)
    base_price: int = Field(default=0, ge=0)


class ComponentCatalog(BaseModel):
    """Component → eligible suppliers lookup."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    components: Tuple[ComponentEntry, ...] = Field(default_factory=tuple)

    _by_id: Dict[int, ComponentEntry] = PrivateAttr(default_factory=dict)

    @model_validator(mode="after")
    def _index_components(self) -> "ComponentCatalog":
        self._by_id = {entry.product_id: entry for entry in self.components}
        return self

    def suppliers_for(self, product_id: int) -> Optional[Tuple[str, ...]]:
        """Return eligible suppliers, or None when the component has none."""
        entry = self._by_id.get(product_id)
        if entry is None or not entry.suppliers:
            return None
        return entry.suppliers

    def base_price(self, product_id: int) -> int:
        entry = self._by_id.get(product_id)
        return entry.base_price if entry is not None else 0

    @property
    def component_ids(self) -> List[int]:
        return sorted(self._by_id)

    @property
    def suppliers(self) -> List[str]:
        names = {name for entry in self.components for name in entry.suppliers}
        return sorted(names)


class StartInfo(BaseModel):
    """Simulation parameters announced when the game starts."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    number_of_days: int = Field(gt=0)
    days_before_void: int = Field(default=5, ge=1)
    factory_capacity: int = Field(default=2000, ge=0, description="Cycles per day")
