"""
Market scenarios: the product structure a simulation runs on.

A scenario file is YAML with two sections that map onto the catalog models:

    products:
      - {product_id: 1, components: [100, 200], base_price: 1200, cycles_per_unit: 4}
    components:
      - {product_id: 100, suppliers: [pintel, imd], base_price: 500}
      - {product_id: 200, suppliers: [watergate], base_price: 700}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Union

import yaml
from pydantic import ValidationError

from scm_agent.exceptions import ConfigurationError
from scm_agent.models import BOMBundle, ComponentCatalog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Scenario:
    bom: BOMBundle
    catalog: ComponentCatalog

    def validate_supply(self) -> None:
        """Log every BOM component that no supplier sells."""
        for spec in self.bom.products:
            for component in spec.components:
                if self.catalog.suppliers_for(component) is None:
                    logger.error(
                        "Product %d needs component %d, which has no supplier",
                        spec.product_id,
                        component,
                    )


def _component(product_id: int, suppliers, base_price: int) -> Dict[str, Any]:
    return {"product_id": product_id, "suppliers": suppliers, "base_price": base_price}


def _product(product_id: int, components, cycles: int, catalog: Dict[int, int]) -> Dict[str, Any]:
    return {
        "product_id": product_id,
        "components": components,
        "base_price": sum(catalog[c] for c in components),
        "cycles_per_unit": cycles,
    }


def default_scenario() -> Scenario:
    """A small PC-assembly market: four products built from six components."""
    prices = {100: 1000, 101: 1500, 200: 250, 300: 100, 301: 300, 400: 300}
    components = [
        _component(100, ["pintel"], prices[100]),
        _component(101, ["pintel", "imd"], prices[101]),
        _component(200, ["basus", "macrostar"], prices[200]),
        _component(300, ["mec"], prices[300]),
        _component(301, ["mec", "queenmax"], prices[301]),
        _component(400, ["watergate", "mintor"], prices[400]),
    ]
    products = [
        _product(1, [100, 200, 300, 400], 4, prices),
        _product(2, [100, 200, 301, 400], 5, prices),
        _product(3, [101, 200, 300, 400], 5, prices),
        _product(4, [101, 200, 301, 400], 6, prices),
    ]
    return Scenario(
        bom=BOMBundle.model_validate({"products": products}),
        catalog=ComponentCatalog.model_validate({"components": components}),
    )


def load_scenario(path: Union[str, Path]) -> Scenario:
    """
    Load a scenario YAML file.

    Raises:
        ConfigurationError: unreadable file, non-mapping root or invalid entries.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError("cannot load scenario", path=str(path), error=str(e)) from e

    if not isinstance(data, dict):
        raise ConfigurationError(
            "scenario YAML root must be a mapping", path=str(path), got=type(data).__name__
        )

    try:
        scenario = Scenario(
            bom=BOMBundle.model_validate({"products": data.get("products") or []}),
            catalog=ComponentCatalog.model_validate({"components": data.get("components") or []}),
        )
    except ValidationError as e:
        raise ConfigurationError(
            "invalid scenario", path=str(path), errors=e.errors(include_url=False)
        ) from e

    scenario.validate_supply()
    logger.info(
        "Loaded scenario %s: %d products, %d components",
        path,
        len(scenario.bom.products),
        len(scenario.catalog.components),
    )
    return scenario
