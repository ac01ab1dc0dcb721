"""
Agent settings.

Resolution order (later wins):
    1. Defaults declared on the models below
    2. YAML overlay file (``SCM_AGENT_CONFIG_PATH`` or an explicit path)
    3. Environment variables (``SCM_AGENT_LOG_LEVEL``, ``SCM_AGENT_SEED``,
       ``SCM_AGENT_DISCOUNT_FACTOR``)

Usage:
    from scm_agent.config import get_settings

    settings = get_settings()
    settings.bidding.discount_factor  # 0.2

The YAML overlay mirrors the model layout:

    bidding:
      discount_factor: 0.15
    procurement:
      decrement_mode: once
    simulation:
      days: 60
      seed: 7
"""

from __future__ import annotations

import logging
import os
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Literal, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from scm_agent.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "SCM_AGENT_CONFIG_PATH"

# env var -> (section, field)
_ENV_OVERRIDES = {
    "SCM_AGENT_LOG_LEVEL": ("logging", "level"),
    "SCM_AGENT_SEED": ("simulation", "seed"),
    "SCM_AGENT_DISCOUNT_FACTOR": ("bidding", "discount_factor"),
}


class DecrementMode(str, Enum):
    """
    How the procurement planner charges the ledger when a component has
    several eligible suppliers.

    PER_SUPPLIER: every supplier receives the full outstanding quantity and
        the ledger is decremented once per supplier (the historical policy).
    ONCE: every supplier receives the full outstanding quantity and the
        ledger is decremented once per component.
    """

    PER_SUPPLIER = "per_supplier"
    ONCE = "once"


class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    level: str = "INFO"
    json_format: bool = Field(default=False, alias="json")
    destination: Literal["stdout", "stderr", "file"] = "stderr"
    filename: Optional[str] = None
    format: str = "%(asctime)s %(levelname)s %(name)s [day %(day)s] - %(message)s"


class BiddingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    discount_factor: float = Field(default=0.2, ge=0.0, le=1.0)
    min_lead_time: int = Field(default=6, ge=0)
    risk_threshold: float = Field(default=0.1)
    bid_cutoff_margin: int = Field(
        default=2, ge=0, description="Days before the end of the game after which no bids are placed"
    )


class ProcurementSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    supplier_due_offset: int = Field(default=2, ge=0)
    reserve_price: int = Field(default=0, ge=0)
    decrement_mode: DecrementMode = DecrementMode.PER_SUPPLIER


class SimulationSettings(BaseModel):
    """Parameters of the reference market used by the CLI and integration tests."""

    model_config = ConfigDict(extra="forbid")

    days: int = Field(default=40, gt=0)
    seed: Optional[int] = None
    days_before_void: int = Field(default=5, ge=1)
    factory_capacity: int = Field(default=2000, ge=0)
    rfqs_per_day: int = Field(default=8, ge=0)
    max_rfq_quantity: int = Field(default=20, gt=0)
    min_due_offset: int = Field(default=3, ge=1)
    max_due_offset: int = Field(default=12, ge=1)
    supplier_lead_time: int = Field(default=2, ge=0)
    supplier_partial_ratio: float = Field(default=0.5, ge=0.0, le=1.0)
    supplier_partial_probability: float = Field(default=0.3, ge=0.0, le=1.0)
    supplier_quote_only_probability: float = Field(default=0.05, ge=0.0, le=1.0)
    customer_acceptance_rate: float = Field(default=0.6, ge=0.0, le=1.0)
    initial_component_stock: int = Field(default=0, ge=0)
    scenario_path: Optional[str] = None

    @model_validator(mode="after")
    def _check_due_window(self) -> "SimulationSettings":
        if self.min_due_offset > self.max_due_offset:
            raise ValueError(
                f"min_due_offset ({self.min_due_offset}) must not exceed "
                f"max_due_offset ({self.max_due_offset})"
            )
        return self


class AgentSettings(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    bidding: BiddingSettings = Field(default_factory=BiddingSettings)
    procurement: ProcurementSettings = Field(default_factory=ProcurementSettings)
    simulation: SimulationSettings = Field(default_factory=SimulationSettings)


def _read_yaml(path: Union[str, Path]) -> Dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError("cannot read settings file", path=str(path), error=str(e)) from e
    except yaml.YAMLError as e:
        raise ConfigurationError("invalid YAML", path=str(path), error=str(e)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            "settings YAML root must be a mapping",
            path=str(path),
            got=type(data).__name__,
        )
    return data


def _apply_env(data: Dict[str, Any]) -> Dict[str, Any]:
    for env_name, (section, key) in _ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value is None or value == "":
            continue
        block = data.setdefault(section, {})
        if not isinstance(block, dict):
            raise ConfigurationError(f"`{section}` must be a mapping (dict)")
        block[key] = value
    return data


def load_settings(path: Union[str, Path, None] = None, *, use_env: bool = True) -> AgentSettings:
    """
    Build settings from defaults, an optional YAML overlay and the environment.

    Raises:
        ConfigurationError: the file cannot be read, is not a mapping, or a
            value fails validation.
    """
    data: Dict[str, Any] = {}
    if path is None and use_env:
        path = os.environ.get(CONFIG_PATH_ENV) or None
    if path is not None:
        data = _read_yaml(path)
        logger.debug("Loaded settings overlay from %s", path)
    if use_env:
        data = _apply_env(data)

    try:
        return AgentSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(
            "settings validation failed", errors=e.errors(include_url=False)
        ) from e


@lru_cache(maxsize=1)
def get_settings() -> AgentSettings:
    """Process-wide settings, resolved once. Tests call ``get_settings.cache_clear()``."""
    return load_settings()
