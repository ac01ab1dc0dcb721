"""Domain models used by the agent and the reference platform."""

from scm_agent.models.catalog import (
    BOMBundle,
    ComponentCatalog,
    ComponentEntry,
    ProductSpec,
    StartInfo,
)
from scm_agent.models.inventory import InventoryStatus
from scm_agent.models.messages import (
    RFQ,
    CustomerOffer,
    DeliveryRequest,
    ProductionRequest,
    SupplierOffer,
    SupplierOrder,
    SupplierRFQ,
)
from scm_agent.models.orders import CustomerOrder, OrderStatus

__all__ = [
    "BOMBundle",
    "ComponentCatalog",
    "ComponentEntry",
    "ProductSpec",
    "StartInfo",
    "InventoryStatus",
    "RFQ",
    "CustomerOffer",
    "DeliveryRequest",
    "ProductionRequest",
    "SupplierOffer",
    "SupplierOrder",
    "SupplierRFQ",
    "CustomerOrder",
    "OrderStatus",
]
