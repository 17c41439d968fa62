"""
Product Service Event Schemas
=============================

Outbound product lifecycle event payloads and the inbound inventory event
payloads consumed from the inventory service.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

# ==============================================
# OUTBOUND PRODUCT EVENTS
# ==============================================


class ProductEventData(BaseModel):
    """Base product event data structure"""

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()


class ProductCreatedEventData(ProductEventData):
    product_id: str
    seller_id: str
    hub_id: Optional[str] = None
    name: str
    created_at: datetime


class ProductUpdatedEventData(ProductEventData):
    product_id: str
    name: str
    price: Decimal
    updated_at: datetime


class ProductDeletedEventData(ProductEventData):
    product_id: str
    seller_id: str
    deleted_at: datetime


class ProductStatusChangedEventData(ProductEventData):
    product_id: str
    old_status: str
    new_status: str
    changed_at: datetime


# ==============================================
# INBOUND INVENTORY EVENTS
# ==============================================


class InventoryEventData(BaseModel):
    """Inventory service payloads arrive in camelCase; unknown keys are ignored"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )

    inventory_id: Optional[str] = None
    product_id: str
    hub_id: Optional[str] = None


class InventoryLowStockEventData(InventoryEventData):
    current_quantity: Optional[int] = None
    safety_stock: Optional[int] = None
    detected_at: Optional[datetime] = None


class InventoryRestockedEventData(InventoryEventData):
    restocked_quantity: Optional[int] = None
    current_quantity: Optional[int] = None
    restocked_at: Optional[datetime] = None


# ==============================================
# EVENT TYPE CONSTANTS
# ==============================================

PRODUCT_CREATED = "product.created"
PRODUCT_UPDATED = "product.updated"
PRODUCT_DELETED = "product.deleted"
PRODUCT_STATUS_CHANGED = "product.status_changed"

INVENTORY_LOW_STOCK = "inventory.low_stock"
INVENTORY_RESTOCKED = "inventory.restocked"
