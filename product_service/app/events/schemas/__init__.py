"""
Product Service Event Schemas
=============================

Event data schemas specific to the product service domain.
"""

from .event_schemas import (
    INVENTORY_LOW_STOCK,
    INVENTORY_RESTOCKED,
    PRODUCT_CREATED,
    PRODUCT_DELETED,
    PRODUCT_STATUS_CHANGED,
    PRODUCT_UPDATED,
    InventoryEventData,
    InventoryLowStockEventData,
    InventoryRestockedEventData,
    ProductCreatedEventData,
    ProductDeletedEventData,
    ProductEventData,
    ProductStatusChangedEventData,
    ProductUpdatedEventData,
)

__all__ = [
    # Outbound
    "ProductEventData",
    "ProductCreatedEventData",
    "ProductUpdatedEventData",
    "ProductDeletedEventData",
    "ProductStatusChangedEventData",
    # Inbound
    "InventoryEventData",
    "InventoryLowStockEventData",
    "InventoryRestockedEventData",
    # Constants
    "PRODUCT_CREATED",
    "PRODUCT_UPDATED",
    "PRODUCT_DELETED",
    "PRODUCT_STATUS_CHANGED",
    "INVENTORY_LOW_STOCK",
    "INVENTORY_RESTOCKED",
]
