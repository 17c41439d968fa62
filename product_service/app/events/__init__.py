"""
Events module for the Product Service.

Producers:
    - ProductEventProducer: publishes product created/updated/deleted and
      status-changed events, one Kafka topic per event kind

Consumers:
    - InventoryLowStockHandler: takes a product out of sale on stock depletion
    - InventoryRestockedHandler: puts an out-of-stock product back on sale
    - InventoryEventConsumer: subscribes both handlers to their topics
"""

from .event_consumers import (
    InventoryEventConsumer,
    InventoryLowStockHandler,
    InventoryRestockedHandler,
)
from .event_producers import ProductEventProducer, ProductEventPublisher

__all__ = [
    # Producers
    "ProductEventPublisher",
    "ProductEventProducer",
    # Consumer handlers
    "InventoryLowStockHandler",
    "InventoryRestockedHandler",
    # Consumer management
    "InventoryEventConsumer",
]
