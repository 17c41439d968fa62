"""
Product Service Event Consumers
==============================

Reconciles product availability with the inventory service. A low-stock
event takes the product out of sale; a restock event puts an out-of-stock
product back on sale. Both service calls are no-ops when the product is
already in the target condition, so redelivered messages are harmless.
"""

from typing import (
    TYPE_CHECKING,
    Any,
    AsyncContextManager,
    Callable,
    Dict,
    Optional,
    Tuple,
    Type,
)

from ..core.setting import get_settings
from ..utils.logging import setup_product_logging as setup_logging
from .base import EventHandler
from .base.kafka_client import KafkaEventSubscriber
from .schemas import (
    InventoryEventData,
    InventoryLowStockEventData,
    InventoryRestockedEventData,
)

if TYPE_CHECKING:
    from ..services.product_service import ProductService

settings = get_settings()
logger = setup_logging("product_service.events.consumers", log_level=settings.LOG_LEVEL)

ServiceFactory = Callable[[], AsyncContextManager["ProductService"]]


def _unwrap(payload: Dict[str, Any]) -> Tuple[Dict[str, Any], Optional[str]]:
    """Accept either a bare inventory payload or one wrapped in an event envelope"""
    if "event_type" in payload and isinstance(payload.get("data"), dict):
        correlation_id = payload.get("correlation_id")
        return payload["data"], str(correlation_id) if correlation_id else None
    return payload, None


class InventoryEventHandler(EventHandler):
    """Parse an inventory payload and run one service call in its own session"""

    schema: Type[InventoryEventData] = InventoryEventData

    def __init__(self, service_factory: ServiceFactory):
        self.service_factory = service_factory

    async def handle(self, payload: Dict[str, Any]) -> None:
        body, correlation_id = _unwrap(payload)
        data = self.schema.model_validate(body)

        logger.info(
            f"Processing {self.__class__.__name__} event",
            extra={
                "product_id": data.product_id,
                "hub_id": data.hub_id,
                "inventory_id": data.inventory_id,
                "correlation_id": correlation_id,
            },
        )

        try:
            async with self.service_factory() as service:
                await self.apply(service, data, correlation_id)
        except Exception as e:
            logger.error(
                "Failed to process inventory event",
                extra={
                    "handler": self.__class__.__name__,
                    "product_id": data.product_id,
                    "error": str(e),
                    "correlation_id": correlation_id,
                },
            )
            raise

    async def apply(
        self,
        service: "ProductService",
        data: InventoryEventData,
        correlation_id: Optional[str],
    ) -> None:
        raise NotImplementedError


class InventoryLowStockHandler(InventoryEventHandler):
    """Stock depleted below safety level: mark the product out of stock"""

    schema = InventoryLowStockEventData

    async def apply(self, service, data, correlation_id) -> None:
        await service.mark_as_out_of_stock(
            data.product_id, correlation_id=correlation_id
        )


class InventoryRestockedHandler(InventoryEventHandler):
    """Stock replenished: reactivate an out-of-stock product"""

    schema = InventoryRestockedEventData

    async def apply(self, service, data, correlation_id) -> None:
        await service.restore_from_out_of_stock(
            data.product_id, correlation_id=correlation_id
        )


class InventoryEventConsumer:
    """Wires the inventory handlers onto the Kafka subscriber"""

    def __init__(
        self,
        service_factory: ServiceFactory,
        subscriber: Optional[KafkaEventSubscriber] = None,
    ):
        self.service_factory = service_factory
        self.subscriber = subscriber or KafkaEventSubscriber(
            bootstrap_servers=settings.KAFKA_BOOTSTRAP_SERVERS,
            group_id=settings.KAFKA_GROUP_ID,
            client_id=f"{settings.SERVICE_NAME}-consumer",
            max_redeliveries=settings.KAFKA_CONSUMER_MAX_REDELIVERIES,
            redelivery_delay=settings.KAFKA_CONSUMER_RETRY_DELAY,
        )

    async def start(self) -> None:
        await self.subscriber.start()

        subscriptions = {
            settings.KAFKA_TOPIC_INVENTORY_LOW_STOCK: InventoryLowStockHandler(
                self.service_factory
            ),
            settings.KAFKA_TOPIC_INVENTORY_RESTOCKED: InventoryRestockedHandler(
                self.service_factory
            ),
        }
        for topic, handler in subscriptions.items():
            await self.subscriber.subscribe(topic, handler)

        logger.info(
            "Started consuming inventory events",
            extra={"subscriptions": list(subscriptions)},
        )

    async def stop(self) -> None:
        await self.subscriber.stop()
