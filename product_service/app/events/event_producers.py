"""
Product Service Event Producers
==============================

Outbound product lifecycle events. ``ProductEventPublisher`` is the port the
service layer depends on; ``ProductEventProducer`` sends each event kind to
its own Kafka topic keyed by product id.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional

from ..core.setting import get_settings
from ..utils.logging import setup_product_logging as setup_logging
from .base import BaseEvent, EventPublisher
from .schemas import (
    PRODUCT_CREATED,
    PRODUCT_DELETED,
    PRODUCT_STATUS_CHANGED,
    PRODUCT_UPDATED,
    ProductCreatedEventData,
    ProductDeletedEventData,
    ProductEventData,
    ProductStatusChangedEventData,
    ProductUpdatedEventData,
)

settings = get_settings()
logger = setup_logging("product_service.events.producers", log_level=settings.LOG_LEVEL)


class ProductEventPublisher(ABC):
    """Outbound product event port"""

    @abstractmethod
    async def publish_product_created(
        self, data: ProductCreatedEventData, correlation_id: Optional[str] = None
    ) -> None:
        pass

    @abstractmethod
    async def publish_product_updated(
        self, data: ProductUpdatedEventData, correlation_id: Optional[str] = None
    ) -> None:
        pass

    @abstractmethod
    async def publish_product_deleted(
        self, data: ProductDeletedEventData, correlation_id: Optional[str] = None
    ) -> None:
        pass

    @abstractmethod
    async def publish_product_status_changed(
        self,
        data: ProductStatusChangedEventData,
        correlation_id: Optional[str] = None,
    ) -> None:
        pass


def default_topics() -> Dict[str, str]:
    return {
        PRODUCT_CREATED: settings.KAFKA_TOPIC_PRODUCT_CREATED,
        PRODUCT_UPDATED: settings.KAFKA_TOPIC_PRODUCT_UPDATED,
        PRODUCT_DELETED: settings.KAFKA_TOPIC_PRODUCT_DELETED,
        PRODUCT_STATUS_CHANGED: settings.KAFKA_TOPIC_PRODUCT_STATUS_CHANGED,
    }


class ProductEventProducer(ProductEventPublisher):
    """Kafka-backed product event publisher"""

    def __init__(
        self,
        kafka_publisher: EventPublisher,
        topics: Optional[Dict[str, str]] = None,
        source_service: str = "product-service",
    ):
        self.kafka_publisher = kafka_publisher
        self.topics = topics or default_topics()
        self.source_service = source_service

    async def publish_product_created(
        self, data: ProductCreatedEventData, correlation_id: Optional[str] = None
    ) -> None:
        await self._publish(PRODUCT_CREATED, data, correlation_id)

    async def publish_product_updated(
        self, data: ProductUpdatedEventData, correlation_id: Optional[str] = None
    ) -> None:
        await self._publish(PRODUCT_UPDATED, data, correlation_id)

    async def publish_product_deleted(
        self, data: ProductDeletedEventData, correlation_id: Optional[str] = None
    ) -> None:
        await self._publish(PRODUCT_DELETED, data, correlation_id)

    async def publish_product_status_changed(
        self,
        data: ProductStatusChangedEventData,
        correlation_id: Optional[str] = None,
    ) -> None:
        await self._publish(PRODUCT_STATUS_CHANGED, data, correlation_id)

    async def _publish(
        self,
        event_type: str,
        data: ProductEventData,
        correlation_id: Optional[str],
    ) -> None:
        topic = self.topics[event_type]
        product_id = getattr(data, "product_id")
        try:
            event = BaseEvent(
                event_type=event_type,
                source_service=self.source_service,
                data=data.to_dict(),
                correlation_id=correlation_id,
            )
            await self.kafka_publisher.publish(event, topic=topic, key=product_id)
            logger.debug(
                "Handed product event to publisher",
                extra={
                    "event_type": event_type,
                    "event_id": event.event_id,
                    "product_id": product_id,
                    "topic": topic,
                    "correlation_id": correlation_id,
                },
            )

        except Exception as e:
            logger.error(
                f"Failed to publish {event_type} event: {e}",
                extra={"product_id": product_id, "topic": topic},
            )
            raise
