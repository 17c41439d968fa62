"""
Product Service Event Management
Owns the Kafka publisher, the product event producer and the inventory
event consumer for the lifetime of the application.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from ..events.base.kafka_client import KafkaEventPublisher
from ..events.event_consumers import InventoryEventConsumer
from ..events.event_producers import ProductEventProducer, default_topics
from ..services.product_service import ProductService
from ..utils.logging import setup_product_logging as setup_logging
from .setting import get_settings

logger = setup_logging("product_service.events", log_level=get_settings().LOG_LEVEL)

# Global instances
_kafka_publisher: Optional[KafkaEventPublisher] = None
_product_event_producer: Optional[ProductEventProducer] = None
_inventory_consumer: Optional[InventoryEventConsumer] = None


async def init_events() -> None:
    """Start the Kafka publisher; failures leave the service in degraded mode"""
    global _kafka_publisher, _product_event_producer

    settings = get_settings()
    logger.info(
        "Initializing event publishing infrastructure",
        extra={
            "operation": "init_events",
            "kafka_servers": settings.KAFKA_BOOTSTRAP_SERVERS,
            "service_name": settings.SERVICE_NAME,
        },
    )

    try:
        _kafka_publisher = KafkaEventPublisher(
            bootstrap_servers=settings.KAFKA_BOOTSTRAP_SERVERS,
            client_id=f"{settings.SERVICE_NAME}-producer",
            max_retries=5,
            retry_delay=2.0,
            enable_graceful_degradation=True,
        )
        await _kafka_publisher.start(timeout=30.0)

        topics = default_topics()
        if _kafka_publisher.is_connected:
            await _kafka_publisher.ensure_topics_exist(topics.values())

        _product_event_producer = ProductEventProducer(_kafka_publisher, topics=topics)
        logger.info(
            "Event publishing infrastructure initialized",
            extra={
                "operation": "init_events_complete",
                "connected": _kafka_publisher.is_connected,
            },
        )

    except Exception as e:
        logger.warning(
            "Event publishing initialization failed - operating in degraded mode",
            extra={"operation": "init_events_failed", "error": str(e)},
        )


async def close_events() -> None:
    """Stop the consumer, then flush and stop the publisher"""
    global _kafka_publisher, _product_event_producer

    await stop_inventory_consumer()

    try:
        if _kafka_publisher:
            await _kafka_publisher.stop()
            logger.info(
                "Event publishing infrastructure closed",
                extra={"operation": "close_events_complete"},
            )
    except Exception as e:
        logger.error(
            "Error closing event infrastructure",
            extra={"operation": "close_events_error", "error": str(e)},
        )
    finally:
        _kafka_publisher = None
        _product_event_producer = None


def get_event_producer() -> Optional[ProductEventProducer]:
    """Get the product event producer instance"""
    return _product_event_producer


@asynccontextmanager
async def product_service_scope() -> AsyncIterator[ProductService]:
    """A ProductService bound to a fresh session, for work outside a request"""
    from .database import database_manager

    async with database_manager.async_session_maker() as session:
        yield ProductService(session, get_event_producer())


async def start_inventory_consumer() -> Optional[InventoryEventConsumer]:
    global _inventory_consumer

    settings = get_settings()
    if not settings.KAFKA_ENABLE_CONSUMER:
        logger.info("Inventory event consumer disabled by configuration")
        return None

    _inventory_consumer = InventoryEventConsumer(product_service_scope)
    await _inventory_consumer.start()
    return _inventory_consumer


async def stop_inventory_consumer() -> None:
    global _inventory_consumer

    if _inventory_consumer is None:
        return
    try:
        await _inventory_consumer.stop()
    except Exception as e:
        logger.error(
            "Error stopping inventory event consumer",
            extra={"operation": "stop_consumer_error", "error": str(e)},
        )
    finally:
        _inventory_consumer = None


async def health_check_events() -> bool:
    """Check if event publishing is healthy"""
    if _kafka_publisher is None:
        return False
    return await _kafka_publisher.health_check()
