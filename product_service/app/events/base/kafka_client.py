import asyncio
import json
from collections import defaultdict
from functools import partial
from typing import Any, Dict, Iterable, List, Optional, Tuple

from aiokafka import AIOKafkaConsumer, AIOKafkaProducer, TopicPartition  # type: ignore
from aiokafka.admin import AIOKafkaAdminClient, NewTopic  # type: ignore
from aiokafka.errors import KafkaConnectionError, KafkaError  # type: ignore

from ...core.setting import get_settings
from ...utils.logging import setup_product_logging as setup_logging
from . import BaseEvent, EventHandler, EventPublisher, EventSubscriber

logger = setup_logging(
    "product_service.events.kafka", log_level=get_settings().LOG_LEVEL
)


class KafkaEventPublisher(EventPublisher):
    """
    Kafka publisher with connection retry logic.

    ``publish`` only enqueues the record; delivery is reported by a callback
    on the send future and never raised to the caller.
    """

    def __init__(
        self,
        bootstrap_servers: str,
        client_id: str,
        max_retries: int = 20,
        retry_delay: float = 2.0,
        enable_graceful_degradation: bool = True,
    ):
        self.bootstrap_servers = bootstrap_servers
        self.client_id = client_id
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.enable_graceful_degradation = enable_graceful_degradation
        self.producer: Optional[AIOKafkaProducer] = None
        self.is_connected = False
        self._connection_lock = asyncio.Lock()

    async def ensure_topics_exist(self, topic_names: Iterable[str]) -> None:
        """Create any missing topics; failures are logged only"""
        admin_client = AIOKafkaAdminClient(bootstrap_servers=self.bootstrap_servers)
        await admin_client.start()  # type: ignore
        try:
            existing = set(await admin_client.list_topics())
            missing = [name for name in topic_names if name not in existing]
            if missing:
                await admin_client.create_topics(
                    [
                        NewTopic(name=name, num_partitions=1, replication_factor=1)
                        for name in missing
                    ]
                )
                logger.info(
                    "Created Kafka topics",
                    extra={"topics": missing, "operation": "create_topic"},
                )
        except Exception as e:
            logger.warning(
                "Error ensuring Kafka topics exist",
                extra={
                    "topics": list(topic_names),
                    "error": str(e),
                    "operation": "ensure_topics_exist",
                },
            )
        finally:
            await admin_client.close()  # type: ignore

    async def start(self, timeout: float = 30.0) -> None:
        """Start Kafka producer with retry logic"""
        async with self._connection_lock:
            if self.producer and self.is_connected:
                return

            self.producer = AIOKafkaProducer(
                bootstrap_servers=self.bootstrap_servers,
                client_id=self.client_id,
                value_serializer=lambda x: json.dumps(x, default=str).encode("utf-8"),
                key_serializer=lambda x: x.encode("utf-8") if x else None,
                acks="all",
                retry_backoff_ms=1000,
                request_timeout_ms=30000,
                connections_max_idle_ms=540000,
            )

            for attempt in range(self.max_retries):
                try:
                    logger.info(
                        "Attempting Kafka connection",
                        extra={
                            "attempt": attempt + 1,
                            "max_retries": self.max_retries,
                            "operation": "kafka_connect",
                        },
                    )
                    await asyncio.wait_for(self.producer.start(), timeout=timeout)
                    self.is_connected = True
                    logger.info("Successfully connected to Kafka")
                    return

                except (KafkaConnectionError, asyncio.TimeoutError) as e:
                    backoff = self.retry_delay * (2**attempt)
                    logger.warning(
                        f"Kafka connection attempt {attempt + 1} failed: {e}",
                        extra={"retry_in_seconds": backoff},
                    )
                    if attempt < self.max_retries - 1:
                        await asyncio.sleep(backoff)

            logger.error(
                f"Failed to connect to Kafka after {self.max_retries} attempts. "
                "Running in degraded mode (events will be logged but not published)"
            )
            self.is_connected = False

    async def stop(self) -> None:
        """Flush pending records and stop the producer"""
        async with self._connection_lock:
            if self.producer:
                try:
                    await self.producer.stop()
                    logger.info("Kafka producer stopped")
                except Exception as e:
                    logger.warning(
                        "Error stopping Kafka producer",
                        extra={"error": str(e), "operation": "stop_producer"},
                    )
                finally:
                    self.producer = None
                    self.is_connected = False

    async def publish(
        self, event: BaseEvent, topic: str, key: Optional[str] = None
    ) -> None:
        """Enqueue an event without waiting for broker acknowledgement"""
        if not self.is_connected or not self.producer:
            if self.enable_graceful_degradation:
                logger.warning(
                    f"Kafka not available, logging event instead: {event.event_type}",
                    extra={
                        "event_id": event.event_id,
                        "event_type": event.event_type,
                        "topic": topic,
                        "event_data": event.model_dump(mode="json"),
                    },
                )
                return
            raise KafkaConnectionError("Kafka producer not connected")

        try:
            delivery = await self.producer.send(
                topic, value=event.model_dump(mode="json"), key=key
            )
        except KafkaError as e:
            logger.error(
                "Failed to enqueue event for Kafka",
                extra={
                    "event_type": event.event_type,
                    "event_id": event.event_id,
                    "topic": topic,
                    "key": key,
                    "error": str(e),
                    "operation": "publish_event_failed",
                },
            )
            if not self.enable_graceful_degradation:
                raise
            return

        delivery.add_done_callback(partial(self._on_delivery, event, topic, key))

    @staticmethod
    def _on_delivery(
        event: BaseEvent, topic: str, key: Optional[str], future: "asyncio.Future"
    ) -> None:
        context = {
            "event_type": event.event_type,
            "event_id": event.event_id,
            "topic": topic,
            "key": key,
            "correlation_id": event.correlation_id,
        }
        if future.cancelled():
            logger.warning(
                "Event delivery cancelled",
                extra={**context, "operation": "publish_event_cancelled"},
            )
            return

        error = future.exception()
        if error is not None:
            logger.error(
                "Failed to deliver event to Kafka",
                extra={**context, "error": str(error), "operation": "publish_event_failed"},
            )
            return

        metadata = future.result()
        logger.info(
            "Published event to Kafka topic",
            extra={
                **context,
                "partition": getattr(metadata, "partition", None),
                "offset": getattr(metadata, "offset", None),
                "operation": "publish_event",
            },
        )

    async def health_check(self) -> bool:
        """Check if Kafka connection is healthy"""
        try:
            if not self.producer or not self.is_connected:
                return False

            metadata = await self.producer.client.fetch_all_metadata()
            return len(metadata.brokers()) > 0

        except Exception as e:
            logger.warning(
                "Kafka health check failed",
                extra={"error": str(e), "operation": "health_check"},
            )
            return False


class KafkaEventSubscriber(EventSubscriber):
    """
    Kafka subscriber with at-least-once delivery.

    Offsets are committed manually once the topic handler returns. A failing
    message is re-fetched by seeking back to its offset; after
    ``max_redeliveries`` failed attempts it is logged and skipped.
    """

    def __init__(
        self,
        bootstrap_servers: str,
        group_id: str,
        client_id: str,
        max_retries: int = 5,
        retry_delay: float = 2.0,
        max_redeliveries: int = 5,
        redelivery_delay: float = 1.0,
        enable_graceful_degradation: bool = True,
    ):
        self.bootstrap_servers = bootstrap_servers
        self.group_id = group_id
        self.client_id = client_id
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.max_redeliveries = max_redeliveries
        self.redelivery_delay = redelivery_delay
        self.enable_graceful_degradation = enable_graceful_degradation
        self.consumers: Dict[str, AIOKafkaConsumer] = {}
        self.handlers: Dict[str, EventHandler] = {}
        self.running = False
        self.is_connected = False
        self._tasks: List[asyncio.Task] = []
        self._failures: Dict[Tuple[TopicPartition, int], int] = defaultdict(int)

    async def start(self, timeout: float = 30.0) -> None:
        """Probe the broker with retry logic before any subscription"""
        for attempt in range(self.max_retries):
            try:
                logger.info(
                    "Attempting Kafka subscriber connection",
                    extra={
                        "attempt": attempt + 1,
                        "max_retries": self.max_retries,
                        "operation": "subscriber_connect",
                    },
                )
                health_consumer = AIOKafkaConsumer(
                    bootstrap_servers=self.bootstrap_servers,
                    group_id=f"{self.group_id}-health-check",
                    client_id=f"{self.client_id}-health-check",
                )
                await asyncio.wait_for(health_consumer.start(), timeout=timeout)
                await health_consumer.stop()

                self.running = True
                self.is_connected = True
                logger.info("Kafka subscriber connected successfully")
                return

            except (KafkaConnectionError, asyncio.TimeoutError) as e:
                backoff = self.retry_delay * (2**attempt)
                logger.warning(
                    f"Kafka subscriber connection attempt {attempt + 1} failed: {e}",
                    extra={"retry_in_seconds": backoff},
                )
                if attempt < self.max_retries - 1:
                    await asyncio.sleep(backoff)

        self.running = False
        self.is_connected = False
        if not self.enable_graceful_degradation:
            raise KafkaConnectionError(
                f"Could not connect to Kafka at {self.bootstrap_servers}"
            )
        logger.error(
            "Failed to connect Kafka subscriber after all retries. "
            "Running in degraded mode (no event consumption)"
        )

    async def stop(self) -> None:
        """Stop all consumers"""
        self.running = False
        self.is_connected = False

        for task in self._tasks:
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()

        for topic, consumer in self.consumers.items():
            try:
                await consumer.stop()
                logger.info(
                    "Stopped Kafka consumer for topic",
                    extra={"topic": topic, "operation": "stop_consumer"},
                )
            except Exception as e:
                logger.warning(
                    "Error stopping Kafka consumer",
                    extra={
                        "topic": topic,
                        "error": str(e),
                        "operation": "stop_consumer_error",
                    },
                )

        self.consumers.clear()
        logger.info("All Kafka consumers stopped")

    async def subscribe(self, topic: str, handler: EventHandler) -> None:
        """Attach a handler to a topic and start consuming it"""
        if not self.is_connected:
            logger.warning(f"Cannot subscribe to {topic} - Kafka not connected")
            return

        self.handlers[topic] = handler
        if topic in self.consumers:
            return

        try:
            consumer = AIOKafkaConsumer(
                topic,
                bootstrap_servers=self.bootstrap_servers,
                group_id=self.group_id,
                client_id=f"{self.client_id}-{topic}",
                enable_auto_commit=False,
                auto_offset_reset="earliest",
            )
            await consumer.start()
            self.consumers[topic] = consumer
            self._tasks.append(
                asyncio.create_task(self._consume_messages(topic, consumer))
            )
            logger.info(
                "Subscribed to Kafka topic",
                extra={"topic": topic, "operation": "subscribe"},
            )

        except Exception as e:
            logger.error(
                "Failed to subscribe to Kafka topic",
                extra={"topic": topic, "error": str(e), "operation": "subscribe_failed"},
            )
            if not self.enable_graceful_degradation:
                raise

    async def _consume_messages(self, topic: str, consumer: AIOKafkaConsumer) -> None:
        try:
            async for message in consumer:
                if not self.running:
                    break
                await self.process_message(consumer, message)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(
                "Kafka consumer error",
                extra={"topic": topic, "error": str(e), "operation": "consumer_error"},
                exc_info=True,
            )

    async def process_message(self, consumer: Any, message: Any) -> bool:
        """
        Dispatch one record and settle its offset.

        Returns True when the offset was committed, False when the record was
        rewound for redelivery.
        """
        tp = TopicPartition(message.topic, message.partition)
        context = {
            "topic": message.topic,
            "partition": message.partition,
            "offset": message.offset,
        }

        try:
            payload = json.loads(message.value)
        except (TypeError, ValueError) as e:
            logger.error(
                "Skipping undecodable Kafka message",
                extra={**context, "error": str(e), "operation": "decode_failed"},
            )
            await consumer.commit({tp: message.offset + 1})
            return True

        handler = self.handlers.get(message.topic)
        if handler is None:
            logger.warning(
                "No handler registered for topic",
                extra={**context, "operation": "no_handler"},
            )
            await consumer.commit({tp: message.offset + 1})
            return True

        failure_key = (tp, message.offset)
        try:
            await handler.handle(payload)
        except Exception as e:
            self._failures[failure_key] += 1
            attempts = self._failures[failure_key]
            if attempts > self.max_redeliveries:
                logger.error(
                    "Giving up on Kafka message after repeated failures",
                    extra={
                        **context,
                        "attempts": attempts,
                        "error": str(e),
                        "payload": payload,
                        "operation": "message_dropped",
                    },
                    exc_info=True,
                )
                self._failures.pop(failure_key, None)
                await consumer.commit({tp: message.offset + 1})
                return True

            logger.warning(
                "Event handler failed, message will be redelivered",
                extra={
                    **context,
                    "attempts": attempts,
                    "error": str(e),
                    "operation": "handler_error",
                },
            )
            consumer.seek(tp, message.offset)
            await asyncio.sleep(self.redelivery_delay)
            return False

        self._failures.pop(failure_key, None)
        await consumer.commit({tp: message.offset + 1})
        return True
