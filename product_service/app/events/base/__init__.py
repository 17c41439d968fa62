"""
Product Service event envelope and messaging interfaces.
"""

import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class BaseEvent(BaseModel):
    """Envelope shared by every event the product service publishes"""

    event_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    event_type: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    version: str = "1.0"
    source_service: str = "product-service"
    correlation_id: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)


class EventHandler(ABC):
    """Abstract base class for inbound event handlers"""

    @abstractmethod
    async def handle(self, payload: Dict[str, Any]) -> None:
        """Handle one decoded message payload"""
        pass


class EventPublisher(ABC):
    """Abstract base class for event publishers"""

    @abstractmethod
    async def publish(
        self, event: BaseEvent, topic: str, key: Optional[str] = None
    ) -> None:
        """Publish an event"""
        pass


class EventSubscriber(ABC):
    """Abstract base class for event subscribers"""

    @abstractmethod
    async def subscribe(self, topic: str, handler: EventHandler) -> None:
        """Subscribe a handler to a topic"""
        pass
