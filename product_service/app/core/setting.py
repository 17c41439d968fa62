"""
Product Service configuration
"""

from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

# Get the product service directory path
PRODUCT_SERVICE_DIR = Path(__file__).parent.parent.parent
ENV_FILE = PRODUCT_SERVICE_DIR / ".env"


class ProductSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Product Service"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    ENABLE_FILE_LOGGING: bool = False
    LOG_DIR: str = ""

    # Service specific
    SERVICE_NAME: str = "product-service"

    # Database
    PRODUCT_DATABASE_URL: str
    DATABASE_POOL_SIZE: int = 25
    DATABASE_MAX_OVERFLOW: int = 50

    # Kafka for events
    KAFKA_BOOTSTRAP_SERVERS: str
    KAFKA_GROUP_ID: str = "product-service"
    KAFKA_ENABLE_CONSUMER: bool = True

    # Outbound product topics
    KAFKA_TOPIC_PRODUCT_CREATED: str = "product-created"
    KAFKA_TOPIC_PRODUCT_UPDATED: str = "product-updated"
    KAFKA_TOPIC_PRODUCT_DELETED: str = "product-deleted"
    KAFKA_TOPIC_PRODUCT_STATUS_CHANGED: str = "product-status-changed"

    # Inbound inventory topics
    KAFKA_TOPIC_INVENTORY_LOW_STOCK: str = "inventory-low-stock"
    KAFKA_TOPIC_INVENTORY_RESTOCKED: str = "inventory-restocked"

    # Consumer redelivery policy
    KAFKA_CONSUMER_MAX_REDELIVERIES: int = 5
    KAFKA_CONSUMER_RETRY_DELAY: float = 1.0

    # External Service URLs
    USER_SERVICE_URL: str
    USER_SERVICE_TIMEOUT: float = 5.0

    # CORS
    CORS_ORIGINS: List[str] = ["*"]
    CORS_CREDENTIALS: bool = True
    CORS_METHODS: List[str] = ["*"]
    CORS_HEADERS: List[str] = ["*"]

    # Paging
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100


# Create a singleton instance
_settings_instance = None


def get_settings() -> ProductSettings:
    """Get settings singleton instance"""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = ProductSettings()  # type: ignore[call-arg]
    return _settings_instance
