"""
Pytest configuration and fixtures for Product Service tests.
"""

import os

import pytest

# Set up test environment before any application module reads settings
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("PRODUCT_DATABASE_URL", "sqlite+aiosqlite:///./test_product.db")
os.environ.setdefault("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092")
os.environ.setdefault("USER_SERVICE_URL", "http://user-service:8000")
os.environ.setdefault("KAFKA_ENABLE_CONSUMER", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from product_service.app.domain.price import Price
from product_service.app.domain.product import Product
from product_service.app.services.product_service import ProductService
from product_service.tests.fakes import (
    FakeSession,
    InMemoryProductRepository,
    RecordingEventPublisher,
)


@pytest.fixture
def repository() -> InMemoryProductRepository:
    return InMemoryProductRepository()


@pytest.fixture
def publisher() -> RecordingEventPublisher:
    return RecordingEventPublisher()


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def product_service(session, publisher, repository) -> ProductService:
    """ProductService wired to in-memory collaborators."""
    return ProductService(session, publisher, repository=repository)


@pytest.fixture
def widget() -> Product:
    """A fresh DRAFT product as sellers usually create it."""
    return Product.create(
        seller_id="seller-1",
        name="Widget",
        description="A very useful widget",
        price=Price.of(10000),
        min_order_quantity=1,
        max_order_quantity=100,
    )
