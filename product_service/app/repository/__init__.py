"""Repository layer for Product Service"""

from .base import Page, ProductRepository
from .product_repository import SQLAlchemyProductRepository

__all__ = [
    "Page",
    "ProductRepository",
    "SQLAlchemyProductRepository",
]
