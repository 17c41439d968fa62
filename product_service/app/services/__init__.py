"""Service layer for Product Service"""

from .product_service import ProductService, ProductValidationResult

__all__ = [
    "ProductService",
    "ProductValidationResult",
]
