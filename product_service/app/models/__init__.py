from .base import ProductServiceAuditModel, ProductServiceBase
from .product import ProductModel

"""Product Service Models"""

__all__ = [
    "ProductServiceBase",
    "ProductServiceAuditModel",
    "ProductModel",
]
