from .exceptions import ErrorKind, ProductErrorCode, ProductException
from .price import Price
from .product import Product, ProductStatus

__all__ = [
    "ErrorKind",
    "Price",
    "Product",
    "ProductErrorCode",
    "ProductException",
    "ProductStatus",
]
