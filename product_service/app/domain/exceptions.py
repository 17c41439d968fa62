"""
Product Service error taxonomy.

Every business failure raised by the domain, the service layer and the
integration adapters is a ``ProductException`` carrying one
``ProductErrorCode``. The code fixes the stable error identifier, the
default human readable message and the HTTP status the API boundary renders.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    VALIDATION = "VALIDATION"
    STATE_CONFLICT = "STATE_CONFLICT"
    EXTERNAL_DEPENDENCY = "EXTERNAL_DEPENDENCY"


class ProductErrorCode(Enum):
    """Product error codes as (code, message, status_code, kind)"""

    # 0xx - lookup
    PRODUCT_NOT_FOUND = ("PRODUCT_001", "Product not found", 404, ErrorKind.NOT_FOUND)

    # 1xx - input validation
    INVALID_PRODUCT_NAME = (
        "PRODUCT_101",
        "Product name must be between 1 and 100 characters",
        400,
        ErrorKind.VALIDATION,
    )
    INVALID_PRICE = (
        "PRODUCT_102",
        "Price must be greater than zero",
        400,
        ErrorKind.VALIDATION,
    )
    INVALID_DISCOUNT_RATE = (
        "PRODUCT_104",
        "Discount rate must be between 0 and 100",
        400,
        ErrorKind.VALIDATION,
    )
    INVALID_PRODUCT_STATUS = (
        "PRODUCT_105",
        "Invalid product status",
        400,
        ErrorKind.VALIDATION,
    )
    INVALID_MIN_MAX_ORDER_QUANTITY = (
        "PRODUCT_109",
        "Order quantities must be at least 1 and minimum must not exceed maximum",
        400,
        ErrorKind.VALIDATION,
    )

    # 2xx - business rules
    PRODUCT_ALREADY_DISCONTINUED = (
        "PRODUCT_201",
        "Product is already discontinued",
        400,
        ErrorKind.STATE_CONFLICT,
    )
    ORDER_QUANTITY_BELOW_MINIMUM = (
        "PRODUCT_204",
        "Order quantity is below the minimum order quantity",
        400,
        ErrorKind.VALIDATION,
    )
    ORDER_QUANTITY_EXCEEDS_MAXIMUM = (
        "PRODUCT_205",
        "Order quantity exceeds the maximum order quantity",
        400,
        ErrorKind.VALIDATION,
    )

    # 3xx - modification rights
    CANNOT_MODIFY_DISCONTINUED_PRODUCT = (
        "PRODUCT_302",
        "Discontinued products cannot be modified",
        403,
        ErrorKind.STATE_CONFLICT,
    )

    # 6xx - external services
    SELLER_SERVICE_UNAVAILABLE = (
        "PRODUCT_602",
        "Seller service is unavailable",
        503,
        ErrorKind.EXTERNAL_DEPENDENCY,
    )
    HUB_INFO_NOT_FOUND = (
        "PRODUCT_603",
        "Hub information not found for seller",
        404,
        ErrorKind.EXTERNAL_DEPENDENCY,
    )

    def __init__(self, code: str, message: str, status_code: int, kind: ErrorKind):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.kind = kind


class ProductException(Exception):
    """Business error raised anywhere in the product service"""

    def __init__(
        self,
        error_code: ProductErrorCode,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.error_code = error_code
        self.message = message or error_code.message
        self.details = details or {}
        super().__init__(self.message)

    @property
    def code(self) -> str:
        return self.error_code.code

    @property
    def status_code(self) -> int:
        return self.error_code.status_code

    @property
    def kind(self) -> ErrorKind:
        return self.error_code.kind

    def __repr__(self) -> str:
        return f"ProductException({self.code}, {self.message!r})"
