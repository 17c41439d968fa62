from .product import (
    InternalProductResponse,
    OrderQuantityCheck,
    ProductCreate,
    ProductEventStatusUpdate,
    ProductExistenceResponse,
    ProductIdsRequest,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
    ProductValidationResponse,
)

__all__ = [
    "InternalProductResponse",
    "OrderQuantityCheck",
    "ProductCreate",
    "ProductEventStatusUpdate",
    "ProductExistenceResponse",
    "ProductIdsRequest",
    "ProductListResponse",
    "ProductResponse",
    "ProductUpdate",
    "ProductValidationResponse",
]
