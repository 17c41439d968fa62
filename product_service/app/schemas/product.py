from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..domain.product import Product
from ..repository.base import Page
from ..services.product_service import ProductValidationResult

# Name, price and quantity rules are enforced by the domain so that
# violations come back with their product error codes.


class ProductCreate(BaseModel):
    name: str
    description: Optional[str] = None
    price: Decimal
    min_order_quantity: int = 1
    max_order_quantity: int = 100


class ProductUpdate(BaseModel):
    name: str
    description: Optional[str] = None
    price: Decimal


class ProductEventStatusUpdate(BaseModel):
    has_event: bool


class OrderQuantityCheck(BaseModel):
    quantity: int


class ProductIdsRequest(BaseModel):
    product_ids: List[str] = Field(..., min_length=1, max_length=500)

    @field_validator("product_ids")
    @classmethod
    def strip_blank_ids(cls, v):
        ids = [product_id.strip() for product_id in v if product_id.strip()]
        if not ids:
            raise ValueError("product_ids must contain at least one id")
        return ids


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: str
    seller_id: str
    name: str
    description: Optional[str] = None
    price: Decimal
    status: str
    is_sellable: bool
    has_event: bool
    min_order_quantity: int
    max_order_quantity: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, product: Product) -> "ProductResponse":
        return cls(
            product_id=product.product_id,
            seller_id=product.seller_id,
            name=product.name,
            description=product.description,
            price=product.price.amount,
            status=product.status.value,
            is_sellable=product.is_sellable,
            has_event=product.has_event,
            min_order_quantity=product.min_order_quantity,
            max_order_quantity=product.max_order_quantity,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


class InternalProductResponse(BaseModel):
    """Projection served to other services"""

    product_id: str
    seller_id: str
    name: str
    price: Decimal
    status: str
    is_sellable: bool
    can_be_sold: bool
    min_order_quantity: int
    max_order_quantity: int

    @classmethod
    def from_domain(cls, product: Product) -> "InternalProductResponse":
        return cls(
            product_id=product.product_id,
            seller_id=product.seller_id,
            name=product.name,
            price=product.price.amount,
            status=product.status.value,
            is_sellable=product.is_sellable,
            can_be_sold=product.can_be_sold(),
            min_order_quantity=product.min_order_quantity,
            max_order_quantity=product.max_order_quantity,
        )


class ProductListResponse(BaseModel):
    products: List[ProductResponse]
    total: int
    page: int
    size: int
    total_pages: int

    @classmethod
    def from_page(cls, page: Page[Product]) -> "ProductListResponse":
        return cls(
            products=[ProductResponse.from_domain(p) for p in page.content],
            total=page.total_elements,
            page=page.page,
            size=page.size,
            total_pages=page.total_pages,
        )


class ProductExistenceResponse(BaseModel):
    product_id: str
    exists: bool
    valid: bool


class ProductValidationResponse(BaseModel):
    all_valid: bool
    valid_product_ids: List[str]
    invalid_product_ids: List[str]
    errors: Dict[str, str]

    @classmethod
    def from_result(cls, result: ProductValidationResult) -> "ProductValidationResponse":
        return cls(
            all_valid=result.all_valid,
            valid_product_ids=result.valid_product_ids,
            invalid_product_ids=result.invalid_product_ids,
            errors=result.errors,
        )
