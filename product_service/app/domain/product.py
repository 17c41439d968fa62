"""
Product aggregate and its lifecycle state machine.

Status changes only through the transition methods on ``Product``. Every
transition sets ``is_sellable`` explicitly; the flag is stored, not derived,
and ``has_consistent_sellable_flag`` reports when it disagrees with the
status.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from .exceptions import ProductErrorCode, ProductException
from .price import Price

NAME_MAX_LENGTH = 100


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class ProductStatus(str, Enum):
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"
    OUT_OF_STOCK = "OUT_OF_STOCK"
    DISCONTINUED = "DISCONTINUED"

    def is_sellable(self) -> bool:
        return self is ProductStatus.ACTIVE

    def is_modifiable(self) -> bool:
        return self is not ProductStatus.DISCONTINUED

    @classmethod
    def from_value(cls, value: str) -> "ProductStatus":
        try:
            return cls(str(value).upper())
        except ValueError:
            raise ProductException(
                ProductErrorCode.INVALID_PRODUCT_STATUS,
                f"Unknown product status: {value}",
            ) from None


def _validate_name(name: Optional[str]) -> None:
    if name is None or not name.strip():
        raise ProductException(
            ProductErrorCode.INVALID_PRODUCT_NAME, "Product name must not be blank"
        )
    if len(name) > NAME_MAX_LENGTH:
        raise ProductException(
            ProductErrorCode.INVALID_PRODUCT_NAME,
            f"Product name must be at most {NAME_MAX_LENGTH} characters",
        )


def _validate_order_quantities(
    min_order_quantity: Optional[int], max_order_quantity: Optional[int]
) -> None:
    if min_order_quantity is None or min_order_quantity < 1:
        raise ProductException(
            ProductErrorCode.INVALID_MIN_MAX_ORDER_QUANTITY,
            "Minimum order quantity must be at least 1",
        )
    if max_order_quantity is None or max_order_quantity < 1:
        raise ProductException(
            ProductErrorCode.INVALID_MIN_MAX_ORDER_QUANTITY,
            "Maximum order quantity must be at least 1",
        )
    if min_order_quantity > max_order_quantity:
        raise ProductException(
            ProductErrorCode.INVALID_MIN_MAX_ORDER_QUANTITY,
            "Minimum order quantity must not exceed maximum order quantity",
        )


@dataclass
class Product:
    seller_id: str
    name: str
    price: Price
    min_order_quantity: int
    max_order_quantity: int
    description: Optional[str] = None
    product_id: Optional[str] = None
    status: ProductStatus = ProductStatus.DRAFT
    is_sellable: bool = False
    has_event: bool = False
    created_at: datetime = field(default_factory=utcnow)
    created_by: Optional[str] = None
    updated_at: datetime = field(default_factory=utcnow)
    updated_by: Optional[str] = None
    deleted_at: Optional[datetime] = None
    deleted_by: Optional[str] = None
    is_deleted: bool = False

    # ==============================================
    # FACTORIES
    # ==============================================

    @classmethod
    def create(
        cls,
        seller_id: str,
        name: str,
        description: Optional[str],
        price: Price,
        min_order_quantity: int,
        max_order_quantity: int,
        product_id: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> "Product":
        """Build a new DRAFT product after validating name and quantity bounds"""
        _validate_name(name)
        _validate_order_quantities(min_order_quantity, max_order_quantity)
        if not isinstance(price, Price):
            price = Price.of(price)

        now = utcnow()
        return cls(
            product_id=product_id,
            seller_id=seller_id,
            name=name,
            description=description,
            price=price,
            status=ProductStatus.DRAFT,
            is_sellable=False,
            has_event=False,
            min_order_quantity=min_order_quantity,
            max_order_quantity=max_order_quantity,
            created_at=now,
            created_by=created_by or seller_id,
            updated_at=now,
            updated_by=created_by or seller_id,
            is_deleted=False,
        )

    @classmethod
    def reconstruct(cls, **fields) -> "Product":
        """Rebuild a product from stored data without validation"""
        return cls(**fields)

    # ==============================================
    # MUTATIONS
    # ==============================================

    def update(
        self,
        name: str,
        description: Optional[str],
        price: Price,
        updated_by: Optional[str] = None,
    ) -> None:
        if not self.status.is_modifiable():
            raise ProductException(ProductErrorCode.CANNOT_MODIFY_DISCONTINUED_PRODUCT)
        _validate_name(name)
        if not isinstance(price, Price):
            price = Price.of(price)

        self.name = name
        self.description = description
        self.price = price
        self._touch(updated_by)

    def activate(self, updated_by: Optional[str] = None) -> None:
        self._ensure_not_discontinued()
        self.status = ProductStatus.ACTIVE
        self.is_sellable = True
        self._touch(updated_by)

    def suspend(self, updated_by: Optional[str] = None) -> None:
        self._ensure_not_discontinued()
        self.status = ProductStatus.SUSPENDED
        self.is_sellable = False
        self._touch(updated_by)

    def discontinue(self, updated_by: Optional[str] = None) -> None:
        self._ensure_not_discontinued()
        self.status = ProductStatus.DISCONTINUED
        self.is_sellable = False
        self._touch(updated_by)

    def mark_out_of_stock(self, updated_by: Optional[str] = None) -> None:
        # Unconditional; the service layer owns idempotency.
        self.status = ProductStatus.OUT_OF_STOCK
        self.is_sellable = False
        self._touch(updated_by)

    def set_event_status(self, has_event: bool, updated_by: Optional[str] = None):
        self.has_event = has_event
        self._touch(updated_by)

    def delete(self, actor: Optional[str] = None) -> None:
        now = utcnow()
        self.is_deleted = True
        self.deleted_at = now
        self.deleted_by = actor
        self.updated_at = now

    def restore(self) -> None:
        self.is_deleted = False
        self.deleted_at = None
        self.deleted_by = None
        self.updated_at = utcnow()

    # ==============================================
    # CHECKS AND QUERIES
    # ==============================================

    def validate_order_quantity(self, quantity: int) -> None:
        if quantity < self.min_order_quantity:
            raise ProductException(
                ProductErrorCode.ORDER_QUANTITY_BELOW_MINIMUM,
                f"Order quantity {quantity} is below the minimum of "
                f"{self.min_order_quantity}",
            )
        if quantity > self.max_order_quantity:
            raise ProductException(
                ProductErrorCode.ORDER_QUANTITY_EXCEEDS_MAXIMUM,
                f"Order quantity {quantity} exceeds the maximum of "
                f"{self.max_order_quantity}",
            )

    def is_owned_by(self, user_id: Optional[str]) -> bool:
        return user_id is not None and self.seller_id == user_id

    def is_discontinued(self) -> bool:
        return self.status is ProductStatus.DISCONTINUED

    def can_be_sold(self) -> bool:
        return self.is_sellable and self.status is ProductStatus.ACTIVE

    def has_consistent_sellable_flag(self) -> bool:
        return self.is_sellable == self.status.is_sellable()

    def _ensure_not_discontinued(self) -> None:
        if self.is_discontinued():
            raise ProductException(ProductErrorCode.PRODUCT_ALREADY_DISCONTINUED)

    def _touch(self, updated_by: Optional[str]) -> None:
        self.updated_at = utcnow()
        if updated_by is not None:
            self.updated_by = updated_by
