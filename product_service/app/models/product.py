from decimal import Decimal
from typing import Optional

from sqlalchemy import TEXT, Boolean, CheckConstraint, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import ProductServiceAuditModel


class ProductModel(ProductServiceAuditModel):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("price > 0", name="ck_products_price_positive"),
        CheckConstraint(
            "min_order_quantity >= 1 AND max_order_quantity >= min_order_quantity",
            name="ck_products_order_quantity_bounds",
        ),
        # Live listings filter on is_deleted and sort newest first
        Index("ix_products_is_deleted_created_at", "is_deleted", "created_at"),
    )

    product_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    seller_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(TEXT, nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(19, 2), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    is_sellable: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    has_event: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    min_order_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    max_order_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
