"""Initial migration

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "products",
        sa.Column("product_id", sa.String(length=36), nullable=False),
        sa.Column("seller_id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Numeric(precision=19, scale=2), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column(
            "is_sellable", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("has_event", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("min_order_quantity", sa.Integer(), nullable=False),
        sa.Column("max_order_quantity", sa.Integer(), nullable=False),
        # Audit and soft delete
        sa.Column("created_at", sa.DateTime(timezone=False), nullable=False),
        sa.Column("created_by", sa.String(length=64), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=False), nullable=False),
        sa.Column("updated_by", sa.String(length=64), nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=False), nullable=True),
        sa.Column("deleted_by", sa.String(length=64), nullable=True),
        sa.Column(
            "is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.PrimaryKeyConstraint("product_id"),
        sa.CheckConstraint("price > 0", name="ck_products_price_positive"),
        sa.CheckConstraint(
            "min_order_quantity >= 1 AND max_order_quantity >= min_order_quantity",
            name="ck_products_order_quantity_bounds",
        ),
    )
    op.create_index("ix_products_seller_id", "products", ["seller_id"])
    op.create_index("ix_products_name", "products", ["name"])
    op.create_index("ix_products_status", "products", ["status"])
    op.create_index("ix_products_is_deleted", "products", ["is_deleted"])
    op.create_index(
        "ix_products_is_deleted_created_at", "products", ["is_deleted", "created_at"]
    )


def downgrade() -> None:
    op.drop_index("ix_products_is_deleted_created_at", table_name="products")
    op.drop_index("ix_products_is_deleted", table_name="products")
    op.drop_index("ix_products_status", table_name="products")
    op.drop_index("ix_products_name", table_name="products")
    op.drop_index("ix_products_seller_id", table_name="products")
    op.drop_table("products")
