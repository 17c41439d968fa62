"""SQLAlchemy implementation of the product repository"""

import uuid
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain.exceptions import ProductErrorCode, ProductException
from ..domain.price import Price
from ..domain.product import Product, ProductStatus
from ..models.product import ProductModel
from .base import Page, ProductRepository


class SQLAlchemyProductRepository(ProductRepository):
    """Repository for product database operations.

    Writes are flushed, never committed; the caller owns the transaction.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def save(self, product: Product) -> Product:
        """Insert a new product or update the stored one"""
        if not product.product_id:
            product.product_id = str(uuid.uuid4())
            row = None
        else:
            row = await self.db.get(ProductModel, product.product_id)

        if row is None:
            row = ProductModel(product_id=product.product_id)
            self._apply(row, product)
            self.db.add(row)
        else:
            self._apply(row, product)

        await self.db.flush()
        return product

    async def find_by_id(self, product_id: str) -> Optional[Product]:
        """Get product by ID"""
        query = select(ProductModel).where(
            ProductModel.product_id == product_id,
            ProductModel.is_deleted.is_(False),
        )
        result = await self.db.execute(query)
        row = result.scalar_one_or_none()
        return self._to_domain(row) if row else None

    async def find_all(self) -> List[Product]:
        return await self._find_many()

    async def find_by_seller_id(self, seller_id: str) -> List[Product]:
        return await self._find_many(ProductModel.seller_id == seller_id)

    async def find_by_status(self, status: ProductStatus) -> List[Product]:
        return await self._find_many(ProductModel.status == ProductStatus(status).value)

    async def find_by_name_containing(self, keyword: str) -> List[Product]:
        """Case-insensitive substring search; wildcard characters match literally"""
        return await self._find_many(
            func.lower(ProductModel.name).contains(
                (keyword or "").lower(), autoescape=True
            )
        )

    async def find_all_paged(self, page: int, size: int) -> Page[Product]:
        return await self._find_page(page, size)

    async def find_by_seller_id_paged(
        self, seller_id: str, page: int, size: int
    ) -> Page[Product]:
        return await self._find_page(page, size, ProductModel.seller_id == seller_id)

    async def delete(self, product_id: str, deleted_by: Optional[str] = None) -> Product:
        """Soft delete by setting is_deleted with timestamp and actor"""
        query = select(ProductModel).where(
            ProductModel.product_id == product_id,
            ProductModel.is_deleted.is_(False),
        )
        result = await self.db.execute(query)
        row = result.scalar_one_or_none()
        if row is None:
            raise ProductException(
                ProductErrorCode.PRODUCT_NOT_FOUND,
                f"Product not found: {product_id}",
            )

        product = self._to_domain(row)
        product.delete(deleted_by)
        self._apply(row, product)
        await self.db.flush()
        return product

    async def exists_by_id(self, product_id: str) -> bool:
        query = select(func.count()).select_from(ProductModel).where(
            ProductModel.product_id == product_id,
            ProductModel.is_deleted.is_(False),
        )
        result = await self.db.execute(query)
        return result.scalar_one() > 0

    async def _find_many(self, *criteria) -> List[Product]:
        query = (
            select(ProductModel)
            .where(ProductModel.is_deleted.is_(False), *criteria)
            .order_by(ProductModel.created_at.desc(), ProductModel.product_id)
        )
        result = await self.db.execute(query)
        return [self._to_domain(row) for row in result.scalars().all()]

    async def _find_page(self, page: int, size: int, *criteria) -> Page[Product]:
        conditions = [ProductModel.is_deleted.is_(False), *criteria]

        count_query = select(func.count()).select_from(ProductModel).where(*conditions)
        total = (await self.db.execute(count_query)).scalar_one()

        query = (
            select(ProductModel)
            .where(*conditions)
            .order_by(ProductModel.created_at.desc(), ProductModel.product_id)
            .offset(page * size)
            .limit(size)
        )
        result = await self.db.execute(query)
        content = [self._to_domain(row) for row in result.scalars().all()]
        return Page(content=content, page=page, size=size, total_elements=total)

    @staticmethod
    def _apply(row: ProductModel, product: Product) -> None:
        row.seller_id = product.seller_id
        row.name = product.name
        row.description = product.description
        row.price = product.price.amount
        row.status = product.status.value
        row.is_sellable = product.is_sellable
        row.has_event = product.has_event
        row.min_order_quantity = product.min_order_quantity
        row.max_order_quantity = product.max_order_quantity
        row.created_at = product.created_at
        row.created_by = product.created_by
        row.updated_at = product.updated_at
        row.updated_by = product.updated_by
        row.deleted_at = product.deleted_at
        row.deleted_by = product.deleted_by
        row.is_deleted = product.is_deleted

    @staticmethod
    def _to_domain(row: ProductModel) -> Product:
        return Product.reconstruct(
            product_id=row.product_id,
            seller_id=row.seller_id,
            name=row.name,
            description=row.description,
            price=Price.of(row.price),
            status=ProductStatus(row.status),
            is_sellable=row.is_sellable,
            has_event=row.has_event,
            min_order_quantity=row.min_order_quantity,
            max_order_quantity=row.max_order_quantity,
            created_at=row.created_at,
            created_by=row.created_by,
            updated_at=row.updated_at,
            updated_by=row.updated_by,
            deleted_at=row.deleted_at,
            deleted_by=row.deleted_by,
            is_deleted=row.is_deleted,
        )
