"""Product service for business logic"""

from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from decimal import Decimal
from typing import AsyncIterator, Awaitable, Callable, Dict, List, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from ..domain.exceptions import ProductErrorCode, ProductException
from ..domain.price import Price
from ..domain.product import Product, ProductStatus
from ..events.event_producers import ProductEventPublisher
from ..events.schemas import (
    ProductCreatedEventData,
    ProductDeletedEventData,
    ProductEventData,
    ProductStatusChangedEventData,
    ProductUpdatedEventData,
)
from ..repository.base import Page, ProductRepository
from ..repository.product_repository import SQLAlchemyProductRepository
from ..utils.logging import setup_product_logging as setup_logging

# Setup structured logging for the service
logger = setup_logging("product_service.services.product")

PriceInput = Union[Price, Decimal, int, float, str]


@dataclass
class ProductValidationResult:
    valid_product_ids: List[str] = field(default_factory=list)
    invalid_product_ids: List[str] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def all_valid(self) -> bool:
        return not self.invalid_product_ids


class ProductService:
    """
    Product use cases.

    Each command is one unit of work on the session: load, mutate, persist,
    commit. Events go out only after the commit succeeds, and a failed
    publication is logged without failing the command.
    """

    def __init__(
        self,
        db: AsyncSession,
        event_producer: Optional[ProductEventPublisher] = None,
        repository: Optional[ProductRepository] = None,
    ):
        self.db = db
        self.repository = repository or SQLAlchemyProductRepository(db)
        self.event_producer = event_producer

    # ==============================================
    # COMMANDS
    # ==============================================

    async def create_product(
        self,
        seller_id: str,
        name: str,
        description: Optional[str],
        price: PriceInput,
        min_order_quantity: int,
        max_order_quantity: int,
        hub_id: Optional[str] = None,
        product_id: Optional[str] = None,
        correlation_id: Optional[str] = None,
    ) -> Product:
        """Create a new DRAFT product"""
        async with self._unit_of_work(
            "create_product", seller_id=seller_id, correlation_id=correlation_id
        ):
            product = Product.create(
                seller_id=seller_id,
                name=name,
                description=description,
                price=_as_price(price),
                min_order_quantity=min_order_quantity,
                max_order_quantity=max_order_quantity,
                product_id=product_id,
            )
            product = await self.repository.save(product)

        logger.info(
            "Product created successfully",
            extra={
                "product_id": product.product_id,
                "seller_id": seller_id,
                "hub_id": hub_id,
                "correlation_id": correlation_id,
            },
        )

        await self._publish_safely(
            "publish_product_created",
            ProductCreatedEventData(
                product_id=product.product_id,
                seller_id=product.seller_id,
                hub_id=hub_id,
                name=product.name,
                created_at=product.created_at,
            ),
            correlation_id,
        )
        return product

    async def update_product(
        self,
        product_id: str,
        name: str,
        description: Optional[str],
        price: PriceInput,
        updated_by: Optional[str] = None,
        correlation_id: Optional[str] = None,
    ) -> Product:
        """Replace name, description and price"""
        async with self._unit_of_work(
            "update_product", product_id=product_id, correlation_id=correlation_id
        ):
            product = await self._load(product_id)
            product.update(name, description, _as_price(price), updated_by=updated_by)
            product = await self.repository.save(product)

        logger.info(
            "Product updated successfully",
            extra={"product_id": product_id, "correlation_id": correlation_id},
        )

        await self._publish_safely(
            "publish_product_updated",
            ProductUpdatedEventData(
                product_id=product.product_id,
                name=product.name,
                price=product.price.amount,
                updated_at=product.updated_at,
            ),
            correlation_id,
        )
        return product

    async def delete_product(
        self,
        product_id: str,
        deleted_by: Optional[str] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Soft delete a product"""
        async with self._unit_of_work(
            "delete_product", product_id=product_id, correlation_id=correlation_id
        ):
            await self._load(product_id)
            product = await self.repository.delete(product_id, deleted_by=deleted_by)

        logger.info(
            "Product deleted successfully",
            extra={
                "product_id": product_id,
                "deleted_by": deleted_by,
                "correlation_id": correlation_id,
            },
        )

        await self._publish_safely(
            "publish_product_deleted",
            ProductDeletedEventData(
                product_id=product_id,
                seller_id=product.seller_id,
                deleted_at=product.deleted_at,
            ),
            correlation_id,
        )

    async def activate_product(
        self,
        product_id: str,
        updated_by: Optional[str] = None,
        correlation_id: Optional[str] = None,
    ) -> Product:
        return await self._transition(
            product_id, Product.activate, updated_by, correlation_id
        )

    async def suspend_product(
        self,
        product_id: str,
        updated_by: Optional[str] = None,
        correlation_id: Optional[str] = None,
    ) -> Product:
        return await self._transition(
            product_id, Product.suspend, updated_by, correlation_id
        )

    async def discontinue_product(
        self,
        product_id: str,
        updated_by: Optional[str] = None,
        correlation_id: Optional[str] = None,
    ) -> Product:
        return await self._transition(
            product_id,
            Product.discontinue,
            updated_by,
            correlation_id,
            always_publish=True,
        )

    async def mark_as_out_of_stock(
        self, product_id: str, correlation_id: Optional[str] = None
    ) -> Product:
        """Stock depleted; no-op when the product is already OUT_OF_STOCK"""
        return await self._transition(
            product_id,
            Product.mark_out_of_stock,
            None,
            correlation_id,
            skip_when=lambda product: product.status is ProductStatus.OUT_OF_STOCK,
        )

    async def restore_from_out_of_stock(
        self, product_id: str, correlation_id: Optional[str] = None
    ) -> Product:
        """Restocked; only an OUT_OF_STOCK product is reactivated"""
        return await self._transition(
            product_id,
            Product.activate,
            None,
            correlation_id,
            skip_when=lambda product: product.status is not ProductStatus.OUT_OF_STOCK,
        )

    async def set_product_event_status(
        self,
        product_id: str,
        has_event: bool,
        updated_by: Optional[str] = None,
        correlation_id: Optional[str] = None,
    ) -> Product:
        async with self._unit_of_work(
            "set_product_event_status",
            product_id=product_id,
            correlation_id=correlation_id,
        ):
            product = await self._load(product_id)
            product.set_event_status(has_event, updated_by=updated_by)
            product = await self.repository.save(product)

        logger.info(
            "Product event flag updated",
            extra={
                "product_id": product_id,
                "has_event": has_event,
                "correlation_id": correlation_id,
            },
        )
        return product

    # ==============================================
    # QUERIES
    # ==============================================

    async def get_product(self, product_id: str) -> Product:
        """Get product by ID, raising PRODUCT_NOT_FOUND when absent"""
        return await self._load(product_id)

    async def get_all_products(self) -> List[Product]:
        return await self.repository.find_all()

    async def get_products_with_paging(self, page: int, size: int) -> Page[Product]:
        return await self.repository.find_all_paged(page, size)

    async def get_products_by_seller(
        self, seller_id: str, page: int, size: int
    ) -> Page[Product]:
        return await self.repository.find_by_seller_id_paged(seller_id, page, size)

    async def get_products_by_seller_id(self, seller_id: str) -> List[Product]:
        return await self.repository.find_by_seller_id(seller_id)

    async def get_products_by_status(self, status: ProductStatus) -> List[Product]:
        return await self.repository.find_by_status(status)

    async def search_products(self, keyword: str, page: int, size: int) -> Page[Product]:
        """Case-insensitive name search, paged in memory"""
        matches = await self.repository.find_by_name_containing(keyword)
        start = page * size
        return Page(
            content=matches[start : start + size],
            page=page,
            size=size,
            total_elements=len(matches),
        )

    async def exists_product(self, product_id: str) -> bool:
        return await self.repository.exists_by_id(product_id)

    async def check_order_quantity(self, product_id: str, quantity: int) -> Product:
        product = await self._load(product_id)
        product.validate_order_quantity(quantity)
        return product

    async def validate_products(self, product_ids: List[str]) -> ProductValidationResult:
        result = ProductValidationResult()
        for product_id in product_ids:
            try:
                exists = await self.repository.exists_by_id(product_id)
            except Exception as e:
                logger.warning(
                    "Product validation lookup failed",
                    extra={"product_id": product_id, "error": str(e)},
                )
                result.invalid_product_ids.append(product_id)
                result.errors[product_id] = str(e)
                continue

            if exists:
                result.valid_product_ids.append(product_id)
            else:
                result.invalid_product_ids.append(product_id)
                result.errors[product_id] = ProductErrorCode.PRODUCT_NOT_FOUND.message

        logger.info(
            "Validated products",
            extra={
                "requested": len(product_ids),
                "invalid": len(result.invalid_product_ids),
            },
        )
        return result

    # ==============================================
    # INTERNALS
    # ==============================================

    async def _transition(
        self,
        product_id: str,
        mutation: Callable[..., None],
        updated_by: Optional[str],
        correlation_id: Optional[str],
        always_publish: bool = False,
        skip_when: Optional[Callable[[Product], bool]] = None,
    ) -> Product:
        operation = mutation.__name__
        skipped = False
        async with self._unit_of_work(
            operation, product_id=product_id, correlation_id=correlation_id
        ):
            product = await self._load(product_id)
            old_status = product.status
            if skip_when is not None and skip_when(product):
                skipped = True
            else:
                mutation(product, updated_by=updated_by)
                product = await self.repository.save(product)

        if skipped:
            logger.info(
                "Product already in target condition, nothing to do",
                extra={
                    "product_id": product_id,
                    "operation": operation,
                    "status": old_status.value,
                    "correlation_id": correlation_id,
                },
            )
            return product

        new_status = product.status
        logger.info(
            "Product status changed",
            extra={
                "product_id": product_id,
                "operation": operation,
                "old_status": old_status.value,
                "new_status": new_status.value,
                "correlation_id": correlation_id,
            },
        )

        if always_publish or old_status is not new_status:
            await self._publish_safely(
                "publish_product_status_changed",
                ProductStatusChangedEventData(
                    product_id=product.product_id,
                    old_status=old_status.value,
                    new_status=new_status.value,
                    changed_at=product.updated_at,
                ),
                correlation_id,
            )
        return product

    async def _load(self, product_id: str) -> Product:
        product = await self.repository.find_by_id(product_id)
        if product is None:
            raise ProductException(
                ProductErrorCode.PRODUCT_NOT_FOUND,
                f"Product not found: {product_id}",
            )
        if not product.has_consistent_sellable_flag():
            logger.warning(
                "Stored sellable flag disagrees with product status",
                extra={
                    "product_id": product_id,
                    "status": product.status.value,
                    "is_sellable": product.is_sellable,
                },
            )
        return product

    @asynccontextmanager
    async def _unit_of_work(self, operation: str, **context) -> AsyncIterator[None]:
        try:
            yield
            await self.db.commit()
        except ProductException as e:
            await self.db.rollback()
            logger.warning(
                f"Product operation rejected: {e.message}",
                extra={"operation": operation, "error_code": e.code, **context},
            )
            raise
        except Exception as e:
            await self.db.rollback()
            logger.error(
                f"Failed to {operation.replace('_', ' ')}: {str(e)}",
                extra={"operation": operation, "error": str(e), **context},
                exc_info=True,
            )
            raise

    async def _publish_safely(
        self,
        method_name: str,
        data: ProductEventData,
        correlation_id: Optional[str],
    ) -> None:
        if not self.event_producer:
            logger.debug(
                "No event producer configured, event not published",
                extra={"event": method_name, "product_id": getattr(data, "product_id")},
            )
            return

        publish: Callable[..., Awaitable[None]] = getattr(
            self.event_producer, method_name
        )
        try:
            await publish(data, correlation_id=correlation_id)
        except Exception as e:
            logger.error(
                "Event publication failed; command already committed",
                extra={
                    "event": method_name,
                    "product_id": getattr(data, "product_id"),
                    "error": str(e),
                    "correlation_id": correlation_id,
                },
                exc_info=True,
            )


def _as_price(price: PriceInput) -> Price:
    return price if isinstance(price, Price) else Price.of(price)
