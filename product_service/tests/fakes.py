"""In-memory collaborators for exercising the service layer without I/O."""

import copy
import uuid
from typing import Any, Dict, List, Optional, Tuple

from product_service.app.domain.exceptions import ProductErrorCode, ProductException
from product_service.app.domain.product import Product, ProductStatus
from product_service.app.events.event_producers import ProductEventPublisher
from product_service.app.repository.base import Page, ProductRepository


class FakeSession:
    """Stands in for AsyncSession; counts commits and rollbacks."""

    def __init__(self, commit_error: Optional[Exception] = None):
        self.commit_error = commit_error
        self.commits = 0
        self.rollbacks = 0

    async def commit(self) -> None:
        if self.commit_error is not None:
            raise self.commit_error
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1


class InMemoryProductRepository(ProductRepository):
    """Stores copies so that callers never share state with the store."""

    def __init__(self):
        self.rows: Dict[str, Product] = {}
        self.saves = 0

    async def save(self, product: Product) -> Product:
        if not product.product_id:
            product.product_id = str(uuid.uuid4())
        self.rows[product.product_id] = copy.deepcopy(product)
        self.saves += 1
        return product

    async def find_by_id(self, product_id: str) -> Optional[Product]:
        row = self.rows.get(product_id)
        if row is None or row.is_deleted:
            return None
        return copy.deepcopy(row)

    async def find_all(self) -> List[Product]:
        return self._live()

    async def find_by_seller_id(self, seller_id: str) -> List[Product]:
        return [p for p in self._live() if p.seller_id == seller_id]

    async def find_by_status(self, status: ProductStatus) -> List[Product]:
        return [p for p in self._live() if p.status is status]

    async def find_by_name_containing(self, keyword: str) -> List[Product]:
        keyword = (keyword or "").lower()
        return [p for p in self._live() if keyword in p.name.lower()]

    async def find_all_paged(self, page: int, size: int) -> Page[Product]:
        return self._page(self._live(), page, size)

    async def find_by_seller_id_paged(
        self, seller_id: str, page: int, size: int
    ) -> Page[Product]:
        return self._page(await self.find_by_seller_id(seller_id), page, size)

    async def delete(self, product_id: str, deleted_by: Optional[str] = None) -> Product:
        row = self.rows.get(product_id)
        if row is None or row.is_deleted:
            raise ProductException(ProductErrorCode.PRODUCT_NOT_FOUND)
        row.delete(deleted_by)
        return copy.deepcopy(row)

    async def exists_by_id(self, product_id: str) -> bool:
        row = self.rows.get(product_id)
        return row is not None and not row.is_deleted

    def _live(self) -> List[Product]:
        live = [copy.deepcopy(p) for p in self.rows.values() if not p.is_deleted]
        live.sort(key=lambda p: p.product_id)
        live.sort(key=lambda p: p.created_at, reverse=True)
        return live

    @staticmethod
    def _page(products: List[Product], page: int, size: int) -> Page[Product]:
        start = page * size
        return Page(
            content=products[start : start + size],
            page=page,
            size=size,
            total_elements=len(products),
        )


class RecordingEventPublisher(ProductEventPublisher):
    """Keeps every published event as (kind, data, correlation_id)."""

    def __init__(self):
        self.events: List[Tuple[str, Any, Optional[str]]] = []

    async def publish_product_created(self, data, correlation_id=None) -> None:
        self.events.append(("created", data, correlation_id))

    async def publish_product_updated(self, data, correlation_id=None) -> None:
        self.events.append(("updated", data, correlation_id))

    async def publish_product_deleted(self, data, correlation_id=None) -> None:
        self.events.append(("deleted", data, correlation_id))

    async def publish_product_status_changed(self, data, correlation_id=None) -> None:
        self.events.append(("status_changed", data, correlation_id))

    def of_kind(self, kind: str) -> List[Any]:
        return [data for event_kind, data, _ in self.events if event_kind == kind]


class FailingEventPublisher(RecordingEventPublisher):
    """Every publication raises, as when the broker rejects the record."""

    async def publish_product_created(self, data, correlation_id=None) -> None:
        raise RuntimeError("broker unavailable")

    async def publish_product_updated(self, data, correlation_id=None) -> None:
        raise RuntimeError("broker unavailable")

    async def publish_product_deleted(self, data, correlation_id=None) -> None:
        raise RuntimeError("broker unavailable")

    async def publish_product_status_changed(self, data, correlation_id=None) -> None:
        raise RuntimeError("broker unavailable")
