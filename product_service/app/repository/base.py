"""Persistence port for the Product aggregate"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Generic, List, Optional, TypeVar

from ..domain.product import Product, ProductStatus

T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    """One page of results. ``page`` is zero based."""

    content: List[T] = field(default_factory=list)
    page: int = 0
    size: int = 20
    total_elements: int = 0

    @property
    def total_pages(self) -> int:
        if self.size <= 0:
            return 0
        return math.ceil(self.total_elements / self.size)

    @property
    def is_last(self) -> bool:
        return self.page + 1 >= self.total_pages


class ProductRepository(ABC):
    """Load/persist boundary for products. Every query skips soft-deleted rows."""

    @abstractmethod
    async def save(self, product: Product) -> Product:
        """Insert when the id is new, otherwise update all mutable fields"""

    @abstractmethod
    async def find_by_id(self, product_id: str) -> Optional[Product]:
        pass

    @abstractmethod
    async def find_all(self) -> List[Product]:
        pass

    @abstractmethod
    async def find_by_seller_id(self, seller_id: str) -> List[Product]:
        pass

    @abstractmethod
    async def find_by_status(self, status: ProductStatus) -> List[Product]:
        pass

    @abstractmethod
    async def find_by_name_containing(self, keyword: str) -> List[Product]:
        """Case-insensitive substring match on name"""

    @abstractmethod
    async def find_all_paged(self, page: int, size: int) -> Page[Product]:
        """Newest first"""

    @abstractmethod
    async def find_by_seller_id_paged(
        self, seller_id: str, page: int, size: int
    ) -> Page[Product]:
        """Newest first"""

    @abstractmethod
    async def delete(
        self, product_id: str, deleted_by: Optional[str] = None
    ) -> Product:
        """Mark the product soft-deleted and return it as stored"""

    @abstractmethod
    async def exists_by_id(self, product_id: str) -> bool:
        pass
