"""Public catalog endpoints"""

from fastapi import APIRouter, Query

from ...schemas.product import ProductListResponse, ProductResponse
from ...services.product_service import ProductService
from ..dependencies import PageDep, PageSizeDep, ProductServiceDep

router = APIRouter(prefix="/v1/product/web/all")


@router.get("/products", response_model=ProductListResponse)
async def list_products(
    page: int = PageDep,
    size: int = PageSizeDep,
    service: ProductService = ProductServiceDep,
):
    """List live products, newest first"""
    result = await service.get_products_with_paging(page, size)
    return ProductListResponse.from_page(result)


@router.get("/products/search", response_model=ProductListResponse)
async def search_products(
    keyword: str = Query(..., min_length=1),
    page: int = PageDep,
    size: int = PageSizeDep,
    service: ProductService = ProductServiceDep,
):
    """Case-insensitive search on product name"""
    result = await service.search_products(keyword, page, size)
    return ProductListResponse.from_page(result)


@router.get("/products/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str, service: ProductService = ProductServiceDep):
    product = await service.get_product(product_id)
    return ProductResponse.from_domain(product)
