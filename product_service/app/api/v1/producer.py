"""Seller self-service endpoints. The seller id comes from X-User-Id."""

from typing import Optional

from fastapi import APIRouter, status

from ...clients.user_client import UserServiceClient, resolve_seller_hub
from ...schemas.product import (
    ProductCreate,
    ProductEventStatusUpdate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
)
from ...services.product_service import ProductService
from ...utils.logging import setup_product_logging as setup_logging
from ..dependencies import (
    CorrelationIdDep,
    PageDep,
    PageSizeDep,
    ProductServiceDep,
    SellerIdDep,
    UserServiceClientDep,
)

logger = setup_logging("product_service.api.producer")
router = APIRouter(prefix="/v1/product/web/producer")


@router.post(
    "/products", response_model=ProductResponse, status_code=status.HTTP_201_CREATED
)
async def create_product(
    product_data: ProductCreate,
    seller_id: str = SellerIdDep,
    correlation_id: Optional[str] = CorrelationIdDep,
    service: ProductService = ProductServiceDep,
    user_client: UserServiceClient = UserServiceClientDep,
):
    """Create a DRAFT product for the calling seller"""
    seller = await resolve_seller_hub(user_client, seller_id, correlation_id)
    product = await service.create_product(
        seller_id=seller_id,
        name=product_data.name,
        description=product_data.description,
        price=product_data.price,
        min_order_quantity=product_data.min_order_quantity,
        max_order_quantity=product_data.max_order_quantity,
        hub_id=seller.hub_id,
        correlation_id=correlation_id,
    )
    return ProductResponse.from_domain(product)


@router.get("/products", response_model=ProductListResponse)
async def list_my_products(
    seller_id: str = SellerIdDep,
    page: int = PageDep,
    size: int = PageSizeDep,
    service: ProductService = ProductServiceDep,
):
    result = await service.get_products_by_seller(seller_id, page, size)
    return ProductListResponse.from_page(result)


@router.put("/products/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    product_data: ProductUpdate,
    seller_id: str = SellerIdDep,
    correlation_id: Optional[str] = CorrelationIdDep,
    service: ProductService = ProductServiceDep,
):
    product = await service.update_product(
        product_id,
        name=product_data.name,
        description=product_data.description,
        price=product_data.price,
        updated_by=seller_id,
        correlation_id=correlation_id,
    )
    return ProductResponse.from_domain(product)


@router.delete("/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: str,
    seller_id: str = SellerIdDep,
    correlation_id: Optional[str] = CorrelationIdDep,
    service: ProductService = ProductServiceDep,
):
    await service.delete_product(
        product_id, deleted_by=seller_id, correlation_id=correlation_id
    )


@router.put("/products/{product_id}/activate", response_model=ProductResponse)
async def activate_product(
    product_id: str,
    seller_id: str = SellerIdDep,
    correlation_id: Optional[str] = CorrelationIdDep,
    service: ProductService = ProductServiceDep,
):
    product = await service.activate_product(
        product_id, updated_by=seller_id, correlation_id=correlation_id
    )
    return ProductResponse.from_domain(product)


@router.put("/products/{product_id}/suspend", response_model=ProductResponse)
async def suspend_product(
    product_id: str,
    seller_id: str = SellerIdDep,
    correlation_id: Optional[str] = CorrelationIdDep,
    service: ProductService = ProductServiceDep,
):
    product = await service.suspend_product(
        product_id, updated_by=seller_id, correlation_id=correlation_id
    )
    return ProductResponse.from_domain(product)


@router.put("/products/{product_id}/discontinue", response_model=ProductResponse)
async def discontinue_product(
    product_id: str,
    seller_id: str = SellerIdDep,
    correlation_id: Optional[str] = CorrelationIdDep,
    service: ProductService = ProductServiceDep,
):
    product = await service.discontinue_product(
        product_id, updated_by=seller_id, correlation_id=correlation_id
    )
    return ProductResponse.from_domain(product)


@router.put("/products/{product_id}/event", response_model=ProductResponse)
async def set_event_status(
    product_id: str,
    body: ProductEventStatusUpdate,
    seller_id: str = SellerIdDep,
    correlation_id: Optional[str] = CorrelationIdDep,
    service: ProductService = ProductServiceDep,
):
    product = await service.set_product_event_status(
        product_id,
        body.has_event,
        updated_by=seller_id,
        correlation_id=correlation_id,
    )
    return ProductResponse.from_domain(product)
