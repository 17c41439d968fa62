"""Service-to-service endpoints"""

from typing import List

from fastapi import APIRouter

from ...domain.exceptions import ProductErrorCode, ProductException
from ...schemas.product import (
    InternalProductResponse,
    OrderQuantityCheck,
    ProductExistenceResponse,
    ProductIdsRequest,
    ProductValidationResponse,
)
from ...services.product_service import ProductService
from ..dependencies import ProductServiceDep

router = APIRouter(prefix="/v1/product/internal")


@router.get("/products/{product_id}/validate", response_model=ProductExistenceResponse)
async def validate_product(
    product_id: str, service: ProductService = ProductServiceDep
):
    """Existence plus sellability; never 404s"""
    try:
        product = await service.get_product(product_id)
    except ProductException as e:
        if e.error_code is not ProductErrorCode.PRODUCT_NOT_FOUND:
            raise
        return ProductExistenceResponse(product_id=product_id, exists=False, valid=False)
    return ProductExistenceResponse(
        product_id=product_id, exists=True, valid=product.can_be_sold()
    )


@router.get("/products/{product_id}", response_model=InternalProductResponse)
async def get_product(product_id: str, service: ProductService = ProductServiceDep):
    product = await service.get_product(product_id)
    return InternalProductResponse.from_domain(product)


@router.post("/products/validate-bulk", response_model=ProductValidationResponse)
async def validate_products(
    body: ProductIdsRequest, service: ProductService = ProductServiceDep
):
    result = await service.validate_products(body.product_ids)
    return ProductValidationResponse.from_result(result)


@router.post(
    "/products/{product_id}/validate-quantity", response_model=InternalProductResponse
)
async def validate_order_quantity(
    product_id: str,
    body: OrderQuantityCheck,
    service: ProductService = ProductServiceDep,
):
    """400 with ORDER_QUANTITY_* codes when the quantity is out of bounds"""
    product = await service.check_order_quantity(product_id, body.quantity)
    return InternalProductResponse.from_domain(product)


@router.get(
    "/sellers/{seller_id}/products", response_model=List[InternalProductResponse]
)
async def get_products_by_seller(
    seller_id: str, service: ProductService = ProductServiceDep
):
    products = await service.get_products_by_seller_id(seller_id)
    return [InternalProductResponse.from_domain(p) for p in products]
