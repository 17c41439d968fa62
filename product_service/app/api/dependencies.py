"""
FastAPI dependency injection for Product Service

Provides database sessions, the product service, the user service client and
request context (correlation id, calling seller).
"""

from typing import AsyncGenerator, Optional

from fastapi import Depends, Header, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..clients.user_client import UserServiceClient
from ..core.database import get_db_session
from ..core.event_management import get_event_producer
from ..core.setting import get_settings
from ..events.event_producers import ProductEventPublisher
from ..services.product_service import ProductService

# =====================================================
# DATABASE DEPENDENCIES
# =====================================================


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide async database session"""
    async for session in get_db_session():
        yield session


# =====================================================
# SERVICE DEPENDENCIES
# =====================================================


def get_product_event_producer() -> Optional[ProductEventPublisher]:
    return get_event_producer()


def get_product_service(
    session: AsyncSession = Depends(get_async_session),
    event_producer: Optional[ProductEventPublisher] = Depends(
        get_product_event_producer
    ),
) -> ProductService:
    """Provide ProductService instance with database and event publishing"""
    return ProductService(session, event_producer)


_user_service_client: Optional[UserServiceClient] = None


def get_user_service_client() -> UserServiceClient:
    global _user_service_client
    if _user_service_client is None:
        settings = get_settings()
        _user_service_client = UserServiceClient(
            settings.USER_SERVICE_URL, timeout=settings.USER_SERVICE_TIMEOUT
        )
    return _user_service_client


async def close_user_service_client() -> None:
    global _user_service_client
    if _user_service_client is not None:
        await _user_service_client.close()
        _user_service_client = None


# =====================================================
# REQUEST CONTEXT DEPENDENCIES
# =====================================================


def get_correlation_id(request: Request) -> Optional[str]:
    """Extract correlation ID from request headers or state"""
    return (
        request.headers.get("X-Correlation-ID")
        or request.headers.get("x-request-id")
        or getattr(request.state, "correlation_id", None)
    )


def get_seller_id(x_user_id: Optional[str] = Header(None)) -> str:
    """Seller id forwarded by the gateway in X-User-Id"""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-User-Id header is required",
        )
    return x_user_id.strip()


def get_page(page: int = Query(0, ge=0)) -> int:
    return page


def get_page_size(size: Optional[int] = Query(None, ge=1)) -> int:
    settings = get_settings()
    if size is None:
        return settings.DEFAULT_PAGE_SIZE
    return min(size, settings.MAX_PAGE_SIZE)


# =====================================================
# COMMON DEPENDENCY ALIASES
# =====================================================

CorrelationIdDep = Depends(get_correlation_id)
DatabaseDep = Depends(get_async_session)
ProductServiceDep = Depends(get_product_service)
UserServiceClientDep = Depends(get_user_service_client)
SellerIdDep = Depends(get_seller_id)
PageDep = Depends(get_page)
PageSizeDep = Depends(get_page_size)
