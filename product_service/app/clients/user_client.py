"""
User Service client.

Resolves a seller id to the identity record (hub and company) held by the
user service. Used by the producer API before a product is created.
"""

from typing import Optional

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from ..domain.exceptions import ProductErrorCode, ProductException
from ..utils.logging import setup_product_logging as setup_logging

logger = setup_logging("product_service.clients.user")


class UserInfo(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )

    user_id: str
    username: Optional[str] = None
    hub_id: Optional[str] = None
    company_id: Optional[str] = None
    role: Optional[str] = None


class UserServiceClient:
    """Client for identity lookups via the User Service API"""

    def __init__(
        self,
        user_service_url: str,
        timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = user_service_url.rstrip("/")
        self.timeout = timeout
        self.client = client or httpx.AsyncClient(timeout=timeout)

    async def get_user_info(
        self, user_id: str, correlation_id: Optional[str] = None
    ) -> UserInfo:
        headers = {"X-Correlation-ID": correlation_id} if correlation_id else {}
        url = f"{self.base_url}/api/v1/users/{user_id}"
        try:
            response = await self.client.get(url, headers=headers)
            response.raise_for_status()
            return UserInfo.model_validate(response.json())
        except (httpx.HTTPError, ValueError, ValidationError) as e:
            logger.error(
                "User service lookup failed",
                extra={
                    "user_id": user_id,
                    "url": url,
                    "error": str(e),
                    "correlation_id": correlation_id,
                },
            )
            raise ProductException(
                ProductErrorCode.SELLER_SERVICE_UNAVAILABLE,
                details={"user_id": user_id},
            ) from e

    async def close(self):
        """Close the HTTP client"""
        await self.client.aclose()


async def resolve_seller_hub(
    client: UserServiceClient, seller_id: str, correlation_id: Optional[str] = None
) -> UserInfo:
    """Look up the seller and insist on a hub id"""
    user_info = await client.get_user_info(seller_id, correlation_id=correlation_id)
    if not user_info.hub_id or not user_info.hub_id.strip():
        logger.warning(
            "Seller has no hub assigned",
            extra={"seller_id": seller_id, "correlation_id": correlation_id},
        )
        raise ProductException(
            ProductErrorCode.HUB_INFO_NOT_FOUND, details={"seller_id": seller_id}
        )
    return user_info
