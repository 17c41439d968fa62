"""
Unit tests for the User Service client, driven through httpx.MockTransport.
"""

import httpx
import pytest

from product_service.app.clients.user_client import (
    UserInfo,
    UserServiceClient,
    resolve_seller_hub,
)
from product_service.app.domain.exceptions import ProductErrorCode, ProductException


def _client(handler) -> UserServiceClient:
    return UserServiceClient(
        "http://user-service:8000/",
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


class TestUserServiceClient:
    @pytest.mark.asyncio
    async def test_get_user_info(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["correlation_id"] = request.headers.get("X-Correlation-ID")
            return httpx.Response(
                200,
                json={
                    "userId": 42,
                    "username": "acme",
                    "hubId": 7,
                    "companyId": "c-1",
                    "role": "SELLER",
                    "email": "seller@example.com",
                },
            )

        client = _client(handler)

        info = await client.get_user_info("42", correlation_id="corr-1")
        await client.close()

        assert seen == {
            "url": "http://user-service:8000/api/v1/users/42",
            "correlation_id": "corr-1",
        }
        assert info == UserInfo(
            user_id="42", username="acme", hub_id="7", company_id="c-1", role="SELLER"
        )

    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(500, json={"detail": "boom"}),
            httpx.Response(404, json={"detail": "no such user"}),
            httpx.Response(200, content=b"<html>"),
            httpx.Response(200, json={"username": "no id"}),
        ],
    )
    @pytest.mark.asyncio
    async def test_failures_become_seller_service_unavailable(self, response):
        client = _client(lambda request: response)

        with pytest.raises(ProductException) as exc_info:
            await client.get_user_info("42")

        assert exc_info.value.error_code is ProductErrorCode.SELLER_SERVICE_UNAVAILABLE
        assert exc_info.value.details == {"user_id": "42"}

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ProductException) as exc_info:
            await _client(handler).get_user_info("42")

        assert exc_info.value.status_code == 503


class TestResolveSellerHub:
    @pytest.mark.asyncio
    async def test_returns_user_with_hub(self):
        client = _client(
            lambda request: httpx.Response(200, json={"userId": "s-1", "hubId": "h-1"})
        )

        info = await resolve_seller_hub(client, "s-1")

        assert info.hub_id == "h-1"

    @pytest.mark.parametrize("hub_id", [None, "", "  "])
    @pytest.mark.asyncio
    async def test_missing_hub_is_rejected(self, hub_id):
        client = _client(
            lambda request: httpx.Response(200, json={"userId": "s-1", "hubId": hub_id})
        )

        with pytest.raises(ProductException) as exc_info:
            await resolve_seller_hub(client, "s-1")

        assert exc_info.value.error_code is ProductErrorCode.HUB_INFO_NOT_FOUND
        assert exc_info.value.details == {"seller_id": "s-1"}
