"""
Correlation ID middleware for Product Service.
Propagates the caller's correlation id, or mints one, for every request.
"""

import time
import uuid
from typing import Any, Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ...utils.logging import setup_product_logging

logger = setup_product_logging("product_service.requests")

CORRELATION_HEADER = "X-Correlation-ID"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Stores the correlation id on ``request.state`` and echoes it back"""

    def __init__(self, app: Any, log_requests: bool = True):
        super().__init__(app)
        self.log_requests = log_requests

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        correlation_id = (
            request.headers.get(CORRELATION_HEADER)
            or request.headers.get("x-request-id")
            or uuid.uuid4().hex
        )
        request.state.correlation_id = correlation_id

        started = time.perf_counter()
        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id

        if self.log_requests:
            logger.info(
                "Request completed",
                extra={
                    "correlation_id": correlation_id,
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )
        return response
