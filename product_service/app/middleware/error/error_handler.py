"""
Error handling for Product Service.
Renders every failure as one JSON error envelope.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ...domain.exceptions import ProductException
from ...utils.logging import setup_product_logging

logger = setup_product_logging("product_service.error_handler")


def _validation_details(errors: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in errors
    ]


class ProductServiceErrorHandler:
    """
    Centralized error handling for Product Service.

    ``ProductException`` keeps its own code and status. Request validation is
    a 422, other pydantic validation a 400, and anything unexpected a logged
    500 without internals in the body.
    """

    @staticmethod
    def setup_error_handlers(app: FastAPI) -> None:
        @app.exception_handler(ProductException)
        async def product_exception_handler(
            request: Request, exc: ProductException
        ) -> JSONResponse:
            return ProductServiceErrorHandler._create_error_response(
                request=request,
                status_code=exc.status_code,
                error_type=exc.kind.value.lower(),
                message=exc.message,
                code=exc.code,
                details=exc.details or None,
            )

        @app.exception_handler(StarletteHTTPException)
        async def http_exception_handler(
            request: Request, exc: StarletteHTTPException
        ) -> JSONResponse:
            return ProductServiceErrorHandler._create_error_response(
                request=request,
                status_code=exc.status_code,
                error_type="http_error",
                message=str(exc.detail),
            )

        @app.exception_handler(RequestValidationError)
        async def validation_exception_handler(
            request: Request, exc: RequestValidationError
        ) -> JSONResponse:
            return ProductServiceErrorHandler._create_error_response(
                request=request,
                status_code=422,
                error_type="validation_error",
                message="Request validation failed",
                details={"validation_errors": _validation_details(exc.errors())},
            )

        @app.exception_handler(ValidationError)
        async def pydantic_validation_exception_handler(
            request: Request, exc: ValidationError
        ) -> JSONResponse:
            return ProductServiceErrorHandler._create_error_response(
                request=request,
                status_code=400,
                error_type="data_validation_error",
                message="Data validation failed",
                details={"validation_errors": _validation_details(exc.errors())},
            )

        @app.exception_handler(Exception)
        async def unhandled_exception_handler(
            request: Request, exc: Exception
        ) -> JSONResponse:
            logger.error(
                "Unhandled exception occurred",
                extra={
                    "correlation_id": getattr(
                        request.state, "correlation_id", "unknown"
                    ),
                    "path": request.url.path,
                    "method": request.method,
                    "exception_type": type(exc).__name__,
                    "exception_message": str(exc),
                },
                exc_info=exc,
            )
            return ProductServiceErrorHandler._create_error_response(
                request=request,
                status_code=500,
                error_type="internal_server_error",
                message="An internal server error occurred",
                details={"exception_type": type(exc).__name__},
            )

    @staticmethod
    def _create_error_response(
        request: Request,
        status_code: int,
        error_type: str,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> JSONResponse:
        """
        Build the standard error envelope.

        Returns:
            JSONResponse shaped ``{"error": {...}}``
        """
        correlation_id = getattr(request.state, "correlation_id", "unknown")

        error_response: Dict[str, Any] = {
            "error": {
                "type": error_type,
                "code": code,
                "message": message,
                "status_code": status_code,
                "correlation_id": correlation_id,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "path": request.url.path,
                "method": request.method,
            }
        }
        if details:
            error_response["error"]["details"] = details

        if status_code < 500:
            logger.warning(
                f"Client error: {error_type}",
                extra={
                    "correlation_id": correlation_id,
                    "status_code": status_code,
                    "error_code": code,
                    "error_type": error_type,
                    "path": request.url.path,
                    "method": request.method,
                },
            )

        return JSONResponse(status_code=status_code, content=error_response)


def setup_product_error_handling(app: FastAPI) -> None:
    ProductServiceErrorHandler.setup_error_handlers(app)
    logger.info("Product Service error handling configured")
