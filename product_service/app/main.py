"""
Product Service FastAPI Application
==================================

Main application entry point for the Product Service microservice.
Serves the public catalog, seller self-service and internal APIs, publishes
product lifecycle events and reconciles availability from inventory events.
"""

import time
from contextlib import asynccontextmanager
from typing import Any, Dict, List

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.dependencies import close_user_service_client
from .api.v1.health import router as health_router
from .api.v1.internal import router as internal_router
from .api.v1.producer import router as producer_router
from .api.v1.products import router as products_router
from .core.database import database_manager
from .core.event_management import close_events, init_events, start_inventory_consumer
from .core.setting import get_settings
from .middleware.common.correlation import CorrelationIdMiddleware
from .middleware.error.error_handler import setup_product_error_handling
from .utils.logging import setup_product_logging

settings = get_settings()
logger = setup_product_logging(
    "product_service.main",
    log_level=settings.LOG_LEVEL,
    enable_file_logging=settings.ENABLE_FILE_LOGGING,
    log_dir=settings.LOG_DIR or None,
)


def _elapsed_ms(start: float) -> int:
    return int((time.time() - start) * 1000)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager for startup and shutdown."""
    startup_start = time.time()
    logger.info(
        "Starting product service initialization",
        extra={
            "environment": settings.ENVIRONMENT,
            "debug_mode": settings.DEBUG,
            "service_version": settings.APP_VERSION,
        },
    )

    try:
        await database_manager.create_tables()
        await init_events()
        try:
            await start_inventory_consumer()
        except Exception as e:
            logger.warning(
                "Event consumer initialization failed, continuing without it",
                extra={"error": str(e), "error_type": type(e).__name__},
            )
    except Exception as e:
        logger.error(
            "Failed to start product service",
            exc_info=True,
            extra={
                "startup_duration_ms": _elapsed_ms(startup_start),
                "error_type": type(e).__name__,
            },
        )
        raise

    logger.info(
        "Product service started successfully",
        extra={"total_startup_duration_ms": _elapsed_ms(startup_start)},
    )

    yield

    shutdown_start = time.time()
    logger.info("Starting product service shutdown")
    try:
        await close_events()
        await close_user_service_client()
    finally:
        await database_manager.close()
    logger.info(
        "Product service shutdown completed",
        extra={"shutdown_duration_ms": _elapsed_ms(shutdown_start)},
    )


# Application factory
def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    _setup_middleware(app)
    _setup_cors(app)
    _setup_routers(app)

    return app


def _setup_middleware(app: FastAPI) -> None:
    app.add_middleware(CorrelationIdMiddleware)
    setup_product_error_handling(app)
    logger.info("Correlation and error handling middleware configured")


def _setup_cors(app: FastAPI) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=settings.CORS_CREDENTIALS,
        allow_methods=settings.CORS_METHODS,
        allow_headers=settings.CORS_HEADERS,
    )


def _setup_routers(app: FastAPI) -> None:
    routers_info: List[Dict[str, Any]] = []
    for router, tags in (
        (health_router, ["Health"]),
        (products_router, ["Catalog"]),
        (producer_router, ["Producer"]),
        (internal_router, ["Internal"]),
    ):
        app.include_router(router, tags=tags)
        routers_info.append({"prefix": router.prefix, "tags": tags})

    logger.info(
        "API routes configured",
        extra={"total_routers": len(routers_info), "routers": routers_info},
    )


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(  # type: ignore
        "product_service.app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
        access_log=True,
    )
