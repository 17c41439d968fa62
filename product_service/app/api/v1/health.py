from typing import Any, Dict

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ...core.database import database_manager
from ...core.event_management import health_check_events
from ...core.setting import get_settings
from ...utils.service_health import ProductServiceHealthChecker

router = APIRouter()


async def _database_check() -> Dict[str, Any]:
    await database_manager.ping()
    return {"status": "healthy", "component": "database"}


async def _kafka_check() -> Dict[str, Any]:
    if await health_check_events():
        return {"status": "healthy", "component": "kafka"}
    return {
        "status": "unavailable",
        "component": "kafka",
        "message": "Events are logged instead of published",
    }


@router.get("/health")
async def health_check():
    """Database is critical; Kafka only degrades the service."""
    settings = get_settings()
    checker = ProductServiceHealthChecker(settings.SERVICE_NAME, settings.APP_VERSION)
    checker.add_check("database", _database_check)
    checker.add_check("kafka", _kafka_check, critical=False)

    report = await checker.run_checks()
    status_code = 503 if report["status"] == "unhealthy" else 200
    return JSONResponse(status_code=status_code, content=report)
