"""
Product Service Health Check Utilities
======================================

Runs named async checks and folds them into one health report. A check
marked non-critical can only degrade the service, never make it unhealthy.
"""

import time
from typing import Any, Awaitable, Callable, Dict, Tuple

HealthCheck = Callable[[], Awaitable[Dict[str, Any]]]


class ProductServiceHealthChecker:
    """Product Service specific health checker"""

    def __init__(self, service_name: str = "product_service", version: str = "1.0.0"):
        self.service_name = service_name
        self.version = version
        self.checks: Dict[str, Tuple[HealthCheck, bool]] = {}
        self.start_time = time.time()

    def add_check(self, name: str, check_func: HealthCheck, critical: bool = True):
        self.checks[name] = (check_func, critical)

    async def run_checks(self) -> Dict[str, Any]:
        results: Dict[str, Dict[str, Any]] = {}
        status = "healthy"
        check_start_time = time.time()

        for name, (check_func, critical) in self.checks.items():
            individual_start = time.time()
            try:
                result = await check_func()
            except Exception as e:
                result = {"status": "error", "error": str(e)}
            result["duration_ms"] = round((time.time() - individual_start) * 1000, 2)
            result["critical"] = critical
            results[name] = result

            if result.get("status") != "healthy":
                if critical:
                    status = "unhealthy"
                elif status == "healthy":
                    status = "degraded"

        return {
            "service": self.service_name,
            "version": self.version,
            "status": status,
            "checks": results,
            "total_duration_ms": round((time.time() - check_start_time) * 1000, 2),
            "uptime_seconds": round(time.time() - self.start_time, 2),
            "timestamp": time.time(),
        }
