"""
Unit tests for structured logging and the health checker.
"""

import json
import logging
import sys

import pytest

from product_service.app.utils.logging import (
    ProductJSONFormatter,
    setup_product_logging,
)
from product_service.app.utils.service_health import ProductServiceHealthChecker


def _record(msg="Product created successfully", level=logging.INFO, **extra):
    record = logging.LogRecord(
        name="product_service.services.product",
        level=level,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    record.__dict__.update(extra)
    return record


class TestProductJSONFormatter:
    def test_extra_fields_are_flattened(self):
        formatter = ProductJSONFormatter()

        entry = json.loads(
            formatter.format(_record(product_id="p-1", correlation_id="corr-1"))
        )

        assert entry["message"] == "Product created successfully"
        assert entry["level"] == "INFO"
        assert entry["service"] == "product_service"
        assert entry["logger"] == "product_service.services.product"
        assert entry["product_id"] == "p-1"
        assert entry["correlation_id"] == "corr-1"
        assert "lineno" not in entry
        assert entry["timestamp"].endswith("+00:00")

    def test_excluded_fields_are_dropped(self):
        formatter = ProductJSONFormatter(exclude_fields=["payload"])

        entry = json.loads(formatter.format(_record(payload={"big": "blob"})))

        assert "payload" not in entry

    def test_non_serializable_values_are_stringified(self):
        from decimal import Decimal

        entry = json.loads(ProductJSONFormatter().format(_record(price=Decimal("1.50"))))

        assert entry["price"] == "1.50"

    def test_exception_is_included(self):
        try:
            raise ValueError("bad quantity")
        except ValueError:
            record = _record(level=logging.ERROR)
            record.exc_info = sys.exc_info()

        entry = json.loads(ProductJSONFormatter().format(record))

        assert "ValueError: bad quantity" in entry["exception"]


class TestSetupProductLogging:
    def test_repeated_setup_does_not_stack_handlers(self):
        logger = setup_product_logging("product_service.test.repeat")
        logger = setup_product_logging("product_service.test.repeat", "DEBUG")

        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self):
        logger = setup_product_logging("product_service.test.level", "chatty")

        assert logger.level == logging.INFO

    def test_file_logging_writes_main_and_error_files(self, tmp_path):
        logger = setup_product_logging(
            "product_service.test.files",
            enable_file_logging=True,
            log_dir=str(tmp_path),
        )

        logger.info("kept")
        logger.error("failed", extra={"product_id": "p-1"})
        for handler in logger.handlers:
            handler.flush()

        main_log = (tmp_path / "product_service.test.files.log").read_text()
        error_log = (tmp_path / "product_service.test.files_errors.log").read_text()
        assert "kept" in main_log and "failed" in main_log
        assert "kept" not in error_log
        assert json.loads(error_log.strip())["product_id"] == "p-1"

        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()


class TestProductServiceHealthChecker:
    @pytest.mark.asyncio
    async def test_all_checks_healthy(self):
        checker = ProductServiceHealthChecker("product-service", "1.2.3")

        async def ok():
            return {"status": "healthy"}

        checker.add_check("database", ok)
        report = await checker.run_checks()

        assert report["status"] == "healthy"
        assert report["version"] == "1.2.3"
        assert report["checks"]["database"]["critical"] is True

    @pytest.mark.asyncio
    async def test_non_critical_failure_degrades(self):
        checker = ProductServiceHealthChecker()

        async def ok():
            return {"status": "healthy"}

        async def down():
            return {"status": "unavailable"}

        checker.add_check("database", ok)
        checker.add_check("kafka", down, critical=False)

        assert (await checker.run_checks())["status"] == "degraded"

    @pytest.mark.asyncio
    async def test_critical_exception_is_unhealthy(self):
        checker = ProductServiceHealthChecker()

        async def broken():
            raise ConnectionError("refused")

        checker.add_check("database", broken)
        report = await checker.run_checks()

        assert report["status"] == "unhealthy"
        assert report["checks"]["database"] == {
            "status": "error",
            "error": "refused",
            "duration_ms": report["checks"]["database"]["duration_ms"],
            "critical": True,
        }
