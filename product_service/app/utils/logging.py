"""
Product Service Logging
=======================
JSON structured logging for the product service. Context travels through the
``extra`` argument of each logging call and is flattened into the record.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterable, Optional

SERVICE_NAME = "product_service"

# LogRecord attributes that are never copied into the JSON payload
RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "exc_info",
        "exc_text",
        "stack_info",
        "taskName",
        "message",
        "asctime",
    }
)


class ProductJSONFormatter(logging.Formatter):
    """JSON formatter for Product Service structured logging"""

    def __init__(self, exclude_fields: Optional[Iterable[str]] = None):
        super().__init__()
        self.excluded = RESERVED_ATTRS | frozenset(exclude_fields or ())

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat(),
            "level": record.levelname,
            "service": SERVICE_NAME,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in self.excluded and not key.startswith("_"):
                log_entry[key] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str, ensure_ascii=False)


def _rotating_handler(
    path: Path, level: int, formatter: logging.Formatter, max_bytes: int, backups: int
) -> RotatingFileHandler:
    handler = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backups)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_product_logging(
    logger_name: str = SERVICE_NAME,
    log_level: str = "INFO",
    enable_file_logging: bool = False,
    log_dir: Optional[str] = None,
    max_file_size: int = 100 * 1024 * 1024,  # 100MB
    backup_count: int = 5,
    exclude_fields: Optional[Iterable[str]] = None,
) -> logging.Logger:
    """
    Configure a JSON logger for one Product Service component.

    Calling it again for the same name replaces the handlers instead of
    stacking them. File logging writes ``<name>.log`` plus an errors-only
    ``<name>_errors.log``.

    Returns:
        Configured logger instance
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    logger.handlers.clear()

    formatter = ProductJSONFormatter(exclude_fields=exclude_fields)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if enable_file_logging:
        log_dir_path = Path(log_dir) if log_dir else Path(__file__).parent.parent / "logs"
        log_dir_path.mkdir(parents=True, exist_ok=True)

        logger.addHandler(
            _rotating_handler(
                log_dir_path / f"{logger_name}.log",
                level,
                formatter,
                max_file_size,
                backup_count,
            )
        )
        logger.addHandler(
            _rotating_handler(
                log_dir_path / f"{logger_name}_errors.log",
                logging.ERROR,
                formatter,
                max_file_size,
                backup_count,
            )
        )

    logger.debug(
        "Logger configured",
        extra={
            "log_level": log_level,
            "file_logging": enable_file_logging,
            "handlers": len(logger.handlers),
        },
    )

    return logger
