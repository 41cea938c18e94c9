"""Structured logging configuration."""

import sys
import structlog
import logging
from pathlib import Path
from typing import Any, Optional
from phoenix.core.config import Settings


def configure_logging(settings: Settings) -> None:
    """Configure structured logging based on settings."""
    level = getattr(logging, settings.log_level.upper())

    if settings.log_file:
        log_path = Path(settings.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(level)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)

        logging.basicConfig(
            level=level,
            handlers=[console_handler, file_handler],
            format="%(message)s"
        )
    else:
        logging.basicConfig(
            format="%(message)s",
            stream=sys.stdout,
            level=level
        )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.log_format == "json":
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))
        processors.insert(0, structlog.stdlib.add_logger_name)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.insert(0, structlog.processors.TimeStamper(fmt="%H:%M:%S"))
        processors.append(structlog.dev.ConsoleRenderer(
            colors=False,
            pad_event=35,
            exception_formatter=structlog.dev.plain_traceback
        ))

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def log_cache_operation(logger: structlog.BoundLogger, operation: str,
                        key: str, hit: Optional[bool] = None, **kwargs: Any) -> None:
    """Log cache operations."""
    log_data = {
        "operation": operation,
        "cache_key": key,
        **kwargs
    }

    if hit is not None:
        log_data["cache_hit"] = hit

    logger.debug("Cache operation", **log_data)


def log_store_query(logger: structlog.BoundLogger, operation: str,
                    identifier: Any = None, **kwargs: Any) -> None:
    """Log a relational store query with the lookup it served."""
    logger.debug(
        "Store query",
        operation=operation,
        identifier=identifier,
        **kwargs
    )
