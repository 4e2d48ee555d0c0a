"""Structured logging configuration."""

import logging
import sys
from typing import Any

import structlog
from pythonjsonlogger import jsonlogger

from cafe_backoffice.config import Settings, get_settings


def setup_logging(settings: Settings | None = None) -> None:
    """Configure structured logging for the application."""
    settings = settings or get_settings()

    log_level = getattr(logging, settings.log_level)

    if settings.log_format == "json":
        handler = logging.StreamHandler(sys.stdout)
        formatter = jsonlogger.JsonFormatter(
            fmt="%(timestamp)s %(level)s %(name)s %(message)s",
            rename_fields={"levelname": "level", "asctime": "timestamp"},
        )
        handler.setFormatter(formatter)
    else:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    # SQL echo goes through the stdlib handler configured above
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.database_echo else logging.WARNING
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=False),
            structlog.processors.JSONRenderer() if settings.log_format == "json"
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


class ServiceLogger:
    """Specialized logger for engine services."""

    def __init__(self, service_id: str):
        self.service_id = service_id
        self.logger = get_logger(service_id)

    def log_operation(
        self,
        action: str,
        duration_ms: float | None = None,
        **kwargs: Any,
    ) -> None:
        """Log a completed service operation with structured data."""
        log_data: dict[str, Any] = {
            "service_id": self.service_id,
            "action": action,
        }

        if duration_ms is not None:
            log_data["duration_ms"] = duration_ms

        log_data.update(kwargs)
        self.logger.info("service_operation", **log_data)

    def log_tool_call(
        self,
        tool_name: str,
        duration_ms: float,
        success: bool,
        **kwargs: Any,
    ) -> None:
        """Log a tool invocation."""
        self.logger.info(
            "tool_call",
            service_id=self.service_id,
            tool_name=tool_name,
            duration_ms=duration_ms,
            success=success,
            **kwargs,
        )

    def log_error(
        self,
        error: str,
        **kwargs: Any,
    ) -> None:
        """Log an error."""
        self.logger.error(
            "service_error",
            service_id=self.service_id,
            error=error,
            **kwargs,
        )
