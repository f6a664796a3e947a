"""Structured JSON logging configuration for the console API."""

import logging
import time
from contextvars import ContextVar

from pythonjsonlogger.json import JsonFormatter as _JsonFormatter

from app.config import settings

# Per-request correlation ID, set by RequestIdMiddleware
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")


class _RequestIdFilter(logging.Filter):
    """Injects the current request_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


class _ConsoleJsonFormatter(_JsonFormatter):
    """JSON formatter that stamps every record with service name, version and env."""

    converter = time.gmtime

    def add_fields(
        self,
        log_record: dict[str, object],
        record: logging.LogRecord,
        message_dict: dict[str, object],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record.setdefault("service", settings.app_name)
        log_record.setdefault("version", settings.app_version)
        log_record.setdefault("env", settings.env)


def configure_logging() -> None:
    """Set up structured JSON logging for the entire application.

    Called once from create_app(). ``settings.debug`` forces DEBUG; otherwise
    ``settings.log_level`` applies.

    Log levels:
        DEBUG  — reads (get/list of zones and qubes)
        INFO   — every mutation, zone connect/disconnect, qube start/stop, startup/shutdown
        WARNING — rejected operations: zone in use, qube running, zone missing or disconnected
        ERROR  — storage failures, request timeouts, unhandled exceptions
    """
    log_level = "DEBUG" if settings.debug else settings.log_level.upper()

    handler = logging.StreamHandler()
    handler.setFormatter(
        _ConsoleJsonFormatter(
            fmt="%(asctime)s %(name)s %(levelname)s %(message)s %(request_id)s",
            datefmt="%Y-%m-%dT%H:%M:%SZ",
        )
    )
    handler.addFilter(_RequestIdFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(log_level)

    # Suppress noisy third-party loggers
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
