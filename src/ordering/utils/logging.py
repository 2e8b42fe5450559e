"""Logging configuration for the order service.

structlog formats every record and hands it to the standard library, which
writes to stdout, ``orders.log`` and ``orders_error.log`` under ``LOG_DIR``.
Production renders JSON lines; every other environment gets the Rich console
renderer.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any

import structlog
from shared import config

_MAX_LOG_BYTES = 10 * 1024 * 1024


def get_log_level() -> str:
    """``LOG_LEVEL`` if set, else DEBUG in development, WARNING under test, INFO otherwise."""
    default = {"development": "DEBUG", "test": "WARNING"}.get(config.get_environment(), "INFO")
    return os.getenv("LOG_LEVEL", default).upper()


def _rotating_file(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(path, maxBytes=_MAX_LOG_BYTES, backupCount=5, encoding="utf-8")
    handler.setLevel(level)
    return handler


def setup_stdlib_logging() -> None:
    log_level = get_log_level()
    log_dir = Path(config.get_log_dir())
    log_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [
        logging.StreamHandler(sys.stdout),
        _rotating_file(log_dir / "orders.log", log_level),
        _rotating_file(log_dir / "orders_error.log", logging.ERROR),
    ]

    for noisy in ("protean", "stripe"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def setup_structlog() -> None:
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if config.is_production():
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(exception_formatter=structlog.dev.RichTracebackFormatter(max_frames=4))
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging() -> None:
    """Configure all logging for the application."""
    setup_stdlib_logging()
    setup_structlog()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def add_context(**kwargs: Any) -> None:
    """Bind key/values onto every log line emitted until ``clear_context``."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
