"""structlog configuration shared by the app, the CLI and tests.

Only logging setup lives here so any module can import `get_logger`
without pulling in FastAPI or Twilio.
"""
from __future__ import annotations

import logging
from typing import Any

import structlog

LOGGER_NAME = "sms_gateway"

_configured = False


def configure_logging(level: str = "INFO") -> None:
    """Configure structlog once; later calls only adjust the level."""
    global _configured

    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    stdlib_logger = logging.getLogger(LOGGER_NAME)
    stdlib_logger.setLevel(numeric_level)
    if not stdlib_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        stdlib_logger.addHandler(handler)

    if _configured:
        return

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(**initial_values: Any) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(LOGGER_NAME, **initial_values)
