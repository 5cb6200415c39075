"""
Structured logging setup.

Development gets key=value console output, production gets JSON lines.
"""

import logging
import sys

import structlog

from core.config import settings


def configure_logging(is_development: bool | None = None, log_level: str | None = None) -> None:
    """
    Configure structlog on top of the standard library logger.

    Args:
        is_development: Human-readable output when True, JSON otherwise.
            Defaults to the settings (LOG_JSON forces JSON).
        log_level: Logging level name. Defaults to settings.LOG_LEVEL.
    """
    if is_development is None:
        is_development = settings.is_development and not settings.LOG_JSON
    numeric_level = getattr(logging, (log_level or settings.LOG_LEVEL).upper(), logging.INFO)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if is_development:
        renderer = structlog.processors.KeyValueRenderer(key_order=["event"], drop_missing=True)
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=numeric_level,
    )
