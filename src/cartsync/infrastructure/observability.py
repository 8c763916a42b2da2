"""Logging setup and the structlog-backed cart event emitter."""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from cartsync.domain.events import CartEventEmitter
from cartsync.infrastructure.config import Settings


def configure_logging(settings: Settings) -> None:
    """Route structlog output to stderr at the configured level."""
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    renderer: Any
    if settings.log_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )

    # Suppress noisy library loggers
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)


class StructlogEventEmitter(CartEventEmitter):
    """Emits cart events as structured log records on a dedicated logger."""

    def __init__(self, logger_name: str = "cartsync.events") -> None:
        self._logger = structlog.get_logger(logger_name)

    def emit(self, event: str, **fields: Any) -> None:
        self._logger.info(event, **fields)
