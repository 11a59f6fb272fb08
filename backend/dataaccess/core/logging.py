"""
structlog configuration shared by every module.

Usage:
    from dataaccess.core.logging import get_logger, setup_logging

    setup_logging("DEBUG")          # entry points only, once at startup
    logger = get_logger(__name__)
    logger.info("User created", user_id=user.id)
"""

from __future__ import annotations

import logging
import sys

import structlog

from dataaccess.core.config import settings


def setup_logging(level: str | None = None, *, json_output: bool | None = None) -> None:
    """
    Configure stdlib logging and structlog.

    Console rendering in development, JSON lines everywhere else.
    Safe to call more than once; the last call wins.
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    log_level = logging.getLevelName(level_name)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    if json_output is None:
        json_output = settings.APP_ENV != "development"

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
        force=True,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger. Configuration is left to the entry point."""
    return structlog.get_logger(name)
