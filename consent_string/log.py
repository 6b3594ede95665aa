"""
Structured logging for consent_string.

Library modules log through :func:`get_logger`, which routes structlog events
into the standard library ``logging`` tree. Until an application configures
logging nothing below WARNING is printed, and nothing at all reaches stdout.
Command line entry points call :func:`configure_logging` once at start-up.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def get_logger(name: str) -> Any:
    """Get a structlog logger backed by the stdlib logger ``name``."""
    return structlog.wrap_logger(logging.getLogger(name))


def configure_logging(level: str = "WARNING", json_output: bool = False) -> None:
    """
    Configure structlog on top of the standard library logging module.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Render JSON lines instead of the console format

    Raises:
        ValueError: If level is not one of LOG_LEVELS
    """
    level = level.upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"Unknown log level: {level!r}")

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # stdout carries tokens and dumps, so logs go to stderr
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level),
        force=True,
    )
