"""
Structured logging configuration.

**Conceptual**: Library modules log structured events (an event name plus
key/value fields) through structlog. Actions call `configure_logging()` once
at startup to pick the level; everything else just asks for a logger.

Log lines go to stderr; stdout carries the progress messages printed by the
actions.
"""

import logging
import sys
from typing import Any

import structlog

_configured = False


def configure_logging(level: str = "WARNING") -> None:
    """
    Configure structlog processors and the minimum log level.

    Args:
        level: Standard level name ("DEBUG", "INFO", "WARNING", ...).

    Raises:
        ValueError: If the level name is unknown.
    """
    global _configured

    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
    _configured = True


def get_logger(name: str) -> Any:
    """
    Return a structlog logger bound to a module name.

    Configures logging with defaults on first use if `configure_logging()`
    has not been called yet.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog bound logger.
    """
    if not _configured:
        configure_logging()
    return structlog.get_logger(name)
