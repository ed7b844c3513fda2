"""
Logging Utilities

This module provides logging helpers for contitask drivers and tools.
The task core logs through plain ``logging.getLogger(__name__)`` loggers;
drivers and the CLI use structlog bound loggers on top of the same
standard library handlers.
"""

import logging
import sys
from typing import Any, Optional

import structlog

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_SHARED_PROCESSORS = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
]


def get_logger(name: str) -> Any:
    """
    Get a structlog logger for the specified name

    Args:
        name: Logger name (usually module or component name)

    Returns:
        Bound logger instance
    """
    if not structlog.is_configured():
        structlog.configure(
            processors=_SHARED_PROCESSORS + [structlog.dev.ConsoleRenderer(colors=False)],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

    return structlog.get_logger(name)


def configure_logging(
    level: str = "INFO",
    format_string: Optional[str] = None,
    use_structlog: bool = True,
) -> None:
    """
    Configure logging for contitask components

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: Custom format string (for standard logging)
        use_structlog: Whether to render structlog events with the console renderer
    """
    numeric_level = getattr(logging, level.upper())

    if use_structlog:
        structlog.configure(
            processors=_SHARED_PROCESSORS + [structlog.dev.ConsoleRenderer()],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

    logging.basicConfig(
        level=numeric_level,
        format=format_string or DEFAULT_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    logging.getLogger("contitask").setLevel(numeric_level)
