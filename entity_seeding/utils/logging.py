"""
Structured logging utilities built on structlog.

The library logs through structlog bound loggers and never configures structlog
on import. Applications that want the library's processor chain call
``configure_logging`` (JSON output by default, a console renderer for local
development); ``get_logger`` returns a logger bound to a component name, and
``log_operation`` wraps an awaited operation with start/complete/failure
events and its duration.
"""

import logging
import sys
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import structlog

from .config import get_config


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """
    Configure structlog for the seeding library.

    Args:
        level: Minimum log level name; defaults to the configured SEEDING_LOG_LEVEL
        fmt: "json" or "console"; defaults to the configured SEEDING_LOG_FORMAT
    """
    if level is None or fmt is None:
        config = get_config()
        level = level or config.log_level
        fmt = fmt or config.log_format

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
    ]

    if fmt == "console":
        processors = shared_processors + [structlog.dev.ConsoleRenderer(colors=False)]
    else:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level.upper())),
        logger_factory=structlog.WriteLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str, **initial_values: Any) -> structlog.typing.FilteringBoundLogger:
    """Get a structured logger bound to a component name; output follows the current structlog configuration."""
    return structlog.get_logger(name, component=name, **initial_values)


@asynccontextmanager
async def log_operation(
    logger: structlog.typing.FilteringBoundLogger,
    operation_name: str,
    **fields: Any
) -> AsyncIterator[None]:
    """
    Async context manager for logging an operation with its duration.

    Args:
        logger: Bound logger to emit events on
        operation_name: Event name of the operation
        **fields: Additional key-value pairs attached to every event
    """
    start_time = time.perf_counter()
    logger.debug(operation_name, action='start', **fields)

    try:
        yield
    except Exception as e:
        logger.warning(
            operation_name,
            action='error',
            duration_seconds=time.perf_counter() - start_time,
            error_type=type(e).__name__,
            error_message=str(e),
            **fields
        )
        raise

    logger.debug(
        operation_name,
        action='complete',
        duration_seconds=time.perf_counter() - start_time,
        **fields
    )
