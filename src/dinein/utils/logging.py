"""Logging configuration for the Dine-in domain.

Synchronization warnings from the ticket synchronizer and table coordinator
are the main operational signal: they mark orders that need reconciling.
"""

import logging

import structlog

logger = structlog.get_logger(__name__)

# Suppress noisy library loggers
logging.getLogger("protean").setLevel(logging.WARNING)


def configure_logging(level: str = "INFO", json_output: bool = False) -> None:
    """Route structlog through a level filter with timestamps.

    JSON output is meant for production log shipping; the console renderer is
    for local development.
    """
    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level.upper())),
    )
    logger.info("Logging configured", level=level.upper(), json_output=json_output)
