"""
Structured logging setup.

Modules obtain loggers with ``structlog.get_logger(__name__)`` and log
snake_case events with key/value context. Call ``configure_logging`` once at
process start; until then structlog's defaults apply.
"""

import logging
import sys

import structlog


def configure_logging(level: str = "INFO", fmt: str = "text") -> None:
    """
    Configure structlog for the facilitator process.

    Args:
        level: Minimum log level name (``DEBUG``, ``INFO``, ...).
        fmt: ``json`` for machine readable lines, anything else for console output.
    """
    renderer = (
        structlog.processors.JSONRenderer()
        if fmt == "json"
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
