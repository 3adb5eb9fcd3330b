"""Structured logging setup shared by all components."""

import logging
import sys

import structlog
from structlog.typing import FilteringBoundLogger


def configure_logging(environment: str = "development", level: int = logging.INFO) -> None:
    """Configure structlog for the process.

    Development gets a human-readable console renderer, every other
    environment emits one JSON object per line.
    """
    renderer = (
        structlog.dev.ConsoleRenderer()
        if environment == "development"
        else structlog.processors.JSONRenderer()
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """Get a named structured logger."""
    return structlog.get_logger(name)
