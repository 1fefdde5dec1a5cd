"""Structured logging setup for addrgraph."""

import logging
import sys

import structlog
from structlog.stdlib import LoggerFactory

from addrgraph.config import settings


def setup_logging(level: str = settings.LOG_LEVEL, fmt: str = settings.LOG_FORMAT) -> None:
    """Route structlog through stdlib logging on stderr, console or JSON rendered."""

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer() if fmt == "json" else structlog.dev.ConsoleRenderer(),
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # stdout belongs to the CLI progress output
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
        force=True,
    )
