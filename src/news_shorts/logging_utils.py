"""Structured logging setup shared by the pipeline, adapters and CLI."""

import logging
import sys
from typing import Optional

import structlog

from news_shorts import config

_CONFIGURED = False


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Configure structlog on top of stdlib logging.

    Calls without arguments after the first one are no-ops. Only an explicit
    call replaces handlers already installed on the root logger.

    Args:
        level: log level name, defaults to LOG_LEVEL from config.
        fmt: "console" or "json", defaults to LOG_FORMAT from config.
    """
    global _CONFIGURED
    explicit = level is not None or fmt is not None
    if _CONFIGURED and not explicit:
        return

    level_name = (level or config.LOG_LEVEL).upper()
    renderer = (
        structlog.processors.JSONRenderer()
        if (fmt or config.LOG_FORMAT) == "json"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level_name, logging.INFO),
        force=explicit,
    )
    _CONFIGURED = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a module logger with global config ensured."""
    setup_logging()
    return structlog.get_logger(name)
