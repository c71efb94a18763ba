"""Structured logging for feedrank.

Every module logs through `get_logger(__name__)` with snake_case event names
and bound fields. `configure_logging` renders them as JSON lines or as a
coloured console stream, chosen by the `log_format` setting.
"""

import logging
import sys
from typing import Optional

import structlog

LOG_FORMATS = ("auto", "json", "console")


def _renderer(log_format: str):
    if log_format not in LOG_FORMATS:
        raise ValueError(f"log_format must be one of {', '.join(LOG_FORMATS)}")
    if log_format == "auto":
        # JSON for servers and pipes, console for a terminal
        log_format = "console" if sys.stderr.isatty() else "json"
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(level: str = "INFO", log_format: Optional[str] = None) -> None:
    """Route structlog through stdlib logging on stderr at `level`."""
    renderer = _renderer(log_format or "auto")
    logging.basicConfig(
        format="%(message)s", stream=sys.stderr, level=level.upper(), force=True
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
