"""
Structured logging with structlog.

Development renders colored key/value lines; production renders one JSON
object per line (accents kept as-is, catalog text is Spanish).

Usage:
    from core.logging import configure_logging, get_logger

    configure_logging(json_logs=False)  # once, at startup

    logger = get_logger(__name__)
    logger.info("Catalog loaded", products=412, source="json")
"""

import logging
import sys
from typing import Any, List, Optional

import structlog
from structlog.types import Processor

# Third-party loggers that are chatty at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "hpack", "uvicorn.access")


def _processors(json_logs: bool, include_timestamp: bool) -> List[Processor]:
    processors: List[Processor] = []
    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    processors += [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_logs:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        ))
    return processors


def configure_logging(
    json_logs: bool = False,
    log_level: str = "INFO",
    include_timestamp: bool = True,
) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        json_logs: JSON lines (production) instead of console output.
        log_level: Minimum level name, case-insensitive.
        include_timestamp: Prefix entries with an ISO timestamp.
    """
    structlog.configure(
        processors=_processors(json_logs, include_timestamp),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    level = getattr(logging, log_level.upper())
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    # basicConfig leaves an already-configured root logger alone
    logging.getLogger().setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Logger for a module (pass __name__)."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Attach key/values to every log line in the current request/context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


class LoggerMixin:
    """Gives a class a `logger` named after it."""

    @property
    def logger(self) -> structlog.stdlib.BoundLogger:
        return get_logger(self.__class__.__name__)
