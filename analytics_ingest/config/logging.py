"""
Logging for scheduled ingestion runs.

structlog renders both its own events and stdlib records (SQLAlchemy, the
Google client libraries) through one stdout handler, as JSON or as
human-readable console lines depending on LOG_FORMAT.
"""

import logging
import sys
from typing import List, Optional

import structlog
from structlog.processors import JSONRenderer, TimeStamper
from structlog.stdlib import add_log_level, ProcessorFormatter

from analytics_ingest.config.settings import get_settings

# Third-party loggers held at INFO or above even when LOG_LEVEL=DEBUG
QUIET_LOGGERS = ("google", "urllib3")


def _shared_processors() -> List:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        add_log_level,
        TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(log_format: str):
    if log_format == "json":
        return JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def configure_logging(log_level: Optional[str] = None) -> None:
    """
    Route structlog and stdlib logging to stdout.

    Args:
        log_level: Overrides LOG_LEVEL (DEBUG, INFO, WARNING, ERROR)
    """
    monitoring = get_settings().monitoring
    level = (log_level or monitoring.log_level).upper()
    numeric_level = getattr(logging, level, logging.INFO)
    processors = _shared_processors()

    structlog.configure(
        processors=processors + [ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(
        ProcessorFormatter(processor=_renderer(monitoring.log_format), foreign_pre_chain=processors)
    )

    root_logger = logging.getLogger()
    root_logger.handlers[:] = [handler]
    root_logger.setLevel(numeric_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.INFO))

    structlog.get_logger(__name__).debug(
        "Logging configured",
        level=level,
        format=monitoring.log_format,
    )


def get_logger(name: str):
    return structlog.get_logger(name)
