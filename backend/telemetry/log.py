from __future__ import annotations

import logging
import sys

import structlog

from telemetry.config import log_format, log_level

_CONFIGURED = False


def configure_logging(*, force: bool = False) -> None:
    """
    Configure structlog once per process.

    Level and renderer come from DADAR_LOG_LEVEL / DADAR_LOG_FORMAT.
    """
    global _CONFIGURED
    if _CONFIGURED and not force:
        return

    level = logging.getLevelName(log_level())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if log_format() == "json":
        # ConsoleRenderer prints tracebacks itself; JSON needs them flattened first.
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer())
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )
    _CONFIGURED = True
