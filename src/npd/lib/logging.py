"""Diagnostic logging for the npd CLI (never mixed into rendered output)."""

from __future__ import annotations

import logging as std_logging
import sys
from typing import TextIO

import structlog

NPD_LOGGER = "npd"

_LEVELS = (std_logging.WARNING, std_logging.INFO, std_logging.DEBUG)


def level_for(verbosity: int) -> int:
    """Map `-v` counts to a log level: 0 warning, 1 info, 2+ debug."""

    return _LEVELS[max(0, min(verbosity, len(_LEVELS) - 1))]


def configure_logging(
    json_mode: bool = False,
    verbosity: int = 0,
    *,
    color: bool = True,
    stream: TextIO | None = None,
) -> None:
    """Route `npd.*` stdlib loggers and structlog to stderr at one level."""

    level = level_for(verbosity)
    target = stream if stream is not None else sys.stderr

    handler = std_logging.StreamHandler(target)
    handler.setFormatter(std_logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    package_logger = std_logging.getLogger(NPD_LOGGER)
    package_logger.handlers[:] = [handler]
    package_logger.setLevel(level)
    package_logger.propagate = False

    renderer: structlog.typing.Processor = (
        structlog.processors.JSONRenderer()
        if json_mode
        else structlog.dev.ConsoleRenderer(colors=color)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=target),
        cache_logger_on_first_use=False,
    )
