"""Structured logging configuration built on structlog.

Events are named with dotted identifiers and carry keyword fields:

    logger = get_logger(__name__)
    logger.debug("context.git.command_failed", command="branch")

Output goes to stderr so it never mixes with CLI output on stdout. Callers must
not pass collected text (commit subjects, todo items) as log fields; counts and
names only.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

import structlog

DEFAULT_LEVEL = "WARNING"
LEVEL_ENV_VAR = "ZER0_LOG_LEVEL"

_configured = False


def _resolve_level(level: Optional[str]) -> int:
    name = (level or os.environ.get(LEVEL_ENV_VAR) or DEFAULT_LEVEL).upper()
    resolved = logging.getLevelName(name)
    if not isinstance(resolved, int):
        return logging.WARNING
    return resolved


def configure_logging(level: Optional[str] = None, force: bool = False) -> None:
    """Configure structlog once for the process.

    Args:
        level: Level name (DEBUG, INFO, ...). Falls back to $ZER0_LOG_LEVEL, then WARNING
        force: Reconfigure even if logging was already set up
    """
    global _configured
    if _configured and not force:
        return

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_resolve_level(level)),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
    _configured = True


def get_logger(name: Optional[str] = None):
    """Return a bound structlog logger, configuring defaults on first use."""
    if not _configured:
        configure_logging()
    return structlog.get_logger(name)
