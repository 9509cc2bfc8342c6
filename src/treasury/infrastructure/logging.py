"""Structlog configuration for the membership engine.

Probes log through structlog; this module decides how those events are
rendered. Console output is used for interactive sessions, JSON lines
everywhere else.
"""

from __future__ import annotations

import logging
import os
import sys

import structlog

from infrastructure.settings import MembershipSettings, get_settings


def _use_console(log_format: str) -> bool:
    if log_format == "console":
        return True
    if log_format == "json":
        return False
    # FORCE_COLOR=1 enables colors even in non-TTY environments (like Docker)
    force_color = os.environ.get("FORCE_COLOR", "").lower() in ("1", "true", "yes")
    return force_color or sys.stdout.isatty()


def _min_level(level: str) -> int:
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


def configure_logging(settings: MembershipSettings | None = None) -> None:
    """Configure structlog processors and the minimum level.

    Args:
        settings: Settings providing ``log_level`` and ``log_format``
            (defaults to environment settings)

    Raises:
        ValueError: If the configured level is not a standard level name
    """
    settings = settings or get_settings()
    min_level = _min_level(settings.log_level)

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if _use_console(settings.log_format):
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
