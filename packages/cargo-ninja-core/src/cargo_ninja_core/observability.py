"""Structured logging setup for cargo-ninja.

Pipeline modules log through ``structlog.get_logger(__name__)`` with
snake_case event names; entry points call configure_logging() once.
Log output goes to stderr so that commands printing data on stdout
(``cargo-ninja plan``) stay machine-readable.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog


def configure_logging(
    *,
    verbose: bool = False,
    json_format: bool = False,
    colors: bool = True,
) -> None:
    """Configure structured logging.

    Args:
        verbose: If True, log DEBUG and above; otherwise WARNING and above.
        json_format: If True, output JSON lines. If False, output human-readable.
        colors: Colorize human-readable output.

    Example:
        >>> configure_logging(verbose=True)
    """
    processors: list[Any] = [
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=colors))

    level = logging.DEBUG if verbose else logging.WARNING
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


__all__ = ["configure_logging"]
