# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Structured logging configuration.

Logs go to stderr unless another stream is given, since
``blobcache get`` writes raw blob bytes to stdout.
"""

import logging
import sys
from collections.abc import Callable
from typing import Any, TextIO, cast

import structlog
from structlog.typing import EventDict, WrappedLogger

Processor = Callable[[WrappedLogger, str, EventDict], Any]

_VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _resolve_level(log_level: str) -> int:
    normalized_level = log_level.upper()
    if normalized_level not in _VALID_LEVELS:
        logging.warning(
            f"Invalid log level '{log_level}', defaulting to INFO. "
            f"Valid levels: {', '.join(sorted(_VALID_LEVELS))}"
        )
        normalized_level = "INFO"
    return cast(int, getattr(logging, normalized_level))


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = True,
    stream: TextIO | None = None,
) -> None:
    """Configure structlog and stdlib logging to write to one stream.

    Args:
        log_level: Level name, case-insensitive. Unknown names fall back to INFO.
        json_output: Render JSON lines (True) or colored console output (False).
        stream: Destination for both loggers; defaults to sys.stderr.
    """
    level = _resolve_level(log_level)
    stream = stream if stream is not None else sys.stderr

    # Store adapters log through stdlib logging
    logging.basicConfig(format="%(message)s", stream=stream, level=level)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if json_output:
        processors += [
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    if name:
        return cast(structlog.BoundLogger, structlog.get_logger(name))
    return cast(structlog.BoundLogger, structlog.get_logger())
