"""Structured logging for the Skirmish combat engine.

Engine code logs through structlog with key/value pairs. Once
:func:`configure_logging` has run, every structlog event is handed to the
standard library's root logger, so engine events and third-party records
(openai, httpx) share the same handlers:

    stderr    console lines, or JSON lines with ``json_format``
    log file  always JSON lines, one object per event

Bound context (for example the ``match_id`` of the match being played)
is merged into every event.

Example:
    >>> from skirmish.core.logging import configure_logging, get_logger
    >>> configure_logging(level="INFO", log_file="match.log")
    >>> get_logger(__name__).info("Turn started", combatant="Conan", round=1)
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import Processor


if TYPE_CHECKING:
    from structlog.types import EventDict, WrappedLogger

APP_NAME = "skirmish"

QUIET_LOGGERS = ("httpx", "httpcore", "openai")
"""Chatty third-party loggers held at WARNING."""


def add_app_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Tag every event with the application name."""
    event_dict["app"] = APP_NAME
    return event_dict


def _event_processors() -> list[Processor]:
    """Processors applied to structlog events and foreign stdlib records alike."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_app_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _formatter(*, json_format: bool) -> structlog.stdlib.ProcessorFormatter:
    """Build a stdlib formatter that renders events as JSON or console lines."""
    if json_format:
        render: list[Processor] = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        render = [
            structlog.dev.ConsoleRenderer(
                colors=sys.stderr.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        ]
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_event_processors(),
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *render],
    )


def configure_logging(
    *,
    level: str = "INFO",
    json_format: bool = False,
    log_file: str | None = None,
) -> None:
    """Route all logging to stderr and, optionally, a JSON log file.

    Safe to call more than once: the root logger's handlers are replaced,
    so loggers cached by earlier calls write to the new destinations.

    Args:
        level: The logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: Render stderr lines as JSON instead of console text.
        log_file: Path of a file that also receives every event as JSON.
            The file is appended to.
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(_formatter(json_format=json_format))
    handlers: list[logging.Handler] = [console]

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(_formatter(json_format=True))
        handlers.append(file_handler)

    logging.basicConfig(level=log_level, handlers=handlers, force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_event_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a logger, typically with ``__name__``."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context variables included in all subsequent log entries.

    Example:
        >>> bind_context(match_id="3f2a")
        >>> logger.info("Round started")  # includes match_id
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()


__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
]
