"""Structured logging for the NWN character builder.

Logging is configured once per process from ``Settings``: a readable console
renderer when ``debug`` is set, JSON lines otherwise. Every entry carries the
application name and version, and store operations bind the character id
they work on.

Example:
    >>> from nwn_builder.core.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Level added", character_id="abc", level=4)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import structlog

from nwn_builder.core.config import Settings, get_settings


if TYPE_CHECKING:
    from contextlib import AbstractContextManager

    from structlog.types import EventDict, Processor, WrappedLogger


def app_context_processor(app_name: str, app_version: str) -> Processor:
    """Build a processor stamping entries with the application identity.

    Args:
        app_name: Value for the ``app`` key.
        app_version: Value for the ``version`` key.

    Returns:
        A structlog processor.
    """

    def add_app_context(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("app", app_name)
        event_dict.setdefault("version", app_version)
        return event_dict

    return add_app_context


def configure_logging(settings: Settings | None = None, *, force: bool = False) -> None:
    """Configure structlog from the application settings.

    Does nothing when structlog is already configured, unless ``force`` is
    set, so every builder can call it.

    Args:
        settings: Settings to read; the cached settings if omitted.
        force: Reconfigure even if logging was set up before.
    """
    if structlog.is_configured() and not force:
        return
    settings = settings or get_settings()

    renderer: Processor
    if settings.is_production:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            app_context_processor(settings.app_name, settings.app_version),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, settings.log_level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a logger, typically with ``__name__``."""
    return structlog.get_logger(name)


def character_context(character_id: str) -> AbstractContextManager[None]:
    """Bind a character id to every log entry inside the block.

    Example:
        >>> with character_context("abc123"):
        ...     logger.info("Character saved")  # includes character_id
    """
    return structlog.contextvars.bound_contextvars(character_id=character_id)


__all__ = [
    "app_context_processor",
    "configure_logging",
    "get_logger",
    "character_context",
]
