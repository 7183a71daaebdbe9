"""
Rich console logging with dispatch context for wabridge.

Every record logged through ``get_logger`` is prefixed with the business phone
number id and the sender of the message currently being dispatched, e.g.
``[P:106540352242922][U:16315551234] Sent text message``.
"""

from __future__ import annotations

import logging
import os
from collections.abc import MutableMapping
from datetime import datetime
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

from wabridge.core.config.settings import LOG_LEVELS, settings

from .context import get_current_phone_number_context, get_current_user_context

CONSOLE_FORMAT = "[%(name)s] %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_console = Console(
    theme=Theme(
        {
            "logging.level.debug": "dim white",
            "logging.level.info": "cyan",
            "logging.level.warning": "yellow",
            "logging.level.error": "bold red",
        }
    )
)


class CompactFormatter(logging.Formatter):
    """Shorten ``wabridge.a.b.c`` logger names to their last two parts."""

    def format(self, record: logging.LogRecord) -> str:
        name = record.name
        if name.startswith("wabridge.") and name.count(".") > 1:
            record.name = ".".join(name.rsplit(".", 2)[-2:])
        try:
            return super().format(record)
        finally:
            record.name = name


class ContextLogger(logging.LoggerAdapter):
    """
    Logger adapter that prefixes messages with the dispatch context.

    Context variables set by the dispatcher take precedence over the values
    bound on the adapter.
    """

    def __init__(
        self,
        logger: logging.Logger,
        phone_number_id: str | None = None,
        user_id: str | None = None,
    ):
        super().__init__(
            logger, {"phone_number_id": phone_number_id, "user_id": user_id}
        )

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        phone = get_current_phone_number_context() or self.extra["phone_number_id"]
        user = get_current_user_context() or self.extra["user_id"]

        prefix = ""
        if phone:
            prefix += f"[P:{phone}]"
        if user:
            prefix += f"[U:{user}]"
        return (f"{prefix} {msg}" if prefix else msg), kwargs

    def bind(self, **context: str | None) -> ContextLogger:
        """
        Create a new adapter with updated context.

        Args:
            **context: ``phone_number_id`` and/or ``user_id``
        """
        return ContextLogger(
            self.logger,
            phone_number_id=context.get("phone_number_id", self.extra["phone_number_id"]),
            user_id=context.get("user_id", self.extra["user_id"]),
        )


def _console_handler(fmt: str) -> logging.Handler:
    handler = RichHandler(
        console=_console,
        rich_tracebacks=True,
        show_time=True,
        show_level=True,
        markup=False,
    )
    handler.setFormatter(CompactFormatter(fmt))
    return handler


def _daily_file_handler(log_dir: str, fmt: str) -> logging.Handler:
    os.makedirs(log_dir, exist_ok=True)
    path = os.path.join(log_dir, f"wabridge_{datetime.now():%Y%m%d}.log")
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(CompactFormatter(fmt))
    return handler


def setup_logging(
    *,
    level: str = "INFO",
    mode: str = "PROD",
    log_dir: str | None = None,
    console_fmt: str | None = None,
    file_fmt: str | None = None,
) -> None:
    """
    Configure the root logger.

    Parameters
    ----------
    level : str
        One of LOG_LEVELS; anything else falls back to INFO
    mode : str
        "DEV" adds a daily log file next to the console output
    log_dir : str, optional
        Directory for the daily log file (DEV mode only)
    console_fmt, file_fmt : str, optional
        Override the default format strings
    """
    lvl = level.upper() if level.upper() in LOG_LEVELS else "INFO"

    handlers = [_console_handler(console_fmt or CONSOLE_FORMAT)]
    if mode.upper() == "DEV" and log_dir:
        handlers.append(_daily_file_handler(log_dir, file_fmt or FILE_FORMAT))

    logging.basicConfig(level=lvl, handlers=handlers, force=True)
    get_logger("wabridge.setup").info(f"Logging initialized ({lvl}, {mode.upper()})")


def setup_app_logging() -> None:
    """Configure logging from the global settings."""
    setup_logging(
        level=settings.log_level,
        mode=settings.environment,
        log_dir=settings.log_dir if settings.is_development else None,
    )


def get_logger(name: str) -> ContextLogger:
    """
    Get a context-aware logger.

    Args:
        name: Logger name (usually __name__)
    """
    return ContextLogger(logging.getLogger(name))
