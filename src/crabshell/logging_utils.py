"""Runtime logging helpers."""

from __future__ import annotations

import os
from logging import Handler

from loguru import logger
from rich.console import Console
from rich.logging import RichHandler

from crabshell.config import Settings

_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<7} | {name}:{function}:{line} | {message}"
_CONSOLE_LEVEL = "WARNING"


def _build_console_handler() -> Handler:
    return RichHandler(
        console=Console(stderr=True),
        show_level=True,
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )


def configure_logging(settings: Settings) -> None:
    """Configure loguru sinks for one shell process.

    Warnings and errors always reach the terminal through rich. With logging
    enabled every message at ``settings.log_level`` is also written to the log
    file in the config folder.
    """
    level = os.getenv("CRABSHELL_LOG_LEVEL", settings.log_level).upper()
    logger.remove()
    logger.add(
        _build_console_handler(),
        level=_CONSOLE_LEVEL,
        format="{message}",
        backtrace=False,
        diagnose=False,
    )
    if settings.log_enabled:
        logger.add(
            settings.log_path,
            level=level,
            format=_FILE_FORMAT,
            mode="w",
            encoding="utf-8",
            backtrace=False,
            diagnose=False,
        )
        logger.info("logging.configured file={} level={}", settings.log_path, level)
