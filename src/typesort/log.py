"""Logging setup for the command line entry point."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from typesort.config.models import LoggingSettings

LOGGER_NAME = "typesort"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(
    settings: LoggingSettings,
    *,
    verbose: bool = False,
    quiet: bool = False,
    console: Console | None = None,
) -> logging.Logger:
    """Attach console and optional file handlers to the ``typesort`` logger.

    Previously installed handlers are replaced, so repeated CLI invocations in
    one process do not duplicate output.

    Args:
        settings: Logging section of the resolved configuration.
        verbose: Force DEBUG output on the console.
        quiet: Restrict console output to errors.
        console: Rich console to render to; stderr when omitted.

    Returns:
        logging.Logger: The configured package logger.
    """
    level = logging.getLevelName(settings.level.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    rich_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=verbose,
    )
    rich_handler.setLevel(level)
    logger.addHandler(rich_handler)
    effective = level

    if settings.file:
        log_path = Path(settings.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=settings.max_size_mb * 1024 * 1024,
            backupCount=settings.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        file_handler.setLevel(min(level, logging.INFO))
        logger.addHandler(file_handler)
        effective = min(effective, logging.INFO)

    logger.setLevel(effective)
    return logger


__all__ = ["LOGGER_NAME", "configure_logging"]
