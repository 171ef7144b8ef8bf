"""Logging setup: module loggers rendered through Rich on the console."""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "readtrack"

_configured = False


def setup_logging(level: str = "INFO", console: Optional[Console] = None) -> logging.Logger:
    """Initialize the logging system.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        console: Rich console to write to (default: stderr)

    Returns:
        The package logger
    """
    global _configured

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not _configured:
        handler = RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        logger.addHandler(handler)
        logger.propagate = False
        _configured = True

    return logger


def reset_logging() -> None:
    """Remove installed handlers. Used for testing."""
    global _configured
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    _configured = False
