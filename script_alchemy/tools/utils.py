"""
Logging setup for applications using ScriptAlchemy.
"""
from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

__all__ = [
    "LOGGER_NAME",
    "get_logger",
]

LOGGER_NAME = "script-alchemy"


def get_logger(
    level: int = logging.INFO, *, console: Console | None = None
) -> logging.Logger:
    """
    Get the `script-alchemy` logger, attaching a rich handler the first time.
    Pass the result as `logger` to {obj}`Session`.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        rich_handler = RichHandler(
            console=console or Console(stderr=True),
            rich_tracebacks=True,
            show_level=True,
            show_time=True,
            show_path=False,
        )
        rich_handler.setFormatter(logging.Formatter("%(message)s"))

        logger.addHandler(rich_handler)
        logger.propagate = False

    return logger
