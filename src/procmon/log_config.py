"""Logging setup for procmon."""

import logging
from pathlib import Path

from textual.logging import TextualHandler

LOGGER_NAME = "procmon"


def setup_logging(level: str | int = logging.WARNING, log_file: Path | None = None) -> logging.Logger:
    """
    Configure and return the procmon package logger.

    Args:
        level: Logging level name or number.
        log_file: Optional file for log output. Without one, records go to the
            Textual devtools console so they never draw over the TUI.

    Returns:
        The configured ``procmon`` logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
    else:
        handler = TextualHandler()
        handler.setFormatter(logging.Formatter(fmt="[%(levelname)s] %(message)s"))

    logger.addHandler(handler)
    logger.propagate = False
    return logger
