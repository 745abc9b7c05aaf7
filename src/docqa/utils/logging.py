"""
Logging setup for the docqa entry points.

Library modules only call ``logging.getLogger(__name__)``; handlers are
attached here, once, by the CLI and the server.
"""

import logging
import sys
from typing import TextIO

ROOT_LOGGER = "docqa"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Client libraries that log every HTTP request at INFO
NOISY_LOGGERS = ("httpx", "openai", "chromadb")


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved


def configure_logging(level: int | str = "INFO", stream: TextIO | None = None) -> logging.Logger:
    """
    Attach a stderr handler to the docqa logger tree.

    Calling it again only changes the level.

    Args:
        level: Log level name or number
        stream: Output stream (stderr if None)

    Returns:
        The docqa root logger
    """
    logger = logging.getLogger(ROOT_LOGGER)

    if not any(getattr(h, "_docqa", False) for h in logger.handlers):
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._docqa = True
        logger.addHandler(handler)
        logger.propagate = False

        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    set_log_level(level)
    return logger


def set_log_level(level: int | str) -> None:
    """
    Set the log level of the docqa logger tree.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Raises:
        ValueError: If the level name is unknown
    """
    logging.getLogger(ROOT_LOGGER).setLevel(_resolve_level(level))
