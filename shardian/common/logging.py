"""Centralized logging setup for the ``shardian`` logger tree."""

import logging
import sys
from typing import Union

LOGGER_NAME = "shardian"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved


def setup_logging(level: Union[int, str] = logging.INFO) -> logging.Logger:
    """
    Configure the package logger with a single stdout handler.

    Module loggers created with ``logging.getLogger(__name__)`` inside the
    package propagate here. Calling this again only adjusts the level.

    Args:
        level: Logging level as an int or a name such as ``"DEBUG"``.

    Returns:
        The configured package logger.
    """
    numeric_level = _resolve_level(level)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric_level)

    if not logger.handlers:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(
            logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
        )
        logger.addHandler(console_handler)

    for handler in logger.handlers:
        handler.setLevel(numeric_level)

    return logger
