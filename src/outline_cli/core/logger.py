"""
Outline CLI - Logging Setup

Builds the ``outline-cli`` logger from the ``--verbosity`` flag. The returned
logger is passed to the registry, manager and API client explicitly; the root
logger is left alone.
"""

import logging
import sys
from typing import Optional, TextIO

from .exceptions import ValidationError
from ..shared.constants import DEFAULT_VERBOSITY, LOG_FORMAT, LOGGER_NAME

LEVELS = {
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


def level_from_string(verbosity: Optional[str]) -> int:
    """Map a verbosity name to a logging level; empty means ``info``."""
    name = (verbosity or DEFAULT_VERBOSITY).strip().lower()
    if name not in LEVELS:
        raise ValidationError(
            f"illegal log level ({verbosity}), expected one of: {', '.join(LEVELS)}",
            context={"value": verbosity},
        )
    return LEVELS[name]


def configure_logging(
    verbosity: Optional[str] = DEFAULT_VERBOSITY,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """Configure and return the ``outline-cli`` logger.

    Args:
        verbosity: One of error, warning, info, debug
        stream: Destination stream, stderr by default

    Returns:
        The configured logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level_from_string(verbosity))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
