"""Logging setup for the ai_trace package loggers."""
import logging
import sys
from typing import Optional, TextIO

LOGGER_NAME = "ai_trace"
LOG_FORMAT = "%(asctime)s ai-trace %(levelname)-7s [%(name)s] %(message)s"


def setup_logging(level: int = logging.INFO, stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Route ai_trace log records to a single stream handler.

    Only the ``ai_trace`` logger tree is configured; loggers of the host
    application and of openai or httpx are left alone. Calling again
    replaces the handler instead of stacking another one.

    Args:
        level: Logging level for the ai_trace loggers.
        stream: Destination stream, stderr by default.

    Returns:
        The configured ``ai_trace`` logger.
    """
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logger = logging.getLogger(LOGGER_NAME)
    for old in list(logger.handlers):
        logger.removeHandler(old)
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger
