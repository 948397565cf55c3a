"""Logging setup for the content translator.

Library modules only create loggers with ``logging.getLogger(__name__)``;
handlers are installed once by the application entry point.
"""

import logging
import sys
from typing import Optional

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Chatty third-party loggers kept at WARNING
THIRD_PARTY_LOGGERS = ("urllib3", "requests")


def setup_logging(
    level: int = logging.INFO,
    log_format: str = DEFAULT_LOG_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
    stream: Optional[object] = None,
) -> logging.Logger:
    """Configure the package logger with a single stream handler.

    Calling this again replaces the previous handler, so the level can be
    changed between runs.

    Args:
        level: Logging level threshold for the package.
        log_format: Format string for log records.
        date_format: strftime format for timestamps.
        stream: Stream to write to. Defaults to stderr.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger("content_translator")
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(log_format, datefmt=date_format))
    logger.addHandler(handler)
    logger.propagate = False

    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger
