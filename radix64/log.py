import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"
LOGGER_NAME = "radix64"

_logger: Optional[logging.Logger] = None


def get_logger() -> logging.Logger:
    global _logger
    if _logger is None:
        _logger = logging.getLogger(LOGGER_NAME)
        _logger.setLevel(logging.INFO)
        if not _logger.hasHandlers():
            # stdout carries codec output, so log records go to stderr
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
            _logger.addHandler(handler)
    return _logger


__all__ = ["LOG_FORMAT", "LOGGER_NAME", "get_logger"]
