"""
Logging Configuration
=====================
Console (and optional file) output for the `cannon_sim` logger tree.
Modules log through `logging.getLogger(__name__)`, so one call here covers
flight, camera and scheduler messages alike.
"""

import logging
import sys
from typing import Optional


LOGGER_NAME = 'cannon_sim'
LOG_FORMAT = '%(asctime)s  %(levelname)-7s %(name)-22s %(message)s'
DATE_FORMAT = '%H:%M:%S'


def setup_logging(level: int = logging.INFO,
                  log_file: Optional[str] = None) -> logging.Logger:
    """
    Route simulator log records to stdout and, if given, to `log_file`.

    Calling again replaces the previous handlers (closing any open log file).
    Returns the package logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='w', encoding='utf-8'))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug("Logging to stdout%s at level %s",
                 f" and {log_file}" if log_file else "",
                 logging.getLevelName(level))
    return logger
