"""Logging helper shared by the road mesh packages.

Wraps Python's standard logging module so that every module logs with
the same format.  Call `get_logger(__name__)` at module import time.
"""

import logging


def get_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Return a logger with a single stream handler and preset format.

    The handler is only installed the first time a given name is
    requested, so repeated calls never duplicate output.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt='[%(asctime)s] [%(levelname)s] %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(level)
    return logger
