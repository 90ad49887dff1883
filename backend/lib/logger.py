"""
Logging setup shared by the core library, the Flask app and the Lambda
handlers.

Usage:
    from backend.lib.logger import get_logger
    logger = get_logger(__name__)
    logger.info("Bill saved")
"""
import logging
import os

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str = "tnb-bill") -> logging.Logger:
    """
    Return a logger writing to the console.

    The level comes from LOG_LEVEL (default INFO). Handlers are only
    attached once per logger name, so calling this repeatedly is safe.
    """
    logger = logging.getLogger(name)
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logger.setLevel(getattr(logging, level, logging.INFO))

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        logger.addHandler(handler)

    return logger
