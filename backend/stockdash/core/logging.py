"""
Logging setup shared by the API server and scripts.
"""

import logging

LOGGER_NAME = "stockdash"


def configure_logging(log_level: str = "INFO") -> logging.Logger:
    """
    Configure the package logger.

    Installs a single stream handler; calling again only updates the level.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(handler)
    return logger
