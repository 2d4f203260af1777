"""Logging setup for the CLI."""

from __future__ import annotations

import logging

DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: int = logging.INFO) -> logging.Logger:
    """Install a single console handler on the root logger."""

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(fmt=DEFAULT_LOG_FORMAT, datefmt=DEFAULT_DATE_FORMAT))
    stream_handler.setLevel(level)
    root_logger.addHandler(stream_handler)

    # keep urllib3 connection chatter out of --verbose output
    logging.getLogger("urllib3").setLevel(max(level, logging.INFO))

    logger = logging.getLogger("cannon_core")
    logger.setLevel(level)
    return logger
