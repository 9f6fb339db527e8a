"""
Logging configuration for the handler and the CLI.
"""

from __future__ import annotations

import logging

LOGGER_NAME = "xray_archiver"
HANDLER_NAME = "xray_archiver.console"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def init_logging(level: str = "INFO") -> logging.Logger:
    """Configure the package logger with a console handler (once)."""
    log_level = getattr(logging, level.upper(), logging.INFO)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)
    logger.propagate = False  # avoid duplicate lines when the runtime configures root

    if not any(h.get_name() == HANDLER_NAME for h in logger.handlers):
        ch = logging.StreamHandler()
        ch.set_name(HANDLER_NAME)
        ch.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(ch)
    for h in logger.handlers:
        h.setLevel(log_level)

    return logger
