"""Logging configuration for route_log command-line tools."""

import logging
import logging.config
import os
from typing import Optional

LOG_LEVEL_ENV = "ROUTE_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(log_level: Optional[str] = None) -> None:
    """
    Configure the root logger to write plain text lines to stderr.

    Library modules only create loggers; handlers are installed here so
    that scripts decide where output goes.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
                   Defaults to the ROUTE_LOG_LEVEL env var or INFO.
    """
    if log_level is None:
        log_level = os.getenv(LOG_LEVEL_ENV, "INFO")

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "plain": {
                "format": LOG_FORMAT,
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "plain",
                "stream": "ext://sys.stderr",
            },
        },
        "root": {
            "level": log_level.upper(),
            "handlers": ["console"],
        },
    }

    logging.config.dictConfig(logging_config)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance (typically for ``__name__``)."""
    return logging.getLogger(name)
