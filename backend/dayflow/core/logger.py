"""
Logging setup.

Every module obtains its logger through ``setup_logger(__name__)``; the root
handler is configured once from settings.
"""

from __future__ import annotations

import logging
from logging.config import dictConfig

from dayflow.core.config import get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_configured = False


def configure_logging(log_level: str | None = None) -> None:
    """Configure root logging once at startup."""
    global _configured
    if _configured:
        return

    level = (log_level or get_settings().LOG_LEVEL).upper()
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": {"format": LOG_FORMAT}},
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "level": level,
                }
            },
            "root": {"handlers": ["console"], "level": level},
        }
    )
    _configured = True


def setup_logger(name: str) -> logging.Logger:
    """Get a module logger, configuring the root handler on first use."""
    configure_logging()
    return logging.getLogger(name)
