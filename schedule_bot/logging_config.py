"""Centralized logging configuration (rich console handler)."""

import logging
from logging.config import dictConfig


def configure_logging(*, log_level: str = "INFO") -> None:
    """Configure application logging once at startup."""
    if getattr(configure_logging, "_configured", False):
        return

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(name)s | %(message)s",
                    "datefmt": "[%X]",
                }
            },
            "handlers": {
                "rich": {
                    "class": "rich.logging.RichHandler",
                    "formatter": "default",
                    "level": log_level,
                    "rich_tracebacks": True,
                    "show_path": False,
                }
            },
            "loggers": {
                # Google client chatter is noise at INFO
                "googleapiclient": {"level": "WARNING"},
                "httpx": {"level": "WARNING"},
            },
            "root": {
                "handlers": ["rich"],
                "level": log_level,
            },
        }
    )

    logging.getLogger(__name__).debug("Logging configured at %s", log_level)
    setattr(configure_logging, "_configured", True)
