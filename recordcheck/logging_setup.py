"""Central logging configuration for the harness.

Applies a root stdout handler so all `recordcheck.*` loggers emit at the
configured level without per-module setup, and avoids duplicate handlers when
test runners import the package more than once.
"""
from __future__ import annotations
import logging
from logging.config import dictConfig

from recordcheck.config import load_config


def _dict_config(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)s:%(name)s:%(message)s",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
                "stream": "ext://sys.stdout",
            }
        },
        "root": {"level": "WARNING", "handlers": ["console"]},
        "loggers": {
            "recordcheck": {"level": level, "handlers": ["console"], "propagate": False},
        },
    }


def configure_logging(level: str | None = None) -> None:
    """Configure harness logging once.

    If the `recordcheck` logger already has handlers, return to prevent
    duplicate output.
    """
    if logging.getLogger("recordcheck").handlers:
        return
    dictConfig(_dict_config(level or load_config().logging.level))
