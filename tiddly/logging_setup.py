"""Central logging configuration for the tiddler server.

Applies a root stdout handler so all module loggers emit without per-module
setup. Keeps uvicorn loggers on the same handler and avoids duplicate
handlers on reloads.
"""
from __future__ import annotations
import copy
import logging
from logging.config import dictConfig

_DICT_CONFIG = {
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
            "level": "NOTSET",
            "formatter": "default",
            "stream": "ext://sys.stdout",
        }
    },
    "root": {"level": "INFO", "handlers": ["console"]},
    "loggers": {
        "uvicorn": {"level": "INFO", "handlers": ["console"], "propagate": False},
        "uvicorn.error": {"level": "INFO", "handlers": ["console"], "propagate": False},
        # Access lines come from RequestIdMiddleware instead
        "uvicorn.access": {"level": "WARNING", "handlers": ["console"], "propagate": False},
    },
}


def configure_logging(level: str = "INFO") -> None:
    """Configure application-wide logging once.

    If the root logger already has handlers (pytest, reloaders), only the
    level is adjusted.
    """
    root = logging.getLogger()
    level_name = str(level or "INFO").upper()
    if root.handlers:
        root.setLevel(level_name)
        return
    config = copy.deepcopy(_DICT_CONFIG)
    config["root"]["level"] = level_name
    dictConfig(config)
