from __future__ import annotations

import logging.config
import os

from . import config


def build_logging_config() -> dict:
    handlers = ["console", "file"] if config.LOG_TO_FILE else ["console"]
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "verbose": {
                "format": "{levelname} {asctime} {name} {message}",
                "style": "{",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "verbose",
            },
            "file": {
                "class": "logging.handlers.RotatingFileHandler",
                "filename": config.LOG_FILE_PATH,
                "maxBytes": 1024 * 1024 * 10,  # 10MB
                "backupCount": 5,
                "formatter": "verbose",
            } if config.LOG_TO_FILE else {
                "class": "logging.NullHandler",
            },
        },
        "root": {
            "handlers": handlers,
            "level": config.LOG_LEVEL,
        },
        "loggers": {
            "farm_app": {
                "handlers": handlers,
                "level": config.LOG_LEVEL,
                "propagate": False,
            },
            "sqlalchemy.engine": {
                "handlers": ["console"],
                "level": "WARNING",
                "propagate": False,
            },
        },
    }


def configure_logging() -> None:
    if config.LOG_TO_FILE:
        os.makedirs(os.path.dirname(config.LOG_FILE_PATH) or ".", exist_ok=True)
    logging.config.dictConfig(build_logging_config())
