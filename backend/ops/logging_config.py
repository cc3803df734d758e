"""
Structured logging configuration.

Console output while developing, JSON lines on stdout everywhere else so the
posting logs (organization, source_type, source_id, entry_number) can be
queried from the log aggregator.

Environment variables:
- LOG_FORMAT: "json" or "console" (default: console in DEBUG, json otherwise)
- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: DEBUG in DEBUG, INFO otherwise)
"""
import json
import logging
import os
from datetime import datetime, timezone

# Loggers owned by this project; each one writes to the console handler only.
APP_LOGGERS = ("accounts", "accounting", "operations", "ops", "celery")

_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}


def _handlers(log_format: str) -> tuple[dict, dict]:
    if log_format == "json":
        formatters = {"json": {"()": "ops.logging_config.JsonFormatter"}}
        console = {
            "class": "logging.StreamHandler",
            "formatter": "json",
            "stream": "ext://sys.stdout",
        }
    else:
        formatters = {
            "verbose": {
                "format": "[{asctime}] {levelname} {name} {message}",
                "style": "{",
            },
        }
        console = {"class": "logging.StreamHandler", "formatter": "verbose"}

    handlers = {"console": console, "null": {"class": "logging.NullHandler"}}
    return formatters, handlers


def get_logging_config(debug: bool = False) -> dict:
    """Return the Django LOGGING dict for the current environment."""
    log_level = os.environ.get("LOG_LEVEL", "DEBUG" if debug else "INFO")
    log_format = os.environ.get("LOG_FORMAT", "console" if debug else "json")

    formatters, handlers = _handlers(log_format)

    loggers = {
        "": {"handlers": ["console"], "level": log_level},
        "django": {"handlers": ["console"], "level": log_level, "propagate": False},
        "django.request": {
            "handlers": ["console"],
            "level": log_level if debug else "ERROR",
            "propagate": False,
        },
        # SQL echo only in DEBUG
        "django.db.backends": {
            "handlers": ["console"] if debug else ["null"],
            "level": "DEBUG" if debug else "INFO",
            "propagate": False,
        },
    }
    for name in APP_LOGGERS:
        loggers[name] = {"handlers": ["console"], "level": log_level, "propagate": False}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "handlers": handlers,
        "loggers": loggers,
    }


class JsonFormatter(logging.Formatter):
    """
    One JSON object per line.

    Fields: timestamp, level, logger, message, location, exception (when
    present) and every ``extra=`` key under "extra". Values that json cannot
    encode are stringified (Decimal amounts, dates, model instances).
    """

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            },
        }

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        extras = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS
        }
        if extras:
            payload["extra"] = extras

        return json.dumps(payload, default=str)
