from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Any, Iterable, Iterator

from settings import read_log_level

# Attributes every LogRecord carries; anything else was passed through ``extra=``.
_RECORD_ATTRIBUTES = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

# Client libraries that log every request at INFO/DEBUG.
_NOISY_LOGGERS = ("botocore", "boto3", "urllib3", "httpx", "httpcore")

_configured = False


class ContextualFormatter(logging.Formatter):
    """Appends ``extra=`` context to the message as ``key=value`` pairs.

    When ``extra_keys`` is given only those keys are rendered, in that order;
    otherwise every extra attribute is rendered in the order it was supplied.
    ``None`` values are left out.
    """

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        style: str = "%",
        extra_keys: Iterable[str] | None = None,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt, style=style)
        self._extra_keys = tuple(extra_keys) if extra_keys is not None else None

    def _context(self, record: logging.LogRecord) -> Iterator[tuple[str, Any]]:
        if self._extra_keys is not None:
            keys: Iterable[str] = self._extra_keys
        else:
            keys = (key for key in vars(record) if key not in _RECORD_ATTRIBUTES)
        for key in keys:
            value = getattr(record, key, None)
            if value is not None:
                yield key, value

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context = " ".join(f"{key}={value}" for key, value in self._context(record))
        return f"{message} | {context}" if context else message


def configure_logging(level: str | int | None = None) -> None:
    """Route every logger through one contextual stream handler."""
    global _configured
    if _configured:
        return

    log_level = level if level is not None else read_log_level()

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "contextual": {
                    "()": "logging_config.ContextualFormatter",
                    "fmt": "%(asctime)sZ | %(levelname)s | %(name)s | %(message)s",
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                }
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": "contextual",
                }
            },
            "loggers": {name: {"level": "WARNING"} for name in _NOISY_LOGGERS},
            "root": {"handlers": ["default"], "level": log_level},
        }
    )

    _configured = True
