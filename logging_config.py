from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Any, Dict, Iterable, Iterator

from settings import get_settings

# Context fields services attach through ``extra=``, in display order.
CONTEXT_KEYS = (
    "stage",
    "sensor",
    "sensor_type",
    "status",
    "reason",
    "reading_count",
    "anomaly_count",
    "health",
    "source",
)

_LOG_FORMAT = "%(asctime)sZ | %(levelname)s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

_configured = False


class ContextualFormatter(logging.Formatter):
    """Render known ``extra=`` fields as a trailing ``key=value`` block."""

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        style: str = "%",
        context_keys: Iterable[str] | None = None,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt, style=style)
        self.context_keys = tuple(context_keys or CONTEXT_KEYS)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context = " ".join(self._context_pairs(record))
        return f"{message} | {context}" if context else message

    def _context_pairs(self, record: logging.LogRecord) -> Iterator[str]:
        for key in self.context_keys:
            value = getattr(record, key, None)
            if value is not None:
                yield f"{key}={_render(value)}"


def _render(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


def _logging_config(level: str | int) -> Dict[str, Any]:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "contextual": {
                "()": "logging_config.ContextualFormatter",
                "fmt": _LOG_FORMAT,
                "datefmt": _DATE_FORMAT,
                "context_keys": list(CONTEXT_KEYS),
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "contextual",
            }
        },
        "loggers": {"httpx": {"level": "WARNING"}},
        "root": {"handlers": ["console"], "level": level},
    }


def configure_logging(level: str | int | None = None, force: bool = False) -> None:
    """Install the console handler once per process; ``force`` reapplies it."""
    global _configured
    if _configured and not force:
        return

    dictConfig(_logging_config(level if level is not None else get_settings().log_level))
    _configured = True
