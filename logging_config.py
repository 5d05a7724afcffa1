from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Iterable, Sequence

from settings import get_settings

_DEFAULT_EXTRA_KEYS = (
    "port",
    "store_key",
    "value",
    "line",
    "reason",
    "pending_bytes",
    "exit_code",
)

_configured = False


class ContextualFormatter(logging.Formatter):
    """Append ``key=value`` context from ``extra`` to each status line."""

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        style: str = "%",
        extra_keys: Iterable[str] | None = None,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt, style=style)
        self._extra_keys: Sequence[str] = tuple(extra_keys or _DEFAULT_EXTRA_KEYS)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context_parts: list[str] = []
        for key in self._extra_keys:
            value = getattr(record, key, None)
            if value is None:
                continue
            context_parts.append(f"{key}={_render(value)}")
        if not context_parts:
            return message
        return f"{message} | {' '.join(context_parts)}"


def _render(value: object) -> str:
    # Raw sensor lines can carry spaces or control bytes.
    if isinstance(value, str) and (not value or any(ch.isspace() for ch in value)):
        return repr(value)
    return str(value)


def configure_logging(level: str | int | None = None) -> None:
    global _configured
    if _configured:
        return

    log_level = level if level is not None else get_settings().log_level

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "contextual": {
                    "()": "logging_config.ContextualFormatter",
                    "fmt": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                    "style": "%",
                    "extra_keys": list(_DEFAULT_EXTRA_KEYS),
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stdout",
                    "level": log_level,
                    "formatter": "contextual",
                }
            },
            "loggers": {
                "serial": {"level": "WARNING"},
            },
            "root": {"handlers": ["console"], "level": log_level},
        }
    )

    _configured = True
