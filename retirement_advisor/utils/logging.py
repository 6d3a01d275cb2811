"""
Logging setup for the retirement advisor.

``configure_logging(config)`` is called once by the CLI before any work.
Library modules only ever use ``logging.getLogger(__name__)``; embedding
applications configure logging themselves. Console logs go to stderr;
stdout carries only command output.

Records are tagged with a short ``component`` (the logger name without the
``retirement_advisor.`` prefix, e.g. ``advice.engine``). The configured level
applies to the ``retirement_advisor`` logger; other libraries log at WARNING
or above unless the configured level is stricter.

Text format::

    2026-10-19T09:00:00Z INFO     advice.engine | Advice generated | recommendations=3

JSON format (``json_format = true`` under ``[logging]``) emits one object per
line::

    {"ts": "...", "app": "retirement_advisor", "level": "INFO",
     "component": "advice.engine", "msg": "..."}
"""

from __future__ import annotations

import json
import logging
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from retirement_advisor.config import LoggingConfig

APP_LOGGER = "retirement_advisor"
LOG_FORMAT = "%(asctime)s %(levelname)-8s %(component)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
THIRD_PARTY_LEVEL = logging.WARNING

# Attributes every LogRecord carries; anything else came from ``extra=``.
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "component"}


def component_name(logger_name: str) -> str:
    """``retirement_advisor.advice.engine`` → ``advice.engine``."""
    if logger_name == APP_LOGGER:
        return "app"
    prefix = APP_LOGGER + "."
    return logger_name[len(prefix):] if logger_name.startswith(prefix) else logger_name


class _ComponentFilter(logging.Filter):
    """Adds ``record.component``; never drops a record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.component = component_name(record.name)
        return True


class _JsonFormatter(logging.Formatter):
    """One JSON object per record: ``ts``, ``app``, ``level``, ``component``, ``msg``, extras."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(
                LOG_DATE_FORMAT
            ),
            "app": APP_LOGGER,
            "level": record.levelname,
            "component": component_name(record.name),
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        for key, val in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                payload[key] = val
        return json.dumps(payload, default=str)


def build_formatter(json_format: bool) -> logging.Formatter:
    if json_format:
        return _JsonFormatter()
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    formatter.converter = time.gmtime
    return formatter


def configure_logging(config: "LoggingConfig") -> None:
    """Configure handlers and levels from a ``LoggingConfig``.

    Installs a stderr handler, plus a file handler when ``config.log_file``
    is set (parent directories are created). The ``retirement_advisor``
    logger gets ``config.level``; the root logger gets the stricter of that
    and ``THIRD_PARTY_LEVEL``.
    """
    level = getattr(logging, config.level.upper(), logging.INFO)
    formatter = build_formatter(config.json_format)
    component_filter = _ComponentFilter()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(component_filter)

    logging.basicConfig(level=max(level, THIRD_PARTY_LEVEL), handlers=handlers, force=True)
    logging.getLogger(APP_LOGGER).setLevel(level)
