"""Structured JSON logging."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime, timezone
import logging
from pathlib import Path
import sys
from typing import Any

import orjson


# Attributes every LogRecord carries; anything else was passed via ``extra``.
_RESERVED_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime"}

PLAIN_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _clip(text: str, limit: int) -> str:
    return text if len(text) <= limit else f"{text[:limit]}..."


def _orjson_fallback(value: Any) -> Any:
    """Serialize the extras orjson rejects (token sets, paths, exceptions)."""
    if isinstance(value, (set, frozenset)):
        try:
            return sorted(value)
        except TypeError:
            return list(value)
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, (Path, Exception)):
        return str(value)
    return repr(value)


class JsonFormatter(logging.Formatter):
    """Render each record as one JSON object.

    ``extra`` fields are inlined next to the standard keys. Keys that look
    like credentials are masked, and long strings are clipped so a pasted
    document body cannot flood the log.
    """

    REDACT_KEYS = frozenset({"password", "token", "api_key", "secret", "authorization"})
    MAX_MESSAGE_LEN = 2000
    MAX_EXTRA_LEN = 500

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": _clip(record.getMessage(), self.MAX_MESSAGE_LEN),
        }
        _, dot, component = record.name.rpartition(".")
        if dot:
            entry["component"] = component
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        entry.update(self._extras(record))
        return orjson.dumps(entry, default=_orjson_fallback).decode("utf-8")

    def _extras(self, record: logging.LogRecord) -> Iterator[tuple[str, Any]]:
        for key, value in vars(record).items():
            if key in _RESERVED_ATTRS or key.startswith("_"):
                continue
            if key.lower() in self.REDACT_KEYS:
                yield key, "[REDACTED]"
            elif isinstance(value, str):
                yield key, _clip(value, self.MAX_EXTRA_LEN)
            else:
                yield key, value


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    *,
    log_file: Path | None = None,
    handler: logging.Handler | None = None,
    logger_levels: dict[str, str] | None = None,
) -> logging.Handler:
    """Replace the root logger's handlers with a single one.

    Args:
        level: Root level name; unknown names fall back to INFO
        json_output: Use :class:`JsonFormatter` instead of plain text lines
        log_file: Append to this file instead of writing to stderr
        handler: Install this handler as-is (wins over ``log_file``)
        logger_levels: Level overrides keyed by logger name

    Returns:
        The installed handler.
    """
    root = logging.getLogger()
    root.setLevel(_level_number(level))
    for existing in list(root.handlers):
        root.removeHandler(existing)
        existing.close()

    if handler is None:
        handler = logging.FileHandler(log_file, encoding="utf-8") if log_file else logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter() if json_output else logging.Formatter(PLAIN_FORMAT))
    root.addHandler(handler)

    # asyncio debug chatter from the TUI event loop
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    for name, name_level in (logger_levels or {}).items():
        logging.getLogger(name).setLevel(_level_number(name_level))

    return handler


def _level_number(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO
