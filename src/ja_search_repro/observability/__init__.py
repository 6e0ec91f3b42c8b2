"""Observability helpers (structured logging)."""

from ja_search_repro.observability.logging import JsonFormatter, configure_logging


__all__ = [
    "JsonFormatter",
    "configure_logging",
]
