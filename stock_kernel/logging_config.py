"""
Structured JSON logging for the stock kernel.

Responsibility:
    Every record under the ``stock_kernel`` logger tree is written as one
    JSON object per line. Ids bound in ``LogContext`` (the drug and action
    being applied, the remote store being written) are merged into each
    record, so a stock movement can be traced without threading ids
    through every call.

Architecture position:
    Kernel infrastructure. The transaction engine binds ``drug_id`` and
    ``action`` around each applied action, the persistence gateway binds
    ``store_id`` around remote writes, and the CLI calls
    ``configure_logging`` once with the configured level.

Failure modes:
    - TypeError from ``LogContext.set`` / ``LogContext.bind`` for a field
      the context does not carry.
"""

from __future__ import annotations

import json
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterator, TextIO

from stock_kernel.exceptions import StockKernelError

__all__ = [
    "CONTEXT_FIELDS",
    "LOGGER_ROOT",
    "LogContext",
    "StructuredFormatter",
    "configure_logging",
    "get_logger",
    "reset_logging",
]

LOGGER_ROOT = "stock_kernel"

CONTEXT_FIELDS = ("drug_id", "action", "store_id")

_context: dict[str, ContextVar[str | None]] = {
    name: ContextVar(f"stock_log_{name}", default=None) for name in CONTEXT_FIELDS
}


def _context_var(name: str) -> ContextVar[str | None]:
    try:
        return _context[name]
    except KeyError:
        raise TypeError(f"unknown log context field {name!r}") from None


class LogContext:
    """Ids attached to every record logged in the current context."""

    @staticmethod
    def set(**fields: str | None) -> None:
        """Set the given fields. A None value leaves its field unchanged."""
        for name, value in fields.items():
            var = _context_var(name)
            if value is not None:
                var.set(value)

    @staticmethod
    def get_all() -> dict[str, str]:
        values = {name: var.get() for name, var in _context.items()}
        return {name: value for name, value in values.items() if value is not None}

    @staticmethod
    def clear() -> None:
        for var in _context.values():
            var.set(None)

    @staticmethod
    @contextmanager
    def bind(**fields: str | None) -> Iterator[None]:
        """Set fields for the duration of a ``with`` block, then restore them."""
        tokens = []
        for name, value in fields.items():
            var = _context_var(name)
            if value is not None:
                tokens.append((var, var.set(value)))
        try:
            yield
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


# Attributes every LogRecord has; anything else arrived through ``extra``
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


def _json_default(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return str(value)


def _error_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {"exc_type": type(exc).__name__, "exc_message": str(exc)}
    if isinstance(exc, StockKernelError):
        fields["exc_code"] = exc.code
        fields.update(
            (f"exc_{key}", value) for key, value in vars(exc).items() if not key.startswith("_")
        )
    return fields


class StructuredFormatter(logging.Formatter):
    """Render a record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(
                timespec="milliseconds"
            ),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(LogContext.get_all())
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS and key not in payload:
                payload[key] = value

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_error_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_default, ensure_ascii=False)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"{LOGGER_ROOT}.{name}")


_installed: logging.Handler | None = None


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: TextIO | None = None,
    handler: logging.Handler | None = None,
) -> logging.Handler:
    """
    Install the JSON handler on the ``stock_kernel`` logger.

    Only the first call takes effect; later calls return the handler already
    installed until ``reset_logging`` removes it.
    """
    global _installed
    if _installed is not None:
        return _installed

    _installed = handler or logging.StreamHandler(stream or sys.stderr)
    _installed.setFormatter(StructuredFormatter())
    root = logging.getLogger(LOGGER_ROOT)
    root.setLevel(level)
    root.propagate = False
    root.addHandler(_installed)
    return _installed


def reset_logging() -> None:
    """Remove the installed handler so tests can configure logging again."""
    global _installed
    root = logging.getLogger(LOGGER_ROOT)
    if _installed is not None:
        root.removeHandler(_installed)
        _installed = None
    root.setLevel(logging.NOTSET)
    root.propagate = True
