"""
Structured JSON logging for the catalog kernel.

Every record is written as one JSON line::

    {"ts": "...", "level": "WARNING", "logger": "catalog_kernel.catalog",
     "message": "operation_rejected", "correlation_id": "9f2c...",
     "operation": "purchase", "actor": "0xb2", "item_id": 3,
     "error_type": "ItemLockedError", "error_code": "ITEM_LOCKED",
     "error_message": "Item 3 is locked", "error_item_id": 3}

Call-scoped fields (correlation id, operation, actor, item id) come from
LogContext, which CatalogService binds around every mutating call.

Catalog exceptions are flattened into ``error_*`` fields, whether they
arrive through ``exc_info`` or as an ``extra`` value.  Receipts and other
catalog dataclasses are written as nested objects, enums by value.
"""

__all__ = [
    "CONTEXT_FIELDS",
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import dataclasses
import json
import logging
import sys
import threading
from collections.abc import Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterator

from catalog_kernel.exceptions import CatalogKernelError

CONTEXT_FIELDS = ("correlation_id", "operation", "actor", "item_id")

_EMPTY: Mapping[str, Any] = MappingProxyType({})

_context: ContextVar[Mapping[str, Any]] = ContextVar(
    "catalog_log_context", default=_EMPTY
)


class LogContext:
    """Fields added to every record logged inside one catalog call."""

    @staticmethod
    def _merged(fields: dict[str, Any]) -> Mapping[str, Any]:
        unknown = set(fields) - set(CONTEXT_FIELDS)
        if unknown:
            raise ValueError(f"Unknown log context fields: {sorted(unknown)}")
        current = dict(_context.get())
        current.update((k, v) for k, v in fields.items() if v is not None)
        return MappingProxyType(current)

    @classmethod
    @contextmanager
    def bind(cls, **fields: Any) -> Iterator[None]:
        """Add fields for the duration of the block; None values are skipped."""
        token = _context.set(cls._merged(fields))
        try:
            yield
        finally:
            _context.reset(token)

    @classmethod
    def get_all(cls) -> dict[str, Any]:
        return dict(_context.get())

    @classmethod
    def clear(cls) -> None:
        _context.set(_EMPTY)


# ---------------------------------------------------------------------------
# JSON Formatter
# ---------------------------------------------------------------------------

_STDLIB_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "taskName"}


def _to_json(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        # Shallow, so mapping proxies inside event records stay serializable
        return {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)}
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, Mapping):
        return dict(obj)
    if isinstance(obj, datetime):
        return obj.isoformat()
    return str(obj)


def _error_fields(exc: BaseException) -> dict[str, Any]:
    """Flatten an exception into ``error_*`` fields."""
    fields: dict[str, Any] = {
        "error_type": type(exc).__name__,
        "error_message": str(exc),
    }
    if isinstance(exc, CatalogKernelError):
        fields["error_code"] = exc.code
        for name, value in vars(exc).items():
            if not name.startswith("_"):
                fields[f"error_{name}"] = value
    if exc.__cause__ is not None:
        fields["error_cause"] = type(exc.__cause__).__name__
    return fields


class StructuredFormatter(logging.Formatter):
    """Formats each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(_context.get())

        for key, val in vars(record).items():
            if key in _STDLIB_KEYS or key in payload:
                continue
            if isinstance(val, BaseException):
                for k, v in _error_fields(val).items():
                    payload.setdefault(k, v)
            else:
                payload[key] = val

        if record.exc_info and record.exc_info[1] is not None:
            for k, v in _error_fields(record.exc_info[1]).items():
                payload.setdefault(k, v)
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_to_json)


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

_LOGGER_PREFIX = "catalog_kernel"

_configured = False
_lock = threading.Lock()


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the catalog_kernel namespace."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """Attach one JSON handler to the catalog_kernel logger.  Later calls are no-ops."""
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    h = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
    h.setFormatter(StructuredFormatter())

    root = logging.getLogger(_LOGGER_PREFIX)
    root.setLevel(level)
    root.propagate = False
    root.addHandler(h)


def reset_logging() -> None:
    """Drop the handler installed by configure_logging.  For tests."""
    global _configured
    with _lock:
        _configured = False
    root = logging.getLogger(_LOGGER_PREFIX)
    root.handlers.clear()
    root.setLevel(logging.WARNING)
