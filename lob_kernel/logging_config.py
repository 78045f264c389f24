"""
Structured JSON logging for the calculation kernel and engines.

Every record is one JSON line: a fixed envelope (``ts``, ``level``,
``logger``, ``message``), the screen-scoped ``LogContext`` fields, then any
``extra={...}`` passed at the call site. Kernel exceptions attached with
``exc_info`` contribute their ``code`` and structured attributes as
``exc_*`` keys.

Nothing is emitted until ``configure_logging()`` installs a handler on the
``lob_kernel`` logger; until then records propagate to the root logger like
any library's.
"""

__all__ = [
    "CONTEXT_FIELDS",
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Context propagation
# ---------------------------------------------------------------------------

CONTEXT_FIELDS: tuple[str, ...] = (
    "correlation_id",
    "actor_id",
    "employee_id",
    "sale_id",
    "invoice_id",
    "event_id",
)

_CONTEXT_VARS: dict[str, ContextVar[str | None]] = {
    name: ContextVar(f"log_{name}", default=None) for name in CONTEXT_FIELDS
}


def _check_fields(names: Iterable[str]) -> None:
    unknown = set(names) - set(CONTEXT_FIELDS)
    if unknown:
        raise TypeError(f"Unknown log context field(s): {sorted(unknown)}")


class LogContext:
    """
    Thread-safe / async-safe holder for screen-scoped log fields.

    Fields are the ids of whatever the user is editing (sale, invoice,
    event, employee) plus a correlation id for one screen action.
    """

    @classmethod
    def set(cls, **fields: str | None) -> None:
        """Set context fields. None values leave the field unchanged."""
        _check_fields(fields.keys())
        for name, val in fields.items():
            if val is not None:
                _CONTEXT_VARS[name].set(str(val))

    @classmethod
    def get_all(cls) -> dict[str, str]:
        """Return all non-None context fields as a dict."""
        return {
            name: val
            for name, var in _CONTEXT_VARS.items()
            if (val := var.get()) is not None
        }

    @classmethod
    def clear(cls) -> None:
        """Reset all context fields to None."""
        for var in _CONTEXT_VARS.values():
            var.set(None)

    @classmethod
    def bind(cls, **fields: str | None):
        """Set fields for the duration of a ``with`` block, then restore them.

        Unknown field names raise ``TypeError`` here, before the block runs.
        """
        _check_fields(fields.keys())
        return cls._bound(fields)

    @classmethod
    @contextmanager
    def _bound(cls, fields: dict[str, str | None]) -> Iterator[type["LogContext"]]:
        tokens: list[tuple[ContextVar[str | None], Token]] = [
            (_CONTEXT_VARS[name], _CONTEXT_VARS[name].set(str(val)))
            for name, val in fields.items()
            if val is not None
        ]
        try:
            yield cls
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


# ---------------------------------------------------------------------------
# JSON Formatter
# ---------------------------------------------------------------------------

_STDLIB_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "taskName"}


class _JSONEncoder(json.JSONEncoder):
    """Handle Decimal, date/datetime, enums and sets in log payloads."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, Decimal):
            return str(obj)
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, (set, frozenset)):
            return sorted((v if isinstance(v, str) else self.default(v) for v in obj), key=str)
        return str(obj)


class StructuredFormatter(logging.Formatter):
    """Formats each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = self._envelope(record)
        payload.update(LogContext.get_all())

        for key, val in vars(record).items():
            if key not in _STDLIB_KEYS and key not in payload:
                payload[key] = val

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(self._exception_fields(record))

        return json.dumps(payload, cls=_JSONEncoder)

    @staticmethod
    def _envelope(record: logging.LogRecord) -> dict[str, Any]:
        return {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

    def _exception_fields(self, record: logging.LogRecord) -> dict[str, Any]:
        exc = record.exc_info[1]
        fields: dict[str, Any] = {
            "exc_type": type(exc).__name__,
            "exc_message": str(exc),
        }
        code = getattr(exc, "code", None)
        if code is not None:
            fields["exc_code"] = code
        # LobKernelError subclasses keep their context as public attributes
        for k, v in vars(exc).items():
            if not k.startswith("_"):
                fields[f"exc_{k}"] = v
        fields["traceback"] = self.formatException(record.exc_info)
        return fields


# ---------------------------------------------------------------------------
# Logger factory
# ---------------------------------------------------------------------------

_LOGGER_PREFIX = "lob_kernel"


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the lob_kernel namespace ("engines.sale_ledger")."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


# ---------------------------------------------------------------------------
# Initialization
# ---------------------------------------------------------------------------

_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Install the JSON handler on the lob_kernel logger.

    Only the first call has any effect. ``level`` accepts a level number or
    name ("DEBUG"); ``handler`` replaces the default stderr stream handler.
    """
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    kernel_logger = logging.getLogger(_LOGGER_PREFIX)
    kernel_logger.setLevel(level.upper() if isinstance(level, str) else level)
    kernel_logger.propagate = False

    if handler is None:
        handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())
    kernel_logger.addHandler(handler)


def reset_logging() -> None:
    """Remove installed handlers and restore library defaults. Test helper."""
    global _configured
    with _lock:
        _configured = False
    kernel_logger = logging.getLogger(_LOGGER_PREFIX)
    kernel_logger.handlers.clear()
    kernel_logger.setLevel(logging.WARNING)
    kernel_logger.propagate = True
