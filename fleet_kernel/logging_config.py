"""
Structured JSON logging for the fleet kernel.

Every kernel log line is one JSON object:

    {"ts": "...", "level": "INFO", "logger": "fleet_kernel.services.assignment",
     "message": "attribute_assigned", "actor_id": "...", "subject": "shift:...",
     "attribute_type_id": "...", "assignment_id": "...", ...}

Messages are snake_case event names.  Context fields come from LogContext:
the write paths bind the acting user, the subject and the attribute type, so
every event emitted inside an assign or a charge calculation (including an
overlap rejection deep in the service) carries them without repeating them
in each ``extra``.

A FleetKernelError attached to a record contributes ``exc_code`` and its
structured attributes as ``exc_<name>``, e.g. ``exc_conflicting_ids`` for an
overlap.  Other exceptions contribute type, message and traceback only.
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
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any
from uuid import UUID

from fleet_kernel.exceptions import FleetKernelError

# Fields a caller may bind.  Anything else is a programming error.
CONTEXT_FIELDS: tuple[str, ...] = (
    "correlation_id",
    "actor_id",
    "subject",
    "attribute_type_id",
)

_EMPTY: Mapping[str, str] = MappingProxyType({})

_context: ContextVar[Mapping[str, str]] = ContextVar(
    "fleet_kernel_log_context", default=_EMPTY
)


class LogContext:
    """
    Request-scoped fields merged into every kernel log line.

    Values are stored as strings (``str(subject)`` renders ``shift:<id>``).
    The mapping is replaced, never mutated, so a bind() in one thread or task
    is invisible to others.
    """

    @staticmethod
    def _coerce(fields: dict[str, Any]) -> dict[str, str]:
        unknown = set(fields) - set(CONTEXT_FIELDS)
        if unknown:
            raise ValueError(f"Unknown log context field(s): {sorted(unknown)}")
        return {name: str(value) for name, value in fields.items() if value is not None}

    @classmethod
    def set(cls, **fields: Any) -> None:
        """Merge ``fields`` into the current context.  None values are ignored."""
        _context.set(MappingProxyType({**_context.get(), **cls._coerce(fields)}))

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return dict(_context.get())

    @classmethod
    def clear(cls) -> None:
        _context.set(_EMPTY)

    @classmethod
    @contextmanager
    def bind(cls, **fields: Any) -> Iterator[None]:
        """Merge ``fields`` for the duration of the block, then restore."""
        token = _context.set(MappingProxyType({**_context.get(), **cls._coerce(fields)}))
        try:
            yield
        finally:
            _context.reset(token)


# ---------------------------------------------------------------------------
# JSON Formatter
# ---------------------------------------------------------------------------

_STDLIB_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "taskName"}


def _encode(obj: Any) -> Any:
    """json.dumps fallback for kernel values."""
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (UUID, Decimal)):
        return str(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, (set, frozenset)):
        # Resolved scope targets; sorted so equal sets log identically.
        return sorted(str(item) for item in obj)
    return str(obj)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    if isinstance(exc, FleetKernelError):
        fields["exc_code"] = exc.code
        for name, value in vars(exc).items():
            if not name.startswith("_"):
                fields[f"exc_{name}"] = value
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

        # extra= fields; a bound context value wins over a repeated extra
        for key, val in vars(record).items():
            if key not in _STDLIB_KEYS and key not in payload:
                payload[key] = val

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_encode)


# ---------------------------------------------------------------------------
# Logger factory and initialization
# ---------------------------------------------------------------------------

_LOGGER_PREFIX = "fleet_kernel"

_configured = False
_lock = threading.Lock()


def get_logger(name: str) -> logging.Logger:
    """Logger under the fleet_kernel namespace, e.g. ``services.assignment``."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach one JSON handler to the ``fleet_kernel`` logger.

    Idempotent: only the first call per process (or since reset_logging)
    has any effect.  The kernel logger does not propagate to the root
    logger, so a host application's own handlers never see duplicates.
    """
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    kernel_logger = logging.getLogger(_LOGGER_PREFIX)
    kernel_logger.setLevel(level.upper() if isinstance(level, str) else level)
    kernel_logger.propagate = False

    target = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
    target.setFormatter(StructuredFormatter())
    kernel_logger.addHandler(target)


def reset_logging() -> None:
    """Undo configure_logging.  Tests only."""
    global _configured
    with _lock:
        _configured = False
    kernel_logger = logging.getLogger(_LOGGER_PREFIX)
    kernel_logger.handlers.clear()
    kernel_logger.setLevel(logging.WARNING)
