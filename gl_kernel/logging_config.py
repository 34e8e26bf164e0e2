"""
Structured JSON logging for the GL posting kernel.

Every record under the ``gl_kernel`` logger tree renders as one JSON object
per line.  Request-scoped fields (correlation, tenant, company, user,
journal) live in LogContext and are merged into each record, so a posting
can be followed across modules without passing ids through every call.

Usage::

    configure_logging(level=logging.INFO)
    logger = get_logger("services.posting_orchestrator")
    with LogContext.bind(journal_number="JE-1"):
        logger.info("journal_posting_started", extra={"line_count": 2})
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
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import IO, Any
from uuid import UUID

ROOT_LOGGER = "gl_kernel"

CONTEXT_FIELDS: tuple[str, ...] = (
    "correlation_id",
    "tenant_id",
    "company_id",
    "user_id",
    "journal_number",
)

_context_vars: dict[str, ContextVar[str | None]] = {
    name: ContextVar(f"gl_log_{name}", default=None) for name in CONTEXT_FIELDS
}


def _vars_for(names) -> dict[str, ContextVar[str | None]]:
    unknown = sorted(set(names) - set(_context_vars))
    if unknown:
        raise TypeError(f"Unknown log context field(s): {', '.join(unknown)}")
    return {name: _context_vars[name] for name in names}


class LogContext:
    """Request-scoped log fields; isolated per thread and per asyncio task."""

    @staticmethod
    def set(**fields: str | None) -> None:
        """Set fields by name. ``None`` leaves a field unchanged."""
        for name, var in _vars_for(fields).items():
            if fields[name] is not None:
                var.set(fields[name])

    @staticmethod
    def get_all() -> dict[str, str]:
        """The fields currently set, in CONTEXT_FIELDS order."""
        current: dict[str, str] = {}
        for name, var in _context_vars.items():
            value = var.get()
            if value is not None:
                current[name] = value
        return current

    @staticmethod
    def clear() -> None:
        for var in _context_vars.values():
            var.set(None)

    @staticmethod
    @contextmanager
    def bind(**fields: str | None) -> Iterator[None]:
        """Set fields for the body of a ``with`` block, then restore them."""
        targets = _vars_for(fields)
        tokens = [
            (var, var.set(fields[name]))
            for name, var in targets.items()
            if fields[name] is not None
        ]
        try:
            yield
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

# Attributes every LogRecord carries; anything else arrived through ``extra``
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


def _json_default(value: Any) -> Any:
    """
    Encode the value types the kernel puts into log extras.

    Enums log as their value, dates and datetimes as ISO 8601 strings,
    UUIDs and Decimals as strings (Decimals keep their exact digits) and
    sets as sorted lists.  Anything else logs as its repr.
    """
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    return repr(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    """Type and message, plus a kernel error's code and public attributes."""
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    for name, value in vars(exc).items():
        if name.startswith("_") or name in ("code", "message"):
            continue
        fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """Render a record as base fields, log context, extras, then exception."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(LogContext.get_all())
        for name, value in vars(record).items():
            if name not in _RECORD_ATTRS:
                payload.setdefault(name, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_default)


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name`` under the gl_kernel tree; full names pass through."""
    if name == ROOT_LOGGER or name.startswith(f"{ROOT_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


_setup_lock = threading.Lock()
_installed: logging.Handler | None = None


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: IO[str] | None = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Install one structured handler on the gl_kernel logger.

    Repeat calls are no-ops until reset_logging().  Records do not propagate
    to the root logger, so host applications see kernel logs only through
    this handler.
    """
    global _installed
    with _setup_lock:
        if _installed is not None:
            return
        if handler is None:
            handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(StructuredFormatter())
        _installed = handler

        root = logging.getLogger(ROOT_LOGGER)
        root.setLevel(level)
        root.propagate = False
        root.addHandler(_installed)


def reset_logging() -> None:
    """Remove all gl_kernel handlers and restore defaults (test cleanup)."""
    global _installed
    with _setup_lock:
        _installed = None
        root = logging.getLogger(ROOT_LOGGER)
        root.handlers.clear()
        root.setLevel(logging.WARNING)
        root.propagate = True
