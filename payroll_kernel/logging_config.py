"""
Structured logging for the payroll packages.

Every logger lives under the ``payroll_kernel`` namespace and writes one
JSON object per line.  Fields bound with ``LogContext`` (employee, period,
run, correlation and actor ids) are merged into each line, followed by
whatever the caller passed in ``extra``::

    logger = get_logger("modules.salary.service")
    with LogContext.bind(run_id=str(run_id), period_key="2025-04"):
        logger.info("payroll_run_started", extra={"employee_count": 12})

    {"ts": "...", "level": "INFO", "logger": "payroll_kernel.modules.salary.service",
     "message": "payroll_run_started", "run_id": "...", "period_key": "2025-04",
     "employee_count": 12}

``configure_logging`` installs the handler once per process and stops
propagation to the root logger; tests attach their own handler.
"""

from __future__ import annotations

import json
import logging
import sys
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any, TextIO

__all__ = [
    "LogContext",
    "StructuredFormatter",
    "configure_logging",
    "get_logger",
    "reset_logging",
]

NAMESPACE = "payroll_kernel"

_EMPTY: Mapping[str, str] = MappingProxyType({})
_bound: ContextVar[Mapping[str, str]] = ContextVar("payroll_log_context", default=_EMPTY)


class LogContext:
    """Request-scoped log fields, isolated per thread and per task."""

    FIELDS = ("correlation_id", "employee_id", "period_key", "run_id", "actor_id")

    @classmethod
    def _merged(cls, fields: dict[str, Any]) -> Mapping[str, str]:
        unknown = set(fields) - set(cls.FIELDS)
        if unknown:
            raise TypeError(f"Unknown log context field(s): {sorted(unknown)}")
        current = dict(_bound.get())
        current.update({k: str(v) for k, v in fields.items() if v is not None})
        return MappingProxyType(current)

    @classmethod
    def set(cls, **fields: Any) -> None:
        """Set fields for the rest of the current context.  ``None`` is ignored."""
        _bound.set(cls._merged(fields))

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return dict(_bound.get())

    @classmethod
    def clear(cls) -> None:
        _bound.set(_EMPTY)

    @classmethod
    @contextmanager
    def bind(cls, **fields: Any) -> Iterator[type[LogContext]]:
        """Set fields inside a ``with`` block and restore the previous ones after."""
        token = _bound.set(cls._merged(fields))
        try:
            yield cls
        finally:
            _bound.reset(token)


def _jsonable(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    return str(value)


# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "taskName"}


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: header, bound context, extras, exception."""

    def format(self, record: logging.LogRecord) -> str:
        line: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        line.update(LogContext.get_all())
        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS:
                line.setdefault(key, value)
        if record.exc_info and record.exc_info[1] is not None:
            line.update(self._exception_fields(record.exc_info[1]))
            line["traceback"] = self.formatException(record.exc_info)
        return json.dumps(line, default=_jsonable)

    @staticmethod
    def _exception_fields(exc: BaseException) -> dict[str, Any]:
        fields: dict[str, Any] = {
            "exc_type": type(exc).__name__,
            "exc_message": str(exc),
        }
        code = getattr(exc, "code", None)
        if code is not None:
            fields["exc_code"] = code
        # PayrollError subclasses keep their structured details as attributes.
        for name, value in vars(exc).items():
            if not name.startswith("_") and name != "code":
                fields[f"exc_{name}"] = value
        return fields


def get_logger(name: str) -> logging.Logger:
    """``get_logger("engines.salary")`` -> ``payroll_kernel.engines.salary``."""
    return logging.getLogger(f"{NAMESPACE}.{name}")


_state_lock = threading.Lock()
_handler: logging.Handler | None = None


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: TextIO | None = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Install a JSON handler on the ``payroll_kernel`` logger.

    Later calls are no-ops until ``reset_logging``.  ``handler`` wins over
    ``stream``; with neither, lines go to stderr.
    """
    global _handler
    with _state_lock:
        if _handler is not None:
            return
        _handler = handler or logging.StreamHandler(stream or sys.stderr)
        _handler.setFormatter(StructuredFormatter())

        namespace = logging.getLogger(NAMESPACE)
        namespace.setLevel(level.upper() if isinstance(level, str) else level)
        namespace.propagate = False
        namespace.addHandler(_handler)


def reset_logging() -> None:
    """Remove the installed handler so ``configure_logging`` can run again (tests)."""
    global _handler
    with _state_lock:
        namespace = logging.getLogger(NAMESPACE)
        if _handler is not None:
            namespace.removeHandler(_handler)
        _handler = None
        namespace.setLevel(logging.WARNING)
