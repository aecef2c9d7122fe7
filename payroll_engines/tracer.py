"""
payroll_engines.tracer -- one PAYROLL_ENGINE_TRACE line per engine call.

``@traced_engine`` leaves the wrapped engine's arguments and result
alone.  After a successful call it logs the engine name and version,
the wall time and a fingerprint of the selected keyword arguments, so
two log lines with the same fingerprint describe the same inputs.

A call that raises logs nothing; the exception reaches the caller as is.
"""

from __future__ import annotations

import dataclasses
import functools
import hashlib
import json
import time
from collections.abc import Callable, Mapping
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, TypeVar

from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.tracer")

TRACE_TYPE = "PAYROLL_ENGINE_TRACE"
FINGERPRINT_LENGTH = 16

F = TypeVar("F", bound=Callable[..., Any])


def _plain(value: Any) -> Any:
    """Reduce a value to JSON primitives with a stable textual form."""
    if isinstance(value, Enum):
        return _plain(value.value)
    if isinstance(value, (Decimal, date)):
        # str(Decimal) keeps the exponent: 10 and 10.00 fingerprint differently.
        return str(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        fields = {f.name: _plain(getattr(value, f.name)) for f in dataclasses.fields(value)}
        return {"__type__": type(value).__name__, **fields}
    if isinstance(value, Mapping):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if value is None or isinstance(value, (bool, int, str)):
        return value
    return repr(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    kwargs: Mapping[str, Any],
) -> str:
    """
    Hash the named keyword arguments into a short hex digest.

    Absent arguments hash like ``None``; mapping key order is irrelevant.
    """
    selected = {name: _plain(kwargs.get(name)) for name in fingerprint_fields}
    canonical = json.dumps(selected, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable[[F], F]:
    """
    Decorate a pure engine function::

        @traced_engine("salary", "1.0", fingerprint_fields=("profile", "period"))
        def compute_salary(*, profile, period, ...): ...

    Only keyword arguments can be fingerprinted.
    """

    def decorate(engine: F) -> F:
        @functools.wraps(engine)
        def traced(*args: Any, **kwargs: Any) -> Any:
            started = time.perf_counter()
            result = engine(*args, **kwargs)
            elapsed_ms = (time.perf_counter() - started) * 1000

            logger.info(
                TRACE_TYPE,
                extra={
                    "trace_type": TRACE_TYPE,
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "input_fingerprint": (
                        compute_input_fingerprint(fingerprint_fields, kwargs)
                        if fingerprint_fields
                        else ""
                    ),
                    "duration_ms": round(elapsed_ms, 3),
                    "function": engine.__qualname__,
                },
            )
            return result

        return traced  # type: ignore[return-value]

    return decorate
