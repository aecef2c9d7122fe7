"""
payroll_config -- single public entrypoint for payroll settings.

Responsibility:
    ``get_active_settings()`` is the way runtime code obtains settings.
    The first call loads and validates them (YAML plus ``PAYROLL_*``
    environment overrides); later calls return the cached instance.

Architecture position:
    Configuration -- sits above ``payroll_kernel`` and below
    ``payroll_modules``.  Engines never read settings; the service passes
    the relevant values (rounding) in explicitly.

Audit relevance:
    Each load emits a ``PAYROLL_CONFIG_TRACE`` record with the settings
    checksum, so a payroll run can be tied to the exact settings used.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from payroll_config.loader import compute_checksum, load_settings
from payroll_config.schema import NegativeNetPolicy, PayrollSettings

_logger = logging.getLogger("payroll_kernel.config")

_active: PayrollSettings | None = None
_lock = threading.Lock()


def get_active_settings(path: Path | str | None = None, reload: bool = False) -> PayrollSettings:
    """Return the cached settings, loading them on first use or when ``reload``."""
    global _active
    with _lock:
        if _active is None or reload or path is not None:
            _active = load_settings(path)
            _logger.info(
                "PAYROLL_CONFIG_TRACE",
                extra={
                    "trace_type": "PAYROLL_CONFIG_TRACE",
                    "checksum": compute_checksum(_active),
                    "default_currency": _active.default_currency,
                    "negative_net_policy": _active.negative_net_policy.value,
                },
            )
        return _active


def reset_active_settings() -> None:
    """Forget the cached settings. FOR TESTING ONLY."""
    global _active
    with _lock:
        _active = None


__all__ = [
    "NegativeNetPolicy",
    "PayrollSettings",
    "compute_checksum",
    "get_active_settings",
    "load_settings",
    "reset_active_settings",
]
