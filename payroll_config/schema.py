"""
PayrollSettings schema.

The typed runtime configuration of the payroll service.  YAML files are
parsed into this frozen dataclass by ``payroll_config.loader``; every
field is validated once in ``__post_init__``.
"""

from __future__ import annotations

import decimal
import logging
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

from payroll_kernel.domain.currency import CurrencyRegistry


class NegativeNetPolicy(str, Enum):
    """What recording does with a result whose net pay is negative."""

    ALLOW = "allow"
    BLOCK = "block"


_ROUNDING_MODES = frozenset(
    {
        decimal.ROUND_HALF_UP,
        decimal.ROUND_HALF_EVEN,
        decimal.ROUND_HALF_DOWN,
        decimal.ROUND_DOWN,
        decimal.ROUND_UP,
        decimal.ROUND_CEILING,
        decimal.ROUND_FLOOR,
    }
)

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


@dataclass(frozen=True)
class PayrollSettings:
    """Runtime settings for the payroll service and its ledgers."""

    default_currency: str = "PKR"
    rounding: str = decimal.ROUND_HALF_UP
    negative_net_policy: NegativeNetPolicy = NegativeNetPolicy.ALLOW
    database_url: str = "sqlite+pysqlite:///:memory:"
    log_level: str = "INFO"
    echo_sql: bool = False
    salary_transaction_category: str = "Salary"

    def __post_init__(self) -> None:
        currency = str(self.default_currency).upper().strip()
        if not CurrencyRegistry.is_valid(currency):
            raise ValueError(f"Unknown default_currency: {self.default_currency!r}")
        object.__setattr__(self, "default_currency", currency)

        if self.rounding not in _ROUNDING_MODES:
            raise ValueError(f"Unknown rounding mode: {self.rounding!r}")

        try:
            policy = NegativeNetPolicy(self.negative_net_policy)
        except ValueError as exc:
            raise ValueError(
                f"negative_net_policy must be 'allow' or 'block', "
                f"got {self.negative_net_policy!r}"
            ) from exc
        object.__setattr__(self, "negative_net_policy", policy)

        level = str(self.log_level).upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log_level: {self.log_level!r}")
        object.__setattr__(self, "log_level", level)

        if not self.database_url:
            raise ValueError("database_url must not be empty")

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PayrollSettings:
        """Build settings from a parsed mapping, rejecting unknown keys."""
        known = set(cls.__dataclass_fields__)
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown payroll setting(s): {', '.join(unknown)}")
        return cls(**data)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["negative_net_policy"] = self.negative_net_policy.value
        return data
