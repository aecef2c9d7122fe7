"""
payroll_engines.salary.types -- Frozen, self-validating salary engine types.

Responsibility:
    Typed inputs and the itemized output of the salary calculator.  Every
    optional amount defaults to zero and every field is validated ONCE at
    construction, so the calculator never guards against missing or
    malformed values.

Architecture position:
    Engines -- pure data definitions with ZERO I/O.
    May only import payroll_kernel (exceptions, values, logging).

Invariants enforced:
    - All amounts and day counts are Decimal -- never float.  Floats,
      ints and numeric strings are converted through ``str``.
    - Every amount/day count is >= 0 (base salary > 0).
    - Base salary and allowances are whole minor units of their currency.
    - unpaid_leave_days <= leave_days_total and paid_leave_days <= leave_days_total.
    - ObligationInstallment.amount <= remaining_balance when a balance is given.
    - SalaryComputationResult.net_salary == gross_salary - total_deductions.

Failure modes:
    - InvalidInputError naming the offending field for any violation.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field, fields
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any
from uuid import UUID

from payroll_kernel.domain.values import Currency
from payroll_kernel.exceptions import InvalidInputError

ObligationId = str | int | UUID

_ZERO = Decimal("0")


def to_decimal(field_name: str, value: Any) -> Decimal:
    """Convert ``value`` to a finite Decimal or raise InvalidInputError."""
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool) or value is None:
        raise InvalidInputError(field_name, value, "must be a number")
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as exc:
            raise InvalidInputError(field_name, value, "must be a number") from exc
    if not result.is_finite():
        raise InvalidInputError(field_name, value, "must be finite")
    return result


def _non_negative(obj: Any, names: tuple[str, ...]) -> None:
    """Normalize ``names`` on a frozen dataclass to non-negative Decimals."""
    for name in names:
        value = to_decimal(name, getattr(obj, name))
        if value < _ZERO:
            raise InvalidInputError(name, value, "must be >= 0")
        object.__setattr__(obj, name, value)


class ComputationWarning(str, Enum):
    """Conditions flagged on a result for the caller to police."""

    NEGATIVE_NET_PAY = "negative_net_pay"


# ============================================================================
# Inputs
# ============================================================================


@dataclass(frozen=True)
class PayPeriod:
    """A calendar month of pay."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if isinstance(self.year, bool) or not isinstance(self.year, int) or not 1 <= self.year <= 9999:
            raise InvalidInputError("period.year", self.year, "must be an integer year 1-9999")
        if isinstance(self.month, bool) or not isinstance(self.month, int) or not 1 <= self.month <= 12:
            raise InvalidInputError("period.month", self.month, "must be an integer month 1-12")

    @classmethod
    def parse(cls, value: str) -> PayPeriod:
        """Parse ``YYYY-MM`` or ``YYYY-MM-DD`` (the day is ignored)."""
        parts = str(value).strip().split("-")
        if len(parts) not in (2, 3):
            raise InvalidInputError("period", value, "expected YYYY-MM")
        try:
            year, month = int(parts[0]), int(parts[1])
        except ValueError as exc:
            raise InvalidInputError("period", value, "expected YYYY-MM") from exc
        return cls(year=year, month=month)

    @classmethod
    def containing(cls, day: date) -> PayPeriod:
        return cls(year=day.year, month=day.month)

    @property
    def total_days_in_month(self) -> int:
        return calendar.monthrange(self.year, self.month)[1]

    @property
    def start_date(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def end_date(self) -> date:
        return date(self.year, self.month, self.total_days_in_month)

    @property
    def key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class CompensationProfile:
    """
    Immutable snapshot of an employee's monthly compensation.

    ``general_allowance`` is the undifferentiated "allowances" amount kept
    on the employee record next to the five named allowances.
    """

    employee_id: str
    base_salary: Decimal
    currency: str = "PKR"
    housing_allowance: Decimal = _ZERO
    transport_allowance: Decimal = _ZERO
    medical_allowance: Decimal = _ZERO
    food_allowance: Decimal = _ZERO
    other_allowances: Decimal = _ZERO
    general_allowance: Decimal = _ZERO

    ALLOWANCE_FIELDS = (
        "housing_allowance",
        "transport_allowance",
        "medical_allowance",
        "food_allowance",
        "other_allowances",
        "general_allowance",
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "employee_id", str(self.employee_id))
        base = to_decimal("base_salary", self.base_salary)
        if base <= _ZERO:
            raise InvalidInputError("base_salary", base, "must be > 0")
        object.__setattr__(self, "base_salary", base)
        try:
            currency = Currency(self.currency)
        except (ValueError, AttributeError) as exc:
            raise InvalidInputError("currency", self.currency, "unknown ISO 4217 code") from exc
        object.__setattr__(self, "currency", currency.code)
        _non_negative(self, self.ALLOWANCE_FIELDS)

        # Amounts are paid as given, so none may be finer than the minor unit.
        for name in ("base_salary", *self.ALLOWANCE_FIELDS):
            value = getattr(self, name)
            try:
                exact = value == value.quantize(currency.quantum)
            except InvalidOperation as exc:
                raise InvalidInputError(name, value, "too large") from exc
            if not exact:
                raise InvalidInputError(
                    name, value,
                    f"more than {currency.decimal_places} decimal places for {currency.code}",
                )

    @property
    def allowance_items(self) -> tuple[tuple[str, Decimal], ...]:
        return tuple((name, getattr(self, name)) for name in self.ALLOWANCE_FIELDS)


@dataclass(frozen=True)
class AttendanceAdjustment:
    """Leave taken in the period.  All leave days reduce working days."""

    leave_days_total: Decimal = _ZERO
    paid_leave_days: Decimal = _ZERO
    unpaid_leave_days: Decimal = _ZERO

    def __post_init__(self) -> None:
        _non_negative(self, ("leave_days_total", "paid_leave_days", "unpaid_leave_days"))
        if self.unpaid_leave_days > self.leave_days_total:
            raise InvalidInputError(
                "unpaid_leave_days", self.unpaid_leave_days,
                f"exceeds leave_days_total {self.leave_days_total}",
            )
        if self.paid_leave_days > self.leave_days_total:
            raise InvalidInputError(
                "paid_leave_days", self.paid_leave_days,
                f"exceeds leave_days_total {self.leave_days_total}",
            )


@dataclass(frozen=True)
class EmploymentWindow:
    """
    Employment dates relevant to proration.

    A missing ``hire_date`` means employed since before any period; the
    earlier of ``termination_date`` and ``contract_end_date`` ends the
    employment.
    """

    hire_date: date | None = None
    termination_date: date | None = None
    contract_end_date: date | None = None

    def __post_init__(self) -> None:
        for name in ("hire_date", "termination_date", "contract_end_date"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, date):
                raise InvalidInputError(name, value, "must be a date")

    @property
    def end_date(self) -> date | None:
        ends = [d for d in (self.termination_date, self.contract_end_date) if d is not None]
        return min(ends) if ends else None


@dataclass(frozen=True)
class EarningsLineItems:
    """
    Caller-supplied earnings on top of base pay.

    ``overtime_hours`` is informational; only ``overtime_pay`` is summed.
    ``additional_allowances`` is the ad hoc allowance amount entered for
    this payment and is counted with the profile allowances.
    """

    overtime_hours: Decimal = _ZERO
    overtime_pay: Decimal = _ZERO
    bonus: Decimal = _ZERO
    performance_bonus: Decimal = _ZERO
    incentive: Decimal = _ZERO
    arrears: Decimal = _ZERO
    salary_revision_amount: Decimal = _ZERO
    additional_allowances: Decimal = _ZERO

    ADD_ON_FIELDS = (
        "overtime_pay",
        "bonus",
        "performance_bonus",
        "incentive",
        "arrears",
        "salary_revision_amount",
    )

    def __post_init__(self) -> None:
        _non_negative(self, tuple(f.name for f in fields(self)))

    @property
    def add_on_items(self) -> tuple[tuple[str, Decimal], ...]:
        return tuple((name, getattr(self, name)) for name in self.ADD_ON_FIELDS)


@dataclass(frozen=True)
class DeductionLineItems:
    """Caller-supplied fixed deductions (taxes, contributions, other)."""

    tax_deduction: Decimal = _ZERO
    income_tax: Decimal = _ZERO
    insurance_deduction: Decimal = _ZERO
    provident_fund: Decimal = _ZERO
    professional_tax: Decimal = _ZERO
    esi_deduction: Decimal = _ZERO
    other_deductions: Decimal = _ZERO

    def __post_init__(self) -> None:
        _non_negative(self, tuple(f.name for f in fields(self)))

    @property
    def items(self) -> tuple[tuple[str, Decimal], ...]:
        return tuple((f.name, getattr(self, f.name)) for f in fields(self))


@dataclass(frozen=True)
class ObligationInstallment:
    """
    One loan or advance installment due in the period.

    ``amount`` is taken verbatim from the ledger.  ``remaining_balance``
    is the obligation's outstanding balance before this installment, when
    the ledger reports it.
    """

    obligation_id: ObligationId
    amount: Decimal
    remaining_balance: Decimal | None = None

    def __post_init__(self) -> None:
        _non_negative(self, ("amount",))
        if self.remaining_balance is not None:
            _non_negative(self, ("remaining_balance",))
            if self.amount > self.remaining_balance:
                raise InvalidInputError(
                    "obligation.amount", self.amount,
                    f"exceeds remaining balance {self.remaining_balance} "
                    f"of obligation {self.obligation_id}",
                )


# ============================================================================
# Output
# ============================================================================


@dataclass(frozen=True)
class DeductionBreakdown:
    """Itemized deductions of one computation."""

    fixed_items: tuple[tuple[str, Decimal], ...]
    fixed_total: Decimal
    loan_installments: tuple[ObligationInstallment, ...]
    loan_total: Decimal
    advance_installments: tuple[ObligationInstallment, ...]
    advance_total: Decimal

    def as_dict(self) -> dict[str, Decimal]:
        """Named deduction -> amount, including the loan and advance sums."""
        named = dict(self.fixed_items)
        named["loan_deduction"] = self.loan_total
        named["advance_deduction"] = self.advance_total
        return named


@dataclass(frozen=True)
class SalaryComputationResult:
    """
    Fully itemized pay computation.

    Created once per calculation and never mutated.  Corrections are a
    new computation.
    """

    employee_id: str
    period: PayPeriod
    currency: str
    daily_rate: Decimal
    base_salary_prorated: Decimal
    total_allowances: Decimal
    total_earnings_add_ons: Decimal
    gross_salary: Decimal
    deductions: DeductionBreakdown
    total_deductions: Decimal
    net_salary: Decimal
    working_days: Decimal
    total_days_in_month: int
    effective_start_day: int
    effective_end_day: int
    is_prorated: bool
    proration_reason: str
    attendance: AttendanceAdjustment
    earnings: EarningsLineItems
    warnings: tuple[ComputationWarning, ...] = field(default_factory=tuple)

    @property
    def has_negative_net_pay(self) -> bool:
        return ComputationWarning.NEGATIVE_NET_PAY in self.warnings

    @property
    def deduction_breakdown(self) -> dict[str, Decimal]:
        return self.deductions.as_dict()
