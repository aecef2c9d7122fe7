"""
Salary Module Models (``payroll_modules.salary.models``).

Frozen dataclasses describing payroll run requests and outcomes.  The
computation inputs and result themselves live in
``payroll_engines.salary``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from uuid import UUID

from payroll_engines.salary import (
    AttendanceAdjustment,
    DeductionLineItems,
    EarningsLineItems,
    PayPeriod,
    PayrollSummary,
    SalaryComputationResult,
)


class PayrollRunStatus(Enum):
    """Outcome of a batch payroll run."""

    COMPLETED = "completed"
    PARTIALLY_COMPLETED = "partially_completed"
    FAILED = "failed"


@dataclass(frozen=True)
class SalaryRequest:
    """Per-employee inputs of a payroll run."""

    employee_id: str
    attendance: AttendanceAdjustment | None = None
    earnings: EarningsLineItems | None = None
    deductions: DeductionLineItems | None = None


@dataclass(frozen=True)
class EmployeeFailure:
    """One employee that could not be processed; never a zero result."""

    employee_id: str
    error_code: str
    error_message: str


@dataclass(frozen=True)
class ProcessedSalary:
    """A computed result and, when recorded, the sink's payment id."""

    result: SalaryComputationResult
    payment_id: Any = None

    @property
    def is_recorded(self) -> bool:
        return self.payment_id is not None


@dataclass(frozen=True)
class PayrollRunResult:
    """Outcome of ``SalaryService.run_payroll``."""

    run_id: UUID
    period: PayPeriod
    committed: bool
    processed: tuple[ProcessedSalary, ...]
    failures: tuple[EmployeeFailure, ...]
    summary: PayrollSummary
    status: PayrollRunStatus = field(default=PayrollRunStatus.COMPLETED)

    @property
    def results(self) -> tuple[SalaryComputationResult, ...]:
        return tuple(p.result for p in self.processed)

    @property
    def failed_employee_ids(self) -> tuple[str, ...]:
        return tuple(f.employee_id for f in self.failures)
