"""
Salary collaborator contracts (``payroll_modules.salary.collaborators``).

The salary service depends on these protocols only.  The SQLAlchemy
ledgers in ``ledgers.py`` and the in-memory doubles in ``memory.py``
both satisfy them structurally.

Every lookup either returns final data or raises.  A collaborator must
never answer "no installments" for a lookup it could not perform.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from payroll_engines.salary import (
    CompensationProfile,
    EmploymentWindow,
    ObligationInstallment,
    PayPeriod,
    SalaryComputationResult,
)

PersistedId = Any


@runtime_checkable
class EmployeeDirectory(Protocol):
    """Source of compensation profiles and employment dates."""

    def get_compensation_profile(self, employee_id: str) -> CompensationProfile:
        """Raises EmployeeNotFoundError for unknown employees."""
        ...

    def get_employment_window(self, employee_id: str) -> EmploymentWindow:
        """Raises EmployeeNotFoundError for unknown employees."""
        ...


@runtime_checkable
class ObligationLedger(Protocol):
    """Loan or advance ledger: installments due for an employee and period."""

    def get_due_installments(
        self, employee_id: str, period: PayPeriod
    ) -> list[ObligationInstallment]:
        """Each amount is already capped at the obligation's remaining balance."""
        ...


LoanLedger = ObligationLedger
AdvanceLedger = ObligationLedger


@runtime_checkable
class SalaryResultSink(Protocol):
    """Persists a computed result and mirrors it into the transaction ledger."""

    def record_salary_payment(self, result: SalaryComputationResult) -> PersistedId:
        ...
