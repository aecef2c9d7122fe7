"""
In-memory salary collaborators.

Dictionary-backed implementations of the collaborator protocols for
tests, previews and the command-line script.  They hold final snapshots
and never consume installments on read.
"""

from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID, uuid4

from payroll_engines.salary import (
    CompensationProfile,
    EmploymentWindow,
    ObligationInstallment,
    PayPeriod,
    SalaryComputationResult,
)
from payroll_kernel.exceptions import (
    DuplicateSalaryPaymentError,
    EmployeeNotFoundError,
    SalaryPaymentNotFoundError,
)
from payroll_kernel.logging_config import get_logger

logger = get_logger("modules.salary.memory")


class InMemoryEmployeeDirectory:
    """Employee profiles and windows keyed by employee id."""

    def __init__(self) -> None:
        self._profiles: dict[str, CompensationProfile] = {}
        self._windows: dict[str, EmploymentWindow] = {}

    def add(
        self,
        profile: CompensationProfile,
        window: EmploymentWindow | None = None,
    ) -> None:
        self._profiles[profile.employee_id] = profile
        self._windows[profile.employee_id] = window or EmploymentWindow()

    def get_compensation_profile(self, employee_id: str) -> CompensationProfile:
        try:
            return self._profiles[str(employee_id)]
        except KeyError:
            raise EmployeeNotFoundError(employee_id) from None

    def get_employment_window(self, employee_id: str) -> EmploymentWindow:
        try:
            return self._windows[str(employee_id)]
        except KeyError:
            raise EmployeeNotFoundError(employee_id) from None


class InMemoryObligationLedger:
    """Installments registered per (employee, period key)."""

    def __init__(self, kind: str = "loan") -> None:
        self.kind = kind
        self._due: dict[tuple[str, str], list[ObligationInstallment]] = {}

    def add_due(
        self,
        employee_id: str,
        period: PayPeriod,
        installments: Iterable[ObligationInstallment],
    ) -> None:
        key = (str(employee_id), period.key)
        self._due.setdefault(key, []).extend(installments)

    def get_due_installments(
        self, employee_id: str, period: PayPeriod
    ) -> list[ObligationInstallment]:
        return list(self._due.get((str(employee_id), period.key), ()))


class InMemoryResultSink:
    """Keeps recorded results; one payment per employee and period."""

    def __init__(self) -> None:
        self.payments: dict[UUID, SalaryComputationResult] = {}
        self._index: dict[tuple[str, str], UUID] = {}

    def record_salary_payment(self, result: SalaryComputationResult) -> UUID:
        key = (result.employee_id, result.period.key)
        if key in self._index:
            raise DuplicateSalaryPaymentError(result.employee_id, result.period.key)
        payment_id = uuid4()
        self.payments[payment_id] = result
        self._index[key] = payment_id
        logger.info(
            "salary_payment_recorded",
            extra={
                "payment_id": str(payment_id),
                "employee_id": result.employee_id,
                "period_key": result.period.key,
                "net_salary": result.net_salary,
            },
        )
        return payment_id

    def delete_salary_payment(self, payment_id: UUID) -> None:
        result = self.payments.pop(payment_id, None)
        if result is None:
            raise SalaryPaymentNotFoundError(payment_id)
        del self._index[(result.employee_id, result.period.key)]
