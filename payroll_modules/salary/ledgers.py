"""
SQLAlchemy Salary Collaborators (``payroll_modules.salary.ledgers``).

Responsibility
--------------
Reference implementations of the salary collaborator protocols on top of
``payroll_modules.salary.orm``: employee directory, loan ledger, advance
ledger and the result sink that records payments, books installment
repayments and mirrors net pay into the financial-transaction ledger.

Architecture position
---------------------
**Modules layer** -- persistence.  Each class wraps a caller-owned
``Session``; methods ``flush`` but never ``commit``.  The caller owns the
transaction boundary (``payroll_kernel.db.session_scope``).

Invariants enforced
-------------------
* An installment is due only for an active obligation whose first
  payment date is on or before the period end, with a positive
  remaining balance and no repayment already booked for that period.
* Due amount = min(scheduled installment, remaining balance).
* ``amount_paid + amount_remaining == total`` after every repayment; an
  obligation whose remaining balance reaches zero becomes ``completed``.
* One salary payment per employee and period.

Failure modes
-------------
* ``EmployeeNotFoundError`` / ``ObligationNotFoundError`` /
  ``SalaryPaymentNotFoundError`` for unknown ids.
* ``OverpaymentError`` when a repayment exceeds the remaining balance.
* ``DuplicateSalaryPaymentError`` for a second payment in one period.
* ``InvalidInputError`` for non-positive amounts or counts.
"""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from payroll_engines.salary import (
    CompensationProfile,
    EmploymentWindow,
    ObligationInstallment,
    PayPeriod,
    SalaryComputationResult,
    to_decimal,
)
from payroll_kernel.domain.clock import Clock, SystemClock
from payroll_kernel.domain.values import Money
from payroll_kernel.exceptions import (
    DuplicateSalaryPaymentError,
    EmployeeNotFoundError,
    InvalidInputError,
    ObligationNotFoundError,
    OverpaymentError,
    SalaryPaymentNotFoundError,
)
from payroll_kernel.logging_config import get_logger
from payroll_modules.salary.orm import (
    ADVANCE,
    LOAN,
    STATUS_ACTIVE,
    STATUS_COMPLETED,
    AdvanceModel,
    EmployeeModel,
    FinancialTransactionModel,
    LoanModel,
    ObligationRepaymentModel,
    SalaryPaymentModel,
)

logger = get_logger("modules.salary.ledgers")

_ZERO = Decimal("0")


def _as_uuid(value: Any) -> UUID | None:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


def _positive(field: str, value: Any) -> Decimal:
    amount = to_decimal(field, value)
    if amount <= _ZERO:
        raise InvalidInputError(field, amount, "must be > 0")
    return amount


# ---------------------------------------------------------------------------
# Employee directory
# ---------------------------------------------------------------------------


class SqlEmployeeDirectory:
    """
    ``EmployeeDirectory`` backed by ``EmployeeModel``.

    ``default_currency`` applies to employees created without one.
    """

    def __init__(self, session: Session, default_currency: str = "PKR"):
        self._session = session
        self._default_currency = default_currency

    def _load(self, employee_id: Any) -> EmployeeModel:
        key = _as_uuid(employee_id)
        employee = self._session.get(EmployeeModel, key) if key is not None else None
        if employee is None:
            raise EmployeeNotFoundError(employee_id)
        return employee

    def get_compensation_profile(self, employee_id: str) -> CompensationProfile:
        return self._load(employee_id).to_profile()

    def get_employment_window(self, employee_id: str) -> EmploymentWindow:
        return self._load(employee_id).to_window()

    def create_employee(
        self,
        employee_code: str,
        name: str,
        base_salary: Decimal,
        currency: str | None = None,
        hire_date: date | None = None,
        termination_date: date | None = None,
        contract_end_date: date | None = None,
        **extra: Any,
    ) -> UUID:
        """
        Insert an employee.  ``extra`` carries allowance amounts and the
        optional position/department.  The compensation is validated by
        building its profile before anything is flushed.
        """
        employee = EmployeeModel(
            employee_code=employee_code,
            name=name,
            base_salary=to_decimal("base_salary", base_salary),
            currency=currency or self._default_currency,
            hire_date=hire_date,
            termination_date=termination_date,
            contract_end_date=contract_end_date,
            **extra,
        )
        for field in CompensationProfile.ALLOWANCE_FIELDS:
            value = getattr(employee, field)
            setattr(employee, field, _ZERO if value is None else to_decimal(field, value))
        profile = CompensationProfile(
            employee_id=employee_code,
            base_salary=employee.base_salary,
            currency=employee.currency,
            **{f: getattr(employee, f) for f in CompensationProfile.ALLOWANCE_FIELDS},
        )
        employee.currency = profile.currency
        self._session.add(employee)
        self._session.flush()
        logger.info(
            "employee_created",
            extra={"employee_id": str(employee.id), "employee_code": employee_code},
        )
        return employee.id


# ---------------------------------------------------------------------------
# Obligation ledgers
# ---------------------------------------------------------------------------


class _SqlObligationLedger:
    """Shared due-installment and repayment logic for loans and advances."""

    model: type[LoanModel] | type[AdvanceModel]
    kind: str

    def __init__(self, session: Session):
        self._session = session

    def _load(self, obligation_id: Any) -> LoanModel | AdvanceModel:
        key = _as_uuid(obligation_id)
        obligation = self._session.get(self.model, key) if key is not None else None
        if obligation is None:
            raise ObligationNotFoundError(self.kind, obligation_id)
        return obligation

    def _booked_for_period(self, obligation_id: UUID, period_key: str) -> bool:
        stmt = select(ObligationRepaymentModel.id).where(
            ObligationRepaymentModel.obligation_kind == self.kind,
            ObligationRepaymentModel.obligation_id == obligation_id,
            ObligationRepaymentModel.period_key == period_key,
        )
        return self._session.scalars(stmt).first() is not None

    def get_due_installments(
        self, employee_id: str, period: PayPeriod
    ) -> list[ObligationInstallment]:
        key = _as_uuid(employee_id)
        if key is None:
            raise EmployeeNotFoundError(employee_id)

        stmt = (
            select(self.model)
            .where(
                self.model.employee_id == key,
                self.model.status == STATUS_ACTIVE,
                self.model.amount_remaining > 0,
            )
            .order_by(self.model.created_at, self.model.id)
        )
        due: list[ObligationInstallment] = []
        for obligation in self._session.scalars(stmt):
            if obligation.start_date > period.end_date:
                continue
            if self._booked_for_period(obligation.id, period.key):
                continue
            due.append(obligation.to_installment())

        logger.debug(
            "obligation_installments_due",
            extra={
                "kind": self.kind,
                "employee_id": str(employee_id),
                "period_key": period.key,
                "count": len(due),
            },
        )
        return due

    def add_repayment(
        self,
        obligation_id: Any,
        amount: Any,
        payment_date: date,
        period_key: str | None = None,
        salary_payment_id: UUID | None = None,
        notes: str | None = None,
    ) -> UUID:
        """Book a repayment and update the obligation's balance and status."""
        obligation = self._load(obligation_id)
        amount = _positive("amount", amount)
        if amount > obligation.amount_remaining:
            raise OverpaymentError(
                self.kind, obligation.id, amount, obligation.amount_remaining
            )

        repayment = ObligationRepaymentModel(
            obligation_kind=self.kind,
            obligation_id=obligation.id,
            employee_id=obligation.employee_id,
            amount=amount,
            payment_date=payment_date,
            period_key=period_key,
            salary_payment_id=salary_payment_id,
            notes=notes,
        )
        self._session.add(repayment)

        obligation.amount_paid = obligation.amount_paid + amount
        obligation.amount_remaining = obligation.amount_remaining - amount
        obligation.installments_paid = obligation.installments_paid + 1
        if obligation.amount_remaining <= _ZERO:
            obligation.status = STATUS_COMPLETED
        self._session.flush()

        logger.info(
            "obligation_repayment_added",
            extra={
                "kind": self.kind,
                "obligation_id": str(obligation.id),
                "amount": amount,
                "amount_remaining": obligation.amount_remaining,
                "status": obligation.status,
            },
        )
        return repayment.id

    def reverse_repayment(self, repayment: ObligationRepaymentModel) -> None:
        """Undo ``repayment`` and reopen the obligation if it had completed."""
        obligation = self._load(repayment.obligation_id)
        obligation.amount_paid = obligation.amount_paid - repayment.amount
        obligation.amount_remaining = obligation.amount_remaining + repayment.amount
        obligation.installments_paid = max(0, obligation.installments_paid - 1)
        if obligation.amount_remaining > _ZERO:
            obligation.status = STATUS_ACTIVE
        self._session.delete(repayment)

    def _delete(self, obligation_id: Any) -> None:
        obligation = self._load(obligation_id)
        stmt = select(ObligationRepaymentModel).where(
            ObligationRepaymentModel.obligation_kind == self.kind,
            ObligationRepaymentModel.obligation_id == obligation.id,
        )
        for repayment in self._session.scalars(stmt):
            self._session.delete(repayment)
        self._session.delete(obligation)
        self._session.flush()
        logger.info(
            "obligation_deleted",
            extra={"kind": self.kind, "obligation_id": str(obligation.id)},
        )

    def _check_employee(self, employee_id: Any) -> UUID:
        key = _as_uuid(employee_id)
        if key is None or self._session.get(EmployeeModel, key) is None:
            raise EmployeeNotFoundError(employee_id)
        return key


class SqlLoanLedger(_SqlObligationLedger):
    """``LoanLedger`` backed by ``LoanModel``."""

    model = LoanModel
    kind = LOAN

    def create_loan(
        self,
        employee_id: Any,
        loan_amount: Any,
        monthly_installment: Any,
        installments_total: int,
        loan_date: date,
        interest_rate: Any = "0",
        first_payment_date: date | None = None,
        loan_type: str = "Personal Loan",
    ) -> UUID:
        """Create an active loan; total = principal plus flat interest."""
        key = self._check_employee(employee_id)
        principal = _positive("loan_amount", loan_amount)
        installment = _positive("monthly_installment", monthly_installment)
        rate = to_decimal("interest_rate", interest_rate)
        if rate < _ZERO:
            raise InvalidInputError("interest_rate", rate, "must be >= 0")
        if installments_total <= 0:
            raise InvalidInputError("installments_total", installments_total, "must be > 0")

        employee = self._session.get(EmployeeModel, key)
        total = Money.of(principal * (1 + rate / 100), employee.currency).round(ROUND_HALF_UP)

        loan = LoanModel(
            employee_id=key,
            loan_type=loan_type,
            loan_amount=principal,
            interest_rate=rate,
            total_amount=total.amount,
            monthly_installment=installment,
            installments_total=installments_total,
            installments_paid=0,
            amount_paid=_ZERO,
            amount_remaining=total.amount,
            loan_date=loan_date,
            first_payment_date=first_payment_date,
            status=STATUS_ACTIVE,
        )
        self._session.add(loan)
        self._session.flush()
        logger.info(
            "loan_created",
            extra={
                "loan_id": str(loan.id),
                "employee_id": str(key),
                "total_amount": loan.total_amount,
                "monthly_installment": installment,
            },
        )
        return loan.id

    def delete_loan(self, loan_id: Any) -> None:
        self._delete(loan_id)


class SqlAdvanceLedger(_SqlObligationLedger):
    """``AdvanceLedger`` backed by ``AdvanceModel``."""

    model = AdvanceModel
    kind = ADVANCE

    def create_advance(
        self,
        employee_id: Any,
        advance_amount: Any,
        advance_date: date,
        monthly_deduction: Any | None = None,
        installments_total: int = 1,
        first_deduction_date: date | None = None,
        reason: str | None = None,
    ) -> UUID:
        """
        Create an active advance.  Without ``monthly_deduction`` the
        advance is recovered in ``installments_total`` equal parts.
        """
        key = self._check_employee(employee_id)
        amount = _positive("advance_amount", advance_amount)
        if installments_total <= 0:
            raise InvalidInputError("installments_total", installments_total, "must be > 0")

        employee = self._session.get(EmployeeModel, key)
        if monthly_deduction is None:
            per_month = Money.of(amount, employee.currency) / installments_total
            deduction = per_month.round(ROUND_HALF_UP).amount
        else:
            deduction = _positive("monthly_deduction", monthly_deduction)

        advance = AdvanceModel(
            employee_id=key,
            advance_amount=amount,
            monthly_deduction=deduction,
            installments_total=installments_total,
            installments_paid=0,
            amount_paid=_ZERO,
            amount_remaining=amount,
            advance_date=advance_date,
            first_deduction_date=first_deduction_date,
            reason=reason,
            status=STATUS_ACTIVE,
        )
        self._session.add(advance)
        self._session.flush()
        logger.info(
            "advance_created",
            extra={
                "advance_id": str(advance.id),
                "employee_id": str(key),
                "advance_amount": amount,
                "monthly_deduction": deduction,
            },
        )
        return advance.id

    def delete_advance(self, advance_id: Any) -> None:
        self._delete(advance_id)


# ---------------------------------------------------------------------------
# Result sink
# ---------------------------------------------------------------------------


class SqlSalaryResultSink:
    """
    ``SalaryResultSink`` that persists payments and mirrors them.

    Recording a result:
        1. inserts a ``SalaryPaymentModel``;
        2. books one repayment per loan/advance installment for the period;
        3. inserts an ``expense`` row of the net salary in the
           financial-transaction ledger and links it to the payment.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        transaction_category: str = "Salary",
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._category = transaction_category
        self._loans = SqlLoanLedger(session)
        self._advances = SqlAdvanceLedger(session)

    def record_salary_payment(self, result: SalaryComputationResult) -> UUID:
        employee_key = _as_uuid(result.employee_id)
        if employee_key is None or self._session.get(EmployeeModel, employee_key) is None:
            raise EmployeeNotFoundError(result.employee_id)

        existing = self._session.scalars(
            select(SalaryPaymentModel.id).where(
                SalaryPaymentModel.employee_id == employee_key,
                SalaryPaymentModel.period_key == result.period.key,
            )
        ).first()
        if existing is not None:
            raise DuplicateSalaryPaymentError(result.employee_id, result.period.key)

        payment_date = self._clock.today()
        payment = SalaryPaymentModel.from_result(result, employee_key, payment_date)
        self._session.add(payment)
        self._session.flush()

        for ledger, installments in (
            (self._loans, result.deductions.loan_installments),
            (self._advances, result.deductions.advance_installments),
        ):
            for installment in installments:
                if installment.amount <= _ZERO:
                    continue
                ledger.add_repayment(
                    installment.obligation_id,
                    installment.amount,
                    payment_date,
                    period_key=result.period.key,
                    salary_payment_id=payment.id,
                    notes=f"Salary deduction {result.period.key}",
                )

        transaction = FinancialTransactionModel(
            transaction_type="expense",
            category=self._category,
            amount=result.net_salary,
            currency=result.currency,
            transaction_date=payment_date,
            description=f"Salary payment {result.period.key} for employee {result.employee_id}",
            reference_type="salary_payment",
            reference_id=payment.id,
        )
        self._session.add(transaction)
        self._session.flush()
        payment.transaction_id = transaction.id
        self._session.flush()

        logger.info(
            "salary_payment_recorded",
            extra={
                "payment_id": str(payment.id),
                "employee_id": result.employee_id,
                "period_key": result.period.key,
                "net_salary": result.net_salary,
                "transaction_id": str(transaction.id),
            },
        )
        return payment.id

    def delete_salary_payment(self, payment_id: Any) -> None:
        """Remove a payment, reversing its repayments and ledger mirror."""
        key = _as_uuid(payment_id)
        payment = self._session.get(SalaryPaymentModel, key) if key is not None else None
        if payment is None:
            raise SalaryPaymentNotFoundError(payment_id)

        repayments = self._session.scalars(
            select(ObligationRepaymentModel).where(
                ObligationRepaymentModel.salary_payment_id == payment.id
            )
        ).all()
        for repayment in repayments:
            ledger = self._loans if repayment.obligation_kind == LOAN else self._advances
            ledger.reverse_repayment(repayment)
        self._session.flush()

        transaction_id = payment.transaction_id
        self._session.delete(payment)
        self._session.flush()
        if transaction_id is not None:
            transaction = self._session.get(FinancialTransactionModel, transaction_id)
            if transaction is not None:
                self._session.delete(transaction)
                self._session.flush()

        logger.info(
            "salary_payment_deleted",
            extra={
                "payment_id": str(payment.id),
                "reversed_repayments": len(repayments),
            },
        )
