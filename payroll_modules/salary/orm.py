"""
Salary ORM Persistence Models (``payroll_modules.salary.orm``).

Responsibility:
    SQLAlchemy ORM models behind the reference collaborators: employees,
    loans, salary advances, obligation repayments, recorded salary
    payments and the financial-transaction ledger that mirrors them.

Architecture position:
    **Modules layer** -- persistence companions to the engine types.
    Inherits from ``TrackedBase`` (kernel DB base) which provides
    id (UUID PK, auto-generated), created_at and updated_at.

Invariants enforced:
    - All monetary fields use Decimal (maps to Numeric(38,9)) -- NEVER float.
    - Status and kind fields are String(20/50) holding enum-like values.
    - One salary payment per employee and period (uq_salary_payment_employee_period).
    - One repayment per obligation and period when booked through payroll
      (uq_obligation_repayment_period).
"""

from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import (
    JSON,
    Boolean,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from payroll_engines.salary import (
    CompensationProfile,
    EmploymentWindow,
    ObligationInstallment,
    SalaryComputationResult,
)
from payroll_kernel.db.base import TrackedBase

LOAN = "loan"
ADVANCE = "advance"

STATUS_ACTIVE = "active"
STATUS_COMPLETED = "completed"

# ---------------------------------------------------------------------------
# EmployeeModel
# ---------------------------------------------------------------------------


class EmployeeModel(TrackedBase):
    """
    ORM model for an employee and its monthly compensation.

    Guarantees:
        - ``employee_code`` is unique (uq_salary_employee_code).
        - ``base_salary`` and allowances are Decimal (Numeric(38,9)).
    """

    __tablename__ = "salary_employees"

    employee_code: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    position: Mapped[str | None] = mapped_column(String(100), nullable=True)
    department: Mapped[str | None] = mapped_column(String(100), nullable=True)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="PKR")
    base_salary: Mapped[Decimal] = mapped_column(nullable=False)
    housing_allowance: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    transport_allowance: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    medical_allowance: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    food_allowance: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    other_allowances: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    general_allowance: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    hire_date: Mapped[date | None] = mapped_column(nullable=True)
    termination_date: Mapped[date | None] = mapped_column(nullable=True)
    contract_end_date: Mapped[date | None] = mapped_column(nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    __table_args__ = (
        UniqueConstraint("employee_code", name="uq_salary_employee_code"),
        Index("idx_salary_employee_active", "is_active"),
    )

    def to_profile(self) -> CompensationProfile:
        return CompensationProfile(
            employee_id=str(self.id),
            base_salary=self.base_salary,
            currency=self.currency,
            housing_allowance=self.housing_allowance,
            transport_allowance=self.transport_allowance,
            medical_allowance=self.medical_allowance,
            food_allowance=self.food_allowance,
            other_allowances=self.other_allowances,
            general_allowance=self.general_allowance,
        )

    def to_window(self) -> EmploymentWindow:
        return EmploymentWindow(
            hire_date=self.hire_date,
            termination_date=self.termination_date,
            contract_end_date=self.contract_end_date,
        )

    def __repr__(self) -> str:
        return f"<EmployeeModel {self.employee_code}: {self.name}>"


# ---------------------------------------------------------------------------
# Obligations
# ---------------------------------------------------------------------------


class LoanModel(TrackedBase):
    """
    ORM model for an employee loan repaid through payroll.

    Contract:
        ``total_amount`` is principal plus flat interest.  ``amount_paid``
        and ``amount_remaining`` always sum to ``total_amount``.  Status is
        ``active`` until fully repaid, then ``completed``.
    """

    __tablename__ = "salary_loans"

    employee_id: Mapped[UUID] = mapped_column(ForeignKey("salary_employees.id"), nullable=False)
    loan_type: Mapped[str] = mapped_column(String(100), nullable=False, default="Personal Loan")
    loan_amount: Mapped[Decimal] = mapped_column(nullable=False)
    interest_rate: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    total_amount: Mapped[Decimal] = mapped_column(nullable=False)
    monthly_installment: Mapped[Decimal] = mapped_column(nullable=False)
    installments_total: Mapped[int] = mapped_column(nullable=False)
    installments_paid: Mapped[int] = mapped_column(nullable=False, default=0)
    amount_paid: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    amount_remaining: Mapped[Decimal] = mapped_column(nullable=False)
    loan_date: Mapped[date] = mapped_column(nullable=False)
    first_payment_date: Mapped[date | None] = mapped_column(nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=STATUS_ACTIVE)

    __table_args__ = (
        Index("idx_salary_loan_employee_status", "employee_id", "status"),
    )

    kind = LOAN

    @property
    def installment_amount(self) -> Decimal:
        return self.monthly_installment

    @property
    def start_date(self) -> date:
        return self.first_payment_date or self.loan_date

    def to_installment(self) -> ObligationInstallment:
        return ObligationInstallment(
            obligation_id=self.id,
            amount=min(self.monthly_installment, self.amount_remaining),
            remaining_balance=self.amount_remaining,
        )

    def __repr__(self) -> str:
        return f"<LoanModel {self.id} {self.status} remaining={self.amount_remaining}>"


class AdvanceModel(TrackedBase):
    """
    ORM model for a salary advance recovered in installments.

    Contract:
        Same balance bookkeeping as ``LoanModel`` without interest.
    """

    __tablename__ = "salary_advances"

    employee_id: Mapped[UUID] = mapped_column(ForeignKey("salary_employees.id"), nullable=False)
    advance_amount: Mapped[Decimal] = mapped_column(nullable=False)
    monthly_deduction: Mapped[Decimal] = mapped_column(nullable=False)
    installments_total: Mapped[int] = mapped_column(nullable=False)
    installments_paid: Mapped[int] = mapped_column(nullable=False, default=0)
    amount_paid: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    amount_remaining: Mapped[Decimal] = mapped_column(nullable=False)
    advance_date: Mapped[date] = mapped_column(nullable=False)
    first_deduction_date: Mapped[date | None] = mapped_column(nullable=True)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=STATUS_ACTIVE)

    __table_args__ = (
        Index("idx_salary_advance_employee_status", "employee_id", "status"),
    )

    kind = ADVANCE

    @property
    def installment_amount(self) -> Decimal:
        return self.monthly_deduction

    @property
    def start_date(self) -> date:
        return self.first_deduction_date or self.advance_date

    def to_installment(self) -> ObligationInstallment:
        return ObligationInstallment(
            obligation_id=self.id,
            amount=min(self.monthly_deduction, self.amount_remaining),
            remaining_balance=self.amount_remaining,
        )

    def __repr__(self) -> str:
        return f"<AdvanceModel {self.id} {self.status} remaining={self.amount_remaining}>"


class ObligationRepaymentModel(TrackedBase):
    """
    One repayment against a loan or advance.

    ``period_key`` is set when the repayment was booked by a salary
    payment; manual repayments leave it empty.
    """

    __tablename__ = "salary_obligation_repayments"

    obligation_kind: Mapped[str] = mapped_column(String(20), nullable=False)
    obligation_id: Mapped[UUID] = mapped_column(nullable=False)
    employee_id: Mapped[UUID] = mapped_column(ForeignKey("salary_employees.id"), nullable=False)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    payment_date: Mapped[date] = mapped_column(nullable=False)
    period_key: Mapped[str | None] = mapped_column(String(7), nullable=True)
    salary_payment_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("salary_payments.id"), nullable=True
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "obligation_kind", "obligation_id", "period_key",
            name="uq_obligation_repayment_period",
        ),
        Index("idx_obligation_repayment_obligation", "obligation_kind", "obligation_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<ObligationRepaymentModel {self.obligation_kind}:{self.obligation_id} "
            f"{self.amount} {self.period_key or ''}>"
        )


# ---------------------------------------------------------------------------
# Payments and transaction ledger
# ---------------------------------------------------------------------------


def _breakdown_json(result: SalaryComputationResult) -> dict[str, Any]:
    deductions = result.deductions
    return {
        "fixed": {name: str(amount) for name, amount in deductions.fixed_items},
        "fixed_total": str(deductions.fixed_total),
        "loans": [
            {"obligation_id": str(i.obligation_id), "amount": str(i.amount)}
            for i in deductions.loan_installments
        ],
        "loan_total": str(deductions.loan_total),
        "advances": [
            {"obligation_id": str(i.obligation_id), "amount": str(i.amount)}
            for i in deductions.advance_installments
        ],
        "advance_total": str(deductions.advance_total),
    }


class SalaryPaymentModel(TrackedBase):
    """
    A recorded salary computation.

    Contract:
        Never updated after insert.  Corrections delete the payment
        (reversing its repayments and ledger mirror) and record a new one.
    """

    __tablename__ = "salary_payments"

    employee_id: Mapped[UUID] = mapped_column(ForeignKey("salary_employees.id"), nullable=False)
    period_key: Mapped[str] = mapped_column(String(7), nullable=False)
    payment_date: Mapped[date] = mapped_column(nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    daily_rate: Mapped[Decimal] = mapped_column(nullable=False)
    base_salary_prorated: Mapped[Decimal] = mapped_column(nullable=False)
    total_allowances: Mapped[Decimal] = mapped_column(nullable=False)
    total_earnings_add_ons: Mapped[Decimal] = mapped_column(nullable=False)
    gross_salary: Mapped[Decimal] = mapped_column(nullable=False)
    loan_deduction: Mapped[Decimal] = mapped_column(nullable=False)
    advance_deduction: Mapped[Decimal] = mapped_column(nullable=False)
    fixed_deductions: Mapped[Decimal] = mapped_column(nullable=False)
    total_deductions: Mapped[Decimal] = mapped_column(nullable=False)
    net_salary: Mapped[Decimal] = mapped_column(nullable=False)
    working_days: Mapped[Decimal] = mapped_column(nullable=False)
    total_days_in_month: Mapped[int] = mapped_column(nullable=False)
    leave_days_total: Mapped[Decimal] = mapped_column(nullable=False)
    paid_leave_days: Mapped[Decimal] = mapped_column(nullable=False)
    unpaid_leave_days: Mapped[Decimal] = mapped_column(nullable=False)
    is_prorated: Mapped[bool] = mapped_column(Boolean, nullable=False)
    proration_reason: Mapped[str] = mapped_column(Text, nullable=False, default="")
    deduction_breakdown: Mapped[dict] = mapped_column(JSON, nullable=False)
    transaction_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("financial_transactions.id"), nullable=True
    )

    __table_args__ = (
        UniqueConstraint("employee_id", "period_key", name="uq_salary_payment_employee_period"),
        Index("idx_salary_payment_period", "period_key"),
    )

    @classmethod
    def from_result(
        cls,
        result: SalaryComputationResult,
        employee_id: UUID,
        payment_date: date,
    ) -> "SalaryPaymentModel":
        return cls(
            employee_id=employee_id,
            period_key=result.period.key,
            payment_date=payment_date,
            currency=result.currency,
            daily_rate=result.daily_rate,
            base_salary_prorated=result.base_salary_prorated,
            total_allowances=result.total_allowances,
            total_earnings_add_ons=result.total_earnings_add_ons,
            gross_salary=result.gross_salary,
            loan_deduction=result.deductions.loan_total,
            advance_deduction=result.deductions.advance_total,
            fixed_deductions=result.deductions.fixed_total,
            total_deductions=result.total_deductions,
            net_salary=result.net_salary,
            working_days=result.working_days,
            total_days_in_month=result.total_days_in_month,
            leave_days_total=result.attendance.leave_days_total,
            paid_leave_days=result.attendance.paid_leave_days,
            unpaid_leave_days=result.attendance.unpaid_leave_days,
            is_prorated=result.is_prorated,
            proration_reason=result.proration_reason,
            deduction_breakdown=_breakdown_json(result),
        )

    def __repr__(self) -> str:
        return f"<SalaryPaymentModel {self.employee_id} {self.period_key} net={self.net_salary}>"


class FinancialTransactionModel(TrackedBase):
    """
    Income/expense ledger row used for reporting.

    Salary payments are mirrored here as ``expense`` rows; the reference
    columns point back at the originating record.
    """

    __tablename__ = "financial_transactions"

    transaction_type: Mapped[str] = mapped_column(String(20), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    transaction_date: Mapped[date] = mapped_column(nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    reference_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    reference_id: Mapped[UUID | None] = mapped_column(nullable=True)

    __table_args__ = (
        Index("idx_financial_transaction_date", "transaction_date"),
        Index("idx_financial_transaction_reference", "reference_type", "reference_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<FinancialTransactionModel {self.transaction_type} "
            f"{self.category} {self.amount} {self.currency}>"
        )
