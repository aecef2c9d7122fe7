"""
Tests for the SQLAlchemy salary collaborators.

Runs against the test database (in-memory SQLite unless
PAYROLL_TEST_DATABASE_URL is set).  Every test uses a session that is
rolled back afterwards.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import select

from payroll_engines.salary import DeductionLineItems, PayPeriod, compute_salary
from payroll_kernel.exceptions import (
    DuplicateSalaryPaymentError,
    EmployeeNotFoundError,
    InvalidInputError,
    ObligationNotFoundError,
    OverpaymentError,
    SalaryPaymentNotFoundError,
)
from payroll_modules.salary import (
    SalaryService,
    SqlAdvanceLedger,
    SqlEmployeeDirectory,
    SqlLoanLedger,
    SqlSalaryResultSink,
)
from payroll_modules.salary.orm import (
    STATUS_ACTIVE,
    STATUS_COMPLETED,
    AdvanceModel,
    FinancialTransactionModel,
    LoanModel,
    ObligationRepaymentModel,
    SalaryPaymentModel,
)

APRIL = PayPeriod(2025, 4)
MAY = PayPeriod(2025, 5)


@pytest.fixture
def directory(session):
    return SqlEmployeeDirectory(session)


@pytest.fixture
def loans(session):
    return SqlLoanLedger(session)


@pytest.fixture
def advances(session):
    return SqlAdvanceLedger(session)


@pytest.fixture
def sink(session, clock):
    return SqlSalaryResultSink(session, clock=clock)


@pytest.fixture
def employee_id(directory):
    return directory.create_employee(
        employee_code="EMP-001",
        name="Ayesha Khan",
        base_salary=Decimal("30000"),
        hire_date=date(2024, 1, 1),
        housing_allowance=Decimal("5000"),
        department="Operations",
    )


@pytest.fixture
def service(directory, loans, advances, sink):
    return SalaryService(directory, loans, advances, sink=sink)


class TestSqlEmployeeDirectory:

    def test_profile_and_window(self, directory, employee_id):
        profile = directory.get_compensation_profile(str(employee_id))
        assert profile.employee_id == str(employee_id)
        assert profile.base_salary == Decimal("30000")
        assert profile.housing_allowance == Decimal("5000")
        assert profile.transport_allowance == Decimal("0")
        assert profile.currency == "PKR"

        window = directory.get_employment_window(employee_id)
        assert window.hire_date == date(2024, 1, 1)
        assert window.termination_date is None

    def test_currency_normalized(self, directory):
        employee_id = directory.create_employee(
            employee_code="EMP-USD", name="Sam Lee", base_salary="4000", currency="usd"
        )
        assert directory.get_compensation_profile(employee_id).currency == "USD"

    def test_default_currency_for_new_employees(self, session):
        directory = SqlEmployeeDirectory(session, default_currency="INR")
        employee_id = directory.create_employee("EMP-IN", "Ravi Kumar", "45000")
        assert directory.get_compensation_profile(employee_id).currency == "INR"

    def test_explicit_currency_wins_over_default(self, session):
        directory = SqlEmployeeDirectory(session, default_currency="INR")
        employee_id = directory.create_employee("EMP-AE", "Omar Ali", "9000", currency="AED")
        assert directory.get_compensation_profile(employee_id).currency == "AED"

    def test_invalid_compensation_rejected(self, directory):
        with pytest.raises(InvalidInputError):
            directory.create_employee(
                employee_code="EMP-BAD", name="Bad", base_salary=Decimal("-1")
            )

    @pytest.mark.parametrize("unknown", ["not-a-uuid", str(uuid4())])
    def test_unknown_employee(self, directory, unknown):
        with pytest.raises(EmployeeNotFoundError):
            directory.get_compensation_profile(unknown)


class TestSqlLoanLedger:

    def test_total_includes_flat_interest(self, session, loans, employee_id):
        loan_id = loans.create_loan(
            employee_id, Decimal("10000"), Decimal("2000"), 6,
            loan_date=date(2025, 3, 1), interest_rate="5",
        )
        loan = session.get(LoanModel, loan_id)
        assert loan.total_amount == Decimal("10500.00")
        assert loan.amount_remaining == Decimal("10500.00")
        assert loan.status == STATUS_ACTIVE

    def test_due_installment(self, loans, employee_id):
        loan_id = loans.create_loan(
            employee_id, Decimal("10000"), Decimal("2000"), 5, loan_date=date(2025, 3, 1)
        )
        due = loans.get_due_installments(str(employee_id), APRIL)
        assert len(due) == 1
        assert due[0].obligation_id == loan_id
        assert due[0].amount == Decimal("2000")
        assert due[0].remaining_balance == Decimal("10000")

    def test_due_capped_at_remaining_balance(self, loans, employee_id):
        loan_id = loans.create_loan(
            employee_id, Decimal("3000"), Decimal("2000"), 2, loan_date=date(2025, 1, 1)
        )
        loans.add_repayment(loan_id, Decimal("2000"), date(2025, 3, 31))
        due = loans.get_due_installments(str(employee_id), APRIL)
        assert due[0].amount == Decimal("1000")

    def test_not_due_before_first_payment_date(self, loans, employee_id):
        loans.create_loan(
            employee_id, Decimal("5000"), Decimal("1000"), 5,
            loan_date=date(2025, 4, 20), first_payment_date=date(2025, 5, 1),
        )
        assert loans.get_due_installments(str(employee_id), APRIL) == []
        assert len(loans.get_due_installments(str(employee_id), MAY)) == 1

    def test_loan_taken_during_period_is_due(self, loans, employee_id):
        loans.create_loan(
            employee_id, Decimal("5000"), Decimal("1000"), 5, loan_date=date(2025, 4, 30)
        )
        assert len(loans.get_due_installments(str(employee_id), APRIL)) == 1

    def test_completed_loan_not_due(self, session, loans, employee_id):
        loan_id = loans.create_loan(
            employee_id, Decimal("1000"), Decimal("1000"), 1, loan_date=date(2025, 1, 1)
        )
        loans.add_repayment(loan_id, Decimal("1000"), date(2025, 3, 31))
        loan = session.get(LoanModel, loan_id)
        assert loan.status == STATUS_COMPLETED
        assert loan.amount_paid == Decimal("1000")
        assert loan.amount_remaining == Decimal("0")
        assert loans.get_due_installments(str(employee_id), APRIL) == []

    def test_overpayment_rejected(self, session, loans, employee_id):
        loan_id = loans.create_loan(
            employee_id, Decimal("1000"), Decimal("500"), 2, loan_date=date(2025, 1, 1)
        )
        with pytest.raises(OverpaymentError) as exc_info:
            loans.add_repayment(loan_id, Decimal("1000.01"), date(2025, 3, 31))
        assert exc_info.value.kind == "loan"
        assert session.get(LoanModel, loan_id).amount_paid == Decimal("0")

    def test_non_positive_repayment_rejected(self, loans, employee_id):
        loan_id = loans.create_loan(
            employee_id, Decimal("1000"), Decimal("500"), 2, loan_date=date(2025, 1, 1)
        )
        with pytest.raises(InvalidInputError):
            loans.add_repayment(loan_id, Decimal("0"), date(2025, 3, 31))

    def test_create_for_unknown_employee(self, loans):
        with pytest.raises(EmployeeNotFoundError):
            loans.create_loan(uuid4(), Decimal("1000"), Decimal("100"), 10, loan_date=date(2025, 1, 1))

    def test_invalid_installments_total(self, loans, employee_id):
        with pytest.raises(InvalidInputError):
            loans.create_loan(employee_id, Decimal("1000"), Decimal("100"), 0, loan_date=date(2025, 1, 1))

    def test_delete_loan(self, session, loans, employee_id):
        loan_id = loans.create_loan(
            employee_id, Decimal("1000"), Decimal("500"), 2, loan_date=date(2025, 1, 1)
        )
        loans.add_repayment(loan_id, Decimal("500"), date(2025, 2, 28))
        loans.delete_loan(loan_id)
        assert session.get(LoanModel, loan_id) is None
        remaining = session.scalars(
            select(ObligationRepaymentModel).where(
                ObligationRepaymentModel.obligation_id == loan_id
            )
        ).all()
        assert remaining == []
        with pytest.raises(ObligationNotFoundError):
            loans.delete_loan(loan_id)

    def test_ledger_scoped_to_employee(self, directory, loans, employee_id):
        other = directory.create_employee(
            employee_code="EMP-002", name="Bilal Ahmed", base_salary=Decimal("20000")
        )
        loans.create_loan(employee_id, Decimal("1000"), Decimal("500"), 2, loan_date=date(2025, 1, 1))
        assert loans.get_due_installments(str(other), APRIL) == []


class TestSqlAdvanceLedger:

    def test_equal_parts_when_no_monthly_deduction(self, session, advances, employee_id):
        advance_id = advances.create_advance(
            employee_id, Decimal("1000"), date(2025, 3, 15), installments_total=3
        )
        advance = session.get(AdvanceModel, advance_id)
        assert advance.monthly_deduction == Decimal("333.33")
        assert advance.amount_remaining == Decimal("1000")

    def test_single_installment_default(self, advances, employee_id):
        advances.create_advance(employee_id, Decimal("800"), date(2025, 4, 2))
        due = advances.get_due_installments(str(employee_id), APRIL)
        assert due[0].amount == Decimal("800.00")

    def test_not_due_before_first_deduction_date(self, advances, employee_id):
        advances.create_advance(
            employee_id, Decimal("800"), date(2025, 4, 2),
            monthly_deduction=Decimal("400"), installments_total=2,
            first_deduction_date=date(2025, 5, 1),
        )
        assert advances.get_due_installments(str(employee_id), APRIL) == []

    def test_delete_advance(self, session, advances, employee_id):
        advance_id = advances.create_advance(employee_id, Decimal("800"), date(2025, 4, 2))
        advances.delete_advance(advance_id)
        assert session.get(AdvanceModel, advance_id) is None

    def test_unknown_advance(self, advances):
        with pytest.raises(ObligationNotFoundError):
            advances.add_repayment(uuid4(), Decimal("10"), date(2025, 4, 30))


class TestSqlSalaryResultSink:

    def _setup_obligations(self, loans, advances, employee_id):
        loan_id = loans.create_loan(
            employee_id, Decimal("10000"), Decimal("2000"), 5, loan_date=date(2025, 1, 1)
        )
        advance_id = advances.create_advance(
            employee_id, Decimal("1500"), date(2025, 4, 1),
            monthly_deduction=Decimal("500"), installments_total=3,
        )
        return loan_id, advance_id

    def test_record_persists_payment_and_books_installments(
        self, session, service, loans, advances, employee_id
    ):
        loan_id, advance_id = self._setup_obligations(loans, advances, employee_id)

        result, payment_id = service.process(
            str(employee_id), APRIL, deductions=DeductionLineItems(income_tax=Decimal("1500"))
        )
        assert result.gross_salary == Decimal("35000.00")
        assert result.total_deductions == Decimal("4000.00")
        assert result.net_salary == Decimal("31000.00")

        payment = session.get(SalaryPaymentModel, payment_id)
        assert payment.period_key == "2025-04"
        assert payment.payment_date == date(2025, 4, 30)
        assert payment.net_salary == Decimal("31000.00")
        assert payment.loan_deduction == Decimal("2000")
        assert payment.advance_deduction == Decimal("500")
        assert payment.deduction_breakdown["fixed"]["income_tax"] == "1500"

        loan = session.get(LoanModel, loan_id)
        assert loan.amount_paid == Decimal("2000")
        assert loan.amount_remaining == Decimal("8000")
        assert loan.installments_paid == 1
        advance = session.get(AdvanceModel, advance_id)
        assert advance.amount_remaining == Decimal("1000")

        repayments = session.scalars(
            select(ObligationRepaymentModel).where(
                ObligationRepaymentModel.salary_payment_id == payment_id
            )
        ).all()
        assert {r.obligation_kind for r in repayments} == {"loan", "advance"}
        assert all(r.period_key == "2025-04" for r in repayments)

    def test_record_mirrors_net_salary_as_expense(self, session, service, employee_id):
        _, payment_id = service.process(str(employee_id), APRIL)
        payment = session.get(SalaryPaymentModel, payment_id)
        transaction = session.get(FinancialTransactionModel, payment.transaction_id)
        assert transaction.transaction_type == "expense"
        assert transaction.category == "Salary"
        assert transaction.amount == payment.net_salary
        assert transaction.currency == "PKR"
        assert transaction.reference_type == "salary_payment"
        assert transaction.reference_id == payment_id

    def test_booked_installments_not_due_again(self, service, loans, advances, employee_id):
        self._setup_obligations(loans, advances, employee_id)
        service.process(str(employee_id), APRIL)
        assert loans.get_due_installments(str(employee_id), APRIL) == []
        assert advances.get_due_installments(str(employee_id), APRIL) == []
        may_loans = loans.get_due_installments(str(employee_id), MAY)
        assert may_loans[0].remaining_balance == Decimal("8000")

    def test_duplicate_payment_rejected(self, service, employee_id):
        service.process(str(employee_id), APRIL)
        with pytest.raises(DuplicateSalaryPaymentError):
            service.process(str(employee_id), APRIL)

    def test_record_for_unknown_employee(self, sink, basic_profile, april):
        result = compute_salary(profile=basic_profile, period=april)
        with pytest.raises(EmployeeNotFoundError):
            sink.record_salary_payment(result)

    def test_delete_reverses_repayments_and_ledger(
        self, session, service, sink, loans, advances, employee_id
    ):
        loan_id, advance_id = self._setup_obligations(loans, advances, employee_id)
        _, payment_id = service.process(str(employee_id), APRIL)
        transaction_id = session.get(SalaryPaymentModel, payment_id).transaction_id

        sink.delete_salary_payment(payment_id)

        assert session.get(SalaryPaymentModel, payment_id) is None
        assert session.get(FinancialTransactionModel, transaction_id) is None
        loan = session.get(LoanModel, loan_id)
        assert loan.amount_remaining == Decimal("10000")
        assert loan.installments_paid == 0
        assert session.get(AdvanceModel, advance_id).amount_paid == Decimal("0")

        # the period can be recorded again after the correction
        result, _ = service.process(str(employee_id), APRIL)
        assert result.deductions.loan_total == Decimal("2000")

    def test_delete_reopens_completed_obligation(
        self, session, service, sink, advances, employee_id
    ):
        advance_id = advances.create_advance(employee_id, Decimal("500"), date(2025, 4, 1))
        _, payment_id = service.process(str(employee_id), APRIL)
        assert session.get(AdvanceModel, advance_id).status == STATUS_COMPLETED

        sink.delete_salary_payment(payment_id)
        assert session.get(AdvanceModel, advance_id).status == STATUS_ACTIVE

    def test_delete_unknown_payment(self, sink):
        with pytest.raises(SalaryPaymentNotFoundError):
            sink.delete_salary_payment(uuid4())

    def test_custom_transaction_category(self, session, directory, loans, advances, clock, employee_id):
        sink = SqlSalaryResultSink(session, clock=clock, transaction_category="Payroll")
        service = SalaryService(directory, loans, advances, sink=sink)
        _, payment_id = service.process(str(employee_id), APRIL)
        payment = session.get(SalaryPaymentModel, payment_id)
        assert session.get(FinancialTransactionModel, payment.transaction_id).category == "Payroll"
