"""
Typed Exception Hierarchy for the Payroll Kernel.

Every error raised by the engine, the salary service and the reference
ledgers is a ``PayrollError`` subclass with:

  1. A TYPED exception class (catch by type, not by message)
  2. A ``code`` CLASS ATTRIBUTE (machine-readable, API-safe)
  3. Structured DATA attributes (field names, ids, amounts)

Example::

    try:
        result = compute_salary(...)
    except ZeroWorkingDaysError as e:
        api_response(code=e.code, employee=e.employee_id, period=e.period_key)
    except InvalidInputError as e:
        api_response(code=e.code, field=e.field)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    PayrollError (base)
    |
    +-- InvalidInputError
    +-- ZeroWorkingDaysError
    +-- CurrencyMismatchError
    |
    +-- NotFoundError
    |   +-- EmployeeNotFoundError
    |   +-- ObligationNotFoundError
    |   +-- SalaryPaymentNotFoundError
    |
    +-- PaymentError
        +-- DuplicateSalaryPaymentError
        +-- NegativeNetPayError
        +-- SinkNotConfiguredError
        +-- OverpaymentError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category   | Code                      | When Raised
-----------|---------------------------|------------------------------------------
Input      | INVALID_INPUT             | Negative amount, bad period, leave mismatch
           | ZERO_WORKING_DAYS         | Employed span minus leave is <= 0
           | CURRENCY_MISMATCH         | Aggregating results in different currencies
-----------|---------------------------|------------------------------------------
Lookup     | EMPLOYEE_NOT_FOUND        | Directory has no such employee
           | OBLIGATION_NOT_FOUND      | Loan/advance id does not exist
           | SALARY_PAYMENT_NOT_FOUND  | Recorded payment id does not exist
-----------|---------------------------|------------------------------------------
Payment    | DUPLICATE_SALARY_PAYMENT  | Employee already paid for the period
           | NEGATIVE_NET_PAY          | Recording blocked by negative-net policy
           | SINK_NOT_CONFIGURED       | record() called without a result sink
           | OVERPAYMENT               | Repayment exceeds remaining balance

Negative net pay is NOT an exception at computation time: the engine
flags it on the result (``ComputationWarning.NEGATIVE_NET_PAY``) and the
caller decides.  ``NegativeNetPayError`` only exists for callers that opt
into the ``block`` policy when recording.
"""

from __future__ import annotations

from typing import Any


class PayrollError(Exception):
    """
    Base exception for all payroll errors.

    All subclasses carry a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "PAYROLL_ERROR"


# Input validation


class InvalidInputError(PayrollError):
    """Malformed or out-of-range input; names the offending field."""

    code: str = "INVALID_INPUT"

    def __init__(self, field: str, value: Any, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field}={value!r}: {reason}")


class ZeroWorkingDaysError(PayrollError):
    """
    Computed working days are zero or negative.

    A zero-day payment is almost always a caller mistake (termination
    before hire, leave days exceeding the employed span), so the engine
    refuses to produce one.
    """

    code: str = "ZERO_WORKING_DAYS"

    def __init__(
        self,
        employee_id: str,
        period_key: str,
        effective_start_day: int,
        effective_end_day: int,
        leave_days_total: Any,
    ):
        self.employee_id = employee_id
        self.period_key = period_key
        self.effective_start_day = effective_start_day
        self.effective_end_day = effective_end_day
        self.leave_days_total = leave_days_total
        super().__init__(
            f"No working days for employee {employee_id} in {period_key}: "
            f"days {effective_start_day}-{effective_end_day}, "
            f"leave {leave_days_total}"
        )


class CurrencyMismatchError(PayrollError):
    """Attempted operation on mismatched currencies."""

    code: str = "CURRENCY_MISMATCH"

    def __init__(self, currency1: str, currency2: str):
        self.currency1 = currency1
        self.currency2 = currency2
        super().__init__(f"Currency mismatch: {currency1} vs {currency2}")


# Lookup errors


class NotFoundError(PayrollError):
    """Base exception for missing records."""

    code: str = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: Any):
        self.entity = entity
        self.entity_id = str(entity_id)
        super().__init__(f"{entity} not found: {entity_id}")


class EmployeeNotFoundError(NotFoundError):
    """Employee (or its compensation profile) does not exist."""

    code: str = "EMPLOYEE_NOT_FOUND"

    def __init__(self, employee_id: Any):
        self.employee_id = str(employee_id)
        super().__init__("Employee", employee_id)


class ObligationNotFoundError(NotFoundError):
    """Loan or advance does not exist."""

    code: str = "OBLIGATION_NOT_FOUND"

    def __init__(self, kind: str, obligation_id: Any):
        self.kind = kind
        super().__init__(kind.capitalize(), obligation_id)


class SalaryPaymentNotFoundError(NotFoundError):
    """Recorded salary payment does not exist."""

    code: str = "SALARY_PAYMENT_NOT_FOUND"

    def __init__(self, payment_id: Any):
        super().__init__("Salary payment", payment_id)


# Payment recording errors


class PaymentError(PayrollError):
    """Base exception for salary payment recording errors."""

    code: str = "PAYMENT_ERROR"


class DuplicateSalaryPaymentError(PaymentError):
    """
    A salary payment already exists for the employee and period.

    Corrections go through deleting the prior payment and recording a new
    computation.
    """

    code: str = "DUPLICATE_SALARY_PAYMENT"

    def __init__(self, employee_id: Any, period_key: str):
        self.employee_id = str(employee_id)
        self.period_key = period_key
        super().__init__(
            f"Salary already recorded for employee {employee_id} in {period_key}"
        )


class NegativeNetPayError(PaymentError):
    """Recording refused because net pay is negative and policy is ``block``."""

    code: str = "NEGATIVE_NET_PAY"

    def __init__(self, employee_id: Any, period_key: str, net_salary: Any):
        self.employee_id = str(employee_id)
        self.period_key = period_key
        self.net_salary = str(net_salary)
        super().__init__(
            f"Net salary {net_salary} is negative for employee "
            f"{employee_id} in {period_key}"
        )


class SinkNotConfiguredError(PaymentError):
    """Recording was requested but no result sink was injected."""

    code: str = "SINK_NOT_CONFIGURED"

    def __init__(self) -> None:
        super().__init__("No salary result sink configured")


class OverpaymentError(PaymentError):
    """Repayment amount exceeds the obligation's remaining balance."""

    code: str = "OVERPAYMENT"

    def __init__(self, kind: str, obligation_id: Any, amount: Any, remaining: Any):
        self.kind = kind
        self.obligation_id = str(obligation_id)
        self.amount = str(amount)
        self.remaining = str(remaining)
        super().__init__(
            f"{kind.capitalize()} {obligation_id}: repayment {amount} "
            f"exceeds remaining balance {remaining}"
        )
