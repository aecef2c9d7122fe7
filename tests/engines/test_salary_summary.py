"""Tests for payroll summaries over computed results."""

from decimal import Decimal

import pytest

from payroll_engines.salary import (
    CompensationProfile,
    DeductionLineItems,
    PayPeriod,
    compute_salary,
    summarize_results,
)
from payroll_kernel.exceptions import CurrencyMismatchError

APRIL = PayPeriod(2025, 4)


def _result(employee_id: str, base: str, deduction: str = "0", currency: str = "PKR"):
    return compute_salary(
        profile=CompensationProfile(
            employee_id=employee_id, base_salary=Decimal(base), currency=currency
        ),
        period=APRIL,
        deductions=DeductionLineItems(other_deductions=Decimal(deduction)),
    )


class TestSummarizeResults:

    def test_empty(self):
        summary = summarize_results([])
        assert summary.employee_count == 0
        assert summary.total_net == 0
        assert summary.currency is None

    def test_totals(self):
        summary = summarize_results(
            [_result("A", "30000", "1000"), _result("B", "20000", "500")]
        )
        assert summary.currency == "PKR"
        assert summary.employee_count == 2
        assert summary.total_gross == Decimal("50000.00")
        assert summary.total_deductions == Decimal("1500.00")
        assert summary.total_net == Decimal("48500.00")
        assert summary.negative_net_count == 0

    def test_counts_negative_net(self):
        summary = summarize_results(
            [_result("A", "1000", "1500"), _result("B", "1000")]
        )
        assert summary.negative_net_count == 1
        assert summary.total_net == Decimal("500.00")

    def test_mixed_currencies_rejected(self):
        with pytest.raises(CurrencyMismatchError):
            summarize_results([_result("A", "1000"), _result("B", "1000", currency="USD")])
