"""
payroll_engines.salary.summary -- Aggregates over computed salaries.

Pure roll-up used by the batch payroll run and for period statistics.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from payroll_engines.salary.types import SalaryComputationResult
from payroll_kernel.domain.values import Money


@dataclass(frozen=True)
class PayrollSummary:
    """Totals across a set of salary computations in one currency."""

    currency: str | None
    employee_count: int
    total_gross: Decimal
    total_deductions: Decimal
    total_net: Decimal
    negative_net_count: int

    @classmethod
    def empty(cls, currency: str | None = None) -> PayrollSummary:
        zero = Decimal("0")
        return cls(currency, 0, zero, zero, zero, 0)


def summarize_results(results: Iterable[SalaryComputationResult]) -> PayrollSummary:
    """
    Sum gross, deductions and net across ``results``.

    Raises:
        CurrencyMismatchError: results in more than one currency.
    """
    results = list(results)
    if not results:
        return PayrollSummary.empty()

    currency = results[0].currency
    gross = Money.zero(currency)
    deductions = Money.zero(currency)
    net = Money.zero(currency)
    negative = 0
    for result in results:
        gross = gross + Money.of(result.gross_salary, result.currency)
        deductions = deductions + Money.of(result.total_deductions, result.currency)
        net = net + Money.of(result.net_salary, result.currency)
        if result.has_negative_net_pay:
            negative += 1

    return PayrollSummary(
        currency=gross.currency.code,
        employee_count=len(results),
        total_gross=gross.amount,
        total_deductions=deductions.amount,
        total_net=net.amount,
        negative_net_count=negative,
    )
