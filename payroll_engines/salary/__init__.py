"""
Salary engine -- prorated pay, allowances, deductions and net derivation.

Pure functions over frozen inputs:

    compute_salary(profile=..., period=..., ...) -> SalaryComputationResult
    preview_salary(...)                         -> SalaryComputationResult
    summarize_results(results)                  -> PayrollSummary
"""

from payroll_engines.salary.calculator import (
    ENGINE_NAME,
    ENGINE_VERSION,
    compute_salary,
    preview_salary,
)
from payroll_engines.salary.proration import EffectiveWindow, effective_window
from payroll_engines.salary.summary import PayrollSummary, summarize_results
from payroll_engines.salary.types import (
    AttendanceAdjustment,
    CompensationProfile,
    ComputationWarning,
    DeductionBreakdown,
    DeductionLineItems,
    EarningsLineItems,
    EmploymentWindow,
    ObligationInstallment,
    PayPeriod,
    SalaryComputationResult,
    to_decimal,
)

__all__ = [
    "ENGINE_NAME",
    "ENGINE_VERSION",
    "AttendanceAdjustment",
    "CompensationProfile",
    "ComputationWarning",
    "DeductionBreakdown",
    "DeductionLineItems",
    "EarningsLineItems",
    "EffectiveWindow",
    "EmploymentWindow",
    "ObligationInstallment",
    "PayPeriod",
    "PayrollSummary",
    "SalaryComputationResult",
    "compute_salary",
    "effective_window",
    "preview_salary",
    "summarize_results",
    "to_decimal",
]
