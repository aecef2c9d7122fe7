"""
Module: payroll_engines
Responsibility:
    Package entrypoint for the pure calculation engines.  The canonical
    import surface for payroll_modules.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import payroll_kernel (domain values, exceptions, logging).
    MUST NOT import payroll_modules or payroll_config.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      Dates are passed in explicitly by the caller.
    - Decimal-only arithmetic: monetary amounts and day counts use
      ``Decimal``; floats are forbidden.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Every engine invocation is traced via ``@traced_engine`` (see
    ``payroll_engines.tracer``), emitting PAYROLL_ENGINE_TRACE records
    with engine name, version, input fingerprint and duration.

Usage:
    from payroll_engines.salary import compute_salary, CompensationProfile
"""

from payroll_kernel.logging_config import get_logger

logger = get_logger("engines")

from payroll_engines.salary import (  # noqa: E402
    AttendanceAdjustment,
    CompensationProfile,
    ComputationWarning,
    DeductionBreakdown,
    DeductionLineItems,
    EarningsLineItems,
    EmploymentWindow,
    ObligationInstallment,
    PayPeriod,
    PayrollSummary,
    SalaryComputationResult,
    compute_salary,
    preview_salary,
    summarize_results,
)
from payroll_engines.tracer import compute_input_fingerprint, traced_engine  # noqa: E402

__all__ = [
    "AttendanceAdjustment",
    "CompensationProfile",
    "ComputationWarning",
    "DeductionBreakdown",
    "DeductionLineItems",
    "EarningsLineItems",
    "EmploymentWindow",
    "ObligationInstallment",
    "PayPeriod",
    "PayrollSummary",
    "SalaryComputationResult",
    "compute_input_fingerprint",
    "compute_salary",
    "preview_salary",
    "summarize_results",
    "traced_engine",
]
