"""
payroll_engines.salary.calculator -- Pure salary computation.

Responsibility:
    Turn a compensation profile, a pay period, attendance, an employment
    window, caller-supplied earnings/deductions and the loan/advance
    installments due in the period into a fully itemized
    SalaryComputationResult.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import payroll_kernel (values, exceptions, logging) and
    sibling engine modules.  Collaborator lookups happen in the caller
    (payroll_modules.salary.service) BEFORE this function runs.

Invariants enforced:
    - working_days = max(0, span - leave_days_total); zero raises.
    - base_salary_prorated = base_salary * working_days / total_days,
      so a full month with no leave yields base_salary exactly.
    - net_salary = gross_salary - total_deductions, never clamped.
    - Loan/advance amounts are used verbatim.
    - Determinism: identical inputs produce identical results (no clock,
      no randomness).

Failure modes:
    - InvalidInputError from the input types, or when an obligation list
      holds something other than ObligationInstallment.
    - ZeroWorkingDaysError when no working day remains.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal

from payroll_engines.salary.proration import effective_window
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
)
from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.values import Money
from payroll_kernel.exceptions import InvalidInputError, ZeroWorkingDaysError
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.salary")

ENGINE_NAME = "salary"
ENGINE_VERSION = "1.0"

_FINGERPRINT_FIELDS = (
    "profile",
    "period",
    "attendance",
    "employment_window",
    "earnings",
    "deductions",
    "loan_obligations",
    "advance_obligations",
)


def _installments(
    field_name: str,
    obligations: Sequence[ObligationInstallment] | None,
) -> tuple[ObligationInstallment, ...]:
    if obligations is None:
        return ()
    items = tuple(obligations)
    for item in items:
        if not isinstance(item, ObligationInstallment):
            raise InvalidInputError(field_name, item, "expected ObligationInstallment")
    return items


@traced_engine(ENGINE_NAME, ENGINE_VERSION, fingerprint_fields=_FINGERPRINT_FIELDS)
def compute_salary(
    *,
    profile: CompensationProfile,
    period: PayPeriod,
    attendance: AttendanceAdjustment | None = None,
    employment_window: EmploymentWindow | None = None,
    earnings: EarningsLineItems | None = None,
    deductions: DeductionLineItems | None = None,
    loan_obligations: Sequence[ObligationInstallment] | None = None,
    advance_obligations: Sequence[ObligationInstallment] | None = None,
    rounding: str = ROUND_HALF_UP,
) -> SalaryComputationResult:
    """
    Compute one employee's salary for one period.

    Omitted inputs mean "nothing of that kind": no leave, employed for the
    whole period, no add-ons, no deductions, no obligations.

    Raises:
        InvalidInputError: malformed input.
        ZeroWorkingDaysError: no working day left after the window and leave.
    """
    attendance = attendance or AttendanceAdjustment()
    employment_window = employment_window or EmploymentWindow()
    earnings = earnings or EarningsLineItems()
    deductions = deductions or DeductionLineItems()
    loans = _installments("loan_obligations", loan_obligations)
    advances = _installments("advance_obligations", advance_obligations)
    currency = profile.currency

    logger.debug(
        "salary_computation_started",
        extra={
            "employee_id": profile.employee_id,
            "period_key": period.key,
            "currency": currency,
            "loan_count": len(loans),
            "advance_count": len(advances),
        },
    )

    # 1. Effective window
    window = effective_window(employment_window, period)
    total_days = period.total_days_in_month

    # 2. Working days
    working_days = max(
        Decimal("0"), Decimal(window.span_days) - attendance.leave_days_total
    )
    if working_days <= 0:
        logger.warning(
            "salary_zero_working_days",
            extra={
                "employee_id": profile.employee_id,
                "period_key": period.key,
                "effective_start_day": window.start_day,
                "effective_end_day": window.end_day,
                "leave_days_total": attendance.leave_days_total,
            },
        )
        raise ZeroWorkingDaysError(
            profile.employee_id,
            period.key,
            window.start_day,
            window.end_day,
            attendance.leave_days_total,
        )

    # 3. Prorated base; multiply before dividing so a full month is exact
    base = Money.of(profile.base_salary, currency)
    prorated_base = (base * working_days / total_days).round(rounding)
    daily_rate = (base / total_days).round(rounding)

    # 4-6. Allowances, add-ons, gross
    allowance_amounts = [amount for _, amount in profile.allowance_items]
    allowance_amounts.append(earnings.additional_allowances)
    total_allowances = Money.total(allowance_amounts, currency).round(rounding)
    add_ons = Money.total(
        [amount for _, amount in earnings.add_on_items], currency
    ).round(rounding)
    gross = prorated_base + total_allowances + add_ons

    # 7. Obligations, summed independently
    loan_total = Money.total([i.amount for i in loans], currency).round(rounding)
    advance_total = Money.total([i.amount for i in advances], currency).round(rounding)

    # 8-9. Fixed and total deductions
    fixed_items = deductions.items
    fixed_total = Money.total([amount for _, amount in fixed_items], currency).round(rounding)
    total_deductions = fixed_total + loan_total + advance_total

    # 10. Net, never clamped
    net = gross - total_deductions
    warnings: tuple[ComputationWarning, ...] = ()
    if net.is_negative:
        warnings = (ComputationWarning.NEGATIVE_NET_PAY,)
        logger.warning(
            "salary_negative_net_pay",
            extra={
                "employee_id": profile.employee_id,
                "period_key": period.key,
                "gross_salary": gross.amount,
                "total_deductions": total_deductions.amount,
                "net_salary": net.amount,
            },
        )

    breakdown = DeductionBreakdown(
        fixed_items=fixed_items,
        fixed_total=fixed_total.amount,
        loan_installments=loans,
        loan_total=loan_total.amount,
        advance_installments=advances,
        advance_total=advance_total.amount,
    )

    result = SalaryComputationResult(
        employee_id=profile.employee_id,
        period=period,
        currency=currency,
        daily_rate=daily_rate.amount,
        base_salary_prorated=prorated_base.amount,
        total_allowances=total_allowances.amount,
        total_earnings_add_ons=add_ons.amount,
        gross_salary=gross.amount,
        deductions=breakdown,
        total_deductions=total_deductions.amount,
        net_salary=net.amount,
        working_days=working_days,
        total_days_in_month=total_days,
        effective_start_day=window.start_day,
        effective_end_day=window.end_day,
        is_prorated=window.is_prorated,
        proration_reason=window.reason,
        attendance=attendance,
        earnings=earnings,
        warnings=warnings,
    )

    logger.info(
        "salary_computation_completed",
        extra={
            "employee_id": profile.employee_id,
            "period_key": period.key,
            "working_days": working_days,
            "is_prorated": window.is_prorated,
            "gross_salary": result.gross_salary,
            "total_deductions": result.total_deductions,
            "net_salary": result.net_salary,
        },
    )
    return result


def preview_salary(
    *,
    profile: CompensationProfile,
    period: PayPeriod,
    attendance: AttendanceAdjustment | None = None,
    employment_window: EmploymentWindow | None = None,
    earnings: EarningsLineItems | None = None,
    deductions: DeductionLineItems | None = None,
    loan_obligations: Sequence[ObligationInstallment] | None = None,
    advance_obligations: Sequence[ObligationInstallment] | None = None,
    rounding: str = ROUND_HALF_UP,
) -> SalaryComputationResult:
    """Same computation as compute_salary; the caller simply does not record it."""
    return compute_salary(
        profile=profile,
        period=period,
        attendance=attendance,
        employment_window=employment_window,
        earnings=earnings,
        deductions=deductions,
        loan_obligations=loan_obligations,
        advance_obligations=advance_obligations,
        rounding=rounding,
    )
