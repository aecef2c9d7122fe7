"""
Salary input/output documents (``payroll_modules.salary.inputs``).

Converts plain mappings (parsed YAML or JSON) into engine inputs and a
computed result back into a JSON-safe mapping.  Amounts travel as
strings on the way out so no precision is lost.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date
from pathlib import Path
from typing import Any

import yaml

from payroll_engines.salary import (
    AttendanceAdjustment,
    CompensationProfile,
    DeductionLineItems,
    EarningsLineItems,
    EmploymentWindow,
    ObligationInstallment,
    PayPeriod,
    SalaryComputationResult,
)
from payroll_kernel.exceptions import InvalidInputError


@dataclass(frozen=True)
class SalaryInputDocument:
    """Everything ``compute_salary`` needs, parsed from one document."""

    profile: CompensationProfile
    period: PayPeriod
    attendance: AttendanceAdjustment
    employment_window: EmploymentWindow
    earnings: EarningsLineItems
    deductions: DeductionLineItems
    loan_obligations: tuple[ObligationInstallment, ...]
    advance_obligations: tuple[ObligationInstallment, ...]

    def as_kwargs(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise InvalidInputError(key, value, "expected a mapping")
    return value


def _only_known(cls: type, key: str, values: dict[str, Any]) -> dict[str, Any]:
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise InvalidInputError(key, unknown, "unknown field(s)")
    return values


def _date(field: str, value: Any) -> date | None:
    if value is None or isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError as exc:
        raise InvalidInputError(field, value, "expected YYYY-MM-DD") from exc


def _installments(data: dict[str, Any], key: str) -> tuple[ObligationInstallment, ...]:
    items = data.get(key) or []
    if not isinstance(items, list):
        raise InvalidInputError(key, items, "expected a list")
    parsed = []
    for item in items:
        if not isinstance(item, dict) or "obligation_id" not in item or "amount" not in item:
            raise InvalidInputError(key, item, "expected {obligation_id, amount}")
        parsed.append(
            ObligationInstallment(
                obligation_id=item["obligation_id"],
                amount=item["amount"],
                remaining_balance=item.get("remaining_balance"),
            )
        )
    return tuple(parsed)


def parse_salary_input(
    data: dict[str, Any], default_currency: str | None = None
) -> SalaryInputDocument:
    """
    Parse a mapping with ``profile``, ``period`` and optional
    ``attendance``, ``employment``, ``earnings``, ``deductions``,
    ``loans`` and ``advances`` sections.  A profile without a
    ``currency`` gets ``default_currency`` when one is given.
    """
    if not isinstance(data, dict):
        raise InvalidInputError("document", data, "expected a mapping")
    if "profile" not in data:
        raise InvalidInputError("profile", None, "is required")
    if "period" not in data:
        raise InvalidInputError("period", None, "is required")

    profile_data = _only_known(CompensationProfile, "profile", _section(data, "profile"))
    if default_currency and not profile_data.get("currency"):
        profile_data = {**profile_data, "currency": default_currency}
    employment = _only_known(EmploymentWindow, "employment", _section(data, "employment"))

    return SalaryInputDocument(
        profile=CompensationProfile(**profile_data),
        period=PayPeriod.parse(str(data["period"])),
        attendance=AttendanceAdjustment(
            **_only_known(AttendanceAdjustment, "attendance", _section(data, "attendance"))
        ),
        employment_window=EmploymentWindow(
            **{k: _date(k, v) for k, v in employment.items()}
        ),
        earnings=EarningsLineItems(
            **_only_known(EarningsLineItems, "earnings", _section(data, "earnings"))
        ),
        deductions=DeductionLineItems(
            **_only_known(DeductionLineItems, "deductions", _section(data, "deductions"))
        ),
        loan_obligations=_installments(data, "loans"),
        advance_obligations=_installments(data, "advances"),
    )


def load_salary_input(
    path: Path | str, default_currency: str | None = None
) -> SalaryInputDocument:
    """Read and parse a YAML input document."""
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    return parse_salary_input(data, default_currency=default_currency)


def _installment_dict(item: ObligationInstallment) -> dict[str, str]:
    return {"obligation_id": str(item.obligation_id), "amount": str(item.amount)}


def result_to_dict(result: SalaryComputationResult) -> dict[str, Any]:
    """JSON-safe view of ``result``; Decimals become strings."""
    deductions = result.deductions
    return {
        "employee_id": result.employee_id,
        "period": result.period.key,
        "currency": result.currency,
        "daily_rate": str(result.daily_rate),
        "working_days": str(result.working_days),
        "total_days_in_month": result.total_days_in_month,
        "effective_start_day": result.effective_start_day,
        "effective_end_day": result.effective_end_day,
        "is_prorated": result.is_prorated,
        "proration_reason": result.proration_reason,
        "base_salary_prorated": str(result.base_salary_prorated),
        "total_allowances": str(result.total_allowances),
        "total_earnings_add_ons": str(result.total_earnings_add_ons),
        "gross_salary": str(result.gross_salary),
        "deductions": {
            "fixed": {name: str(amount) for name, amount in deductions.fixed_items},
            "fixed_total": str(deductions.fixed_total),
            "loans": [_installment_dict(i) for i in deductions.loan_installments],
            "loan_total": str(deductions.loan_total),
            "advances": [_installment_dict(i) for i in deductions.advance_installments],
            "advance_total": str(deductions.advance_total),
        },
        "total_deductions": str(result.total_deductions),
        "net_salary": str(result.net_salary),
        "warnings": [w.value for w in result.warnings],
    }
