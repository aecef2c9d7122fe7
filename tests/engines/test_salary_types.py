"""
Tests for salary engine input types.

Every input is validated once at construction; violations raise
InvalidInputError naming the offending field.
"""

from datetime import date
from decimal import Decimal

import pytest

from payroll_engines.salary import (
    AttendanceAdjustment,
    CompensationProfile,
    DeductionBreakdown,
    DeductionLineItems,
    EarningsLineItems,
    EmploymentWindow,
    ObligationInstallment,
    PayPeriod,
    compute_salary,
    to_decimal,
)
from payroll_kernel.exceptions import InvalidInputError


class TestToDecimal:

    def test_accepts_int_str_float(self):
        assert to_decimal("x", 5) == Decimal("5")
        assert to_decimal("x", "12.50") == Decimal("12.50")
        assert to_decimal("x", 0.1) == Decimal("0.1")

    @pytest.mark.parametrize("value", ["abc", None, True, "NaN", "Infinity"])
    def test_rejects_non_numbers(self, value):
        with pytest.raises(InvalidInputError) as exc_info:
            to_decimal("bonus", value)
        assert exc_info.value.field == "bonus"


class TestPayPeriod:

    @pytest.mark.parametrize(
        "year,month,days",
        [(2025, 1, 31), (2025, 2, 28), (2024, 2, 29), (2025, 4, 30), (2025, 12, 31)],
    )
    def test_total_days_in_month(self, year, month, days):
        assert PayPeriod(year, month).total_days_in_month == days

    def test_key_and_dates(self):
        period = PayPeriod(2025, 3)
        assert period.key == "2025-03"
        assert period.start_date == date(2025, 3, 1)
        assert period.end_date == date(2025, 3, 31)

    def test_parse(self):
        assert PayPeriod.parse("2025-03") == PayPeriod(2025, 3)
        assert PayPeriod.parse("2025-03-17") == PayPeriod(2025, 3)

    @pytest.mark.parametrize("value", ["2025", "2025/03", "abcd-ef", "2025-13"])
    def test_parse_rejects_invalid(self, value):
        with pytest.raises(InvalidInputError):
            PayPeriod.parse(value)

    def test_invalid_month(self):
        with pytest.raises(InvalidInputError) as exc_info:
            PayPeriod(2025, 0)
        assert exc_info.value.field == "period.month"


class TestCompensationProfile:

    def test_defaults_zero_allowances(self):
        profile = CompensationProfile(employee_id="E1", base_salary="1000")
        assert profile.base_salary == Decimal("1000")
        assert all(amount == 0 for _, amount in profile.allowance_items)
        assert profile.currency == "PKR"

    @pytest.mark.parametrize("base", ["0", "-1"])
    def test_base_salary_must_be_positive(self, base):
        with pytest.raises(InvalidInputError) as exc_info:
            CompensationProfile(employee_id="E1", base_salary=base)
        assert exc_info.value.field == "base_salary"

    def test_negative_allowance_rejected(self):
        with pytest.raises(InvalidInputError) as exc_info:
            CompensationProfile(employee_id="E1", base_salary="1000", food_allowance="-1")
        assert exc_info.value.field == "food_allowance"

    def test_unknown_currency_rejected(self):
        with pytest.raises(InvalidInputError) as exc_info:
            CompensationProfile(employee_id="E1", base_salary="1000", currency="ZZZ")
        assert exc_info.value.field == "currency"

    def test_currency_normalized(self):
        profile = CompensationProfile(employee_id="E1", base_salary="1000", currency="usd")
        assert profile.currency == "USD"

    @pytest.mark.parametrize(
        "currency, base",
        [("PKR", "30000.005"), ("JPY", "250000.5"), ("KWD", "1200.0005")],
    )
    def test_base_finer_than_minor_unit_rejected(self, currency, base):
        with pytest.raises(InvalidInputError) as exc_info:
            CompensationProfile(employee_id="E1", base_salary=base, currency=currency)
        assert exc_info.value.field == "base_salary"
        assert currency in exc_info.value.reason

    def test_allowance_finer_than_minor_unit_rejected(self):
        with pytest.raises(InvalidInputError) as exc_info:
            CompensationProfile(
                employee_id="E1", base_salary="1000", housing_allowance="10.001"
            )
        assert exc_info.value.field == "housing_allowance"

    @pytest.mark.parametrize(
        "currency, base",
        [("PKR", "30000.50"), ("PKR", "30000.500000000"), ("JPY", "250000"), ("KWD", "1200.125")],
    )
    def test_whole_minor_units_accepted(self, currency, base):
        profile = CompensationProfile(employee_id="E1", base_salary=base, currency=currency)
        assert profile.base_salary == Decimal(base)

    def test_full_month_pays_base_exactly(self):
        profile = CompensationProfile(employee_id="E1", base_salary="30000.05")
        result = compute_salary(profile=profile, period=PayPeriod(2025, 4))
        assert result.base_salary_prorated == Decimal("30000.05")


class TestAttendanceAdjustment:

    def test_unpaid_cannot_exceed_total(self):
        with pytest.raises(InvalidInputError) as exc_info:
            AttendanceAdjustment(leave_days_total="2", unpaid_leave_days="3")
        assert exc_info.value.field == "unpaid_leave_days"

    def test_paid_cannot_exceed_total(self):
        with pytest.raises(InvalidInputError) as exc_info:
            AttendanceAdjustment(leave_days_total="1", paid_leave_days="2")
        assert exc_info.value.field == "paid_leave_days"

    def test_negative_rejected(self):
        with pytest.raises(InvalidInputError) as exc_info:
            AttendanceAdjustment(leave_days_total="-1")
        assert exc_info.value.field == "leave_days_total"

    def test_fractional_days_allowed(self):
        attendance = AttendanceAdjustment(leave_days_total="1.5", unpaid_leave_days="0.5")
        assert attendance.leave_days_total == Decimal("1.5")


class TestEmploymentWindow:

    def test_end_date_is_earliest(self):
        window = EmploymentWindow(
            termination_date=date(2025, 4, 20), contract_end_date=date(2025, 4, 10)
        )
        assert window.end_date == date(2025, 4, 10)

    def test_no_end_date(self):
        assert EmploymentWindow().end_date is None

    def test_rejects_non_date(self):
        with pytest.raises(InvalidInputError) as exc_info:
            EmploymentWindow(hire_date="2025-04-01")
        assert exc_info.value.field == "hire_date"


class TestLineItems:

    def test_negative_overtime_rejected(self):
        with pytest.raises(InvalidInputError) as exc_info:
            EarningsLineItems(overtime_pay=-50)
        assert exc_info.value.field == "overtime_pay"

    def test_negative_deduction_rejected(self):
        with pytest.raises(InvalidInputError) as exc_info:
            DeductionLineItems(esi_deduction="-0.01")
        assert exc_info.value.field == "esi_deduction"

    def test_add_on_items_exclude_hours_and_allowances(self):
        earnings = EarningsLineItems(overtime_hours=10, additional_allowances=100, bonus=5)
        names = [name for name, _ in earnings.add_on_items]
        assert "overtime_hours" not in names
        assert "additional_allowances" not in names
        assert dict(earnings.add_on_items)["bonus"] == Decimal("5")

    def test_deduction_items_cover_all_fields(self):
        names = [name for name, _ in DeductionLineItems().items]
        assert names == [
            "tax_deduction",
            "income_tax",
            "insurance_deduction",
            "provident_fund",
            "professional_tax",
            "esi_deduction",
            "other_deductions",
        ]


class TestObligationInstallment:

    def test_amount_within_balance(self):
        item = ObligationInstallment(obligation_id=1, amount="500", remaining_balance="500")
        assert item.amount == Decimal("500")

    def test_amount_above_balance_rejected(self):
        with pytest.raises(InvalidInputError) as exc_info:
            ObligationInstallment(obligation_id=1, amount="600", remaining_balance="500")
        assert exc_info.value.field == "obligation.amount"

    def test_negative_amount_rejected(self):
        with pytest.raises(InvalidInputError):
            ObligationInstallment(obligation_id=1, amount="-1")


class TestDeductionBreakdown:

    def test_as_dict_includes_obligation_totals(self):
        breakdown = DeductionBreakdown(
            fixed_items=(("income_tax", Decimal("300")),),
            fixed_total=Decimal("300"),
            loan_installments=(),
            loan_total=Decimal("500"),
            advance_installments=(),
            advance_total=Decimal("200"),
        )
        assert breakdown.as_dict() == {
            "income_tax": Decimal("300"),
            "loan_deduction": Decimal("500"),
            "advance_deduction": Decimal("200"),
        }
