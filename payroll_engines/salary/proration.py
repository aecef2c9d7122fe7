"""
payroll_engines.salary.proration -- Effective employment window within a month.

Responsibility:
    Decide which days of a pay period the employee was employed, and
    whether (and why) the base salary must be prorated.

Architecture position:
    Engines -- pure calculation layer, zero I/O, no clock access.

Invariants enforced:
    - effective_start_day is 1 unless the hire date falls after day 1 of
      the period; effective_end_day is the last day unless termination or
      contract end falls before it.
    - The reason text is one or both of REASON_HIRED and REASON_TERMINATED
      joined by ", "; the dates are carried by start_day and end_day.
    - Employment that does not overlap the period at all yields an empty
      span (end < start), which the calculator rejects.
"""

from __future__ import annotations

from dataclasses import dataclass

from payroll_engines.salary.types import EmploymentWindow, PayPeriod

REASON_HIRED = "hired mid-month"
REASON_TERMINATED = "terminated mid-month"


@dataclass(frozen=True)
class EffectiveWindow:
    """Days of the period covered by employment (1-indexed, inclusive)."""

    start_day: int
    end_day: int
    is_prorated: bool
    reason: str

    @property
    def span_days(self) -> int:
        """Calendar days employed; 0 for an empty window."""
        return max(0, self.end_day - self.start_day + 1)


def effective_window(window: EmploymentWindow, period: PayPeriod) -> EffectiveWindow:
    """
    Intersect the employment window with ``period``.

    Postconditions:
        - Hire on day 1 or earlier, termination on the last day or later:
          full period, not prorated.
        - Hire after the period end or termination before the period
          start: empty window (start_day > end_day).
    """
    total_days = period.total_days_in_month
    start_day, end_day = 1, total_days
    reasons: list[str] = []

    hire = window.hire_date
    if hire is not None:
        if hire > period.end_date:
            return EffectiveWindow(total_days + 1, total_days, True, "hired after period end")
        if hire > period.start_date:
            start_day = hire.day
            reasons.append(REASON_HIRED)

    end = window.end_date
    if end is not None:
        if end < period.start_date:
            return EffectiveWindow(1, 0, True, "terminated before period start")
        if end < period.end_date:
            end_day = end.day
            reasons.append(REASON_TERMINATED)

    return EffectiveWindow(
        start_day=start_day,
        end_day=end_day,
        is_prorated=bool(reasons),
        reason=", ".join(reasons),
    )
