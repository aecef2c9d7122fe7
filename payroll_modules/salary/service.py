"""
Salary Module Service (``payroll_modules.salary.service``).

Responsibility
--------------
Wires the collaborators to the pure salary engine: fetch the compensation
profile, the employment window and the due loan/advance installments,
compute, and optionally record the result through the sink.  Also runs
payroll for many employees with per-employee isolation.

Architecture position
---------------------
**Modules layer** -- thin glue.  ``SalaryService`` is the public entry
point; computation is delegated to ``payroll_engines.salary`` and
persistence to an injected ``SalaryResultSink``.

Invariants enforced
-------------------
* Every collaborator lookup completes before the engine runs.  Any
  collaborator error propagates unchanged and aborts the computation;
  it is never treated as "no installments".
* No retries.
* In a payroll run, one employee's failure never affects another's, and
  a failed employee is reported as a failure, never as a zero result.

Failure modes
-------------
* ``NotFoundError`` and any other collaborator exception  -> propagated.
* ``InvalidInputError`` / ``ZeroWorkingDaysError``  -> propagated from the engine.
* ``NegativeNetPayError``  -> recording under the ``block`` policy.
* ``SinkNotConfiguredError``  -> recording without a sink.

Usage::

    service = SalaryService(directory, loans, advances, sink=sink)
    result = service.preview("EMP-001", PayPeriod(2025, 3))
    result, payment_id = service.process("EMP-001", PayPeriod(2025, 3))
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any
from uuid import uuid4

from payroll_config import NegativeNetPolicy, PayrollSettings
from payroll_engines.salary import (
    AttendanceAdjustment,
    DeductionLineItems,
    EarningsLineItems,
    PayPeriod,
    SalaryComputationResult,
    compute_salary,
    preview_salary,
    summarize_results,
)
from payroll_kernel.exceptions import (
    NegativeNetPayError,
    PayrollError,
    SinkNotConfiguredError,
)
from payroll_kernel.logging_config import LogContext, get_logger
from payroll_modules.salary.collaborators import (
    AdvanceLedger,
    EmployeeDirectory,
    LoanLedger,
    SalaryResultSink,
)
from payroll_modules.salary.models import (
    EmployeeFailure,
    PayrollRunResult,
    PayrollRunStatus,
    ProcessedSalary,
    SalaryRequest,
)

logger = get_logger("modules.salary.service")


class SalaryService:
    """
    Fetch -> compute -> (optionally) record.

    Contract
    --------
    * ``compute_for_employee`` and ``preview`` never write anything.
    * ``record`` and ``process`` write only through the injected sink.

    Non-goals
    ---------
    * Does NOT decide tax amounts; deductions are caller-supplied.
    * Does NOT clamp negative net pay; the policy only allows or blocks
      recording.
    """

    def __init__(
        self,
        directory: EmployeeDirectory,
        loan_ledger: LoanLedger,
        advance_ledger: AdvanceLedger,
        sink: SalaryResultSink | None = None,
        settings: PayrollSettings | None = None,
    ):
        self._directory = directory
        self._loans = loan_ledger
        self._advances = advance_ledger
        self._sink = sink
        self._settings = settings or PayrollSettings()

    @property
    def settings(self) -> PayrollSettings:
        return self._settings

    @property
    def directory(self) -> EmployeeDirectory:
        return self._directory

    # ------------------------------------------------------------------
    # Computation
    # ------------------------------------------------------------------

    def _gather(self, employee_id: str, period: PayPeriod) -> dict[str, Any]:
        profile = self._directory.get_compensation_profile(employee_id)
        window = self._directory.get_employment_window(employee_id)
        loans = self._loans.get_due_installments(employee_id, period)
        advances = self._advances.get_due_installments(employee_id, period)
        logger.debug(
            "salary_inputs_gathered",
            extra={
                "employee_id": employee_id,
                "period_key": period.key,
                "loan_count": len(loans),
                "advance_count": len(advances),
            },
        )
        return {
            "profile": profile,
            "period": period,
            "employment_window": window,
            "loan_obligations": loans,
            "advance_obligations": advances,
            "rounding": self._settings.rounding,
        }

    def compute_for_employee(
        self,
        employee_id: str,
        period: PayPeriod,
        attendance: AttendanceAdjustment | None = None,
        earnings: EarningsLineItems | None = None,
        deductions: DeductionLineItems | None = None,
    ) -> SalaryComputationResult:
        """Compute one employee's salary from live collaborator data."""
        employee_id = str(employee_id)
        with LogContext.bind(employee_id=employee_id, period_key=period.key):
            inputs = self._gather(employee_id, period)
            return compute_salary(
                attendance=attendance,
                earnings=earnings,
                deductions=deductions,
                **inputs,
            )

    def preview(
        self,
        employee_id: str,
        period: PayPeriod,
        attendance: AttendanceAdjustment | None = None,
        earnings: EarningsLineItems | None = None,
        deductions: DeductionLineItems | None = None,
    ) -> SalaryComputationResult:
        """Same as ``compute_for_employee``; never persists."""
        employee_id = str(employee_id)
        with LogContext.bind(employee_id=employee_id, period_key=period.key):
            inputs = self._gather(employee_id, period)
            return preview_salary(
                attendance=attendance,
                earnings=earnings,
                deductions=deductions,
                **inputs,
            )

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def record(self, result: SalaryComputationResult) -> Any:
        """Apply the negative-net policy and hand ``result`` to the sink."""
        if self._sink is None:
            raise SinkNotConfiguredError()

        if (
            result.has_negative_net_pay
            and self._settings.negative_net_policy is NegativeNetPolicy.BLOCK
        ):
            logger.warning(
                "salary_recording_blocked",
                extra={
                    "employee_id": result.employee_id,
                    "period_key": result.period.key,
                    "net_salary": result.net_salary,
                },
            )
            raise NegativeNetPayError(
                result.employee_id, result.period.key, result.net_salary
            )

        payment_id = self._sink.record_salary_payment(result)
        logger.info(
            "salary_recorded",
            extra={
                "employee_id": result.employee_id,
                "period_key": result.period.key,
                "payment_id": str(payment_id),
                "net_salary": result.net_salary,
            },
        )
        return payment_id

    def process(
        self,
        employee_id: str,
        period: PayPeriod,
        attendance: AttendanceAdjustment | None = None,
        earnings: EarningsLineItems | None = None,
        deductions: DeductionLineItems | None = None,
    ) -> tuple[SalaryComputationResult, Any]:
        """Compute then record; returns ``(result, payment_id)``."""
        result = self.compute_for_employee(
            employee_id, period, attendance, earnings, deductions
        )
        return result, self.record(result)

    # ------------------------------------------------------------------
    # Batch
    # ------------------------------------------------------------------

    def run_payroll(
        self,
        period: PayPeriod,
        requests: Iterable[SalaryRequest | str],
        commit: bool = True,
    ) -> PayrollRunResult:
        """
        Process many employees for ``period``.

        Each employee is isolated: a ``PayrollError`` or any other
        exception is captured as an ``EmployeeFailure`` with its code and
        message, and the run continues with the next employee.
        ``commit=False`` computes without recording.
        """
        if commit and self._sink is None:
            raise SinkNotConfiguredError()

        run_id = uuid4()
        processed: list[ProcessedSalary] = []
        failures: list[EmployeeFailure] = []
        requests = [
            r if isinstance(r, SalaryRequest) else SalaryRequest(employee_id=str(r))
            for r in requests
        ]

        with LogContext.bind(run_id=str(run_id), period_key=period.key):
            logger.info(
                "payroll_run_started",
                extra={"employee_count": len(requests), "commit": commit},
            )

            for request in requests:
                try:
                    result = self.compute_for_employee(
                        request.employee_id,
                        period,
                        request.attendance,
                        request.earnings,
                        request.deductions,
                    )
                    payment_id = self.record(result) if commit else None
                    processed.append(ProcessedSalary(result, payment_id))
                except PayrollError as exc:
                    failures.append(
                        EmployeeFailure(request.employee_id, exc.code, str(exc))
                    )
                    logger.warning(
                        "payroll_employee_failed",
                        extra={
                            "employee_id": request.employee_id,
                            "error_code": exc.code,
                            "error_message": str(exc),
                        },
                    )
                except Exception as exc:
                    failures.append(
                        EmployeeFailure(
                            request.employee_id, "UNHANDLED_EXCEPTION", str(exc)
                        )
                    )
                    logger.exception(
                        "payroll_employee_failed",
                        extra={
                            "employee_id": request.employee_id,
                            "error_code": "UNHANDLED_EXCEPTION",
                        },
                    )

            results = [p.result for p in processed]
            summary = summarize_results(results)

            if not failures:
                status = PayrollRunStatus.COMPLETED
            elif not processed:
                status = PayrollRunStatus.FAILED
            else:
                status = PayrollRunStatus.PARTIALLY_COMPLETED

            logger.info(
                "payroll_run_completed",
                extra={
                    "status": status.value,
                    "succeeded": len(processed),
                    "failed": len(failures),
                    "total_net": summary.total_net,
                },
            )

        return PayrollRunResult(
            run_id=run_id,
            period=period,
            committed=commit,
            processed=tuple(processed),
            failures=tuple(failures),
            summary=summary,
            status=status,
        )
