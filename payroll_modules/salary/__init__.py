"""
Salary Module (``payroll_modules.salary``).

Responsibility
--------------
Glue around the pure salary engine: collaborator contracts, the
``SalaryService`` facade (compute, preview, record, batch run), the
SQLAlchemy reference collaborators and in-memory doubles.

Architecture position
---------------------
**Modules layer** -- depends on ``payroll_engines``, ``payroll_kernel``
and ``payroll_config``; nothing depends on it except scripts and tests.
"""

from payroll_modules.salary.collaborators import (
    AdvanceLedger,
    EmployeeDirectory,
    LoanLedger,
    ObligationLedger,
    SalaryResultSink,
)
from payroll_modules.salary.ledgers import (
    SqlAdvanceLedger,
    SqlEmployeeDirectory,
    SqlLoanLedger,
    SqlSalaryResultSink,
)
from payroll_modules.salary.memory import (
    InMemoryEmployeeDirectory,
    InMemoryObligationLedger,
    InMemoryResultSink,
)
from payroll_modules.salary.models import (
    EmployeeFailure,
    PayrollRunResult,
    PayrollRunStatus,
    ProcessedSalary,
    SalaryRequest,
)
from payroll_modules.salary.service import SalaryService
from payroll_modules.salary.wiring import build_sql_salary_service, init_database

__all__ = [
    "AdvanceLedger",
    "EmployeeDirectory",
    "EmployeeFailure",
    "InMemoryEmployeeDirectory",
    "InMemoryObligationLedger",
    "InMemoryResultSink",
    "LoanLedger",
    "ObligationLedger",
    "PayrollRunResult",
    "PayrollRunStatus",
    "ProcessedSalary",
    "SalaryRequest",
    "SalaryResultSink",
    "SalaryService",
    "SqlAdvanceLedger",
    "SqlEmployeeDirectory",
    "SqlLoanLedger",
    "SqlSalaryResultSink",
    "build_sql_salary_service",
    "init_database",
]
