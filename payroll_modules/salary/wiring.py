"""
Wiring for the SQL-backed salary service.

``init_database`` opens the database named by the settings and creates
the salary tables; ``build_sql_salary_service`` assembles a
``SalaryService`` whose collaborators all share the caller's session.  New
employees default to ``settings.default_currency``::

    init_database()
    with session_scope() as session:
        service = build_sql_salary_service(session)
        run = service.run_payroll(PayPeriod(2025, 4), employee_ids)
"""

from __future__ import annotations

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from payroll_config import PayrollSettings, get_active_settings
from payroll_kernel.db.engine import create_tables, init_engine_from_url
from payroll_kernel.domain.clock import Clock
from payroll_modules.salary.ledgers import (
    SqlAdvanceLedger,
    SqlEmployeeDirectory,
    SqlLoanLedger,
    SqlSalaryResultSink,
)
from payroll_modules.salary.service import SalaryService


def init_database(settings: PayrollSettings | None = None) -> Engine:
    settings = settings or get_active_settings()
    engine = init_engine_from_url(settings.database_url, echo=settings.echo_sql)
    create_tables()
    return engine


def build_sql_salary_service(
    session: Session,
    settings: PayrollSettings | None = None,
    clock: Clock | None = None,
) -> SalaryService:
    settings = settings or get_active_settings()
    sink = SqlSalaryResultSink(
        session,
        clock=clock,
        transaction_category=settings.salary_transaction_category,
    )
    return SalaryService(
        SqlEmployeeDirectory(session, default_currency=settings.default_currency),
        SqlLoanLedger(session),
        SqlAdvanceLedger(session),
        sink=sink,
        settings=settings,
    )
