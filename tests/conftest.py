"""
Shared fixtures.

Database tests run on in-memory SQLite unless ``PAYROLL_TEST_DATABASE_URL``
points elsewhere (a PostgreSQL URL needs the ``postgres`` extra).

``configure_logging`` stops propagation, so pytest's ``caplog`` never sees
payroll log lines; use ``captured_logs`` instead.
"""

import json
import logging
import os
from datetime import date, datetime, timezone
from decimal import Decimal
from io import StringIO

import pytest

from payroll_engines.salary import CompensationProfile, EmploymentWindow, PayPeriod
from payroll_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from payroll_kernel.domain.clock import DeterministicClock
from payroll_kernel.logging_config import (
    NAMESPACE,
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)


@pytest.fixture(autouse=True, scope="session")
def quiet_json_logging():
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def empty_log_context():
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """Attach a JSON handler for the test; call the fixture to read parsed lines."""
    buffer = StringIO()
    handler = logging.StreamHandler(buffer)
    handler.setFormatter(StructuredFormatter())
    namespace = logging.getLogger(NAMESPACE)
    level = namespace.level
    namespace.setLevel(logging.DEBUG)
    namespace.addHandler(handler)
    yield lambda: [json.loads(line) for line in buffer.getvalue().splitlines() if line]
    namespace.removeHandler(handler)
    namespace.setLevel(level)


@pytest.fixture
def db_engine():
    engine = init_engine_from_url(
        os.environ.get("PAYROLL_TEST_DATABASE_URL", "sqlite+pysqlite:///:memory:")
    )
    create_tables()
    yield engine
    drop_tables()
    reset_engine()


@pytest.fixture
def session(db_engine):
    """A session left uncommitted; whatever the test flushed is rolled back."""
    sess = get_session()
    try:
        yield sess
    finally:
        sess.rollback()
        sess.close()


@pytest.fixture
def clock():
    """Month-end evening of April 2025."""
    return DeterministicClock(datetime(2025, 4, 30, 17, 0, tzinfo=timezone.utc))


@pytest.fixture
def april():
    return PayPeriod(2025, 4)


@pytest.fixture
def basic_profile():
    return CompensationProfile(employee_id="EMP-001", base_salary=Decimal("30000"))


@pytest.fixture
def allowance_profile():
    """50,000 base plus every allowance (10,250 in total)."""
    return CompensationProfile(
        employee_id="EMP-002",
        base_salary=Decimal("50000"),
        housing_allowance=Decimal("5000"),
        transport_allowance=Decimal("2000"),
        medical_allowance=Decimal("1500"),
        food_allowance=Decimal("1000"),
        other_allowances=Decimal("500"),
        general_allowance=Decimal("250"),
    )


@pytest.fixture
def long_tenure():
    return EmploymentWindow(hire_date=date(2020, 1, 1))
