"""
Engine and session management for the salary ledgers.

One process-wide engine and session factory, created by
``init_engine_from_url`` and torn down by ``reset_engine``.  In-memory
SQLite gets a ``StaticPool`` so every session sees the same database;
other backends get a regular connection pool.

Ledgers never commit.  Callers wrap a unit of work in ``session_scope()``
(commit on success, rollback on error).
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from payroll_kernel.logging_config import get_logger

logger = get_logger("db.engine")

_engine: Engine | None = None
_SessionFactory: sessionmaker[Session] | None = None

_NOT_INITIALIZED = "Database not initialized. Call init_engine_from_url() first."


def _engine_kwargs(database_url: str, pool_size: int, max_overflow: int) -> dict:
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return {"pool_size": pool_size, "max_overflow": max_overflow, "pool_pre_ping": True}
    kwargs: dict = {"connect_args": {"check_same_thread": False}}
    if url.database in (None, "", ":memory:"):
        kwargs["poolclass"] = StaticPool
    return kwargs


def init_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_size: int = 5,
    max_overflow: int = 10,
) -> Engine:
    """
    (Re)create the engine for ``database_url``.

    Any previous engine is disposed first.  ``pool_size`` and
    ``max_overflow`` only apply to server databases.
    """
    global _engine, _SessionFactory

    if _engine is not None:
        _engine.dispose()

    _engine = create_engine(
        database_url, echo=echo, **_engine_kwargs(database_url, pool_size, max_overflow)
    )
    _SessionFactory = sessionmaker(bind=_engine, expire_on_commit=False)
    logger.info(
        "engine_initialized",
        extra={"dialect": _engine.dialect.name, "echo": echo},
    )
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    if _SessionFactory is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _SessionFactory


def get_session() -> Session:
    return get_session_factory()()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """
    One unit of work::

        with session_scope() as session:
            SalaryService(...).run_payroll(period, employee_ids)
    """
    session = get_session()
    try:
        yield session
        session.commit()
        logger.debug("session_committed")
    except Exception:
        session.rollback()
        logger.warning("session_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables() -> None:
    """Create the salary tables (imports the ORM so they are registered)."""
    from payroll_kernel.db.base import Base
    import payroll_modules.salary.orm  # noqa: F401

    Base.metadata.create_all(get_engine())
    logger.info("tables_created", extra={"tables": sorted(Base.metadata.tables)})


def drop_tables() -> None:
    """Drop every salary table.  Tests only."""
    from payroll_kernel.db.base import Base

    Base.metadata.drop_all(get_engine())


def reset_engine() -> None:
    global _engine, _SessionFactory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionFactory = None
