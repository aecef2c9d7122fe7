"""
Declarative base for the salary ORM models.

* Primary keys are client-generated ``uuid4`` values (SQLAlchemy ``Uuid``,
  native on PostgreSQL and CHAR(32) on SQLite).
* ``Mapped[Decimal]`` columns are ``Numeric(38, 9)``; money is never a float.
* ``TrackedBase`` adds ``created_at`` / ``updated_at`` set by the database.

Kernel layer: must not import payroll_engines or payroll_modules.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID, uuid4

from sqlalchemy import Date, DateTime, Numeric, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

MONEY = Numeric(38, 9, asdecimal=True)


class Base(DeclarativeBase):
    type_annotation_map: ClassVar[dict] = {
        Decimal: MONEY,
        datetime: DateTime(timezone=True),
        date: Date,
        UUID: Uuid(as_uuid=True),
    }

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)


class TrackedBase(Base):
    """Adds audit timestamps; ``updated_at`` moves on every UPDATE."""

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )
