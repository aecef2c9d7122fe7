"""
Clock -- where persistence code gets "now" and "today".

The salary engine never reads the time; a result depends on its inputs
alone.  Only the result sink needs a date (the payment date stamped on a
recorded salary and its ledger mirror), and it receives a ``Clock`` by
constructor injection so tests can pin that date.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone


class Clock(ABC):
    """Injectable time source.  ``now()`` is always timezone-aware."""

    @abstractmethod
    def now(self) -> datetime:
        ...

    def today(self) -> date:
        """Calendar date of ``now()`` used as the payment date."""
        return self.now().date()


class SystemClock(Clock):
    """Wall-clock time in ``tz`` (UTC unless told otherwise)."""

    def __init__(self, tz: timezone = timezone.utc):
        self._tz = tz

    def now(self) -> datetime:
        return datetime.now(self._tz)


class DeterministicClock(Clock):
    """
    Pinned clock for tests and replays.

    Returns the same instant until moved with ``advance`` or ``set_time``.
    A naive ``fixed_time`` is taken to be UTC.
    """

    DEFAULT_TIME = datetime(2025, 1, 31, 17, 0, 0, tzinfo=timezone.utc)

    def __init__(self, fixed_time: datetime | None = None):
        self._current = self._aware(fixed_time or self.DEFAULT_TIME)

    @staticmethod
    def _aware(value: datetime) -> datetime:
        return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._current

    def set_time(self, time: datetime) -> None:
        self._current = self._aware(time)

    def advance(self, seconds: int = 0, days: int = 0) -> None:
        """Move forward, e.g. ``advance(days=30)`` to reach the next payday."""
        self._current += timedelta(days=days, seconds=seconds)
