"""
Currency and Money value objects used by the salary engine.

Every sum inside a salary computation is a ``Money`` so an amount never
travels without its currency and floats never reach the arithmetic.
Money keeps full Decimal precision until ``round()`` is called; the
calculator rounds each reported figure exactly once.

Raises ``ValueError`` for bad amounts or unknown codes and
``CurrencyMismatchError`` when two currencies meet in one operation.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from payroll_kernel.domain.currency import CurrencyRegistry
from payroll_kernel.exceptions import CurrencyMismatchError

Scalar = Union[Decimal, int, str]


def _scalar(value: Scalar) -> Decimal | None:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, str)) and not isinstance(value, bool):
        return Decimal(str(value))
    return None


@dataclass(frozen=True, slots=True)
class Currency:
    """A registered ISO 4217 code, upper-cased on construction."""

    code: str

    def __post_init__(self) -> None:
        normalized = (self.code or "").upper().strip()
        if not CurrencyRegistry.is_valid(normalized):
            raise ValueError(f"Invalid ISO 4217 currency code: {self.code}")
        object.__setattr__(self, "code", normalized)

    @property
    def decimal_places(self) -> int:
        return CurrencyRegistry.minor_units(self.code)

    @property
    def quantum(self) -> Decimal:
        return CurrencyRegistry.get(self.code).quantum

    def __str__(self) -> str:
        return self.code


@dataclass(frozen=True, slots=True)
class Money:
    """An exact amount in one currency.  Never auto-rounds."""

    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            try:
                object.__setattr__(self, "amount", Decimal(str(self.amount)))
            except (InvalidOperation, ValueError) as exc:
                raise ValueError(f"Invalid amount: {self.amount}") from exc
        if isinstance(self.currency, str):
            object.__setattr__(self, "currency", Currency(self.currency))
        elif not isinstance(self.currency, Currency):
            raise TypeError(f"currency must be Currency or str, got {type(self.currency)}")

    @classmethod
    def of(cls, amount: Scalar, currency: str | Currency) -> Money:
        return cls(amount=amount, currency=currency)

    @classmethod
    def zero(cls, currency: str | Currency) -> Money:
        return cls(amount=Decimal("0"), currency=currency)

    @classmethod
    def total(cls, amounts: Iterable[Decimal], currency: str | Currency) -> Money:
        """Sum bare Decimals that are all known to be in ``currency``."""
        total = cls.zero(currency)
        return cls(amount=sum(amounts, total.amount), currency=total.currency)

    @property
    def is_zero(self) -> bool:
        return self.amount.is_zero()

    @property
    def is_negative(self) -> bool:
        return self.amount < 0

    def round(self, rounding: str = ROUND_HALF_UP) -> Money:
        """Quantize to the currency's minor unit."""
        return Money(self.amount.quantize(self.currency.quantum, rounding=rounding), self.currency)

    def _other_amount(self, other: object) -> Decimal | None:
        """``other.amount`` when ``other`` is Money in this currency, else None."""
        if not isinstance(other, Money):
            return None
        if other.currency != self.currency:
            raise CurrencyMismatchError(self.currency.code, other.currency.code)
        return other.amount

    def __add__(self, other: Money) -> Money:
        amount = self._other_amount(other)
        return NotImplemented if amount is None else Money(self.amount + amount, self.currency)

    def __sub__(self, other: Money) -> Money:
        amount = self._other_amount(other)
        return NotImplemented if amount is None else Money(self.amount - amount, self.currency)

    def __neg__(self) -> Money:
        return Money(-self.amount, self.currency)

    def __mul__(self, factor: Scalar) -> Money:
        factor = _scalar(factor)
        if factor is None:
            return NotImplemented
        return Money(self.amount * factor, self.currency)

    __rmul__ = __mul__

    def __truediv__(self, divisor: Scalar) -> Money:
        divisor = _scalar(divisor)
        if divisor is None:
            return NotImplemented
        return Money(self.amount / divisor, self.currency)

    def __lt__(self, other: Money) -> bool:
        amount = self._other_amount(other)
        return NotImplemented if amount is None else self.amount < amount

    def __gt__(self, other: Money) -> bool:
        amount = self._other_amount(other)
        return NotImplemented if amount is None else self.amount > amount

    def __str__(self) -> str:
        return f"{self.amount} {self.currency.code}"
