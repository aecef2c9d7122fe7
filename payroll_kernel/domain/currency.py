"""
Currency registry -- which ISO 4217 codes payroll can pay in, and the
minor unit every salary amount in that code is rounded to.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar


@dataclass(frozen=True)
class CurrencyInfo:
    """One payable currency."""

    code: str
    minor_units: int
    name: str

    @property
    def quantum(self) -> Decimal:
        """Smallest payable amount: ``0.01`` for PKR, ``1`` for JPY."""
        return Decimal(1).scaleb(-self.minor_units)


# Grouped by minor units.  Codes outside this table can be added at
# startup with CurrencyRegistry.register().
_PAYABLE: dict[int, dict[str, str]] = {
    2: {
        "PKR": "Pakistani Rupee",
        "INR": "Indian Rupee",
        "BDT": "Bangladeshi Taka",
        "LKR": "Sri Lankan Rupee",
        "NPR": "Nepalese Rupee",
        "AED": "UAE Dirham",
        "SAR": "Saudi Riyal",
        "QAR": "Qatari Riyal",
        "USD": "US Dollar",
        "EUR": "Euro",
        "GBP": "Pound Sterling",
        "CAD": "Canadian Dollar",
        "AUD": "Australian Dollar",
        "CHF": "Swiss Franc",
        "SGD": "Singapore Dollar",
        "MYR": "Malaysian Ringgit",
        "PHP": "Philippine Peso",
        "NGN": "Nigerian Naira",
        "KES": "Kenyan Shilling",
        "ZAR": "South African Rand",
    },
    0: {
        "JPY": "Japanese Yen",
        "KRW": "South Korean Won",
        "VND": "Vietnamese Dong",
        "UGX": "Ugandan Shilling",
        "XAF": "Central African CFA Franc",
        "XOF": "West African CFA Franc",
    },
    3: {
        "BHD": "Bahraini Dinar",
        "KWD": "Kuwaiti Dinar",
        "OMR": "Omani Rial",
        "JOD": "Jordanian Dinar",
        "TND": "Tunisian Dinar",
    },
}


def _build_table() -> dict[str, CurrencyInfo]:
    return {
        code: CurrencyInfo(code, units, name)
        for units, names in _PAYABLE.items()
        for code, name in names.items()
    }


class CurrencyRegistry:
    """
    Lookup of payable currencies.

    Codes are matched exactly; callers normalize (``Currency`` does) before
    asking.
    """

    _table: ClassVar[dict[str, CurrencyInfo]] = _build_table()

    @classmethod
    def is_valid(cls, code: str) -> bool:
        return code in cls._table

    @classmethod
    def get(cls, code: str) -> CurrencyInfo | None:
        return cls._table.get(code)

    @classmethod
    def minor_units(cls, code: str) -> int:
        info = cls._table.get(code)
        if info is None:
            raise KeyError(f"Currency not registered: {code!r}")
        return info.minor_units

    @classmethod
    def register(cls, code: str, minor_units: int, name: str) -> CurrencyInfo:
        normalized = code.upper().strip()
        if len(normalized) != 3 or not normalized.isalpha():
            raise ValueError(f"Currency code must be three letters: {code!r}")
        if minor_units < 0:
            raise ValueError(f"minor_units must be >= 0, got {minor_units}")
        info = CurrencyInfo(normalized, minor_units, name)
        cls._table[normalized] = info
        return info

    @classmethod
    def unregister(cls, code: str) -> None:
        cls._table.pop(code.upper().strip(), None)

    @classmethod
    def all_codes(cls) -> frozenset[str]:
        return frozenset(cls._table)
