"""
currency.py — Currency descriptors and the registry that resolves them

================================================================================
DESIGN
================================================================================

A Currency is a plain immutable value: code, sub unit (minor units per major
unit) and number of fraction digits. It carries no behaviour of its own.

Resolving a bare code such as "EUR" goes through a CurrencyRegistry. There is
no hidden mutable global: DEFAULT_REGISTRY is built once at import time and is
read-only, and every lookup accepts an explicit registry so tests and callers
can supply their own deterministic table.

    from exactmoney import Currency, CurrencyRegistry

    eur = Currency.from_code("EUR")                 # default table
    lab = CurrencyRegistry([Currency("LAB", 10, 1)])
    lab_unit = Currency.from_code("LAB", registry=lab)

================================================================================
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Iterator, Optional

from .exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)


# ==============================================================================
# CURRENCY
# ==============================================================================

@dataclass(frozen=True, slots=True)
class Currency:
    """
    Immutable currency descriptor.

    Two currencies are equal iff code, sub_unit and fraction_digits are
    all equal.
    """
    code: str
    sub_unit: int
    fraction_digits: int

    def __post_init__(self) -> None:
        if not isinstance(self.code, str):
            raise InvalidArgumentError(
                f"$code must be a string, but provided value is: {self.code!r}"
            )
        for name in ("sub_unit", "fraction_digits"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidArgumentError(
                    f"${name} must be an int, but provided value is: {value!r}"
                )
        if self.sub_unit <= 0:
            raise InvalidArgumentError(
                f"$sub_unit must be positive, but provided value is: {self.sub_unit}"
            )
        if self.fraction_digits < 0:
            raise InvalidArgumentError(
                f"$fraction_digits must not be negative, but provided value is: {self.fraction_digits}"
            )

    @classmethod
    def from_code(
        cls,
        code: str,
        registry: Optional[CurrencyRegistry] = None,
    ) -> Currency:
        """
        Look up the canonical definition of `code`.

        Raises:
            InvalidArgumentError: if code is not a string or is not known
                to the registry (DEFAULT_REGISTRY when none is given).
        """
        if registry is None:
            registry = DEFAULT_REGISTRY
        return registry.resolve(code)

    def __str__(self) -> str:
        return self.code


# ==============================================================================
# REGISTRY
# ==============================================================================

class CurrencyRegistry:
    """
    Read-only table of currencies keyed by code.

    The table is frozen at construction. extend() returns a new registry
    and leaves the receiver untouched.
    """

    def __init__(self, currencies: Iterable[Currency] = ()):
        table: dict[str, Currency] = {}
        for currency in currencies:
            if not isinstance(currency, Currency):
                raise InvalidArgumentError(
                    f"Registry entries must be Currency instances, got {type(currency).__name__}"
                )
            existing = table.get(currency.code)
            if existing is not None and existing != currency:
                raise InvalidArgumentError(
                    f"Conflicting definitions for currency '{currency.code}': "
                    f"{existing!r} vs {currency!r}"
                )
            table[currency.code] = currency
        self._table = MappingProxyType(table)
        logger.debug("Built CurrencyRegistry with %d currencies", len(table))

    def resolve(self, code: str) -> Currency:
        """Return the Currency registered under `code` (case-insensitive)."""
        if not isinstance(code, str):
            raise InvalidArgumentError(
                f"$code must be a string, but provided value is: {code!r}"
            )
        normalized = code.strip().upper()
        try:
            return self._table[normalized]
        except KeyError:
            raise InvalidArgumentError(
                f"Unknown currency code '{code}'"
            ) from None

    def extend(self, *currencies: Currency) -> CurrencyRegistry:
        """Return a new registry holding these entries plus `currencies`."""
        return CurrencyRegistry([*self._table.values(), *currencies])

    def codes(self) -> list[str]:
        return sorted(self._table)

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and code.strip().upper() in self._table

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return f"CurrencyRegistry({self.codes()})"


# ==============================================================================
# ISO 4217 TABLE
# ==============================================================================

# (code, fraction digits); sub unit is 10 ** digits for every entry below.
_ISO_4217 = (
    # Two fraction digits
    ("AED", 2), ("ARS", 2), ("AUD", 2), ("BDT", 2), ("BGN", 2), ("BRL", 2),
    ("CAD", 2), ("CHF", 2), ("CNY", 2), ("COP", 2), ("CZK", 2), ("DKK", 2),
    ("EGP", 2), ("EUR", 2), ("GBP", 2), ("HKD", 2), ("HUF", 2), ("ILS", 2),
    ("INR", 2), ("KES", 2), ("MAD", 2), ("MXN", 2), ("MYR", 2), ("NGN", 2),
    ("NOK", 2), ("NZD", 2), ("PEN", 2), ("PHP", 2), ("PKR", 2), ("PLN", 2),
    ("QAR", 2), ("RON", 2), ("RUB", 2), ("SAR", 2), ("SEK", 2), ("SGD", 2),
    ("THB", 2), ("TRY", 2), ("TWD", 2), ("UAH", 2), ("USD", 2), ("ZAR", 2),
    # No minor unit
    ("CLP", 0), ("ISK", 0), ("JPY", 0), ("KRW", 0), ("PYG", 0), ("UGX", 0),
    ("VND", 0), ("XAF", 0), ("XOF", 0),
    # Three fraction digits
    ("BHD", 3), ("IQD", 3), ("JOD", 3), ("KWD", 3), ("LYD", 3), ("OMR", 3),
    ("TND", 3),
    # Not ISO, but common enough: 1 BTC = 100,000,000 satoshi
    ("BTC", 8),
)

DEFAULT_REGISTRY = CurrencyRegistry(
    Currency(code, 10 ** digits, digits) for code, digits in _ISO_4217
)
