"""
core.py — Money domain primitive

================================================================================
DESIGN PRINCIPLES
================================================================================

1. INTERNAL REPRESENTATION
   Integer amount in minor units (cents for EUR, fils for KWD, ...).
   Never floating point internally. Intermediate results (ratios, factors,
   percentages) are computed on exact rationals and rounded once.

2. TYPE SAFETY
   Operations between different currencies raise CurrencyMismatchError.
   Nothing is converted implicitly.

3. IMMUTABILITY
   Frozen dataclass. Every operation returns a new instance.
   No side effects, safe to share between threads.

4. BOUNDED AMOUNTS
   Amounts live in the signed 64-bit range [MIN_AMOUNT, MAX_AMOUNT].
   A result outside it raises MoneyOverflowError: no wrapping, no saturation.

5. EXPLICIT ROUNDING
   Whenever a non-integral value must become an amount, the caller picks
   one of the four RoundingMode members. Anything else is rejected.

6. VERIFIABLE INVARIANTS
   allocate_to_targets(n) and allocate_by_ratios(r) guarantee
   sum(parts) == original, for negative amounts too.
   extract_percentage() guarantees percentage + subtotal == original.

================================================================================
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Sequence
from dataclasses import InitVar, dataclass
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from typing import Any, Callable, ClassVar, NamedTuple, Optional, Union

from .currency import Currency, CurrencyRegistry
from .exceptions import (
    CurrencyMismatchError,
    InvalidArgumentError,
    MoneyOverflowError,
)

logger = logging.getLogger(__name__)

Number = Union[int, float, Decimal, Fraction]


# ==============================================================================
# ROUNDING STRATEGIES
# ==============================================================================

class RoundingMode(Enum):
    """
    Tie-breaking strategies for rounding to an integer.

    They only differ on exact halves:
    - HALF_UP: away from zero (2.5 -> 3, -2.5 -> -3), commercial rounding
    - HALF_DOWN: towards zero (2.5 -> 2, -2.5 -> -2)
    - HALF_EVEN: banker's rounding (2.5 -> 2, 3.5 -> 4)
    - HALF_ODD: to the odd neighbour (2.5 -> 3, 3.5 -> 3)
    """
    HALF_UP = "half_up"
    HALF_DOWN = "half_down"
    HALF_EVEN = "half_even"
    HALF_ODD = "half_odd"


DEFAULT_ROUNDING_MODE = RoundingMode.HALF_UP

_HALF = Fraction(1, 2)


def _check_rounding_mode(mode: Any) -> RoundingMode:
    if not isinstance(mode, RoundingMode):
        raise InvalidArgumentError(
            f"Unsupported rounding mode: {mode!r}. "
            f"Use one of {[m.name for m in RoundingMode]}"
        )
    return mode


def _apply_rounding(value: Fraction, mode: RoundingMode) -> int:
    """Round an exact rational to the nearest integer, ties broken by mode."""
    floor = math.floor(value)
    diff = value - floor
    if diff < _HALF:
        return floor
    if diff > _HALF:
        return floor + 1

    def _half_up(f: int) -> int:
        return f + 1 if value > 0 else f

    def _half_down(f: int) -> int:
        return f if value > 0 else f + 1

    def _half_even(f: int) -> int:
        return f if f % 2 == 0 else f + 1

    def _half_odd(f: int) -> int:
        return f if f % 2 == 1 else f + 1

    tie_breakers: dict[RoundingMode, Callable[[int], int]] = {
        RoundingMode.HALF_UP: _half_up,
        RoundingMode.HALF_DOWN: _half_down,
        RoundingMode.HALF_EVEN: _half_even,
        RoundingMode.HALF_ODD: _half_odd,
    }
    return tie_breakers[_check_rounding_mode(mode)](floor)


def _to_fraction(value: Any, name: str) -> Fraction:
    """
    Exact rational for a numeric argument.

    Floats are taken at their shortest repr ("0.1" rather than the binary
    expansion 0.1000000000000000055...), which is the value the caller wrote.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal, Fraction)):
        raise InvalidArgumentError(
            f"${name} must be a number, but provided value is: {value!r}"
        )
    if isinstance(value, float):
        value = Decimal(repr(value))
    if isinstance(value, Decimal) and not value.is_finite():
        raise InvalidArgumentError(
            f"${name} must be finite, but provided value is: {value!r}"
        )
    return Fraction(value)


def _to_finite_operand(value: Any, name: str) -> Fraction:
    """
    Exact rational for a factor or percentage.

    Infinities and NaN have no integer value at all, so they overflow
    instead of being reported as malformed input.
    """
    if isinstance(value, (float, Decimal)) and not Decimal(value).is_finite():
        raise MoneyOverflowError(value, Money.MIN_AMOUNT, Money.MAX_AMOUNT)
    return _to_fraction(value, name)


def _handle_currency_argument(
    currency: Any,
    registry: Optional[CurrencyRegistry] = None,
) -> Currency:
    if isinstance(currency, Currency):
        return currency
    if isinstance(currency, str):
        return Currency.from_code(currency, registry)
    raise InvalidArgumentError(
        f"$currency must be a Currency or a currency code string, "
        f"but provided value is: {currency!r}"
    )


# Optional sign, then digits with an optional fractional part: "12", "-0.5", ".5", "5."
_DECIMAL_NUMERAL = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)")


# ==============================================================================
# MONEY CLASS
# ==============================================================================

@dataclass(frozen=True, slots=True, eq=False, repr=False)
class Money:
    """
    Domain primitive for monetary amounts.

    INVARIANTS:
    1. amount is always an int within [MIN_AMOUNT, MAX_AMOUNT]
    2. currency is always a Currency
    3. binary operations between different currencies raise
       CurrencyMismatchError (equality included)
    4. allocations preserve the total exactly

    USAGE:
        price = Money.from_decimal_string("121.00", "EUR")
        split = price.extract_percentage(21)
        # split.percentage + split.subtotal == price

    SERIALIZATION:
        to_dict() / from_dict(), format {"amount": int, "currency": str}.
        The fraction digits are not part of it: the reader resolves the
        code against the same registry.
    """
    amount: int
    currency: Currency
    registry: InitVar[Optional[CurrencyRegistry]] = None

    MIN_AMOUNT: ClassVar[int] = -(2 ** 63)
    MAX_AMOUNT: ClassVar[int] = 2 ** 63 - 1

    def __post_init__(self, registry: Optional[CurrencyRegistry]) -> None:
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise InvalidArgumentError(
                f"$amount must be an int (minor units), but provided value is: {self.amount!r}. "
                f"Use Money.from_decimal_string() for decimal input."
            )
        object.__setattr__(
            self, "currency", _handle_currency_argument(self.currency, registry)
        )
        self._assert_inside_bounds(self.amount)

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def from_decimal_string(
        cls,
        value: str,
        currency: Union[Currency, str],
        registry: Optional[CurrencyRegistry] = None,
    ) -> Money:
        """
        Build a Money from a decimal numeral such as "12.34".

        Rounding happens in two stages, both half-up on exact rationals:
        1. the numeral is rounded to the currency's fraction digits
        2. the result times the sub unit is rounded to an integer

        Excess precision is rounded away, never truncated:
            from_decimal_string("12.345", "EUR").amount == 1235

        Raises:
            InvalidArgumentError: if value is not a decimal numeral or the
                currency cannot be resolved.
            MoneyOverflowError: if the amount does not fit.
        """
        currency = _handle_currency_argument(currency, registry)
        if not isinstance(value, str) or not _DECIMAL_NUMERAL.fullmatch(value.strip()):
            raise InvalidArgumentError(
                f"$value must be a decimal numeral like '12.34', but provided value is: {value!r}"
            )

        scale = 10 ** currency.fraction_digits
        exact = Fraction(Decimal(value.strip()))
        major = Fraction(_apply_rounding(exact * scale, RoundingMode.HALF_UP), scale)
        minor = _apply_rounding(major * currency.sub_unit, RoundingMode.HALF_UP)
        return cls(minor, currency)

    @classmethod
    def zero(
        cls,
        currency: Union[Currency, str],
        registry: Optional[CurrencyRegistry] = None,
    ) -> Money:
        """Zero in a given currency. Handy as the start value for sum()."""
        return cls(0, currency, registry)

    # -------------------------------------------------------------------------
    # Arithmetic
    # -------------------------------------------------------------------------

    def add(self, other: Money) -> Money:
        self._assert_same_currency(other)
        return self._new_money(self.amount + other.amount)

    def subtract(self, other: Money) -> Money:
        self._assert_same_currency(other)
        return self._new_money(self.amount - other.amount)

    def negate(self) -> Money:
        """
        Negated amount.

        MIN_AMOUNT has no positive counterpart in the range, so negating it
        raises MoneyOverflowError.
        """
        return self._new_money(-self.amount)

    def multiply(
        self,
        factor: Number,
        rounding_mode: RoundingMode = DEFAULT_ROUNDING_MODE,
    ) -> Money:
        """
        Multiply by a factor, rounding the exact product to an integer.

        Example: 21% of an amount is amount.multiply(0.21).

        Raises:
            InvalidArgumentError: unsupported rounding mode or non-numeric factor
            MoneyOverflowError: non-finite factor, or the rounded product does not fit
        """
        _check_rounding_mode(rounding_mode)
        product = _to_finite_operand(factor, "factor") * self.amount
        return self._new_money(_apply_rounding(product, rounding_mode))

    def extract_percentage(
        self,
        percentage: Number,
        rounding_mode: RoundingMode = DEFAULT_ROUNDING_MODE,
    ) -> PercentageSplit:
        """
        Split out a percentage that is already included in this amount.

        Use this for "gross price includes 21% VAT" style questions. To
        compute a percentage of an amount use multiply() instead.

        Formula: percentage = round(amount / (100 + p) * p)
                 subtotal   = amount - percentage

        INVARIANT: percentage + subtotal == self
        """
        _check_rounding_mode(rounding_mode)
        rate = _to_finite_operand(percentage, "percentage")
        if rate == -100:
            raise InvalidArgumentError("$percentage cannot be -100 (division by zero)")

        exact = Fraction(self.amount) / (100 + rate) * rate
        part = self._new_money(_apply_rounding(exact, rounding_mode))
        return PercentageSplit(percentage=part, subtotal=self.subtract(part))

    # -------------------------------------------------------------------------
    # Allocation
    # -------------------------------------------------------------------------

    def allocate_to_targets(self, n: int) -> list[Money]:
        """
        Split the amount evenly across n targets with an EXACT sum.

        Algorithm: truncating division. The remainder is handed out one unit
        at a time to the first targets, so parts differ by at most one unit:

            Money(101, "EUR").allocate_to_targets(3)   -> [34, 34, 33]
            Money(-101, "EUR").allocate_to_targets(3)  -> [-34, -34, -33]

        Raises:
            InvalidArgumentError: if n is not an int >= 1
        """
        if isinstance(n, bool) or not isinstance(n, int) or n <= 0:
            raise InvalidArgumentError(
                f"$n must be a positive int, but provided value is: {n!r}"
            )

        quotient = abs(self.amount) // n
        low_amount = quotient if self.amount >= 0 else -quotient
        remainder = self.amount - low_amount * n
        step = 1 if remainder > 0 else -1

        low = self._new_money(low_amount)
        high = self._new_money(low_amount + step) if remainder else low
        logger.debug(
            "Allocating %d to %d targets: low=%d, remainder=%d",
            self.amount, n, low_amount, remainder,
        )
        return [high] * abs(remainder) + [low] * (n - abs(remainder))

    def allocate_by_ratios(self, ratios: Sequence[Number]) -> list[Money]:
        """
        Split the amount proportionally to `ratios` with an EXACT sum.

        Each share is amount * ratio / total truncated towards zero. The
        units lost to truncation go one each to the first shares, in list
        order (not to the largest fractional parts).

            Money(5, "EUR").allocate_by_ratios([3, 7])  -> [2, 3]

        Raises:
            InvalidArgumentError: empty list, negative or non-numeric ratio,
                or ratios summing to zero
        """
        if isinstance(ratios, (str, bytes)) or not isinstance(ratios, Sequence):
            raise InvalidArgumentError(
                f"$ratios must be a sequence of numbers, but provided value is: {ratios!r}"
            )
        if not ratios:
            raise InvalidArgumentError("$ratios cannot be empty")

        weights = [_to_fraction(r, "ratio") for r in ratios]
        if any(w < 0 for w in weights):
            raise InvalidArgumentError(f"$ratios cannot contain negative values: {list(ratios)}")
        total = sum(weights)
        if total == 0:
            raise InvalidArgumentError("$ratios must have a positive sum")

        shares = [self._cast_to_int(self.amount * w / total) for w in weights]
        remainder = self.amount - sum(shares)
        step = 1 if remainder > 0 else -1
        for i in range(abs(remainder)):
            shares[i] += step

        logger.debug(
            "Allocating %d by %d ratios: remainder=%d",
            self.amount, len(weights), remainder,
        )
        return [self._new_money(share) for share in shares]

    # -------------------------------------------------------------------------
    # Comparison
    # -------------------------------------------------------------------------

    def compare_to(self, other: Money) -> int:
        """-1, 0 or 1 as this amount is less than, equal to or greater than other."""
        self._assert_same_currency(other)
        return (self.amount > other.amount) - (self.amount < other.amount)

    def equals(self, other: Money) -> bool:
        return self.compare_to(other) == 0

    def greater_than(self, other: Money) -> bool:
        return self.compare_to(other) == 1

    def greater_than_or_equal(self, other: Money) -> bool:
        return self.compare_to(other) >= 0

    def less_than(self, other: Money) -> bool:
        return self.compare_to(other) == -1

    def less_than_or_equal(self, other: Money) -> bool:
        return self.compare_to(other) <= 0

    # -------------------------------------------------------------------------
    # Operators
    # -------------------------------------------------------------------------

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return self.subtract(other)

    def __neg__(self) -> Money:
        return self.negate()

    def __abs__(self) -> Money:
        return self.negate() if self.amount < 0 else self

    def __mul__(self, factor: Number) -> Money:
        if isinstance(factor, bool) or not isinstance(factor, (int, float, Decimal, Fraction)):
            return NotImplemented
        return self.multiply(factor)

    def __rmul__(self, factor: Number) -> Money:
        return self.__mul__(factor)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.equals(other)

    def __lt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.less_than(other)

    def __le__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.less_than_or_equal(other)

    def __gt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.greater_than(other)

    def __ge__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.greater_than_or_equal(other)

    def __hash__(self) -> int:
        return hash((self.amount, self.currency))

    # -------------------------------------------------------------------------
    # Properties and output
    # -------------------------------------------------------------------------

    @property
    def converted_amount(self) -> Decimal:
        """
        Amount in major units, rounded half-up to the currency's fraction digits.

        Decimal, not float: safe for display and for comparisons with
        decimal input.
        """
        digits = self.currency.fraction_digits
        major = Fraction(self.amount, self.currency.sub_unit)
        scaled = _apply_rounding(major * 10 ** digits, RoundingMode.HALF_UP)
        return Decimal(scaled).scaleb(-digits)

    def is_positive(self) -> bool:
        return self.amount > 0

    def is_negative(self) -> bool:
        return self.amount < 0

    def is_zero(self) -> bool:
        return self.amount == 0

    def __repr__(self) -> str:
        return f"Money({self.amount}, {self.currency.code!r})"

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict:
        """
        Projection for transport: {"amount": int, "currency": str}.

        NOTE: the amount is always the int in minor units, never a float.
        """
        return {
            "amount": self.amount,
            "currency": self.currency.code,
        }

    @classmethod
    def from_dict(
        cls,
        data: dict,
        registry: Optional[CurrencyRegistry] = None,
    ) -> Money:
        """Inverse of to_dict(); the code is resolved against `registry`."""
        try:
            amount = data["amount"]
            code = data["currency"]
        except (KeyError, TypeError):
            raise InvalidArgumentError(
                f"Expected a mapping with 'amount' and 'currency', got: {data!r}"
            ) from None
        if not isinstance(code, str):
            raise InvalidArgumentError(
                f"'currency' must be a currency code string, got: {code!r}"
            )
        return cls(amount, code, registry)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _assert_same_currency(self, other: Money) -> None:
        if not isinstance(other, Money):
            raise InvalidArgumentError(
                f"Expected a Money operand, got {type(other).__name__}"
            )
        if self.currency != other.currency:
            raise CurrencyMismatchError(self.currency, other.currency)

    @classmethod
    def _assert_inside_bounds(cls, value: int) -> None:
        if not cls.MIN_AMOUNT <= value <= cls.MAX_AMOUNT:
            raise MoneyOverflowError(value, cls.MIN_AMOUNT, cls.MAX_AMOUNT)

    @classmethod
    def _cast_to_int(cls, value: Fraction) -> int:
        """Truncate towards zero, refusing values that would not fit."""
        truncated = int(value)
        cls._assert_inside_bounds(truncated)
        return truncated

    def _new_money(self, amount: int) -> Money:
        return Money(amount, self.currency)


class PercentageSplit(NamedTuple):
    """Result of Money.extract_percentage(): percentage + subtotal == original."""
    percentage: Money
    subtotal: Money
