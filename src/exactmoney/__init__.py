"""
exactmoney — Exact monetary values for financial calculations

An integer amount of a currency's smallest unit paired with a Currency.
Arithmetic, comparison and allocation never introduce floating-point error,
never mix currencies and never overflow silently.

================================================================================
QUICK START
================================================================================

Basic usage:

    from exactmoney import Money, RoundingMode

    # Create money from a decimal string (two-stage half-up rounding)
    price = Money.from_decimal_string("12.345", "EUR")      # 1235 cents

    # Split evenly (sum ALWAYS equals the original)
    parts = Money(101, "EUR").allocate_to_targets(3)        # [34, 34, 33]

    # Split by ratios, remainder to the first shares
    shares = Money(5, "EUR").allocate_by_ratios([3, 7])     # [2, 3]

    # Take out a percentage that is already included
    split = Money(12100, "EUR").extract_percentage(21)
    # split.percentage + split.subtotal == Money(12100, "EUR")

    # Multiply with an explicit rounding mode
    Money(5, "EUR").multiply(0.5, RoundingMode.HALF_EVEN)   # 2 cents

Custom currencies:

    from exactmoney import Currency, CurrencyRegistry, DEFAULT_REGISTRY

    registry = DEFAULT_REGISTRY.extend(Currency("LAB", 10, 1))
    Money.from_decimal_string("1.25", "LAB", registry)       # 13 tenths

================================================================================
"""

from .core import (
    DEFAULT_ROUNDING_MODE,
    Money,
    PercentageSplit,
    RoundingMode,
)
from .currency import (
    DEFAULT_REGISTRY,
    Currency,
    CurrencyRegistry,
)
from .exceptions import (
    CurrencyMismatchError,
    InvalidArgumentError,
    MoneyError,
    MoneyOverflowError,
)

__version__ = "1.0.0"
__license__ = "MIT"

__all__ = [
    # Core
    "Money",
    "PercentageSplit",
    "RoundingMode",
    "DEFAULT_ROUNDING_MODE",
    # Currency
    "Currency",
    "CurrencyRegistry",
    "DEFAULT_REGISTRY",
    # Errors
    "MoneyError",
    "InvalidArgumentError",
    "CurrencyMismatchError",
    "MoneyOverflowError",
]
