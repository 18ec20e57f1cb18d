"""
exceptions.py — Error hierarchy for exactmoney

Every error raised by the library derives from MoneyError. Each kind also
derives from the built-in exception a caller would naturally catch:

    InvalidArgumentError   -> ValueError     (malformed input)
    CurrencyMismatchError  -> TypeError      (EUR + USD)
    MoneyOverflowError     -> OverflowError  (result outside integer range)
"""

from __future__ import annotations

from typing import Any


class MoneyError(Exception):
    """Base exception for all exactmoney errors."""
    pass


class InvalidArgumentError(MoneyError, ValueError):
    """Raised when an argument is malformed or of the wrong type."""
    pass


class CurrencyMismatchError(MoneyError, TypeError):
    """Raised when two Money values with different currencies are combined."""

    def __init__(self, left: Any, right: Any) -> None:
        super().__init__(
            f"Different currencies: {left} vs {right}. "
            f"Convert explicitly before combining."
        )
        self.left = left
        self.right = right


class MoneyOverflowError(MoneyError, OverflowError):
    """Raised when a result does not fit in the representable amount range."""

    def __init__(self, value: Any, minimum: int, maximum: int) -> None:
        super().__init__(
            f"Amount {value} is outside the representable range [{minimum}, {maximum}]"
        )
        self.value = value
