"""Exception types for the quoting engine.

Every error raised for a quote that cannot be produced derives from
``QuoteError``. The concrete classes also derive from the matching builtin so
callers that only catch ``ValueError`` / ``OverflowError`` keep working.
"""

from __future__ import annotations


class QuoteError(Exception):
    """Base class for quoting failures."""


class InvalidCurveParameters(QuoteError, ValueError):
    """Raised when a sale snapshot cannot describe a valid bonding curve.

    Configuration-level and fatal: retrying with the same snapshot fails again.
    """


class BelowMinimumUnit(QuoteError, ValueError):
    """Raised when a positive amount quantizes to zero units."""

    def __init__(self, amount: int, unit_scale: int) -> None:
        self.amount = amount
        self.unit_scale = unit_scale
        super().__init__(f"amount {amount} is below the minimum tradeable unit {unit_scale}")


class InsufficientLiquidity(QuoteError, ValueError):
    """Raised when a pool cannot produce the requested output."""


class Overflow(QuoteError, OverflowError):
    """Raised when a value would not fit in an unsigned 256-bit word."""
