"""
Fixed-point helpers (deterministic, integer-only).

Every settlement-relevant formula in this package is built from the helpers
below so that rounding direction lives in one place:

- `mul_div` floors, `mul_div_up` / `ceil_div` round up.
- Operands and results are uint256 values; a result that does not fit raises
  `Overflow` instead of wrapping.
- The intermediate product `a * b` of `mul_div` may exceed 256 bits, matching
  the full-precision mulDiv the sale and pool contracts use.
"""

from __future__ import annotations

from ..errors import BelowMinimumUnit, Overflow


UINT256_MAX: int = (1 << 256) - 1
BPS_DENOM: int = 10_000
ONE_ETH: int = 10**18


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def require_u256(name: str, value: int) -> int:
    """Validate that *value* is an int in ``[0, 2**256 - 1]`` and return it."""
    _require_int(name, value)
    if value < 0:
        raise ValueError(f"{name} must be non-negative: {value}")
    if value > UINT256_MAX:
        raise Overflow(f"{name} exceeds uint256: {value}")
    return value


def _check_result(value: int) -> int:
    if value > UINT256_MAX:
        raise Overflow(f"result exceeds uint256: {value}")
    return value


def _require_denominator(denominator: int) -> None:
    _require_int("denominator", denominator)
    if denominator <= 0:
        raise ValueError(f"denominator must be positive: {denominator}")


def checked_add(a: int, b: int) -> int:
    require_u256("a", a)
    require_u256("b", b)
    return _check_result(a + b)


def checked_mul(a: int, b: int) -> int:
    require_u256("a", a)
    require_u256("b", b)
    return _check_result(a * b)


def mul_div(a: int, b: int, denominator: int) -> int:
    """``floor(a * b / denominator)``."""
    require_u256("a", a)
    require_u256("b", b)
    _require_denominator(denominator)
    return _check_result((a * b) // denominator)


def ceil_div(numerator: int, denominator: int) -> int:
    """``ceil(numerator / denominator)`` for non-negative operands."""
    require_u256("numerator", numerator)
    _require_denominator(denominator)
    return (numerator + denominator - 1) // denominator


def mul_div_up(a: int, b: int, denominator: int) -> int:
    """``ceil(a * b / denominator)``."""
    require_u256("a", a)
    require_u256("b", b)
    _require_denominator(denominator)
    return _check_result((a * b + denominator - 1) // denominator)


def apply_bps_haircut(amount: int, bps: int) -> int:
    """``floor(amount * (10000 - bps) / 10000)``."""
    _require_int("bps", bps)
    if not (0 <= bps <= BPS_DENOM):
        raise ValueError(f"bps must be in [0, {BPS_DENOM}]: {bps}")
    return mul_div(amount, BPS_DENOM - bps, BPS_DENOM)


def quantize(amount: int, unit_scale: int) -> int:
    """
    Round *amount* down to a multiple of *unit_scale*.

    A positive amount that rounds to zero is rejected: a zero-size trade would
    revert on-chain, so the caller must ask for a larger amount.
    """
    require_u256("amount", amount)
    _require_denominator(unit_scale)
    q = (amount // unit_scale) * unit_scale
    if q == 0 and amount > 0:
        raise BelowMinimumUnit(amount, unit_scale)
    return q
