"""
Constant Product Market Maker (CPMM) quoting.

Mirrors the pool contract's `getAmountOut` / `getAmountIn` with the fee taken
from the input, in basis points:

    after_fee  = amount_in * (10_000 - fee_bps)
    amount_out = floor(after_fee * reserve_out / (reserve_in * 10_000 + after_fee))

    amount_in  = floor(reserve_in * amount_out * 10_000
                       / ((reserve_out - amount_out) * (10_000 - fee_bps))) + 1

The `+ 1` on the inverse is a ceiling adjustment: executing the trade with the
returned input never yields less than `amount_out`.

Results are memoized in an injected `QuoteCache`; the cache only changes
latency, never answers.
"""

from __future__ import annotations

import logging
from fractions import Fraction
from typing import Optional

from ..errors import InsufficientLiquidity
from ..state.quote_cache import CachePool, QuoteCache, make_key
from .fixed_point import BPS_DENOM, apply_bps_haircut, checked_add, checked_mul, mul_div, require_u256


logger = logging.getLogger(__name__)

# Pool fee used by the coin pools (1%).
DEFAULT_SWAP_FEE_BPS = 100
# Client-side min-out haircut (2%).
DEFAULT_SLIPPAGE_BPS = 200


def _require_fee(fee_bps: int) -> None:
    if not isinstance(fee_bps, int) or isinstance(fee_bps, bool):
        raise TypeError("fee_bps must be an int")
    if not (0 <= fee_bps < BPS_DENOM):
        raise ValueError(f"fee_bps must be in [0, {BPS_DENOM}): {fee_bps}")


def _require_quote_args(amount_name: str, amount: int, reserve_in: int, reserve_out: int, fee_bps: int) -> None:
    require_u256(amount_name, amount)
    require_u256("reserve_in", reserve_in)
    require_u256("reserve_out", reserve_out)
    _require_fee(fee_bps)


def get_amount_out(amount_in: int, reserve_in: int, reserve_out: int, fee_bps: int) -> int:
    """Uncached forward quote."""
    _require_quote_args("amount_in", amount_in, reserve_in, reserve_out, fee_bps)
    if amount_in == 0 or reserve_in == 0 or reserve_out == 0:
        return 0

    after_fee = checked_mul(amount_in, BPS_DENOM - fee_bps)
    denominator = checked_add(checked_mul(reserve_in, BPS_DENOM), after_fee)
    return mul_div(after_fee, reserve_out, denominator)


def get_amount_in(amount_out: int, reserve_in: int, reserve_out: int, fee_bps: int) -> int:
    """Uncached inverse quote."""
    _require_quote_args("amount_out", amount_out, reserve_in, reserve_out, fee_bps)
    if amount_out == 0:
        return 0
    if reserve_in == 0 or reserve_out == 0:
        raise InsufficientLiquidity(f"empty pool: reserves ({reserve_in}, {reserve_out})")
    if amount_out >= reserve_out:
        raise InsufficientLiquidity(
            f"cannot drain full reserve: amount_out ({amount_out}) >= reserve_out ({reserve_out})"
        )

    numerator = checked_mul(reserve_in, amount_out)
    denominator = checked_mul(reserve_out - amount_out, BPS_DENOM - fee_bps)
    return checked_add(mul_div(numerator, BPS_DENOM, denominator), 1)


def with_slippage(amount: int, slippage_bps: int = DEFAULT_SLIPPAGE_BPS) -> int:
    """Minimum acceptable amount after a slippage tolerance."""
    return apply_bps_haircut(amount, slippage_bps)


def spot_price(reserve_in: int, reserve_out: int) -> Optional[Fraction]:
    """Marginal price of the output asset in input units, ignoring fees (display only)."""
    require_u256("reserve_in", reserve_in)
    require_u256("reserve_out", reserve_out)
    if reserve_in == 0 or reserve_out == 0:
        return None
    return Fraction(reserve_in, reserve_out)


class ConstantProductQuoter:
    """CPMM quotes with an optional, injected result cache."""

    def __init__(self, cache: Optional[QuoteCache] = None) -> None:
        self.cache = cache

    def _cached(self, pool: CachePool, key: str) -> Optional[int]:
        if self.cache is None:
            return None
        try:
            return self.cache.get(pool, key)
        except MemoryError:
            logger.warning("quote cache read failed; computing %s directly", pool.value)
            return None

    def _store(self, pool: CachePool, key: str, value: int) -> None:
        if self.cache is None:
            return
        try:
            self.cache.put(pool, key, value)
        except MemoryError:
            logger.warning("quote cache write failed; %s result not cached", pool.value)

    def amount_out(self, amount_in: int, reserve_in: int, reserve_out: int, fee_bps: int) -> int:
        _require_quote_args("amount_in", amount_in, reserve_in, reserve_out, fee_bps)
        if amount_in == 0 or reserve_in == 0 or reserve_out == 0:
            return 0

        key = make_key(amount_in, reserve_in, reserve_out, fee_bps)
        hit = self._cached(CachePool.FORWARD, key)
        if hit is not None:
            return hit

        result = get_amount_out(amount_in, reserve_in, reserve_out, fee_bps)
        self._store(CachePool.FORWARD, key, result)
        return result

    def amount_in(self, amount_out: int, reserve_in: int, reserve_out: int, fee_bps: int) -> int:
        _require_quote_args("amount_out", amount_out, reserve_in, reserve_out, fee_bps)
        if amount_out == 0:
            return 0

        key = make_key(amount_out, reserve_in, reserve_out, fee_bps)
        hit = self._cached(CachePool.INVERSE, key)
        if hit is not None:
            return hit

        result = get_amount_in(amount_out, reserve_in, reserve_out, fee_bps)
        self._store(CachePool.INVERSE, key, result)
        return result
