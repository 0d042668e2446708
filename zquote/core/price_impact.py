"""
Price impact from two quotes.

Instead of a closed-form derivative per pricing model, the estimator quotes
the trade at `amount` and again at `amount * (1 + epsilon)` and compares the
effective prices:

    p0 = amount_in0 / amount_out0
    p1 = amount_in1 / amount_out1
    impact_percent = (p1 / p0 - 1) * 100

This works unchanged for the bonding curve and for CPMM pools. Ratios are kept
as `Fraction` until the final conversion to float.

An unavailable quote (empty amount, zero output, pool too shallow for the
bumped size, sub-unit amount) gives `None`; that is the normal state while a
user is still typing.
"""

from __future__ import annotations

import math
from fractions import Fraction
from typing import Callable, Optional

from ..errors import BelowMinimumUnit, InsufficientLiquidity
from ..state.pools import PoolReserves
from .cpmm import DEFAULT_SWAP_FEE_BPS, ConstantProductQuoter
from .fixed_point import BPS_DENOM
from .types import Direction, PriceImpact, Quote
from .zcurve import BondingCurveModel


DEFAULT_EPSILON_BPS = 100  # 1%

QuoteFn = Callable[[int], Quote]


class PriceImpactEstimator:
    def __init__(self, epsilon_bps: int = DEFAULT_EPSILON_BPS) -> None:
        if not isinstance(epsilon_bps, int) or isinstance(epsilon_bps, bool):
            raise TypeError("epsilon_bps must be an int")
        if not (0 < epsilon_bps < BPS_DENOM):
            raise ValueError(f"epsilon_bps must be in (0, {BPS_DENOM}): {epsilon_bps}")
        self.epsilon_bps = epsilon_bps

    def bumped(self, amount: int) -> int:
        """`amount` scaled up by epsilon; always strictly larger."""
        return amount + max(1, (amount * self.epsilon_bps) // BPS_DENOM)

    def estimate(self, quote_fn: QuoteFn, amount: int, *, direction: Direction) -> Optional[PriceImpact]:
        """
        Compare `quote_fn(amount)` with `quote_fn(bumped(amount))`.

        `quote_fn` maps the user-entered amount to a `Quote`; for exact-in
        trades that amount is the input, for exact-out trades the output.
        """
        if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
            return None
        try:
            q0 = quote_fn(amount)
            q1 = quote_fn(self.bumped(amount))
        except (InsufficientLiquidity, BelowMinimumUnit):
            return None

        p0 = _effective_price(q0)
        p1 = _effective_price(q1)
        if p0 is None or p1 is None:
            return None

        base_price = float(p0)
        projected_price = float(p1)
        impact_percent = float((p1 / p0 - 1) * 100)
        if not all(math.isfinite(v) for v in (base_price, projected_price, impact_percent)):
            return None
        return PriceImpact(
            base_price=base_price,
            projected_price=projected_price,
            impact_percent=impact_percent,
            direction=direction,
        )

    def for_pool(
        self,
        quoter: ConstantProductQuoter,
        amount: int,
        reserves: PoolReserves,
        *,
        direction: Direction,
        exact_out: bool = False,
        fee_bps: int = DEFAULT_SWAP_FEE_BPS,
    ) -> Optional[PriceImpact]:
        """Impact of buying (ETH in) or selling (token in) against a CPMM pool."""
        reserve_in, reserve_out = reserves.directed(eth_in=direction is Direction.BUY)

        if exact_out:
            def quote(a: int) -> Quote:
                return Quote(amount_in=quoter.amount_in(a, reserve_in, reserve_out, fee_bps), amount_out=a)
        else:
            def quote(a: int) -> Quote:
                return Quote(amount_in=a, amount_out=quoter.amount_out(a, reserve_in, reserve_out, fee_bps))

        return self.estimate(quote, amount, direction=direction)

    def for_curve(
        self,
        model: BondingCurveModel,
        amount: int,
        *,
        direction: Direction,
        exact_out: bool = False,
    ) -> Optional[PriceImpact]:
        """Impact of a bonding-curve buy (ETH in) or sell (tokens in)."""
        if direction is Direction.BUY:
            quote = model.eth_for_token_amount if exact_out else model.tokens_for_eth_budget
        else:
            quote = model.tokens_to_burn_for_eth if exact_out else model.sell_refund
        return self.estimate(quote, amount, direction=direction)


def _effective_price(q: Quote) -> Optional[Fraction]:
    if q.amount_in <= 0 or q.amount_out <= 0:
        return None
    return Fraction(q.amount_in, q.amount_out)
