"""
zCurve bonding-curve model (quadratic, then linear).

The sale contract prices its primary sale with a cumulative cost function over
"units" (1 unit = `unit_scale` base units):

    m      = amount // unit_scale
    K      = quad_cap // unit_scale
    denom  = 6 * divisor

    cost(m) = 0                                            if m < 2
            = floor(S(m) * 1e18 / denom)                   if m <= K
            = floor(S(K) * 1e18 / denom) + pK * (m - K)    otherwise

    S(n)    = n * (n - 1) * (2n - 1) / 6      (sum of squares 0..n-1)
    pK      = floor(K * K * 1e18 / denom)     (flat marginal price past K)

Truncation order matters: S(n) is exact, then scaled with a single floor
`mul_div`. Any reordering changes results by a few wei and makes previews
disagree with settlement.

Inverses (ETH budget -> tokens, ETH target -> tokens to burn) are computed by
binary search over the unit grid. Closed-form inversion of the mixed branch
cannot reproduce the forward formula's truncation.
"""

from __future__ import annotations

import logging
from fractions import Fraction
from typing import List

from ..errors import InvalidCurveParameters
from ..state.sale import DEFAULT_UNIT_SCALE, SaleParameters
from .fixed_point import ONE_ETH, checked_add, checked_mul, mul_div, quantize, require_u256
from .types import CurvePoint, Quote


logger = logging.getLogger(__name__)


def _sum_squares(n: int) -> int:
    if n < 2:
        return 0
    # Exact: n(n-1)(2n-1) is always divisible by 6.
    return checked_mul(checked_mul(n, n - 1), 2 * n - 1) // 6


def cost_units(m: int, *, quad_units: int, divisor: int) -> int:
    """Cumulative cost in wei of the first *m* units."""
    require_u256("m", m)
    require_u256("quad_units", quad_units)
    if divisor <= 0:
        raise InvalidCurveParameters("divisor must be positive")

    # First tick free.
    if m < 2:
        return 0

    denom = 6 * divisor
    if m <= quad_units:
        return mul_div(_sum_squares(m), ONE_ETH, denom)

    k = quad_units
    quad_cost = mul_div(_sum_squares(k), ONE_ETH, denom)
    p_k = mul_div(checked_mul(k, k), ONE_ETH, denom)
    tail_cost = checked_mul(p_k, m - k)
    return checked_add(quad_cost, tail_cost)


def calculate_divisor(
    sale_cap: int,
    quad_cap: int,
    target_raised: int,
    unit_scale: int = DEFAULT_UNIT_SCALE,
) -> int:
    """
    Divisor for which selling the whole `sale_cap` raises `target_raised` wei.

    Solves `cost(sale_cap) == target_raised` for the divisor, using the same
    branch split as the cost function.
    """
    require_u256("sale_cap", sale_cap)
    require_u256("quad_cap", quad_cap)
    require_u256("target_raised", target_raised)
    if target_raised == 0:
        raise ValueError("target_raised must be positive")
    if unit_scale <= 0:
        raise InvalidCurveParameters("unit_scale must be positive")

    m = sale_cap // unit_scale
    k = quad_cap // unit_scale
    if m <= k:
        weighted = _sum_squares(m)
    else:
        weighted = checked_add(_sum_squares(k), checked_mul(checked_mul(k, k), m - k))

    divisor = mul_div(weighted, ONE_ETH, checked_mul(6, target_raised))
    if divisor == 0:
        raise InvalidCurveParameters(
            f"target_raised {target_raised} is too large for sale_cap {sale_cap}"
        )
    return divisor


class BondingCurveModel:
    """Quotes against one `SaleParameters` snapshot."""

    def __init__(self, sale: SaleParameters) -> None:
        if not isinstance(sale, SaleParameters):
            raise TypeError("sale must be a SaleParameters")
        self.sale = sale

    @property
    def unit_scale(self) -> int:
        return self.sale.unit_scale

    @property
    def quad_units(self) -> int:
        return self.sale.quad_cap // self.sale.unit_scale

    @property
    def cap_units(self) -> int:
        return self.sale.sale_cap // self.sale.unit_scale

    def cost_units(self, m: int) -> int:
        return cost_units(m, quad_units=self.quad_units, divisor=self.sale.divisor)

    def cost(self, amount: int) -> int:
        """Cumulative cost in wei of the first *amount* base units sold."""
        require_u256("amount", amount)
        return self.cost_units(amount // self.unit_scale)

    def marginal_price(self, amount: int | None = None) -> int:
        """
        Instantaneous price (wei per unit) at *amount* sold, default `net_sold`.

        Display only; settlement always goes through `cost`.
        """
        if amount is None:
            amount = self.sale.net_sold
        require_u256("amount", amount)
        m = amount // self.unit_scale
        k = self.quad_units
        divisor = self.sale.divisor
        if m < 2:
            # Keep a non-zero quote for an untouched curve.
            return mul_div(max(m, 1), ONE_ETH, 3 * divisor)
        if m <= k:
            return mul_div(2 * m, ONE_ETH, 6 * divisor)
        return mul_div(2 * k, ONE_ETH, 6 * divisor)

    def quantize(self, amount: int) -> int:
        return quantize(amount, self.unit_scale)

    # -- Buy side -----------------------------------------------------------

    def _buy_cost_units(self, start: int, n: int) -> int:
        return self.cost_units(start + n) - self.cost_units(start)

    def tokens_for_eth_budget(self, eth_budget: int) -> Quote:
        """
        Most tokens purchasable for at most *eth_budget* wei (`coinsForETH`).

        `amount_in` is the exact cost of the returned tokens, which may be
        below the budget.
        """
        require_u256("eth_budget", eth_budget)
        if eth_budget == 0:
            return Quote(amount_in=0, amount_out=0)

        u = self.unit_scale
        start = self.sale.net_sold // u
        max_n = self.sale.remaining // u
        if max_n == 0:
            logger.debug("zcurve: sale cap reached, nothing left to buy")
            return Quote(amount_in=0, amount_out=0, clamped_to_sale_cap=True)

        lo, hi = 0, max_n
        while lo < hi:
            mid = (lo + hi + 1) // 2
            if self._buy_cost_units(start, mid) <= eth_budget:
                lo = mid
            else:
                hi = mid - 1

        spent = self._buy_cost_units(start, lo)
        clamped = lo == max_n and spent < eth_budget
        if clamped:
            logger.debug("zcurve: budget %d clamped to remaining supply (%d units)", eth_budget, max_n)
        return Quote(amount_in=spent, amount_out=lo * u, clamped_to_sale_cap=clamped)

    def eth_for_token_amount(self, tokens: int) -> Quote:
        """ETH cost of buying exactly *tokens* (quantized) from the curve (`buyCost`)."""
        require_u256("tokens", tokens)
        if tokens == 0:
            return Quote(amount_in=0, amount_out=0)

        u = self.unit_scale
        wanted = self.quantize(tokens)
        available = (self.sale.remaining // u) * u
        clamped = wanted > available
        if clamped:
            logger.debug("zcurve: buy of %d clamped to remaining supply %d", wanted, available)
            wanted = available

        start = self.sale.net_sold // u
        eth_in = self._buy_cost_units(start, wanted // u)
        return Quote(amount_in=eth_in, amount_out=wanted, clamped_to_sale_cap=clamped)

    # -- Sell side ----------------------------------------------------------

    def _refund_units(self, start: int, n: int) -> int:
        return self.cost_units(start) - self.cost_units(start - n)

    def sell_refund(self, tokens: int) -> Quote:
        """ETH returned for selling *tokens* (quantized) back to the curve (`sellRefund`)."""
        require_u256("tokens", tokens)
        if tokens == 0:
            return Quote(amount_in=0, amount_out=0)

        u = self.unit_scale
        offered = self.quantize(tokens)
        sellable = (self.sale.net_sold // u) * u
        clamped = offered > sellable
        if clamped:
            logger.debug("zcurve: sell of %d clamped to net sold %d", offered, sellable)
            offered = sellable

        start = self.sale.net_sold // u
        eth_out = self._refund_units(start, offered // u)
        return Quote(amount_in=offered, amount_out=eth_out, clamped_to_net_sold=clamped)

    def tokens_to_burn_for_eth(self, eth_out: int) -> Quote:
        """
        Fewest tokens whose sale refunds at least *eth_out* wei (`coinsToBurnForETH`).

        When even selling everything sold so far refunds less, the result is
        clamped to `net_sold` and flagged.
        """
        require_u256("eth_out", eth_out)
        if eth_out == 0:
            return Quote(amount_in=0, amount_out=0)

        u = self.unit_scale
        start = self.sale.net_sold // u
        max_n = start

        if self._refund_units(start, max_n) < eth_out:
            logger.debug("zcurve: refund target %d exceeds curve reserve, clamped to net sold", eth_out)
            n = max_n
            clamped = True
        else:
            lo, hi = 0, max_n
            while lo < hi:
                mid = (lo + hi) // 2
                if self._refund_units(start, mid) >= eth_out:
                    hi = mid
                else:
                    lo = mid + 1
            n = lo
            clamped = False

        return Quote(
            amount_in=n * u,
            amount_out=self._refund_units(start, n),
            clamped_to_net_sold=clamped,
        )

    # -- Presentation -------------------------------------------------------

    def price_curve(self, num_points: int = 100) -> List[CurvePoint]:
        """Evenly spaced samples from 0 to `sale_cap` for charting."""
        if not isinstance(num_points, int) or isinstance(num_points, bool) or num_points <= 0:
            raise ValueError(f"num_points must be a positive int: {num_points!r}")

        sale_cap = self.sale.sale_cap
        points: List[CurvePoint] = []
        for i in range(num_points + 1):
            tokens = (sale_cap * i) // num_points
            total_cost = self.cost(tokens)
            marginal = 0
            if tokens < sale_cap:
                marginal = self.cost(tokens + self.unit_scale) - total_cost
            points.append(
                CurvePoint(
                    tokens=tokens,
                    total_cost=total_cost,
                    marginal_price=marginal,
                    percent_sold=(i / num_points) * 100,
                )
            )
        return points

    def progress_percent(self) -> float:
        return float(Fraction(self.sale.net_sold * 100, self.sale.sale_cap))
