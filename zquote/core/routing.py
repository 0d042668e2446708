"""
Coin-to-coin estimation via ETH.

Coin pools are all paired with ETH, so a coin -> coin trade is two exact-in
swaps through ETH:

    hop 1: source coin -> ETH           (source pool, token side in)
    hop 2: ETH         -> target coin   (target pool, ETH side in)

The two hops are not atomic from the estimator's point of view, so the ETH
passed to hop 2 is the hop 1 output minus a safety margin. The same margin is
applied to the final output to produce the minimum acceptable amount.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..state.pools import PoolReserves
from .cpmm import DEFAULT_SLIPPAGE_BPS, DEFAULT_SWAP_FEE_BPS, ConstantProductQuoter, with_slippage
from .types import Quote


logger = logging.getLogger(__name__)


class MultiHopEstimator:
    def __init__(self, quoter: Optional[ConstantProductQuoter] = None) -> None:
        self.quoter = quoter if quoter is not None else ConstantProductQuoter()

    def estimate_coin_to_coin(
        self,
        amount_in: int,
        source: PoolReserves,
        target: PoolReserves,
        *,
        margin_bps: int = DEFAULT_SLIPPAGE_BPS,
        source_fee_bps: int = DEFAULT_SWAP_FEE_BPS,
        target_fee_bps: int = DEFAULT_SWAP_FEE_BPS,
    ) -> Quote:
        """
        Estimate `amount_in` of the source coin swapped into the target coin.

        `intermediate` is the margin-adjusted ETH amount to feed hop 2;
        `min_amount_out` is the final output with the margin applied again.
        A zero quote on either hop yields a zero result.
        """
        eth_out = self.quoter.amount_out(amount_in, source.reserve1, source.reserve0, source_fee_bps)
        if eth_out == 0:
            logger.debug("multihop: first hop quoted zero for amount_in=%d", amount_in)
            return Quote(amount_in=amount_in, amount_out=0, intermediate=0, min_amount_out=0)

        safe_eth_out = with_slippage(eth_out, margin_bps)
        target_out = self.quoter.amount_out(safe_eth_out, target.reserve0, target.reserve1, target_fee_bps)
        if target_out == 0:
            logger.debug("multihop: second hop quoted zero for eth_in=%d", safe_eth_out)
            return Quote(amount_in=amount_in, amount_out=0, intermediate=0, min_amount_out=0)

        return Quote(
            amount_in=amount_in,
            amount_out=target_out,
            intermediate=safe_eth_out,
            min_amount_out=with_slippage(target_out, margin_bps),
        )
