"""
Constant-product pool reserves.

By convention `reserve0` is the ETH side and `reserve1` the token side.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


Amount = int  # Non-negative integer (arbitrary precision)


@dataclass(frozen=True)
class PoolReserves:
    reserve0: Amount
    reserve1: Amount

    def __post_init__(self) -> None:
        for name, v in (("reserve0", self.reserve0), ("reserve1", self.reserve1)):
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
            if v < 0:
                raise ValueError(f"{name} must be non-negative: {v}")

    @property
    def is_quotable(self) -> bool:
        return self.reserve0 > 0 and self.reserve1 > 0

    def directed(self, *, eth_in: bool) -> Tuple[Amount, Amount]:
        """Return ``(reserve_in, reserve_out)`` for a swap in the given direction."""
        if eth_in:
            return self.reserve0, self.reserve1
        return self.reserve1, self.reserve0
