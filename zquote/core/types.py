"""Result types shared by the quoting models.

All types are frozen dataclasses. Amounts are integer base units (18 decimals);
the float fields of `PriceImpact` are display-only.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import Optional


@unique
class Direction(Enum):
    BUY = "buy"
    SELL = "sell"


@dataclass(frozen=True)
class Quote:
    amount_in: int
    amount_out: int
    # ETH handed from the first hop to the second (multi-hop only).
    intermediate: Optional[int] = None
    # Minimum acceptable output after the slippage haircut (multi-hop only).
    min_amount_out: Optional[int] = None
    clamped_to_sale_cap: bool = False
    clamped_to_net_sold: bool = False

    def __post_init__(self) -> None:
        for name, v in (("amount_in", self.amount_in), ("amount_out", self.amount_out)):
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
            if v < 0:
                raise ValueError(f"{name} must be non-negative: {v}")

    @property
    def is_empty(self) -> bool:
        return self.amount_out == 0


@dataclass(frozen=True)
class PriceImpact:
    base_price: float
    projected_price: float
    impact_percent: float
    direction: Direction


@dataclass(frozen=True)
class CurvePoint:
    """One sample of the bonding curve for charting."""

    tokens: int
    total_cost: int
    marginal_price: int
    percent_sold: float
