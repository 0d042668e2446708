"""
Bonding-curve sale snapshot.

A `SaleParameters` value is a read-only copy of the sale contract's storage at
some point in time. The quoting code never mutates it; callers refresh it from
their data source and build a new one.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import InvalidCurveParameters


# 1 unit = 1e12 base units on the deployed sale contracts.
DEFAULT_UNIT_SCALE = 10**12


@dataclass(frozen=True)
class SaleParameters:
    sale_cap: int
    divisor: int
    quad_cap: int
    net_sold: int = 0
    unit_scale: int = DEFAULT_UNIT_SCALE

    def __post_init__(self) -> None:
        for name, v in (
            ("sale_cap", self.sale_cap),
            ("divisor", self.divisor),
            ("quad_cap", self.quad_cap),
            ("net_sold", self.net_sold),
            ("unit_scale", self.unit_scale),
        ):
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
            if v < 0:
                raise InvalidCurveParameters(f"{name} must be non-negative: {v}")
        if self.sale_cap == 0:
            raise InvalidCurveParameters("sale_cap must be positive")
        if self.divisor == 0:
            raise InvalidCurveParameters("divisor must be positive")
        if self.unit_scale == 0:
            raise InvalidCurveParameters("unit_scale must be positive")
        if self.quad_cap > self.sale_cap:
            raise InvalidCurveParameters(
                f"quad_cap ({self.quad_cap}) must not exceed sale_cap ({self.sale_cap})"
            )
        if self.net_sold > self.sale_cap:
            raise InvalidCurveParameters(
                f"net_sold ({self.net_sold}) must not exceed sale_cap ({self.sale_cap})"
            )

    @property
    def remaining(self) -> int:
        """Tokens still purchasable from the curve."""
        return self.sale_cap - self.net_sold
