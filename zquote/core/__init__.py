"""
Core quoting algorithms
"""

from .cpmm import ConstantProductQuoter, get_amount_in, get_amount_out, spot_price, with_slippage
from ..errors import BelowMinimumUnit, InsufficientLiquidity, InvalidCurveParameters, Overflow, QuoteError
from .fixed_point import apply_bps_haircut, ceil_div, mul_div, mul_div_up, quantize
from .price_impact import PriceImpactEstimator
from .routing import MultiHopEstimator
from .types import CurvePoint, Direction, PriceImpact, Quote
from .zcurve import BondingCurveModel, calculate_divisor, cost_units

__all__ = [
    "ConstantProductQuoter",
    "get_amount_in",
    "get_amount_out",
    "spot_price",
    "with_slippage",
    "BelowMinimumUnit",
    "InsufficientLiquidity",
    "InvalidCurveParameters",
    "Overflow",
    "QuoteError",
    "apply_bps_haircut",
    "ceil_div",
    "mul_div",
    "mul_div_up",
    "quantize",
    "PriceImpactEstimator",
    "MultiHopEstimator",
    "CurvePoint",
    "Direction",
    "PriceImpact",
    "Quote",
    "BondingCurveModel",
    "calculate_divisor",
    "cost_units",
]
