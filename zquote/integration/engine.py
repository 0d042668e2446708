"""
Quote engine facade.

Imperative-shell wrapper around the functional core: owns the one piece of
mutable state (the quote cache) and wires the quoters together according to
an `EngineConfig`. Callers refresh sale snapshots and pool reserves themselves
and pass them in on every call.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from ..core.cpmm import ConstantProductQuoter
from ..core.fixed_point import BPS_DENOM
from ..core.price_impact import PriceImpactEstimator
from ..core.routing import MultiHopEstimator
from ..core.types import Direction, PriceImpact, Quote
from ..core.zcurve import BondingCurveModel
from ..state.pools import PoolReserves
from ..state.quote_cache import Clock, QuoteCache
from ..state.sale import SaleParameters


logger = logging.getLogger(__name__)

ENV_PREFIX = "ZQUOTE_"


def _bool_env(name: str, *, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return bool(default)
    v = raw.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return bool(default)


def _int_env(name: str, *, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return int(default)
    try:
        return int(raw.strip(), 10)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _float_env(name: str, *, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return float(default)
    try:
        return float(raw.strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


@dataclass(frozen=True)
class EngineConfig:
    # Quote cache (constant-product formulas only):
    cache_enabled: bool = True
    cache_capacity: int = 50  # per pool (forward / inverse)
    cache_ttl_ms: int = 2_000

    # Default pool fee when a call does not pass one.
    swap_fee_bps: int = 100

    # Haircut applied to the intermediate ETH and to the final min-out of coin-to-coin estimates.
    multihop_margin_bps: int = 200

    # Price impact: bump size for the second quote, and the "warn the user" threshold.
    impact_epsilon_bps: int = 100
    high_impact_percent: float = 5.0

    def __post_init__(self) -> None:
        if not isinstance(self.cache_enabled, bool):
            raise TypeError("cache_enabled must be a bool")
        for name in ("cache_capacity", "cache_ttl_ms"):
            v = getattr(self, name)
            if not isinstance(v, int) or isinstance(v, bool) or v <= 0:
                raise ValueError(f"{name} must be a positive int: {v!r}")
        for name in ("swap_fee_bps", "multihop_margin_bps", "impact_epsilon_bps"):
            v = getattr(self, name)
            if not isinstance(v, int) or isinstance(v, bool) or not (0 <= v < BPS_DENOM):
                raise ValueError(f"{name} must be an int in [0, {BPS_DENOM}): {v!r}")
        if self.impact_epsilon_bps == 0:
            raise ValueError("impact_epsilon_bps must be positive")
        if not isinstance(self.high_impact_percent, (int, float)) or self.high_impact_percent < 0:
            raise ValueError(f"high_impact_percent must be non-negative: {self.high_impact_percent!r}")

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX) -> "EngineConfig":
        d = cls()
        return cls(
            cache_enabled=_bool_env(f"{prefix}CACHE_ENABLED", default=d.cache_enabled),
            cache_capacity=_int_env(f"{prefix}CACHE_CAPACITY", default=d.cache_capacity),
            cache_ttl_ms=_int_env(f"{prefix}CACHE_TTL_MS", default=d.cache_ttl_ms),
            swap_fee_bps=_int_env(f"{prefix}SWAP_FEE_BPS", default=d.swap_fee_bps),
            multihop_margin_bps=_int_env(f"{prefix}MULTIHOP_MARGIN_BPS", default=d.multihop_margin_bps),
            impact_epsilon_bps=_int_env(f"{prefix}IMPACT_EPSILON_BPS", default=d.impact_epsilon_bps),
            high_impact_percent=_float_env(f"{prefix}HIGH_IMPACT_PERCENT", default=d.high_impact_percent),
        )

    @classmethod
    def from_mapping(cls, obj: Mapping[str, Any]) -> "EngineConfig":
        if not isinstance(obj, Mapping):
            raise TypeError("engine config must be a mapping")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(obj) - known)
        if unknown:
            raise ValueError(f"unknown engine config keys: {', '.join(map(str, unknown))}")
        return cls(**dict(obj))

    @classmethod
    def from_yaml(cls, path: Path | str) -> "EngineConfig":
        obj = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
        if obj is None:
            return cls()
        return cls.from_mapping(obj)


class QuoteEngine:
    """One cache, one set of quoters, shared by every call on this instance."""

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        *,
        cache: Optional[QuoteCache] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.config = config if config is not None else EngineConfig()
        if cache is None and self.config.cache_enabled:
            cache = QuoteCache(
                capacity=self.config.cache_capacity,
                ttl_ms=self.config.cache_ttl_ms,
                clock=clock,
            )
        self.cache = cache
        self.quoter = ConstantProductQuoter(cache=self.cache)
        self.multihop = MultiHopEstimator(self.quoter)
        self.impact = PriceImpactEstimator(epsilon_bps=self.config.impact_epsilon_bps)
        logger.debug(
            "quote engine ready (cache=%s, capacity=%d, ttl_ms=%d)",
            "on" if self.cache is not None else "off",
            self.config.cache_capacity,
            self.config.cache_ttl_ms,
        )

    def _fee(self, fee_bps: Optional[int]) -> int:
        return self.config.swap_fee_bps if fee_bps is None else fee_bps

    # -- Bonding curve ------------------------------------------------------

    def curve(self, sale: SaleParameters) -> BondingCurveModel:
        return BondingCurveModel(sale)

    def curve_price_impact(
        self,
        sale: SaleParameters,
        amount: int,
        *,
        direction: Direction,
        exact_out: bool = False,
    ) -> Optional[PriceImpact]:
        return self.impact.for_curve(self.curve(sale), amount, direction=direction, exact_out=exact_out)

    # -- Constant product ---------------------------------------------------

    def swap_amount_out(
        self,
        amount_in: int,
        reserves: PoolReserves,
        *,
        eth_in: bool,
        fee_bps: Optional[int] = None,
    ) -> Quote:
        reserve_in, reserve_out = reserves.directed(eth_in=eth_in)
        out = self.quoter.amount_out(amount_in, reserve_in, reserve_out, self._fee(fee_bps))
        return Quote(amount_in=amount_in, amount_out=out)

    def swap_amount_in(
        self,
        amount_out: int,
        reserves: PoolReserves,
        *,
        eth_in: bool,
        fee_bps: Optional[int] = None,
    ) -> Quote:
        reserve_in, reserve_out = reserves.directed(eth_in=eth_in)
        amount_in = self.quoter.amount_in(amount_out, reserve_in, reserve_out, self._fee(fee_bps))
        return Quote(amount_in=amount_in, amount_out=amount_out)

    def coin_to_coin(
        self,
        amount_in: int,
        source: PoolReserves,
        target: PoolReserves,
        *,
        margin_bps: Optional[int] = None,
        source_fee_bps: Optional[int] = None,
        target_fee_bps: Optional[int] = None,
    ) -> Quote:
        return self.multihop.estimate_coin_to_coin(
            amount_in,
            source,
            target,
            margin_bps=self.config.multihop_margin_bps if margin_bps is None else margin_bps,
            source_fee_bps=self._fee(source_fee_bps),
            target_fee_bps=self._fee(target_fee_bps),
        )

    def swap_price_impact(
        self,
        amount: int,
        reserves: PoolReserves,
        *,
        direction: Direction,
        exact_out: bool = False,
        fee_bps: Optional[int] = None,
    ) -> Optional[PriceImpact]:
        return self.impact.for_pool(
            self.quoter,
            amount,
            reserves,
            direction=direction,
            exact_out=exact_out,
            fee_bps=self._fee(fee_bps),
        )

    def is_high_impact(self, impact: Optional[PriceImpact]) -> bool:
        if impact is None:
            return False
        return abs(impact.impact_percent) > self.config.high_impact_percent
