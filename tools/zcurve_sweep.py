#!/usr/bin/env python3

from __future__ import annotations

import argparse
import json
import sys
import time
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Sequence

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from zquote.core.fixed_point import ONE_ETH
from zquote.core.zcurve import BondingCurveModel, calculate_divisor
from zquote.state.sale import DEFAULT_UNIT_SCALE, SaleParameters


def parse_ether(value: str) -> int:
    """Decimal string in whole units (18 decimals) -> integer base units."""
    try:
        scaled = Decimal(value.strip()).scaleb(18)
    except InvalidOperation as exc:
        raise ValueError(f"not a decimal amount: {value!r}") from exc
    if scaled < 0 or scaled != scaled.to_integral_value():
        raise ValueError(f"amount must be non-negative with at most 18 decimals: {value!r}")
    return int(scaled)


def _parse_list(csv: str) -> list[str]:
    out = [part.strip() for part in csv.split(",") if part.strip()]
    if not out:
        raise ValueError("empty list")
    return out


def _step_price(model: BondingCurveModel, tokens: int, step: int) -> int:
    """Cost of `step` base units starting at `tokens` sold."""
    return model.cost(tokens + step) - model.cost(tokens)


def analyze_target(sale_cap: int, quad_cap: int, target_raised: int, unit_scale: int) -> dict[str, Any]:
    divisor = calculate_divisor(sale_cap, quad_cap, target_raised, unit_scale)
    model = BondingCurveModel(
        SaleParameters(sale_cap=sale_cap, divisor=divisor, quad_cap=quad_cap, unit_scale=unit_scale)
    )
    # One whole token, or the whole cap when the sale is smaller than that.
    step = min(ONE_ETH, sale_cap)
    prices = {}
    for pct in (25, 50, 75):
        prices[f"price_at_{pct}pct"] = _step_price(model, (sale_cap * pct) // 100, step)
    prices["price_at_100pct"] = model.cost(sale_cap) - model.cost(sale_cap - step)

    return {
        "target_raised": target_raised,
        "divisor": divisor,
        "raised_at_cap": model.cost(sale_cap),
        "avg_price_per_token": (target_raised * ONE_ETH) // sale_cap,
        "tokens_for_1_eth": model.tokens_for_eth_budget(ONE_ETH).amount_out,
        **prices,
    }


def curve_points(model: BondingCurveModel, num_points: int) -> list[dict[str, Any]]:
    return [
        {
            "tokens": p.tokens,
            "total_cost": p.total_cost,
            "marginal_price": p.marginal_price,
            "percent_sold": p.percent_sold,
        }
        for p in model.price_curve(num_points)
    ]


def main(argv: Sequence[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="zCurve divisor and price-curve sweep")
    ap.add_argument("--sale-cap", type=str, default="800000000", help="tokens for sale (whole tokens)")
    ap.add_argument("--quad-cap", type=str, default="200000000", help="end of the quadratic phase (whole tokens)")
    ap.add_argument("--targets", type=str, default="0.01,0.1,0.5,1,2,5,8.5", help="ETH raised at cap")
    ap.add_argument("--unit-scale", type=int, default=DEFAULT_UNIT_SCALE)
    ap.add_argument("--points", type=int, default=20, help="chart samples for the first target")
    ap.add_argument("--out", type=str, default="")
    args = ap.parse_args(argv)

    try:
        sale_cap = parse_ether(args.sale_cap)
        quad_cap = parse_ether(args.quad_cap)
        targets = [parse_ether(t) for t in _parse_list(args.targets)]
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc
    if sale_cap <= 0:
        raise SystemExit("sale-cap must be positive")
    if quad_cap > sale_cap:
        raise SystemExit("quad-cap must be <= sale-cap")
    if args.unit_scale <= 0 or args.points <= 0:
        raise SystemExit("unit-scale and points must be positive")

    start = time.perf_counter()
    scenarios = [analyze_target(sale_cap, quad_cap, t, args.unit_scale) for t in targets]
    first = BondingCurveModel(
        SaleParameters(
            sale_cap=sale_cap,
            divisor=scenarios[0]["divisor"],
            quad_cap=quad_cap,
            unit_scale=args.unit_scale,
        )
    )

    report = {
        "schema": "zquote/zcurve-sweep/v1",
        "sale_cap": sale_cap,
        "quad_cap": quad_cap,
        "unit_scale": args.unit_scale,
        "scenarios": scenarios,
        "curve": curve_points(first, args.points),
        "runtime_s": time.perf_counter() - start,
    }

    payload = json.dumps(report, indent=2, sort_keys=True)
    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(payload + "\n", encoding="utf-8")
        print(f"Wrote {out_path}")
    else:
        print(payload)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
