from __future__ import annotations

import pytest

from zquote.errors import InvalidCurveParameters
from zquote.state.pools import PoolReserves
from zquote.state.sale import DEFAULT_UNIT_SCALE, SaleParameters


def test_sale_defaults_and_remaining() -> None:
    sale = SaleParameters(sale_cap=1_000, divisor=3, quad_cap=400, net_sold=250)
    assert sale.unit_scale == DEFAULT_UNIT_SCALE
    assert sale.remaining == 750


def test_sale_rejects_non_int_fields() -> None:
    with pytest.raises(TypeError):
        SaleParameters(sale_cap=1_000, divisor=3.0, quad_cap=400)
    with pytest.raises(TypeError):
        SaleParameters(sale_cap=1_000, divisor=True, quad_cap=400)


def test_sale_rejects_negative_fields() -> None:
    with pytest.raises(InvalidCurveParameters):
        SaleParameters(sale_cap=1_000, divisor=3, quad_cap=-1)


def test_sale_is_frozen() -> None:
    sale = SaleParameters(sale_cap=1_000, divisor=3, quad_cap=400)
    with pytest.raises(AttributeError):
        sale.net_sold = 5  # type: ignore[misc]


def test_pool_direction() -> None:
    pool = PoolReserves(reserve0=10, reserve1=2_000)
    assert pool.directed(eth_in=True) == (10, 2_000)
    assert pool.directed(eth_in=False) == (2_000, 10)
    assert pool.is_quotable
    assert not PoolReserves(reserve0=0, reserve1=5).is_quotable


def test_pool_rejects_negative_reserves() -> None:
    with pytest.raises(ValueError):
        PoolReserves(reserve0=-1, reserve1=5)
    with pytest.raises(TypeError):
        PoolReserves(reserve0=1.5, reserve1=5)
