from __future__ import annotations

from fractions import Fraction

import pytest

from zquote.core.cpmm import (
    ConstantProductQuoter,
    get_amount_in,
    get_amount_out,
    spot_price,
    with_slippage,
)
from zquote.errors import InsufficientLiquidity
from zquote.state.quote_cache import CachePool, QuoteCache


class FakeClock:
    def __init__(self, now: int = 0) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


class FailingCache(QuoteCache):
    def get(self, pool, key):
        raise MemoryError

    def put(self, pool, key, value):
        raise MemoryError


def test_amount_out_hand_computed() -> None:
    # after_fee = 9_970_000; 99_700_000_000 // 109_970_000
    assert get_amount_out(1_000, 10_000, 10_000, 30) == 906


def test_amount_in_hand_computed_with_ceiling() -> None:
    # 90_600_000_000 // 90_667_180 == 999, plus one
    assert get_amount_in(906, 10_000, 10_000, 30) == 1_000


def test_zero_input_is_zero_and_not_cached() -> None:
    cache = QuoteCache(clock=FakeClock())
    quoter = ConstantProductQuoter(cache=cache)
    assert quoter.amount_out(0, 100, 100, 30) == 0
    assert quoter.amount_in(0, 100, 100, 30) == 0
    assert len(cache) == 0


def test_empty_pool_quotes_zero_out() -> None:
    assert get_amount_out(100, 0, 100, 30) == 0
    assert get_amount_out(100, 100, 0, 30) == 0


@pytest.mark.parametrize("amount_out", [100, 150])
def test_amount_in_cannot_drain_reserve(amount_out: int) -> None:
    with pytest.raises(InsufficientLiquidity):
        get_amount_in(amount_out, 100, 100, 30)
    with pytest.raises(InsufficientLiquidity):
        ConstantProductQuoter().amount_in(amount_out, 100, 100, 30)


def test_amount_in_from_empty_pool_raises() -> None:
    with pytest.raises(InsufficientLiquidity):
        get_amount_in(1, 0, 100, 30)
    with pytest.raises(ValueError):
        get_amount_in(1, 100, 0, 30)


@pytest.mark.parametrize("fee", [-1, 10_000])
def test_fee_out_of_range_rejected(fee: int) -> None:
    with pytest.raises(ValueError):
        get_amount_out(1, 100, 100, fee)
    with pytest.raises(ValueError):
        ConstantProductQuoter().amount_out(0, 100, 100, fee)


def test_zero_fee_is_plain_constant_product() -> None:
    # 100 * 1000 // (1000 + 100)
    assert get_amount_out(100, 1_000, 1_000, 0) == 90


def test_with_slippage() -> None:
    assert with_slippage(10_000) == 9_800
    assert with_slippage(10_000, 50) == 9_950


def test_spot_price() -> None:
    assert spot_price(100, 200) == Fraction(1, 2)
    assert spot_price(0, 5) is None


def test_cache_hit_returns_same_answer() -> None:
    cache = QuoteCache(clock=FakeClock())
    quoter = ConstantProductQuoter(cache=cache)

    cold = quoter.amount_out(1_000, 10_000, 10_000, 30)
    warm = quoter.amount_out(1_000, 10_000, 10_000, 30)
    assert cold == warm == 906
    assert cache.stats().hits == 1
    assert cache.size(CachePool.FORWARD) == 1
    assert cache.size(CachePool.INVERSE) == 0


def test_forward_and_inverse_keys_do_not_collide() -> None:
    cache = QuoteCache(clock=FakeClock())
    quoter = ConstantProductQuoter(cache=cache)

    out = quoter.amount_out(906, 10_000, 10_000, 30)
    inp = quoter.amount_in(906, 10_000, 10_000, 30)
    assert out == get_amount_out(906, 10_000, 10_000, 30)
    assert inp == 1_000
    assert cache.size(CachePool.FORWARD) == 1
    assert cache.size(CachePool.INVERSE) == 1


def test_cache_failure_falls_back_to_direct_computation() -> None:
    quoter = ConstantProductQuoter(cache=FailingCache())
    assert quoter.amount_out(1_000, 10_000, 10_000, 30) == 906
    assert quoter.amount_in(906, 10_000, 10_000, 30) == 1_000


@pytest.mark.parametrize(
    "args",
    [
        (1_000.7, 10_000, 10_000, 30),
        (1_000, 10_000.0, 10_000, 30),
        (1_000, 10_000, True, 30),
    ],
)
def test_warm_cache_rejects_non_int_arguments_like_cold_cache(args) -> None:
    cold = ConstantProductQuoter(cache=QuoteCache(clock=FakeClock()))
    with pytest.raises(TypeError):
        cold.amount_out(*args)

    warm = ConstantProductQuoter(cache=QuoteCache(clock=FakeClock()))
    assert warm.amount_out(1_000, 10_000, 10_000, 30) == 906
    assert warm.amount_in(906, 10_000, 10_000, 30) == 1_000
    with pytest.raises(TypeError):
        warm.amount_out(*args)
    with pytest.raises(TypeError):
        warm.amount_in(906.2, 10_000, 10_000, 30)
    assert warm.cache.stats().hits == 0


def test_zero_amount_still_validates_reserves() -> None:
    quoter = ConstantProductQuoter(cache=QuoteCache(clock=FakeClock()))
    with pytest.raises(ValueError):
        quoter.amount_out(0, -1, 100, 30)
    with pytest.raises(TypeError):
        quoter.amount_in(0, 100, 1.5, 30)
