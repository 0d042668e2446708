from __future__ import annotations

import pytest

from zquote.core.fixed_point import (
    UINT256_MAX,
    apply_bps_haircut,
    ceil_div,
    checked_add,
    checked_mul,
    mul_div,
    mul_div_up,
    quantize,
)
from zquote.errors import BelowMinimumUnit, Overflow, QuoteError


def test_mul_div_floors_and_mul_div_up_ceils() -> None:
    assert mul_div(7, 3, 2) == 10
    assert mul_div_up(7, 3, 2) == 11
    assert mul_div(6, 3, 2) == mul_div_up(6, 3, 2) == 9


def test_ceil_div() -> None:
    assert ceil_div(10, 3) == 4
    assert ceil_div(9, 3) == 3
    assert ceil_div(0, 7) == 0


def test_mul_div_allows_wide_intermediate_product() -> None:
    # a*b is ~512 bits; only the result has to fit.
    assert mul_div(UINT256_MAX, UINT256_MAX, UINT256_MAX) == UINT256_MAX


def test_mul_div_result_overflow_raises() -> None:
    with pytest.raises(Overflow):
        mul_div(UINT256_MAX, 2, 1)


def test_checked_ops_overflow() -> None:
    with pytest.raises(Overflow):
        checked_mul(1 << 255, 2)
    with pytest.raises(Overflow):
        checked_add(UINT256_MAX, 1)
    assert checked_add(UINT256_MAX - 1, 1) == UINT256_MAX


def test_overflow_is_a_quote_error_and_builtin_overflow() -> None:
    with pytest.raises(QuoteError):
        checked_mul(1 << 200, 1 << 200)
    with pytest.raises(OverflowError):
        checked_mul(1 << 200, 1 << 200)


def test_negative_and_zero_denominator_rejected() -> None:
    with pytest.raises(ValueError):
        mul_div(-1, 2, 3)
    with pytest.raises(ValueError):
        mul_div(1, 2, 0)
    with pytest.raises(ValueError):
        ceil_div(5, 0)
    with pytest.raises(TypeError):
        mul_div(True, 2, 3)


def test_quantize_floors_to_unit() -> None:
    assert quantize(25, 10) == 20
    assert quantize(30, 10) == 30
    assert quantize(0, 10) == 0


def test_quantize_rejects_positive_sub_unit_amount() -> None:
    with pytest.raises(BelowMinimumUnit) as exc_info:
        quantize(5, 10)
    assert exc_info.value.amount == 5
    assert exc_info.value.unit_scale == 10
    assert isinstance(exc_info.value, ValueError)


def test_apply_bps_haircut() -> None:
    assert apply_bps_haircut(10_000, 200) == 9_800
    assert apply_bps_haircut(999, 0) == 999
    assert apply_bps_haircut(999, 10_000) == 0
    with pytest.raises(ValueError):
        apply_bps_haircut(1, 10_001)
