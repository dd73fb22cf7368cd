from __future__ import annotations

import pytest

from fanledger.ledger.constants import DYNAMIC_WEIGHTS_BPS, FIXED_WEIGHTS_BPS, UNIT
from fanledger.ledger.split import require_weights, split_amount
from fanledger.runtime.errors import WeightMismatch, ZeroAmount

WEIGHTS = FIXED_WEIGHTS_BPS + DYNAMIC_WEIGHTS_BPS


def test_reference_weights_sum_to_100_percent() -> None:
    assert sum(WEIGHTS) == 10_000
    assert require_weights(WEIGHTS) == (5500, 500, 500, 1500, 500, 1000, 300, 200)


def test_hundred_units_split_without_dust() -> None:
    res = split_amount(100 * UNIT, WEIGHTS)
    assert res.amounts == tuple(x * UNIT for x in (55, 5, 5, 15, 5, 10, 3, 2))
    assert res.residual == 0
    assert res.total == 100 * UNIT


def test_floor_division_leaves_residual_with_depositor() -> None:
    res = split_amount(99, WEIGHTS)
    assert res.amounts == (54, 4, 4, 14, 4, 9, 2, 1)
    assert res.residual == 7
    # no leg absorbs the remainder
    assert res.amounts[0] == 99 * 5500 // 10_000


def test_tiny_amount_rounds_most_legs_to_zero() -> None:
    res = split_amount(7, WEIGHTS)
    assert res.amounts == (3, 0, 0, 1, 0, 0, 0, 0)
    assert res.residual == 3


def test_residual_is_bounded_for_every_small_amount() -> None:
    for amount in range(1, 5_001):
        res = split_amount(amount, WEIGHTS)
        assert res.total <= amount
        assert 0 <= res.residual < 8
        assert res.total + res.residual == amount


def test_weight_mismatch_is_checked_on_every_call() -> None:
    bad = (5500, 500, 500, 1500, 500, 1000, 300, 100)
    with pytest.raises(WeightMismatch) as e:
        split_amount(100, bad)
    assert e.value.code == "weight_mismatch"
    assert e.value.details == {"sum": 9_900, "expected": 10_000}


def test_wrong_leg_count_and_negative_weights_rejected() -> None:
    with pytest.raises(WeightMismatch):
        require_weights((5000, 5000))
    with pytest.raises(WeightMismatch):
        require_weights((5500, 500, 500, 1500, 500, 1600, 300, -400))


def test_zero_amount_rejected() -> None:
    with pytest.raises(ZeroAmount):
        split_amount(0, WEIGHTS)
