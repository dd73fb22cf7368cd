from __future__ import annotations

import pytest

from fanledger.ledger.constants import UNIT, YEAR_SECONDS
from fanledger.ledger.penalty import calculate_penalty, penalty_bps
from fanledger.runtime.errors import NoDepositRecord, ZeroAmount

EPOCH = 1_600_000_000
Y = YEAR_SECONDS


def _at(elapsed: int, amount: int):
    return calculate_penalty(epoch=EPOCH, amount=amount, now=EPOCH + elapsed)


def test_year_is_365_days() -> None:
    assert Y == 31_536_000


def test_immediate_redemption_costs_half() -> None:
    res = _at(0, 100 * UNIT)
    assert res.penalty == 50 * UNIT
    assert res.payout == 50 * UNIT
    assert res.penalty_bps == 5000


def test_two_years_reference_values() -> None:
    assert penalty_bps(2 * Y) == 3750

    small = _at(2 * Y, 100)
    assert (small.penalty, small.payout) == (37, 63)

    big = _at(2 * Y, 100 * UNIT)
    assert big.penalty == 37_500_000
    assert big.payout == 62_500_000


def test_exactly_five_years_is_free() -> None:
    res = _at(5 * Y, 100 * UNIT)
    assert res.penalty == 0
    assert res.payout == 100 * UNIT


def test_boundaries() -> None:
    assert penalty_bps(Y - 1) == 5000
    assert penalty_bps(Y) == 5000
    assert penalty_bps(3 * Y) == 2500
    assert penalty_bps(5 * Y - 1) == 1
    assert penalty_bps(5 * Y) == 0
    assert penalty_bps(50 * Y) == 0


def test_rate_truncates_before_amount_is_applied() -> None:
    # (100_000 * 5000) // (4y) == 3, so the rate is 4997 bp rather than ~4996.04
    res = _at(Y + 100_000, 100 * UNIT)
    assert res.penalty_bps == 4997
    assert res.penalty == 49_970_000
    assert res.payout == 100 * UNIT - 49_970_000


def test_penalty_is_non_increasing_in_elapsed() -> None:
    amount = 123_456_789
    prev = None
    for elapsed in range(0, 6 * Y, Y // 97):
        p = _at(elapsed, amount).penalty
        if prev is not None:
            assert p <= prev
        prev = p
    assert prev == 0


def test_payout_is_amount_minus_penalty() -> None:
    for elapsed in (0, Y, Y + 1, 2 * Y + 17, 4 * Y, 5 * Y):
        for amount in (1, 3, 99, 100 * UNIT + 1):
            res = _at(elapsed, amount)
            assert res.payout == amount - res.penalty


def test_clock_behind_epoch_is_treated_as_zero_elapsed() -> None:
    res = calculate_penalty(epoch=EPOCH, amount=10, now=EPOCH - 50)
    assert res.elapsed == 0
    assert res.penalty == 5


def test_no_epoch_and_zero_amount_rejected() -> None:
    with pytest.raises(NoDepositRecord):
        calculate_penalty(epoch=0, amount=10, now=EPOCH)
    with pytest.raises(ZeroAmount):
        calculate_penalty(epoch=EPOCH, amount=0, now=EPOCH)
