from __future__ import annotations

import pytest

from fanledger.ledger.constants import UNIT, YEAR_SECONDS
from fanledger.runtime.errors import InsufficientBalance, NoDepositRecord, SettlementInsufficientFunds, ZeroAmount

Y = YEAR_SECONDS


def test_redeem_after_two_years_pays_62_5_percent(engine, clock) -> None:
    engine.deposit("alice", 100 * UNIT)
    clock.advance(2 * Y)

    before = engine.asset_balance_of("alice")
    payout = engine.redeem("alice", 100 * UNIT)

    assert payout == 62_500_000
    assert engine.asset_balance_of("alice") == before + 62_500_000
    assert engine.asset_balance_of("reserve") == 10_000 * UNIT - 62_500_000
    assert engine.balance_of("alice") == 0
    assert engine.total_supply() == 0

    (ev,) = [e for e in engine.events() if e["kind"] == "redemption"]
    assert ev["penalty"] == 37_500_000
    assert ev["penalty_bps"] == 3750
    assert ev["timestamp"] == clock.t


def test_immediate_redeem_loses_half(engine) -> None:
    engine.deposit("alice", 10 * UNIT)
    assert engine.redeem("alice", 10 * UNIT) == 5 * UNIT


def test_partial_redeem_keeps_epoch(engine, clock) -> None:
    engine.deposit("alice", 10 * UNIT)
    start = clock.t
    clock.advance(Y)
    engine.redeem("alice", 4 * UNIT)
    assert engine.balance_of("alice") == 6 * UNIT
    assert engine.epoch_of("alice") == start


def test_redeem_after_five_years_is_free(engine, clock) -> None:
    engine.deposit("alice", 10 * UNIT)
    clock.advance(5 * Y)
    assert engine.redeem("alice", 10 * UNIT) == 10 * UNIT


def test_unfunded_reserve_rolls_back_burn(make_engine, clock) -> None:
    eng = make_engine(fund=False)
    eng.fund_assets("alice", 100 * UNIT)
    eng.approve_assets("alice", 100 * UNIT)
    eng.fund_assets("reserve", 100 * UNIT)
    eng.deposit("alice", 100 * UNIT)

    with pytest.raises(SettlementInsufficientFunds) as e:
        eng.redeem("alice", 100 * UNIT)
    assert e.value.code == "settlement_insufficient_funds"

    assert eng.balance_of("alice") == 100 * UNIT
    assert eng.total_supply() == 100 * UNIT
    assert [ev for ev in eng.events() if ev["kind"] == "redemption"] == []


def test_redeem_more_than_held(engine) -> None:
    engine.deposit("alice", UNIT)
    with pytest.raises(InsufficientBalance):
        engine.redeem("alice", UNIT + 1)
    with pytest.raises(ZeroAmount):
        engine.redeem("alice", 0)


def test_preview_without_deposit(engine) -> None:
    with pytest.raises(NoDepositRecord):
        engine.preview("nobody", UNIT)


def test_preview_matches_redeem(engine, clock) -> None:
    engine.deposit("alice", 100 * UNIT)
    clock.advance(Y + 100_000)
    quote = engine.preview("alice", 100 * UNIT)
    assert quote.penalty_bps == 4997
    assert quote.penalty == 49_970_000
    assert engine.redeem("alice", 100 * UNIT) == quote.payout


def test_zero_transfer_pulls_recipient_epoch_back(engine, clock) -> None:
    engine.deposit("alice", 10 * UNIT)
    origin = clock.t
    clock.advance(Y)
    engine.deposit("bob", 100 * UNIT)

    engine.transfer("alice", "bob", 0)
    assert engine.epoch_of("bob") == origin

    clock.advance(2 * Y)
    assert engine.preview("bob", 100 * UNIT).penalty_bps == 2500
    assert engine.redeem("bob", 100 * UNIT) == 75 * UNIT
