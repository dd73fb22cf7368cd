from __future__ import annotations

import pytest

from fanledger.ledger.constants import UNIT
from fanledger.runtime.errors import InvalidRecipient, TransferFailed, Unauthorized, ZeroAmount

FIXED = ("fixed-1", "fixed-2", "fixed-3", "fixed-4", "fixed-5")
DYNAMIC = ("level-1", "level-2", "level-3")
RECIPIENTS = FIXED + DYNAMIC


def _asset_balances(eng) -> dict:
    return dict(eng.view().assets.get("balances", {}))


def test_deposit_fans_out_and_mints(engine, clock) -> None:
    minted = engine.deposit("alice", 100 * UNIT)
    assert minted == 100 * UNIT

    expected = dict(zip(RECIPIENTS, (55, 5, 5, 15, 5, 10, 3, 2)))
    for addr, units in expected.items():
        assert engine.asset_balance_of(addr) == units * UNIT

    assert engine.asset_balance_of("alice") == 900 * UNIT
    assert engine.balance_of("alice") == 100 * UNIT
    assert engine.total_supply() == 100 * UNIT
    assert engine.epoch_of("alice") == clock.t


def test_deposit_event_records_legs_and_recipients(engine, clock) -> None:
    engine.deposit("alice", 99)
    (ev,) = [e for e in engine.events() if e["kind"] == "deposit"]
    assert ev["depositor"] == "alice"
    assert ev["total"] == 99
    assert ev["legs"] == [54, 4, 4, 14, 4, 9, 2, 1]
    assert ev["residual"] == 7
    assert ev["dynamic_recipients"] == list(DYNAMIC)
    assert ev["timestamp"] == clock.t


def test_residual_is_never_debited(engine) -> None:
    engine.deposit("alice", 99)
    assert engine.asset_balance_of("alice") == 1_000 * UNIT - 92
    # certificates are still credited 1:1 on the full amount
    assert engine.balance_of("alice") == 99


def test_second_deposit_resets_epoch(engine, clock) -> None:
    engine.deposit("alice", UNIT)
    first = clock.t
    clock.advance(1_000)
    engine.deposit("alice", UNIT)
    assert engine.epoch_of("alice") == first + 1_000


def test_failed_leg_leaves_no_trace(engine) -> None:
    before = _asset_balances(engine)
    engine.freeze_asset_account("level-2")

    with pytest.raises(TransferFailed) as e:
        engine.deposit("alice", 100 * UNIT)
    assert e.value.reason == "deposit_leg_failed"
    assert e.value.details["leg"] == 6

    assert _asset_balances(engine) == before
    assert engine.balance_of("alice") == 0
    assert engine.total_supply() == 0
    assert engine.epoch_of("alice") == 0
    assert [ev for ev in engine.events() if ev["kind"] == "deposit"] == []


def test_allowance_running_out_midway_rolls_back_earlier_legs(engine) -> None:
    engine.approve_assets("alice", 60 * UNIT)
    before = _asset_balances(engine)

    with pytest.raises(TransferFailed):
        engine.deposit("alice", 100 * UNIT)

    assert _asset_balances(engine) == before
    assert engine.asset_balance_of("fixed-1") == 0
    assert engine.balance_of("alice") == 0


def test_insufficient_asset_balance_fails(make_engine) -> None:
    eng = make_engine(fund=False)
    eng.approve_assets("carol", 10 * UNIT)
    with pytest.raises(TransferFailed):
        eng.deposit("carol", 10 * UNIT)
    assert eng.total_supply() == 0


def test_zero_and_negative_deposits_rejected(engine) -> None:
    with pytest.raises(ZeroAmount):
        engine.deposit("alice", 0)
    with pytest.raises(ZeroAmount):
        engine.deposit("alice", -5)


def test_null_depositor_rejected(engine) -> None:
    with pytest.raises(InvalidRecipient):
        engine.deposit("", UNIT)


def test_registry_policy_refuses_overrides(engine) -> None:
    with pytest.raises(Unauthorized) as e:
        engine.deposit("alice", UNIT, ["x1", "x2", "x3"])
    assert e.value.reason == "dynamic_override_not_allowed"
    assert engine.total_supply() == 0


def test_per_deposit_policy_routes_dynamic_legs_to_overrides(make_engine) -> None:
    eng = make_engine(routing_policy="per_deposit")
    eng.deposit("alice", 100 * UNIT, ["x1", "x2", "x3"])
    assert eng.asset_balance_of("x1") == 10 * UNIT
    assert eng.asset_balance_of("x2") == 3 * UNIT
    assert eng.asset_balance_of("x3") == 2 * UNIT
    assert eng.asset_balance_of("level-1") == 0
    # registry untouched
    assert [r["address"] for r in eng.wallets()["dynamic"]] == list(DYNAMIC)

    # without overrides the registry is used
    eng.deposit("alice", 100 * UNIT)
    assert eng.asset_balance_of("level-1") == 10 * UNIT


def test_per_deposit_policy_rejects_null_override(make_engine) -> None:
    eng = make_engine(routing_policy="per_deposit")
    with pytest.raises(InvalidRecipient):
        eng.deposit("alice", UNIT, ["x1", "0x0000000000000000000000000000000000000000", "x3"])
    with pytest.raises(InvalidRecipient):
        eng.deposit("alice", UNIT, ["x1", "x2"])


def test_dynamic_update_redirects_later_deposits(engine) -> None:
    engine.update_dynamic_recipients("owner", "n1", "n2", "n3")
    engine.deposit("alice", 100 * UNIT)
    assert engine.asset_balance_of("n1") == 10 * UNIT
    assert engine.asset_balance_of("n3") == 2 * UNIT
    assert engine.asset_balance_of("level-1") == 0

    (ev,) = [e for e in engine.events() if e["kind"] == "dynamic_recipients_updated"]
    assert ev["caller"] == "owner"
    assert ev["recipients"] == ["n1", "n2", "n3"]


def test_dynamic_update_requires_owner_and_fresh_nonce(engine) -> None:
    with pytest.raises(Unauthorized):
        engine.update_dynamic_recipients("alice", "n1", "n2", "n3")

    engine.update_dynamic_recipients("owner", "n1", "n2", "n3", nonce=5)
    with pytest.raises(Unauthorized) as e:
        engine.update_dynamic_recipients("owner", "m1", "m2", "m3", nonce=5)
    assert e.value.reason == "stale_nonce"
    assert [r["address"] for r in engine.wallets()["dynamic"]] == ["n1", "n2", "n3"]
