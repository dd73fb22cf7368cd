from __future__ import annotations

import threading

from fanledger.ledger.constants import UNIT


def test_readers_never_see_partial_deposits(engine) -> None:
    recipients = [r["address"] for r in engine.wallets()["fixed"] + engine.wallets()["dynamic"]]
    errors: list[str] = []
    stop = threading.Event()

    def reader() -> None:
        while not stop.is_set():
            view = engine.view()
            paid = sum(view.asset_balance_of(a) for a in recipients)
            if paid != view.total_supply():
                errors.append(f"paid={paid} supply={view.total_supply()}")

    def writer(who: str) -> None:
        for _ in range(25):
            engine.deposit(who, UNIT)

    r = threading.Thread(target=reader)
    r.start()
    writers = [threading.Thread(target=writer, args=(w,)) for w in ("alice", "bob", "alice", "bob")]
    for w in writers:
        w.start()
    for w in writers:
        w.join()
    stop.set()
    r.join()

    assert errors == []
    assert engine.total_supply() == 100 * UNIT
    assert engine.balance_of("alice") == 50 * UNIT
    assert [e["seq"] for e in engine.events(limit=1000)] == list(range(1, 101))


def test_deposits_split_across_one_registry_generation(engine) -> None:
    generations = [("level-1", "level-2", "level-3")]
    generations += [(f"g{i}-1", f"g{i}-2", f"g{i}-3") for i in range(30)]
    started = threading.Event()

    def updater() -> None:
        started.wait()
        for gen in generations[1:]:
            engine.update_dynamic_recipients("owner", *gen)

    def depositor(who: str) -> None:
        started.wait()
        for _ in range(40):
            engine.deposit(who, UNIT)

    threads = [threading.Thread(target=updater)]
    threads += [threading.Thread(target=depositor, args=(w,)) for w in ("alice", "bob", "alice")]
    for t in threads:
        t.start()
    started.set()
    for t in threads:
        t.join()

    allowed = {repr(list(g)) for g in generations}
    deposits = [e for e in engine.events(limit=1000) if e["kind"] == "deposit"]
    assert len(deposits) == 120
    for ev in deposits:
        assert repr(ev["dynamic_recipients"]) in allowed
        assert ev["recipients"][5:] == ev["dynamic_recipients"]

    # Deposits after an update use that update's registry, never an older one.
    current = list(generations[0])
    for ev in engine.events(limit=1000):
        if ev["kind"] == "dynamic_recipients_updated":
            current = ev["recipients"]
        elif ev["kind"] == "deposit":
            assert ev["dynamic_recipients"] == current
