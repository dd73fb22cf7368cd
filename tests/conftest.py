from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure local "src/" takes precedence over any globally-installed "fanledger" package.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

src_str = str(SRC)
if src_str not in sys.path:
    sys.path.insert(0, src_str)

from fanledger.ledger.constants import UNIT  # noqa: E402
from fanledger.ledger.wallets import OwnerAuthorizer, WalletConfig  # noqa: E402
from fanledger.runtime.engine import SettlementEngine  # noqa: E402
from fanledger.testing.clock import FakeClock  # noqa: E402

FIXED = ("fixed-1", "fixed-2", "fixed-3", "fixed-4", "fixed-5")
DYNAMIC = ("level-1", "level-2", "level-3")
RESERVE = "reserve"
OWNER = "owner"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def wallet_cfg() -> WalletConfig:
    return WalletConfig.create(FIXED, DYNAMIC)


@pytest.fixture
def make_engine(clock, wallet_cfg):
    """Factory for an engine with alice/bob/reserve funded and approved."""

    def _make(*, routing_policy: str = "registry", db_path: str | None = None, fund: bool = True) -> SettlementEngine:
        eng = SettlementEngine(
            wallets=wallet_cfg,
            is_authorized=OwnerAuthorizer(OWNER),
            settlement_reserve=RESERVE,
            routing_policy=routing_policy,
            clock=clock,
            db_path=db_path,
        )
        if fund:
            for who in ("alice", "bob"):
                eng.fund_assets(who, 1_000 * UNIT)
                eng.approve_assets(who, 1_000 * UNIT)
            eng.fund_assets(RESERVE, 10_000 * UNIT)
            eng.approve_assets(RESERVE, 10_000 * UNIT)
        return eng

    return _make


@pytest.fixture
def engine(make_engine) -> SettlementEngine:
    return make_engine()
