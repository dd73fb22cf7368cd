# src/fanledger/runtime/engine_boot.py
from __future__ import annotations

from typing import Optional

from fanledger.ledger.wallets import OwnerAuthorizer
from fanledger.runtime.engine import SettlementEngine
from fanledger.runtime.engine_config import EngineConfig, load_engine_config


def build_engine(cfg: Optional[EngineConfig] = None) -> SettlementEngine:
    """
    Build a SettlementEngine from an explicit config or, if omitted, from
    FANLEDGER_CONFIG_PATH (falling back to the FANLEDGER_MODE defaults).
    """
    c = cfg or load_engine_config()
    return SettlementEngine(
        wallets=c.wallet_config(),
        is_authorized=OwnerAuthorizer(c.owner),
        settlement_reserve=c.settlement_reserve,
        operator=c.operator,
        routing_policy=c.routing_policy,
        db_path=c.db_path or None,
    )
