# src/fanledger/runtime/engine_config.py
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from fanledger.ledger.constants import DEFAULT_OPERATOR_ADDRESS, ROUTING_POLICIES, ROUTING_REGISTRY
from fanledger.ledger.state import is_null_address
from fanledger.ledger.wallets import WalletConfig

Json = Dict[str, Any]


def _as_int(v: Any, default: int) -> int:
    try:
        return int(v)
    except (TypeError, ValueError):
        return int(default)


def _as_str(v: Any, default: str) -> str:
    if v is None:
        return str(default)
    s = str(v)
    return s if s.strip() else str(default)


def _as_addrs(v: Any) -> Tuple[str, ...]:
    if not isinstance(v, (list, tuple)):
        return ()
    return tuple("" if a is None else str(a).strip() for a in v)


@dataclass(frozen=True)
class EngineConfig:
    mode: str  # "dev" | "test" | "prod"

    # Empty db_path keeps the ledger in memory only.
    db_path: str

    operator: str
    owner: str
    settlement_reserve: str
    fixed_recipients: Tuple[str, ...]
    dynamic_recipients: Tuple[str, ...]
    routing_policy: str

    api_host: str
    api_port: int
    log_level: str

    # Hex/base64 ed25519 public key that must sign admin API requests.
    admin_pubkey: str = ""

    extra: Json = field(default_factory=dict)

    def wallet_config(self) -> WalletConfig:
        return WalletConfig.create(self.fixed_recipients, self.dynamic_recipients)


_ALLOWED_MODES = {"dev", "test", "prod"}


def validate_engine_config(cfg: EngineConfig) -> None:
    """Fail-fast validation for operator config."""
    mode = str(cfg.mode or "").strip().lower()
    if mode not in _ALLOWED_MODES:
        raise ValueError(f"mode must be one of {_ALLOWED_MODES}; got: {cfg.mode!r}")

    if str(cfg.routing_policy) not in ROUTING_POLICIES:
        raise ValueError(f"routing_policy must be one of {ROUTING_POLICIES}; got: {cfg.routing_policy!r}")

    for name in ("operator", "owner", "settlement_reserve"):
        if is_null_address(getattr(cfg, name)):
            raise ValueError(f"{name} must be a non-null address")

    if int(cfg.api_port) <= 0 or int(cfg.api_port) > 65535:
        raise ValueError(f"api_port must be 1..65535; got: {cfg.api_port}")

    if mode == "prod" and not cfg.db_path.strip():
        raise ValueError("db_path is required in prod mode")

    # Raises InvalidRecipient / WeightMismatch on a bad registry.
    cfg.wallet_config()


DEFAULT_PROD_DB_PATH = "./data/fanledger.db"


def default_engine_config() -> EngineConfig:
    """Defaults used when no config file is given.

    Mode comes from FANLEDGER_MODE and is prod when unset, so running without
    a config never drops into an in-memory ledger by accident. In prod the
    ledger persists to FANLEDGER_DB_PATH, else ./data/fanledger.db. Other
    modes stay in memory unless FANLEDGER_DB_PATH is set.
    """
    mode = (os.environ.get("FANLEDGER_MODE") or "prod").strip().lower()
    db_path = (os.environ.get("FANLEDGER_DB_PATH") or "").strip()
    if not db_path and mode == "prod":
        db_path = DEFAULT_PROD_DB_PATH
    return EngineConfig(
        mode=mode,
        db_path=db_path,
        operator=DEFAULT_OPERATOR_ADDRESS,
        owner="owner",
        settlement_reserve="settlement-reserve",
        fixed_recipients=("fixed-1", "fixed-2", "fixed-3", "fixed-4", "fixed-5"),
        dynamic_recipients=("level-1", "level-2", "level-3"),
        routing_policy=ROUTING_REGISTRY,
        api_host="127.0.0.1",
        api_port=8080,
        log_level="INFO",
    )


def _read_raw(path: Path) -> Json:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in {".yaml", ".yml"}:
        raw = yaml.safe_load(text)
    else:
        raw = json.loads(text)
    if not isinstance(raw, dict):
        raise ValueError("engine config must be a mapping")
    return raw


def read_engine_config_file(path: str) -> EngineConfig:
    raw = _read_raw(Path(path))
    d = default_engine_config()

    fixed = _as_addrs(raw.get("fixed_recipients")) or d.fixed_recipients
    dynamic = _as_addrs(raw.get("dynamic_recipients")) or d.dynamic_recipients

    known = set(EngineConfig.__dataclass_fields__.keys())
    cfg = EngineConfig(
        mode=_as_str(raw.get("mode"), d.mode).strip().lower(),
        # A config file names its own database; only FANLEDGER_DB_PATH fills a gap.
        db_path=str(raw.get("db_path") or os.environ.get("FANLEDGER_DB_PATH") or "").strip(),
        operator=_as_str(raw.get("operator"), d.operator),
        owner=_as_str(raw.get("owner"), d.owner),
        settlement_reserve=_as_str(raw.get("settlement_reserve"), d.settlement_reserve),
        fixed_recipients=fixed,
        dynamic_recipients=dynamic,
        routing_policy=_as_str(raw.get("routing_policy"), d.routing_policy).strip().lower(),
        api_host=_as_str(raw.get("api_host"), d.api_host),
        api_port=_as_int(raw.get("api_port"), d.api_port),
        log_level=_as_str(raw.get("log_level"), d.log_level).upper(),
        admin_pubkey=_as_str(raw.get("admin_pubkey"), d.admin_pubkey),
        extra={k: v for k, v in raw.items() if k not in known},
    )

    validate_engine_config(cfg)
    return cfg


def load_engine_config(*, config_path: Optional[str] = None) -> EngineConfig:
    p = config_path or os.environ.get("FANLEDGER_CONFIG_PATH")
    if p:
        return read_engine_config_file(p)

    cfg = default_engine_config()
    validate_engine_config(cfg)
    return cfg
