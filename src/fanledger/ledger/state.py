# src/fanledger/ledger/state.py
from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from fanledger.ledger.constants import NULL_ADDRESS

Json = Dict[str, Any]


def _as_int(v: Any, default: int = 0) -> int:
    try:
        if isinstance(v, bool):
            return int(default)
        return int(v)
    except Exception:
        return int(default)


def _as_dict(v: Any) -> Json:
    return v if isinstance(v, dict) else {}


def is_null_address(addr: Any) -> bool:
    """True for None, blank strings and the all-zero hex address."""
    if addr is None:
        return True
    if not isinstance(addr, str):
        return True
    s = addr.strip().lower()
    if not s:
        return True
    if s == NULL_ADDRESS:
        return True
    if s.startswith("0x") and len(s) > 2 and set(s[2:]) == {"0"}:
        return True
    return False


def norm_address(addr: Any) -> Optional[str]:
    """Return a stripped address, or None for the null address."""
    if is_null_address(addr):
        return None
    return str(addr).strip()


def ensure_certificates(state: Json) -> Json:
    root = state.get("certificates")
    if not isinstance(root, dict):
        root = {}
        state["certificates"] = root
    root.setdefault("balances", {})
    root.setdefault("allowances", {})
    root.setdefault("total_supply", 0)
    return root


def ensure_epochs(state: Json) -> Json:
    root = state.get("epochs")
    if not isinstance(root, dict):
        root = {}
        state["epochs"] = root
    return root


def ensure_assets(state: Json) -> Json:
    root = state.get("assets")
    if not isinstance(root, dict):
        root = {}
        state["assets"] = root
    root.setdefault("balances", {})
    root.setdefault("allowances", {})
    root.setdefault("frozen", [])
    return root


def ensure_params(state: Json) -> Json:
    params = state.get("params")
    if not isinstance(params, dict):
        params = {}
        state["params"] = params
    return params


def ensure_events(state: Json) -> List[Json]:
    root = state.get("events")
    if not isinstance(root, list):
        root = []
        state["events"] = root
    return root


def ensure_holder_keys(state: Json) -> Json:
    root = state.get("holder_keys")
    if not isinstance(root, dict):
        root = {}
        state["holder_keys"] = root
    return root


def ensure_nonces(state: Json) -> Json:
    root = state.get("nonces")
    if not isinstance(root, dict):
        root = {}
        state["nonces"] = root
    return root


def append_event(state: Json, kind: str, **fields: Any) -> Json:
    """Append an audit record and return it. ``seq`` is 1-based and gap-free."""
    events = ensure_events(state)
    seq = _as_int(state.get("event_seq"), 0) + 1
    state["event_seq"] = seq
    rec: Json = {"seq": seq, "kind": str(kind)}
    rec.update(fields)
    events.append(rec)
    return rec


@dataclass(frozen=True, slots=True)
class LedgerView:
    """
    Immutable read-only ledger view used by query paths.
    """

    wallets: Dict[str, Any] = field(default_factory=dict)
    certificates: Dict[str, Any] = field(default_factory=dict)
    epochs: Dict[str, Any] = field(default_factory=dict)
    assets: Dict[str, Any] = field(default_factory=dict)
    params: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_ledger(cls, state: Dict[str, Any]) -> "LedgerView":
        return cls(
            wallets=copy.deepcopy(_as_dict(state.get("wallets"))),
            certificates=copy.deepcopy(_as_dict(state.get("certificates"))),
            epochs=copy.deepcopy(_as_dict(state.get("epochs"))),
            assets=copy.deepcopy(_as_dict(state.get("assets"))),
            params=copy.deepcopy(_as_dict(state.get("params"))),
        )

    def balance_of(self, holder: str) -> int:
        return _as_int(_as_dict(self.certificates.get("balances")).get(holder), 0)

    def total_supply(self) -> int:
        return _as_int(self.certificates.get("total_supply"), 0)

    def epoch_of(self, holder: str) -> int:
        return _as_int(self.epochs.get(holder), 0)

    def asset_balance_of(self, addr: str) -> int:
        return _as_int(_as_dict(self.assets.get("balances")).get(addr), 0)
