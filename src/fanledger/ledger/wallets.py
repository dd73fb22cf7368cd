# src/fanledger/ledger/wallets.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from fanledger.ledger.constants import (
    DYNAMIC_RECIPIENT_COUNT,
    DYNAMIC_WEIGHTS_BPS,
    FIXED_RECIPIENT_COUNT,
    FIXED_WEIGHTS_BPS,
)
from fanledger.ledger.split import require_weights
from fanledger.ledger.state import append_event, is_null_address
from fanledger.runtime.errors import InvalidRecipient, Unauthorized, WeightMismatch

Json = Dict[str, Any]

AuthPredicate = Callable[[str], bool]


@dataclass(frozen=True, slots=True)
class Recipient:
    address: str
    weight_bps: int

    def to_json(self) -> Json:
        return {"address": self.address, "weight_bps": int(self.weight_bps)}


@dataclass(frozen=True, slots=True)
class WalletConfig:
    """Eight fan-out recipients: five fixed, three replaceable by the owner.

    Build with :meth:`create`, which enforces both registry invariants
    (no null address, weights sum to 10,000 bp).
    """

    fixed: Tuple[Recipient, ...]
    dynamic: Tuple[Recipient, ...]

    @classmethod
    def create(
        cls,
        fixed: Sequence[str],
        dynamic: Sequence[str],
        *,
        fixed_weights: Sequence[int] = FIXED_WEIGHTS_BPS,
        dynamic_weights: Sequence[int] = DYNAMIC_WEIGHTS_BPS,
    ) -> "WalletConfig":
        fixed_addrs = _require_addresses(fixed, FIXED_RECIPIENT_COUNT, group="fixed")
        dynamic_addrs = _require_addresses(dynamic, DYNAMIC_RECIPIENT_COUNT, group="dynamic")

        fw = tuple(int(w) for w in fixed_weights)
        dw = tuple(int(w) for w in dynamic_weights)
        if len(fw) != FIXED_RECIPIENT_COUNT or len(dw) != DYNAMIC_RECIPIENT_COUNT:
            raise WeightMismatch("wrong_weight_count", {"fixed": len(fw), "dynamic": len(dw)})
        require_weights(fw + dw)

        return cls(
            fixed=tuple(Recipient(a, w) for a, w in zip(fixed_addrs, fw)),
            dynamic=tuple(Recipient(a, w) for a, w in zip(dynamic_addrs, dw)),
        )

    @property
    def recipients(self) -> Tuple[Recipient, ...]:
        return self.fixed + self.dynamic

    @property
    def addresses(self) -> Tuple[str, ...]:
        return tuple(r.address for r in self.recipients)

    @property
    def weights(self) -> Tuple[int, ...]:
        return tuple(r.weight_bps for r in self.recipients)

    def to_json(self) -> Json:
        return {
            "fixed": [r.to_json() for r in self.fixed],
            "dynamic": [r.to_json() for r in self.dynamic],
        }

    @classmethod
    def from_json(cls, d: Any) -> "WalletConfig":
        if not isinstance(d, dict):
            raise InvalidRecipient("wallets_not_configured", {})
        fixed = [r for r in (d.get("fixed") or []) if isinstance(r, dict)]
        dynamic = [r for r in (d.get("dynamic") or []) if isinstance(r, dict)]
        return cls.create(
            [r.get("address") for r in fixed],
            [r.get("address") for r in dynamic],
            fixed_weights=[int(r.get("weight_bps", 0)) for r in fixed],
            dynamic_weights=[int(r.get("weight_bps", 0)) for r in dynamic],
        )


def _require_addresses(addrs: Sequence[Any], count: int, *, group: str) -> List[str]:
    out = list(addrs or [])
    if len(out) != int(count):
        raise InvalidRecipient("wrong_recipient_count", {"group": group, "expected": int(count), "got": len(out)})
    for i, a in enumerate(out):
        if is_null_address(a):
            raise InvalidRecipient("null_address", {"group": group, "index": i})
    return [str(a).strip() for a in out]


def configure_wallets(state: Json, cfg: WalletConfig) -> Json:
    """Install the registry into a fresh state. Construction-time only."""
    if isinstance(state.get("wallets"), dict):
        raise Unauthorized("wallets_already_configured", {})
    root = cfg.to_json()
    root["updated_by"] = ""
    root["updated_at"] = 0
    state["wallets"] = root
    return root


def wallet_config(state: Json) -> WalletConfig:
    """Re-validate and return the registry stored in ``state``."""
    return WalletConfig.from_json(state.get("wallets"))


def wallet_snapshot(state: Json) -> Json:
    cfg = wallet_config(state)
    return {
        "fixed": [r.to_json() for r in cfg.fixed],
        "dynamic": [r.to_json() for r in cfg.dynamic],
        "total_bps": sum(cfg.weights),
    }


def update_dynamic_recipients(
    state: Json,
    *,
    caller: str,
    level1: Optional[str],
    level2: Optional[str],
    level3: Optional[str],
    is_authorized: AuthPredicate,
    now: int,
) -> Json:
    """Replace all three dynamic recipient addresses as one unit.

    Weights stay fixed. Either all three addresses change or none do.
    """
    if not is_authorized(str(caller or "")):
        raise Unauthorized(details={"caller": caller})

    new_addrs = [level1, level2, level3]
    for i, a in enumerate(new_addrs):
        if is_null_address(a):
            raise InvalidRecipient("null_address", {"group": "dynamic", "index": i})

    cfg = wallet_config(state)
    updated = WalletConfig.create(
        [r.address for r in cfg.fixed],
        [str(a).strip() for a in new_addrs],
        fixed_weights=[r.weight_bps for r in cfg.fixed],
        dynamic_weights=[r.weight_bps for r in cfg.dynamic],
    )

    root = updated.to_json()
    root["updated_by"] = str(caller)
    root["updated_at"] = int(now)
    state["wallets"] = root

    addresses = [r.address for r in updated.dynamic]
    append_event(state, "dynamic_recipients_updated", caller=str(caller), recipients=addresses, timestamp=int(now))
    return {"applied": "DYNAMIC_RECIPIENTS_UPDATE", "recipients": addresses, "caller": str(caller)}


class OwnerAuthorizer:
    """Authorization predicate accepting exactly one owner address."""

    def __init__(self, owner: str) -> None:
        if is_null_address(owner):
            raise InvalidRecipient("null_owner", {})
        self.owner = str(owner).strip()

    def __call__(self, caller: str) -> bool:
        return bool(caller) and str(caller).strip() == self.owner


__all__ = [
    "Recipient",
    "WalletConfig",
    "OwnerAuthorizer",
    "configure_wallets",
    "wallet_config",
    "wallet_snapshot",
    "update_dynamic_recipients",
]
