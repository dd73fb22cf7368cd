# src/fanledger/ledger/assets.py
from __future__ import annotations

"""In-state ledger for the underlying asset.

This plays the external asset-transfer primitive. Each call is all-or-nothing:
any rejection raises TransferFailed before a single balance moves. Because the
balances live in the same state dict as certificates and epochs, the engine's
copy-on-write transaction also undoes earlier successful calls when a later
leg of the same operation fails.
"""

from typing import Any, Dict, List

from fanledger.ledger.state import _as_int, ensure_assets, norm_address
from fanledger.runtime.errors import InvalidRecipient, TransferFailed, ZeroAmount

Json = Dict[str, Any]


def _addr(a: Any, *, role: str) -> str:
    out = norm_address(a)
    if out is None:
        raise InvalidRecipient("null_address", {"role": role})
    return out


def balance_of(state: Json, addr: str) -> int:
    return _as_int(ensure_assets(state)["balances"].get(addr), 0)


def allowance(state: Json, owner: str, spender: str) -> int:
    per_owner = ensure_assets(state)["allowances"].get(owner)
    if not isinstance(per_owner, dict):
        return 0
    return _as_int(per_owner.get(spender), 0)


def frozen(state: Json) -> List[str]:
    return [str(a) for a in ensure_assets(state)["frozen"]]


def credit(state: Json, addr: str, amount: int) -> Json:
    a = _addr(addr, role="account")
    amt = _as_int(amount, 0)
    if amt <= 0:
        raise ZeroAmount(details={"amount": amount})
    balances = ensure_assets(state)["balances"]
    balances[a] = _as_int(balances.get(a), 0) + amt
    return {"applied": "ASSET_CREDIT", "account": a, "amount": amt}


def approve(state: Json, owner: str, spender: str, amount: int) -> Json:
    o = _addr(owner, role="owner")
    sp = _addr(spender, role="spender")
    amt = max(0, _as_int(amount, 0))
    allowances = ensure_assets(state)["allowances"]
    per_owner = allowances.get(o)
    if not isinstance(per_owner, dict):
        per_owner = {}
        allowances[o] = per_owner
    per_owner[sp] = amt
    return {"applied": "ASSET_APPROVE", "owner": o, "spender": sp, "amount": amt}


def set_frozen(state: Json, addr: str, value: bool) -> Json:
    a = _addr(addr, role="account")
    root = ensure_assets(state)
    current = [str(x) for x in root["frozen"]]
    if value and a not in current:
        current.append(a)
    if not value:
        current = [x for x in current if x != a]
    root["frozen"] = sorted(current)
    return {"applied": "ASSET_FREEZE" if value else "ASSET_UNFREEZE", "account": a}


def transfer(state: Json, sender: str, recipient: str, amount: int) -> Json:
    s = _addr(sender, role="sender")
    r = _addr(recipient, role="recipient")
    amt = _as_int(amount, -1)
    if amt < 0:
        raise TransferFailed("negative_amount", {"amount": amount})

    root = ensure_assets(state)
    blocked = set(str(x) for x in root["frozen"])
    for who in (s, r):
        if who in blocked:
            raise TransferFailed("account_frozen", {"account": who})

    balances = root["balances"]
    have = _as_int(balances.get(s), 0)
    if have < amt:
        raise TransferFailed("insufficient_asset_balance", {"account": s, "balance": have, "amount": amt})

    balances[s] = have - amt
    balances[r] = _as_int(balances.get(r), 0) + amt
    return {"applied": "ASSET_TRANSFER", "from": s, "to": r, "amount": amt}


def transfer_from(state: Json, spender: str, sender: str, recipient: str, amount: int) -> Json:
    sp = _addr(spender, role="spender")
    s = _addr(sender, role="sender")
    amt = _as_int(amount, -1)
    have = allowance(state, s, sp)
    if have < amt:
        raise TransferFailed("insufficient_asset_allowance", {"owner": s, "spender": sp, "allowance": have, "amount": amt})
    out = transfer(state, s, recipient, amt)
    if have:
        approve(state, s, sp, have - amt)
    out["spender"] = sp
    return out


__all__ = ["balance_of", "allowance", "frozen", "credit", "approve", "set_frozen", "transfer", "transfer_from"]
