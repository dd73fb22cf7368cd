# src/fanledger/ledger/certificates.py
from __future__ import annotations

from typing import Any, Dict, Optional

from fanledger.ledger.epochs import Mutation, propagate_epoch
from fanledger.ledger.state import _as_int, ensure_certificates, norm_address
from fanledger.runtime.errors import InsufficientAllowance, InsufficientBalance, InvalidRecipient, ZeroAmount

Json = Dict[str, Any]


def _require_holder(addr: Any, *, role: str) -> str:
    a = norm_address(addr)
    if a is None:
        raise InvalidRecipient("null_address", {"role": role})
    return a


def _require_non_negative(amount: Any) -> int:
    amt = _as_int(amount, -1)
    if amt < 0:
        raise ZeroAmount("amount_must_be_non_negative", {"amount": amount})
    return amt


def balance_of(state: Json, holder: str) -> int:
    return _as_int(ensure_certificates(state)["balances"].get(holder), 0)


def total_supply(state: Json) -> int:
    return _as_int(ensure_certificates(state).get("total_supply"), 0)


def allowance(state: Json, owner: str, spender: str) -> int:
    allowances = ensure_certificates(state)["allowances"]
    per_owner = allowances.get(owner)
    if not isinstance(per_owner, dict):
        return 0
    return _as_int(per_owner.get(spender), 0)


def _move(state: Json, *, sender: Optional[str], recipient: Optional[str], amount: int, now: int) -> Mutation:
    """Single balance-mutation path. Every mint, burn and transfer goes through here."""
    certs = ensure_certificates(state)
    balances = certs["balances"]

    if sender is not None:
        have = _as_int(balances.get(sender), 0)
        if have < amount:
            raise InsufficientBalance(details={"holder": sender, "balance": have, "amount": amount})
        balances[sender] = have - amount
    else:
        certs["total_supply"] = _as_int(certs.get("total_supply"), 0) + amount

    if recipient is not None:
        balances[recipient] = _as_int(balances.get(recipient), 0) + amount
    else:
        certs["total_supply"] = _as_int(certs.get("total_supply"), 0) - amount

    return propagate_epoch(state, sender=sender, recipient=recipient, amount=amount, now=now)


def mint(state: Json, to: str, amount: int, *, now: int) -> Json:
    holder = _require_holder(to, role="recipient")
    amt = _require_non_negative(amount)
    if amt == 0:
        raise ZeroAmount(details={"amount": amt})
    _move(state, sender=None, recipient=holder, amount=amt, now=now)
    return {"applied": "CERT_MINT", "to": holder, "amount": amt}


def burn(state: Json, holder: str, amount: int, *, now: int) -> Json:
    h = _require_holder(holder, role="holder")
    amt = _require_non_negative(amount)
    if amt == 0:
        raise ZeroAmount(details={"amount": amt})
    _move(state, sender=h, recipient=None, amount=amt, now=now)
    return {"applied": "CERT_BURN", "holder": h, "amount": amt}


def transfer(state: Json, sender: str, recipient: str, amount: int, *, now: int) -> Json:
    """Holder-to-holder transfer. Zero amounts are allowed and still move the epoch."""
    s = _require_holder(sender, role="sender")
    r = _require_holder(recipient, role="recipient")
    amt = _require_non_negative(amount)
    _move(state, sender=s, recipient=r, amount=amt, now=now)
    return {"applied": "CERT_TRANSFER", "from": s, "to": r, "amount": amt}


def approve(state: Json, owner: str, spender: str, amount: int) -> Json:
    o = _require_holder(owner, role="owner")
    sp = _require_holder(spender, role="spender")
    amt = _require_non_negative(amount)
    allowances = ensure_certificates(state)["allowances"]
    per_owner = allowances.get(o)
    if not isinstance(per_owner, dict):
        per_owner = {}
        allowances[o] = per_owner
    per_owner[sp] = amt
    return {"applied": "CERT_APPROVE", "owner": o, "spender": sp, "amount": amt}


def transfer_from(state: Json, spender: str, sender: str, recipient: str, amount: int, *, now: int) -> Json:
    sp = _require_holder(spender, role="spender")
    s = _require_holder(sender, role="sender")
    amt = _require_non_negative(amount)
    have = allowance(state, s, sp)
    if have < amt:
        raise InsufficientAllowance(details={"owner": s, "spender": sp, "allowance": have, "amount": amt})
    out = transfer(state, s, recipient, amt, now=now)
    if have:
        approve(state, s, sp, have - amt)
    out["spender"] = sp
    return out


__all__ = [
    "balance_of",
    "total_supply",
    "allowance",
    "mint",
    "burn",
    "transfer",
    "approve",
    "transfer_from",
]
