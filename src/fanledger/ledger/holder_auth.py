# src/fanledger/ledger/holder_auth.py
from __future__ import annotations

"""Holder signing keys and replay nonces.

A holder acts over the API by signing with the ed25519 key an administrator
bound to its address. Every signed action, holder or admin, carries a nonce
that must exceed the last one accepted for the same scope. Scopes are
``"admin"`` and ``"holder:<address>"``.
"""

from typing import Any, Dict, Optional

from fanledger.crypto.sig import is_ed25519_pubkey
from fanledger.ledger.state import _as_int, append_event, ensure_holder_keys, ensure_nonces, norm_address
from fanledger.ledger.wallets import AuthPredicate
from fanledger.runtime.errors import InvalidRecipient, Unauthorized

Json = Dict[str, Any]

ADMIN_SCOPE = "admin"


def holder_scope(holder: str) -> str:
    return f"holder:{holder}"


def last_nonce(state: Json, scope: str) -> int:
    return _as_int(ensure_nonces(state).get(scope), 0)


def consume_nonce(state: Json, scope: str, nonce: int) -> int:
    """Accept ``nonce`` for ``scope`` only if it is strictly greater than the last one."""
    got = _as_int(nonce, 0)
    last = last_nonce(state, scope)
    if got <= last:
        raise Unauthorized("stale_nonce", {"scope": scope, "nonce": got, "last": last})
    ensure_nonces(state)[scope] = got
    return got


def holder_key(state: Json, holder: str) -> Optional[str]:
    key = ensure_holder_keys(state).get(holder)
    return str(key) if isinstance(key, str) and key else None


def register_holder_key(
    state: Json,
    *,
    caller: str,
    holder: str,
    pubkey: str,
    is_authorized: AuthPredicate,
    now: int,
) -> Json:
    """Bind (or rotate) the signing key of ``holder``. Administrator only."""
    if not is_authorized(str(caller or "")):
        raise Unauthorized(details={"caller": caller})
    who = norm_address(holder)
    if who is None:
        raise InvalidRecipient("null_holder", {})
    if not is_ed25519_pubkey(pubkey):
        raise InvalidRecipient("bad_pubkey", {"holder": who})

    key = str(pubkey).strip()
    keys = ensure_holder_keys(state)
    rotated = who in keys
    keys[who] = key

    append_event(state, "holder_key_registered", caller=str(caller), holder=who, pubkey=key, rotated=rotated, timestamp=int(now))
    return {"applied": "HOLDER_KEY_REGISTER", "holder": who, "pubkey": key, "rotated": rotated}


__all__ = [
    "ADMIN_SCOPE",
    "holder_scope",
    "last_nonce",
    "consume_nonce",
    "holder_key",
    "register_holder_key",
]
