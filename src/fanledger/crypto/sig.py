# src/fanledger/crypto/sig.py
from __future__ import annotations

"""Ed25519 signatures over canonical ledger messages.

Keys and signatures travel as hex or base64/base64url text. Every signed
message carries a domain tag: admin actions and holder actions are signed
under different tags, so a signature made for one can never pass as the other.
"""

import base64
import binascii
import json
from typing import Any, Dict, Optional, Sequence

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey, Ed25519PublicKey

Json = Dict[str, Any]

ADMIN_DOMAIN = "fanledger/admin/v1"
HOLDER_DOMAIN = "fanledger/holder/v1"

_SIG_LEN = 64
_KEY_LEN = 32


def decode_key_text(text: str) -> bytes:
    """Hex first, then base64 (either alphabet, padding optional)."""
    raw = (text or "").strip()
    if not raw:
        raise ValueError("empty key/signature text")
    try:
        return bytes.fromhex(raw)
    except ValueError:
        pass
    padded = raw + "=" * (-len(raw) % 4)
    try:
        return base64.b64decode(padded.replace("-", "+").replace("_", "/"), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError("not hex or base64") from e


def is_ed25519_pubkey(text: Any) -> bool:
    if not isinstance(text, str):
        return False
    try:
        return len(decode_key_text(text)) == _KEY_LEN
    except ValueError:
        return False


def canonical_message(*, domain: str, action: str, caller: str, nonce: int, payload: Json) -> bytes:
    obj: Json = {
        "domain": str(domain),
        "action": str(action),
        "caller": str(caller),
        "nonce": int(nonce),
        "payload": payload if isinstance(payload, dict) else {},
    }
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def canonical_admin_message(*, action: str, caller: str, nonce: int, payload: Json) -> bytes:
    return canonical_message(domain=ADMIN_DOMAIN, action=action, caller=caller, nonce=nonce, payload=payload)


def _addr_text(a: Any) -> str:
    return "" if a is None else str(a)


def dynamic_update_message(*, caller: str, nonce: int, recipients: Sequence[Any]) -> bytes:
    """Message an administrator signs to replace the dynamic recipients."""
    return canonical_admin_message(
        action="update_dynamic_recipients",
        caller=caller,
        nonce=nonce,
        payload={"recipients": [_addr_text(r) for r in recipients]},
    )


def holder_key_message(*, caller: str, nonce: int, holder: str, pubkey: str) -> bytes:
    """Message an administrator signs to bind ``pubkey`` to ``holder``."""
    return canonical_admin_message(
        action="register_holder_key",
        caller=caller,
        nonce=nonce,
        payload={"holder": str(holder), "pubkey": str(pubkey).strip()},
    )


# Holder actions. ``caller`` is the address whose certificates or assets move.


def deposit_message(
    *, depositor: str, nonce: int, amount: int, dynamic_recipients: Optional[Sequence[Any]] = None
) -> bytes:
    payload: Json = {"amount": int(amount)}
    if dynamic_recipients is not None:
        payload["dynamic_recipients"] = [_addr_text(r) for r in dynamic_recipients]
    return canonical_message(domain=HOLDER_DOMAIN, action="deposit", caller=depositor, nonce=nonce, payload=payload)


def redeem_message(*, holder: str, nonce: int, amount: int) -> bytes:
    return canonical_message(
        domain=HOLDER_DOMAIN, action="redeem", caller=holder, nonce=nonce, payload={"amount": int(amount)}
    )


def transfer_message(*, sender: str, nonce: int, recipient: str, amount: int) -> bytes:
    return canonical_message(
        domain=HOLDER_DOMAIN,
        action="transfer",
        caller=sender,
        nonce=nonce,
        payload={"recipient": str(recipient), "amount": int(amount)},
    )


def verify_ed25519_signature(*, message: bytes, sig: str, pubkey: str) -> bool:
    try:
        sig_b = decode_key_text(sig)
        pk_b = decode_key_text(pubkey)
    except ValueError:
        return False
    if len(sig_b) != _SIG_LEN or len(pk_b) != _KEY_LEN:
        return False
    try:
        Ed25519PublicKey.from_public_bytes(pk_b).verify(sig_b, message)
    except InvalidSignature:
        return False
    return True


def sign_ed25519(*, message: bytes, privkey: str, encoding: str = "hex") -> str:
    """Sign ``message`` with a 32-byte seed (a 64-byte seed+pubkey blob is also accepted)."""
    seed = decode_key_text(privkey)[:_KEY_LEN]
    if len(seed) != _KEY_LEN:
        raise ValueError("ed25519 private key must carry a 32-byte seed")

    sig_b = Ed25519PrivateKey.from_private_bytes(seed).sign(message)
    if encoding == "hex":
        return sig_b.hex()
    if encoding in {"b64", "base64"}:
        return base64.b64encode(sig_b).decode("ascii")
    raise ValueError(f"unsupported encoding: {encoding!r}")
