from __future__ import annotations

from typing import Any

from fastapi import Request

from fanledger.api.errors import ApiError
from fanledger.crypto.sig import verify_ed25519_signature


def _engine(request: Request):
    eng = getattr(request.app.state, "engine", None)
    if eng is None:
        raise ApiError.internal("not_ready", "engine not attached to app.state", {})
    return eng


def _int_param(v: Any, default: int) -> int:
    """Parse an optional int query param; malformed values are a 400."""
    if v is None:
        return int(default)
    s = str(v).strip()
    if s == "":
        return int(default)
    try:
        return int(s)
    except ValueError:
        raise ApiError.bad_request("bad_int_param", "query parameter must be an integer", {"value": s}) from None


def _require_admin_sig(request: Request, *, caller: str, message: bytes, sig: str) -> None:
    cfg = request.app.state.cfg
    if not cfg.admin_pubkey:
        raise ApiError.forbidden("admin_key_not_configured", "no admin public key is configured", {})
    if not verify_ed25519_signature(message=message, sig=sig, pubkey=cfg.admin_pubkey):
        raise ApiError.forbidden("bad_signature", "admin signature does not verify", {"caller": caller})


def _require_holder_sig(eng, *, holder: str, message: bytes, sig: str) -> None:
    """The request must be signed by the key registered for ``holder``."""
    pubkey = eng.holder_key(str(holder or "").strip())
    if pubkey is None:
        raise ApiError.forbidden("holder_key_not_registered", "no signing key is registered for this holder", {"holder": holder})
    if not verify_ed25519_signature(message=message, sig=sig, pubkey=pubkey):
        raise ApiError.forbidden("bad_signature", "holder signature does not verify", {"holder": holder})
