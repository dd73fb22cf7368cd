from __future__ import annotations

from fastapi import APIRouter, Request

from fanledger.api.errors import ApiError
from fanledger.api.routes_public_parts.common import _engine, _int_param, _require_admin_sig
from fanledger.api.schemas import HolderKeyRequest
from fanledger.crypto.sig import holder_key_message

router = APIRouter()


@router.get("/holders/{holder}")
def v1_holder_get(holder: str, request: Request):
    eng = _engine(request)
    return {"ok": True, **eng.holder(holder)}


@router.get("/holders/{holder}/preview")
def v1_holder_preview(holder: str, request: Request, amount: str | None = None):
    """Penalty/payout preview. Defaults to the holder's full balance."""
    eng = _engine(request)
    amt = _int_param(amount, eng.balance_of(holder))
    res = eng.preview(holder, amt)
    return {"ok": True, "holder": holder, "amount": amt, **res.to_json()}


@router.get("/holders/{holder}/key")
def v1_holder_key_get(holder: str, request: Request):
    eng = _engine(request)
    pubkey = eng.holder_key(holder)
    if pubkey is None:
        raise ApiError.not_found("holder_key_not_registered", "no signing key is registered for this holder", {"holder": holder})
    return {"ok": True, "holder": holder, "pubkey": pubkey, "nonce": eng.last_nonce(holder)}


@router.post("/holders/{holder}/key")
def v1_holder_key_register(holder: str, body: HolderKeyRequest, request: Request):
    """Bind a holder's signing key. Admin-signed, like /wallets/dynamic."""
    eng = _engine(request)
    msg = holder_key_message(caller=body.caller, nonce=body.nonce, holder=holder, pubkey=body.pubkey)
    _require_admin_sig(request, caller=body.caller, message=msg, sig=body.sig)

    out = eng.register_holder_key(body.caller, holder, body.pubkey, nonce=body.nonce)
    return {"ok": True, **out}
