from __future__ import annotations

from fastapi import APIRouter, Request

from fanledger.api.routes_public_parts.common import _engine, _require_admin_sig
from fanledger.api.schemas import DynamicUpdateRequest
from fanledger.crypto.sig import dynamic_update_message

router = APIRouter()


@router.get("/wallets")
def v1_wallets(request: Request):
    eng = _engine(request)
    return {"ok": True, "wallets": eng.wallets(), "routing_policy": eng.routing_policy}


@router.post("/wallets/dynamic")
def v1_wallets_dynamic_update(body: DynamicUpdateRequest, request: Request):
    """
    Replace the three dynamic recipients.

    Two gates, in order:
      - the body must carry a valid ed25519 signature from the configured
        admin key over the canonical admin message
      - the engine's authorization predicate must accept ``caller``
    """
    eng = _engine(request)
    recipients = [body.level1, body.level2, body.level3]
    msg = dynamic_update_message(caller=body.caller, nonce=body.nonce, recipients=recipients)
    _require_admin_sig(request, caller=body.caller, message=msg, sig=body.sig)

    out = eng.update_dynamic_recipients(body.caller, body.level1, body.level2, body.level3, nonce=body.nonce)
    return {"ok": True, **out, "wallets": eng.wallets()}
