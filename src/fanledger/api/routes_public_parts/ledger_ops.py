from __future__ import annotations

from fastapi import APIRouter, Request

from fanledger.api.routes_public_parts.common import _engine, _require_holder_sig
from fanledger.api.schemas import DepositRequest, RedeemRequest, TransferRequest
from fanledger.crypto.sig import deposit_message, redeem_message, transfer_message

router = APIRouter()


@router.post("/deposit")
def v1_deposit(body: DepositRequest, request: Request):
    eng = _engine(request)
    msg = deposit_message(
        depositor=body.depositor, nonce=body.nonce, amount=body.amount, dynamic_recipients=body.dynamic_recipients
    )
    _require_holder_sig(eng, holder=body.depositor, message=msg, sig=body.sig)
    out = eng.deposit_receipt(body.depositor, body.amount, body.dynamic_recipients, nonce=body.nonce)
    return {"ok": True, **out}


@router.post("/redeem")
def v1_redeem(body: RedeemRequest, request: Request):
    eng = _engine(request)
    msg = redeem_message(holder=body.holder, nonce=body.nonce, amount=body.amount)
    _require_holder_sig(eng, holder=body.holder, message=msg, sig=body.sig)
    out = eng.redeem_receipt(body.holder, body.amount, nonce=body.nonce)
    return {"ok": True, **out}


@router.post("/transfer")
def v1_transfer(body: TransferRequest, request: Request):
    eng = _engine(request)
    msg = transfer_message(sender=body.sender, nonce=body.nonce, recipient=body.recipient, amount=body.amount)
    _require_holder_sig(eng, holder=body.sender, message=msg, sig=body.sig)
    out = eng.transfer(body.sender, body.recipient, body.amount, nonce=body.nonce)
    return {"ok": True, **out, "recipient_epoch": eng.epoch_of(out["to"])}
