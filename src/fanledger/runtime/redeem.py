# src/fanledger/runtime/redeem.py
from __future__ import annotations

import logging
from typing import Any, Dict

from fanledger.ledger import assets, certificates
from fanledger.ledger.epochs import epoch_of
from fanledger.ledger.penalty import calculate_penalty
from fanledger.ledger.state import _as_int, append_event, norm_address
from fanledger.runtime.errors import InsufficientBalance, InvalidRecipient, SettlementInsufficientFunds, TransferFailed, ZeroAmount
from fanledger.structured_logging import log_event

Json = Dict[str, Any]

log = logging.getLogger("fanledger.redeem")


def apply_redeem(state: Json, *, holder: str, amount: int, now: int, operator: str, reserve: str) -> Json:
    """Burn ``amount`` certificates and pay the holder from the settlement reserve.

    The penalty is computed on the redeemed amount, not on the whole holding.
    The burn leaves the holder's epoch in place for whatever remains.
    """
    amt = _as_int(amount, 0)
    if amt <= 0:
        raise ZeroAmount(details={"amount": amount})

    who = norm_address(holder)
    if who is None:
        raise InvalidRecipient("null_holder", {})

    have = certificates.balance_of(state, who)
    if have < amt:
        raise InsufficientBalance(details={"holder": who, "balance": have, "amount": amt})

    result = calculate_penalty(epoch=epoch_of(state, who), amount=amt, now=now)

    certificates.burn(state, who, amt, now=now)

    if result.payout > 0:
        try:
            assets.transfer_from(state, operator, reserve, who, result.payout)
        except TransferFailed as e:
            raise SettlementInsufficientFunds(
                details={"reserve": reserve, "payout": result.payout, "cause_reason": e.reason}
            ) from e

    event = append_event(
        state,
        "redemption",
        holder=who,
        amount=amt,
        payout=result.payout,
        penalty=result.penalty,
        penalty_bps=result.penalty_bps,
        timestamp=int(now),
    )
    log_event(log, "redemption", seq=event["seq"], holder=who, amount=amt, payout=result.payout, penalty=result.penalty)

    return {
        "applied": "REDEEM",
        "holder": who,
        "amount": amt,
        "payout": result.payout,
        "penalty": result.penalty,
        "penalty_bps": result.penalty_bps,
        "seq": event["seq"],
    }


__all__ = ["apply_redeem"]
