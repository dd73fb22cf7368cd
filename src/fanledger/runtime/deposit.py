# src/fanledger/runtime/deposit.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from fanledger.ledger import assets, certificates
from fanledger.ledger.constants import DYNAMIC_RECIPIENT_COUNT, ROUTING_PER_DEPOSIT, ROUTING_REGISTRY
from fanledger.ledger.split import split_amount
from fanledger.ledger.state import _as_int, append_event, is_null_address, norm_address
from fanledger.ledger.wallets import wallet_config
from fanledger.runtime.errors import InvalidRecipient, TransferFailed, Unauthorized, ZeroAmount
from fanledger.structured_logging import log_event

Json = Dict[str, Any]

log = logging.getLogger("fanledger.deposit")


def _resolve_dynamic(
    registry: Sequence[str],
    overrides: Optional[Sequence[Optional[str]]],
    *,
    policy: str,
) -> List[str]:
    if overrides is None:
        resolved: List[Any] = list(registry)
    elif policy == ROUTING_PER_DEPOSIT:
        resolved = list(overrides)
        if len(resolved) != DYNAMIC_RECIPIENT_COUNT:
            raise InvalidRecipient(
                "wrong_recipient_count",
                {"group": "dynamic", "expected": DYNAMIC_RECIPIENT_COUNT, "got": len(resolved)},
            )
    else:
        raise Unauthorized("dynamic_override_not_allowed", {"routing_policy": policy})

    for i, a in enumerate(resolved):
        if is_null_address(a):
            raise InvalidRecipient("null_address", {"group": "dynamic", "index": i})
    return [str(a).strip() for a in resolved]


def apply_deposit(
    state: Json,
    *,
    depositor: str,
    amount: int,
    now: int,
    operator: str,
    routing_policy: str = ROUTING_REGISTRY,
    dynamic_overrides: Optional[Sequence[Optional[str]]] = None,
) -> Json:
    """Fan ``amount`` out to the eight recipients and mint certificates 1:1.

    Mutates ``state`` in place. The caller must run this against a working
    copy and discard it on any exception; a failure in leg six leaves legs one
    through five applied to that copy.
    """
    amt = _as_int(amount, 0)
    if amt <= 0:
        raise ZeroAmount(details={"amount": amount})

    who = norm_address(depositor)
    if who is None:
        raise InvalidRecipient("null_depositor", {})

    cfg = wallet_config(state)
    dynamic = _resolve_dynamic([r.address for r in cfg.dynamic], dynamic_overrides, policy=routing_policy)
    recipients = [r.address for r in cfg.fixed] + dynamic

    split = split_amount(amt, cfg.weights)

    for leg, (to, leg_amount) in enumerate(zip(recipients, split.amounts)):
        if leg_amount == 0:
            continue
        try:
            assets.transfer_from(state, operator, who, to, leg_amount)
        except TransferFailed as e:
            details = dict(e.details) if isinstance(e.details, dict) else {"cause": e.details}
            details.update({"leg": leg, "recipient": to, "amount": leg_amount, "cause_reason": e.reason})
            raise TransferFailed("deposit_leg_failed", details) from e

    certificates.mint(state, who, amt, now=now)

    legs = [int(x) for x in split.amounts]
    event = append_event(
        state,
        "deposit",
        depositor=who,
        total=amt,
        legs=legs,
        recipients=recipients,
        dynamic_recipients=dynamic,
        residual=int(split.residual),
        timestamp=int(now),
    )
    log_event(log, "deposit", seq=event["seq"], depositor=who, total=amt, legs=legs, residual=int(split.residual))

    return {
        "applied": "DEPOSIT",
        "depositor": who,
        "certificates": amt,
        "legs": legs,
        "recipients": recipients,
        "residual": int(split.residual),
        "seq": event["seq"],
    }


__all__ = ["apply_deposit"]
