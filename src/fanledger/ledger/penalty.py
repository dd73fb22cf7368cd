# src/fanledger/ledger/penalty.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from fanledger.ledger.constants import (
    BPS_DENOMINATOR,
    MAX_PENALTY_BPS,
    PENALTY_DECAY_WINDOW,
    PENALTY_FLAT_UNTIL,
    PENALTY_ZERO_FROM,
)
from fanledger.runtime.errors import NoDepositRecord, ZeroAmount

Json = Dict[str, Any]


@dataclass(frozen=True, slots=True)
class PenaltyResult:
    penalty: int
    payout: int
    penalty_bps: int
    elapsed: int

    def to_json(self) -> Json:
        return {
            "penalty": int(self.penalty),
            "payout": int(self.payout),
            "penalty_bps": int(self.penalty_bps),
            "elapsed": int(self.elapsed),
        }


def penalty_bps(elapsed: int) -> int:
    """Penalty rate in basis points after ``elapsed`` seconds of holding.

    [0, 1y)  -> 5000 flat
    [1y, 5y) -> linear from 5000 down toward 0, truncated
    [5y, ..) -> 0
    """
    e = max(0, int(elapsed))
    if e < PENALTY_FLAT_UNTIL:
        return MAX_PENALTY_BPS
    if e < PENALTY_ZERO_FROM:
        return MAX_PENALTY_BPS - ((e - PENALTY_FLAT_UNTIL) * MAX_PENALTY_BPS) // PENALTY_DECAY_WINDOW
    return 0


def calculate_penalty(*, epoch: int, amount: int, now: int) -> PenaltyResult:
    """Compute (penalty, payout) for redeeming ``amount`` units.

    Rounding happens twice: once when interpolating the rate, once when
    applying it to the amount. Payout is whatever the penalty leaves.
    """
    ep = int(epoch)
    if ep <= 0:
        raise NoDepositRecord(details={"epoch": ep})
    amt = int(amount)
    if amt <= 0:
        raise ZeroAmount(details={"amount": amt})

    elapsed = max(0, int(now) - ep)
    bps = penalty_bps(elapsed)
    penalty = (amt * bps) // BPS_DENOMINATOR
    return PenaltyResult(penalty=penalty, payout=amt - penalty, penalty_bps=bps, elapsed=elapsed)


__all__ = ["PenaltyResult", "penalty_bps", "calculate_penalty"]
