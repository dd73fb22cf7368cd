# src/fanledger/ledger/split.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

from fanledger.ledger.constants import BPS_DENOMINATOR, LEG_COUNT
from fanledger.runtime.errors import WeightMismatch, ZeroAmount


@dataclass(frozen=True, slots=True)
class SplitResult:
    amounts: Tuple[int, ...]
    residual: int

    @property
    def total(self) -> int:
        return sum(self.amounts)


def require_weights(weights: Sequence[int], *, legs: int = LEG_COUNT) -> Tuple[int, ...]:
    """Validate a weight vector and return it as a tuple of ints.

    Weights must have exactly ``legs`` non-negative entries summing to 10,000 bp.
    """
    ws = tuple(int(w) for w in weights)
    if len(ws) != int(legs):
        raise WeightMismatch("wrong_leg_count", {"expected": int(legs), "got": len(ws)})
    if any(w < 0 for w in ws):
        raise WeightMismatch("negative_weight", {"weights": list(ws)})
    total = sum(ws)
    if total != BPS_DENOMINATOR:
        raise WeightMismatch(details={"sum": total, "expected": BPS_DENOMINATOR})
    return ws


def split_amount(amount: int, weights: Sequence[int]) -> SplitResult:
    """Split ``amount`` into one leg per weight by floor division.

    Each leg is ``amount * w // 10000`` on its own; the shortfall against
    ``amount`` is returned as ``residual`` and stays with the depositor.
    It is never added to any leg.
    """
    ws = require_weights(weights)
    amt = int(amount)
    if amt <= 0:
        raise ZeroAmount(details={"amount": amt})

    amounts = tuple((amt * w) // BPS_DENOMINATOR for w in ws)
    residual = amt - sum(amounts)
    return SplitResult(amounts=amounts, residual=residual)


__all__ = ["SplitResult", "require_weights", "split_amount"]
