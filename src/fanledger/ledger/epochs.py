# src/fanledger/ledger/epochs.py
from __future__ import annotations

"""Deposit-epoch propagation.

Every certificate balance mutation is one of three transitions:

  MINT      (no sender)     -> epoch[to] = now
  BURN      (no recipient)  -> no change
  TRANSFER  (both holders)  -> epoch[to] = epoch[from] if set, else now

The recipient inherits the sender's epoch; it is neither max-merged nor
averaged with its own. The sender's epoch never changes. Amount plays no part,
so a zero-unit transfer still overwrites the recipient's epoch.
"""

from enum import Enum
from typing import Any, Dict, Optional

from fanledger.ledger.state import _as_int, ensure_epochs, is_null_address
from fanledger.runtime.errors import InvalidRecipient

Json = Dict[str, Any]


class Mutation(str, Enum):
    MINT = "mint"
    BURN = "burn"
    TRANSFER = "transfer"


def classify(sender: Optional[str], recipient: Optional[str]) -> Mutation:
    no_sender = is_null_address(sender)
    no_recipient = is_null_address(recipient)
    if no_sender and no_recipient:
        raise InvalidRecipient("mutation_without_holder", {"sender": sender, "recipient": recipient})
    if no_sender:
        return Mutation.MINT
    if no_recipient:
        return Mutation.BURN
    return Mutation.TRANSFER


def next_epoch(kind: Mutation, *, sender_epoch: int, now: int) -> Optional[int]:
    """Return the recipient's new epoch, or None when nothing changes."""
    if kind is Mutation.MINT:
        return int(now)
    if kind is Mutation.BURN:
        return None
    if int(sender_epoch) > 0:
        return int(sender_epoch)
    return int(now)


def epoch_of(state: Json, holder: str) -> int:
    return _as_int(ensure_epochs(state).get(holder), 0)


def propagate_epoch(state: Json, *, sender: Optional[str], recipient: Optional[str], amount: int, now: int) -> Mutation:
    """Apply the epoch transition for one balance mutation.

    ``amount`` is accepted so callers can pass the full mutation triple, but it
    never influences the outcome.
    """
    kind = classify(sender, recipient)
    epochs = ensure_epochs(state)
    sender_epoch = _as_int(epochs.get(sender), 0) if kind is Mutation.TRANSFER else 0

    new = next_epoch(kind, sender_epoch=sender_epoch, now=now)
    if new is not None:
        epochs[str(recipient)] = int(new)
    return kind


__all__ = ["Mutation", "classify", "next_epoch", "epoch_of", "propagate_epoch"]
