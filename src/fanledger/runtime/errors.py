from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class LedgerError(Exception):
    """Canonical error type for ledger operations.

    Every failure aborts the enclosing operation; the engine discards the
    working copy of the state so nothing partial is ever committed.
    """

    code: str
    reason: str
    details: Any | None = None

    def __str__(self) -> str:  # pragma: no cover
        if self.details is None:
            return f"{self.code}:{self.reason}"
        return f"{self.code}:{self.reason}:{self.details}"


class ZeroAmount(LedgerError):
    def __init__(self, reason: str = "amount_must_be_positive", details: Any | None = None) -> None:
        super().__init__("zero_amount", reason, details)


class InvalidRecipient(LedgerError):
    def __init__(self, reason: str = "null_address", details: Any | None = None) -> None:
        super().__init__("invalid_recipient", reason, details)


class WeightMismatch(LedgerError):
    def __init__(self, reason: str = "weights_must_sum_to_10000_bps", details: Any | None = None) -> None:
        super().__init__("weight_mismatch", reason, details)


class Unauthorized(LedgerError):
    def __init__(self, reason: str = "caller_not_authorized", details: Any | None = None) -> None:
        super().__init__("unauthorized", reason, details)


class InsufficientBalance(LedgerError):
    def __init__(self, reason: str = "balance_below_amount", details: Any | None = None) -> None:
        super().__init__("insufficient_balance", reason, details)


class InsufficientAllowance(LedgerError):
    def __init__(self, reason: str = "allowance_below_amount", details: Any | None = None) -> None:
        super().__init__("insufficient_allowance", reason, details)


class NoDepositRecord(LedgerError):
    def __init__(self, reason: str = "no_deposit_epoch", details: Any | None = None) -> None:
        super().__init__("no_deposit_record", reason, details)


class TransferFailed(LedgerError):
    def __init__(self, reason: str = "asset_transfer_rejected", details: Any | None = None, *, code: str = "transfer_failed") -> None:
        super().__init__(code, reason, details)


class SettlementInsufficientFunds(TransferFailed):
    """The settlement reserve could not cover a redemption payout."""

    def __init__(self, reason: str = "reserve_cannot_cover_payout", details: Any | None = None) -> None:
        super().__init__(reason, details, code="settlement_insufficient_funds")


__all__ = [
    "LedgerError",
    "ZeroAmount",
    "InvalidRecipient",
    "WeightMismatch",
    "Unauthorized",
    "InsufficientBalance",
    "InsufficientAllowance",
    "NoDepositRecord",
    "TransferFailed",
    "SettlementInsufficientFunds",
]
