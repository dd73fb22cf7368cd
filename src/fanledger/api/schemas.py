from __future__ import annotations

"""Pydantic request schemas for the HTTP API.

Amounts are plain ints in minor units; range checks happen in the ledger so
every rejection carries the ledger's own error code.

Every mutating request is signed: holder actions by the key registered for the
acting holder, admin actions by the configured admin key. ``nonce`` must be
strictly greater than the last nonce accepted for the same signer.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class SignedRequest(BaseModel):
    nonce: int = Field(..., description="Strictly increasing per-signer nonce")
    sig: str = Field(..., description="Hex/base64 ed25519 signature over the canonical message")


class DepositRequest(SignedRequest):
    depositor: str = Field(..., description="Depositor address; signs the request")
    amount: int = Field(..., description="Asset amount in minor units")
    dynamic_recipients: Optional[List[Optional[str]]] = Field(
        default=None, description="Per-deposit dynamic recipients (per_deposit routing only)"
    )


class RedeemRequest(SignedRequest):
    holder: str = Field(..., description="Certificate holder address; signs the request")
    amount: int = Field(..., description="Certificate units to redeem")


class TransferRequest(SignedRequest):
    sender: str = Field(..., description="Sending holder; signs the request")
    recipient: str = Field(..., description="Receiving holder")
    amount: int = Field(..., description="Certificate units; zero is allowed")


class DynamicUpdateRequest(SignedRequest):
    caller: str = Field(..., description="Administrator address")
    level1: Optional[str] = None
    level2: Optional[str] = None
    level3: Optional[str] = None


class HolderKeyRequest(SignedRequest):
    caller: str = Field(..., description="Administrator address")
    pubkey: str = Field(..., description="Hex/base64 ed25519 public key for the holder")
