# src/fanledger/api/routes_public.py
from __future__ import annotations

from fastapi import APIRouter

from fanledger.api.routes_public_parts.events import router as events_router
from fanledger.api.routes_public_parts.health import router as health_router
from fanledger.api.routes_public_parts.holders import router as holders_router
from fanledger.api.routes_public_parts.ledger_ops import router as ledger_ops_router
from fanledger.api.routes_public_parts.metrics import router as metrics_router
from fanledger.api.routes_public_parts.wallets import router as wallets_router

public_router = APIRouter()

public_router.include_router(health_router, prefix="/v1", tags=["health"])
public_router.include_router(wallets_router, prefix="/v1", tags=["wallets"])
public_router.include_router(holders_router, prefix="/v1", tags=["holders"])
public_router.include_router(ledger_ops_router, prefix="/v1", tags=["ledger"])
public_router.include_router(events_router, prefix="/v1", tags=["events"])

# Ops
public_router.include_router(metrics_router, prefix="/v1", tags=["metrics"])
