from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from fanledger.runtime.metrics import format_prometheus

router = APIRouter()


@router.get("/metrics", response_class=PlainTextResponse)
def v1_metrics():
    return PlainTextResponse(format_prometheus(), media_type="text/plain; version=0.0.4")
