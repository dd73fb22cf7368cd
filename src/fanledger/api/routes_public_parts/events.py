from __future__ import annotations

from fastapi import APIRouter, Request

from fanledger.api.routes_public_parts.common import _engine, _int_param

router = APIRouter()


@router.get("/events")
def v1_events(request: Request, since: str | None = None, limit: str | None = None):
    eng = _engine(request)
    items = eng.events(since=_int_param(since, 0), limit=_int_param(limit, 100))
    next_since = int(items[-1]["seq"]) if items else _int_param(since, 0)
    return {"ok": True, "events": items, "next_since": next_since}
