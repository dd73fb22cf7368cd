# src/fanledger/api/structured_logging.py
from __future__ import annotations

import logging
import os
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from fanledger.runtime import metrics
from fanledger.structured_logging import log_event

_OFF = {"0", "false", "no", "n", "off"}


def _status_class(status: int) -> str:
    return f"{int(status) // 100}xx"


class RequestLogMiddleware(BaseHTTPMiddleware):
    """One JSON line per HTTP request, tagged with a request id.

    Client errors (4xx) are ledger rejections and log at WARNING; anything
    that escapes the exception handlers logs at ERROR. Request counts by
    status class also feed /v1/metrics.

    FANLEDGER_LOG_REQUESTS=0 turns the log line off; counting stays on.
    """

    def __init__(self, app) -> None:
        super().__init__(app)
        flag = (os.environ.get("FANLEDGER_LOG_REQUESTS") or "1").strip().lower()
        self._log_lines = flag not in _OFF
        self._logger = logging.getLogger("fanledger.http")

    async def dispatch(self, request: Request, call_next):
        t0 = time.monotonic()
        rid = request.headers.get("x-request-id") or uuid.uuid4().hex
        request.state.request_id = rid

        try:
            response = await call_next(request)
        except Exception as e:
            metrics.inc_counter("http_requests_5xx_total")
            self._emit(request, rid, t0, status=500, level=logging.ERROR, error=f"{type(e).__name__}: {e}")
            raise

        status = int(response.status_code)
        response.headers.setdefault("x-request-id", rid)
        metrics.inc_counter(f"http_requests_{_status_class(status)}_total")
        level = logging.WARNING if 400 <= status < 500 else logging.INFO
        if status >= 500:
            level = logging.ERROR
        self._emit(request, rid, t0, status=status, level=level)
        return response

    def _emit(self, request: Request, rid: str, t0: float, *, status: int, level: int, error: str | None = None) -> None:
        if not self._log_lines:
            return
        log_event(
            self._logger,
            "http_request",
            level=level,
            request_id=rid,
            method=request.method,
            path=request.url.path,
            status=status,
            duration_ms=int((time.monotonic() - t0) * 1000),
            error=error,
        )
