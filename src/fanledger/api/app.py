from __future__ import annotations

import os
from typing import Optional

from fastapi import FastAPI

from fanledger.api.config import load_api_config
from fanledger.api.errors import ApiError, api_error_handler, ledger_error_handler
from fanledger.api.routes_public import public_router
from fanledger.api.structured_logging import RequestLogMiddleware
from fanledger.runtime.engine import SettlementEngine
from fanledger.runtime.engine_boot import build_engine as _build_engine
from fanledger.runtime.engine_config import load_engine_config
from fanledger.runtime.errors import LedgerError


def build_engine():
    """Build a SettlementEngine for API runtime.

    This wrapper exists so tests can monkeypatch `fanledger.api.app.build_engine`
    without reaching into runtime modules.
    """
    return _build_engine()


def create_app(*, engine: Optional[SettlementEngine] = None, boot_runtime: bool = True) -> FastAPI:
    """Create the FastAPI application.

    engine:
      - attach this engine directly (tests)
    boot_runtime:
      - True (default): load engine config + attach build_engine()
      - False: no engine; only /v1/health and /v1/metrics are usable
    """
    mode = os.environ.get("FANLEDGER_MODE", "prod").strip().lower()

    if mode == "prod":
        app = FastAPI(title="fanledger API", docs_url=None, redoc_url=None, openapi_url=None)
    else:
        app = FastAPI(title="fanledger API")

    admin_pubkey: Optional[str] = None
    if engine is not None:
        app.state.engine = engine
    elif boot_runtime:
        admin_pubkey = load_engine_config().admin_pubkey or None
        app.state.engine = build_engine()
    else:
        app.state.engine = None

    app.state.cfg = load_api_config(admin_pubkey=admin_pubkey)

    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(LedgerError, ledger_error_handler)

    app.add_middleware(RequestLogMiddleware)

    app.include_router(public_router)
    return app
