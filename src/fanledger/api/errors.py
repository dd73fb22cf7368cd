from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from fanledger.runtime.errors import LedgerError


@dataclass
class ApiError(Exception):
    status_code: int
    code: str
    message: str
    details: Dict[str, Any]

    @staticmethod
    def bad_request(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(400, code, message, details or {})

    @staticmethod
    def forbidden(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(403, code, message, details or {})

    @staticmethod
    def not_found(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(404, code, message, details or {})

    @staticmethod
    def internal(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(500, code, message, details or {})


# HTTP status per ledger error code. Unknown codes map to 400.
LEDGER_STATUS: Dict[str, int] = {
    "zero_amount": 400,
    "invalid_recipient": 400,
    "unauthorized": 403,
    "no_deposit_record": 404,
    "insufficient_balance": 409,
    "insufficient_allowance": 409,
    "transfer_failed": 409,
    "weight_mismatch": 500,
    "settlement_insufficient_funds": 503,
}


def _body(code: str, message: str, details: Any) -> Dict[str, Any]:
    return {"ok": False, "error": {"code": code, "message": message, "details": details if details is not None else {}}}


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=_body(exc.code, exc.message, exc.details))


async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    status = LEDGER_STATUS.get(exc.code, 400)
    return JSONResponse(status_code=status, content=_body(exc.code, exc.reason, exc.details))
