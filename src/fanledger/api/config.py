import os
from dataclasses import dataclass


@dataclass(frozen=True)
class ApiConfig:
    mode: str  # "dev" | "test" | "prod"
    admin_pubkey: str | None


def load_api_config(*, admin_pubkey: str | None = None) -> ApiConfig:
    mode = os.getenv("FANLEDGER_MODE", "prod").strip().lower()
    key = os.getenv("FANLEDGER_ADMIN_PUBKEY") or admin_pubkey or None
    return ApiConfig(mode=mode, admin_pubkey=key.strip() if key else None)
