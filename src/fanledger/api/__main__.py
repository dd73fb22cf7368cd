# src/fanledger/api/__main__.py
from __future__ import annotations

import os

import uvicorn

from fanledger.env import load_dotenv_if_present
from fanledger.structured_logging import configure_structured_logging


def main() -> None:
    # .env first: config loading below reads FANLEDGER_* from the environment.
    load_dotenv_if_present()

    from fanledger.api.app import create_app
    from fanledger.runtime.engine_config import load_engine_config

    cfg = load_engine_config()
    configure_structured_logging(os.getenv("FANLEDGER_LOG_LEVEL") or cfg.log_level)

    host = os.getenv("FANLEDGER_API_HOST", cfg.api_host)
    port = int(os.getenv("FANLEDGER_API_PORT", str(cfg.api_port)))
    uvicorn.run(create_app(), host=host, port=port, log_level=cfg.log_level.lower(), log_config=None)


if __name__ == "__main__":
    main()
