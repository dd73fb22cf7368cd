# src/fanledger/structured_logging.py
from __future__ import annotations

import json
import logging
import os
import sys
import time
from typing import Any, Dict, Optional

Json = Dict[str, Any]

_MARK = "_fanledger_configured"


def _now_ms() -> int:
    return int(time.time() * 1000)


def _resolve_level(explicit: Optional[str]) -> int:
    name = (explicit or os.environ.get("FANLEDGER_LOG_LEVEL") or "INFO").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def configure_structured_logging(level: Optional[str] = None) -> None:
    """Send every record to stdout as the bare message, one JSON object per line.

    ``level`` wins over FANLEDGER_LOG_LEVEL. Calling again only adjusts the level.
    """
    lvl = _resolve_level(level)
    root = logging.getLogger()
    if getattr(root, _MARK, False):
        root.setLevel(lvl)
        return

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root.handlers = [handler]
    root.setLevel(lvl)
    setattr(root, _MARK, True)


def log_event(logger: logging.Logger, event: str, *, level: int = logging.INFO, **fields: Any) -> None:
    if not logger.isEnabledFor(level):
        return
    payload: Json = {"ts_ms": _now_ms(), "event": event, **fields}
    try:
        msg = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError):
        # Unserializable field: degrade to key=value rather than drop the line.
        msg = " ".join([f"event={event}"] + [f"{k}={fields[k]!r}" for k in sorted(fields)])
    logger.log(level, msg)
