# src/fanledger/env.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

_LOADED = False


def dotenv_path_from_env(explicit: Optional[str] = None) -> Path:
    """``explicit`` if given, else FANLEDGER_DOTENV_PATH, else ./.env."""
    return Path(explicit or os.getenv("FANLEDGER_DOTENV_PATH") or ".env").expanduser()


def load_dotenv_if_present(dotenv_path: Optional[str] = None) -> bool:
    """Load a .env file into os.environ, at most once per process.

    Variables already set in the process environment are left alone. Returns
    True only on the call that actually read a file.
    """
    global _LOADED
    if _LOADED:
        return False
    _LOADED = True

    path = dotenv_path_from_env(dotenv_path)
    if not path.is_file():
        return False
    load_dotenv(dotenv_path=path, override=False)
    return True
