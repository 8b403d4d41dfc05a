from __future__ import annotations

import getpass
import os
from typing import Callable

from football_report.services.persistent_store import CacheStore


def resolve_api_key(explicit: str | None, store: CacheStore) -> str | None:
    """Return the first configured key: explicit value, API_SPORTS_KEY, then the saved one.

    Nothing is prompted for or written here; a ``None`` result tells the caller
    to ask the user and persist the answer itself.
    """
    if explicit is not None and explicit.strip():
        return explicit.strip()

    from_env = os.getenv("API_SPORTS_KEY", "").strip()
    if from_env:
        return from_env

    return store.load_api_key()


def prompt_api_key(read_secret: Callable[[str], str] = getpass.getpass) -> str:
    return read_secret("API-Football key: ").strip()
