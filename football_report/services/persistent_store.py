from __future__ import annotations

import datetime as dt
import json
import os
import tempfile
from typing import Any

from loguru import logger

from football_report.services.errors import CacheError, CredentialError

FIXTURES_LAST_ROUND = "fixtures_last_round"
FIXTURES_NEXT_ROUND = "fixtures_next_round"
STANDINGS = "standings"
DOCUMENT_NAMES = (FIXTURES_LAST_ROUND, FIXTURES_NEXT_ROUND, STANDINGS)


def _parse_iso_datetime(value: Any) -> dt.datetime | None:
    text = str(value or "").strip()
    if not text:
        return None

    iso_text = text.replace("Z", "+00:00")
    try:
        parsed = dt.datetime.fromisoformat(iso_text)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.UTC)
    return parsed.astimezone(dt.UTC)


class CacheStore:
    """File persistence for cached API documents, sync metadata and the API key."""

    def __init__(self, data_dir: str) -> None:
        self.data_dir = os.path.normpath(data_dir)
        self.meta_path = os.path.join(self.data_dir, "cache_meta.json")
        self.credentials_path = os.path.join(self.data_dir, "credentials.json")

    def document_path(self, name: str) -> str:
        if name not in DOCUMENT_NAMES:
            raise ValueError(f"Unknown cache document: {name}")
        return os.path.join(self.data_dir, f"{name}.json")

    @staticmethod
    def _read_json_file(path: str) -> dict[str, Any] | None:
        if not path or not os.path.exists(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except (OSError, json.JSONDecodeError):
            return None
        if not isinstance(payload, dict):
            return None
        return payload

    @staticmethod
    def _write_json_file(path: str, payload: dict[str, Any]) -> None:
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=parent or None, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, ensure_ascii=False, indent=2)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def missing_documents(self) -> list[str]:
        return [name for name in DOCUMENT_NAMES if not os.path.exists(self.document_path(name))]

    def load_document(self, name: str) -> dict[str, Any]:
        path = self.document_path(name)
        if not os.path.exists(path):
            raise CacheError(f"Cache document {name} is missing ({path})")
        try:
            with open(path, "r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            raise CacheError(f"Cache document {name} is unreadable: {exc}") from exc
        if not isinstance(payload, dict):
            raise CacheError(f"Cache document {name} is not a JSON object")
        return payload

    def save_document(self, name: str, payload: dict[str, Any]) -> None:
        self._write_json_file(self.document_path(name), payload)

    def load_meta(self) -> dict[str, Any]:
        return self._read_json_file(self.meta_path) or {}

    def last_synced_at(self) -> dt.datetime | None:
        return _parse_iso_datetime(self.load_meta().get("last_synced_at"))

    def mark_synced(
        self,
        league_id: int,
        season: int,
        now: dt.datetime | None = None,
    ) -> dt.datetime:
        synced_at = (now or dt.datetime.now(dt.UTC)).astimezone(dt.UTC)
        self._write_json_file(
            self.meta_path,
            {
                "last_synced_at": synced_at.isoformat(),
                "league_id": int(league_id),
                "season": int(season),
            },
        )
        return synced_at

    def staleness_reason(self, now: dt.datetime, ttl: dt.timedelta) -> str | None:
        missing = self.missing_documents()
        if missing:
            return f"missing cache documents: {', '.join(missing)}"

        last_synced = self.last_synced_at()
        if last_synced is None:
            return "no recorded sync time"

        age = now.astimezone(dt.UTC) - last_synced
        if age >= ttl:
            hours = age.total_seconds() / 3600.0
            return f"last sync was {hours:.1f}h ago"
        return None

    def is_stale(self, now: dt.datetime, ttl: dt.timedelta) -> bool:
        return self.staleness_reason(now, ttl) is not None

    def load_api_key(self) -> str | None:
        if not os.path.exists(self.credentials_path):
            return None
        try:
            with open(self.credentials_path, "r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            raise CredentialError(
                f"Credentials file {self.credentials_path} is unreadable: {exc}"
            ) from exc
        if not isinstance(payload, dict):
            raise CredentialError(f"Credentials file {self.credentials_path} is not a JSON object")

        value = payload.get("api_key")
        if value is None:
            return None
        return str(value).strip() or None

    def save_api_key(self, api_key: str) -> None:
        self._write_json_file(self.credentials_path, {"api_key": api_key})
        try:
            os.chmod(self.credentials_path, 0o600)
        except OSError as exc:
            logger.warning(f"Could not restrict permissions on {self.credentials_path}: {exc}")
