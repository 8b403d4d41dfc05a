from __future__ import annotations

import datetime as dt
import json
from pathlib import Path

import pytest

from football_report.services.errors import CacheError, CredentialError
from football_report.services.persistent_store import DOCUMENT_NAMES, CacheStore

NOW = dt.datetime(2026, 5, 1, 12, 0, tzinfo=dt.UTC)
TTL = dt.timedelta(hours=24)


def test_empty_store_is_stale_because_documents_are_missing(tmp_path: Path) -> None:
    store = CacheStore(str(tmp_path / "cache"))
    assert store.missing_documents() == list(DOCUMENT_NAMES)
    reason = store.staleness_reason(NOW, TTL)
    assert reason is not None
    assert "fixtures_last_round" in reason


def test_documents_without_sync_time_are_stale(tmp_path: Path) -> None:
    store = CacheStore(str(tmp_path))
    for name in DOCUMENT_NAMES:
        store.save_document(name, {"response": []})
    assert store.staleness_reason(NOW, TTL) == "no recorded sync time"


def test_staleness_boundary_is_inclusive(tmp_path: Path) -> None:
    store = CacheStore(str(tmp_path))
    for name in DOCUMENT_NAMES:
        store.save_document(name, {"response": []})

    store.mark_synced(253, 2026, now=NOW - TTL + dt.timedelta(seconds=1))
    assert store.is_stale(NOW, TTL) is False

    store.mark_synced(253, 2026, now=NOW - TTL)
    assert store.is_stale(NOW, TTL) is True


def test_mark_synced_records_scope_and_utc_time(tmp_path: Path) -> None:
    store = CacheStore(str(tmp_path))
    local = NOW.astimezone(dt.timezone(dt.timedelta(hours=-5)))
    store.mark_synced(253, 2026, now=local)

    meta = json.loads(Path(store.meta_path).read_text(encoding="utf-8"))
    assert meta == {
        "last_synced_at": "2026-05-01T12:00:00+00:00",
        "league_id": 253,
        "season": 2026,
    }
    assert store.last_synced_at() == NOW


def test_save_document_overwrites_wholesale(tmp_path: Path) -> None:
    store = CacheStore(str(tmp_path))
    store.save_document("standings", {"response": [1, 2, 3], "extra": True})
    store.save_document("standings", {"response": []})

    assert store.load_document("standings") == {"response": []}
    assert sorted(p.name for p in tmp_path.iterdir()) == ["standings.json"]


def test_deeply_nested_document_survives_round_trip(tmp_path: Path) -> None:
    store = CacheStore(str(tmp_path))
    nested: dict = {"leaf": "Sporting Kansas City"}
    for depth in range(40):
        nested = {"level": depth, "child": nested}

    store.save_document("fixtures_next_round", nested)
    assert store.load_document("fixtures_next_round") == nested


def test_corrupt_document_raises_cache_error(tmp_path: Path) -> None:
    store = CacheStore(str(tmp_path))
    Path(store.document_path("standings")).write_text("{not json", encoding="utf-8")

    with pytest.raises(CacheError, match="unreadable"):
        store.load_document("standings")


def test_unknown_document_name_is_rejected(tmp_path: Path) -> None:
    store = CacheStore(str(tmp_path))
    with pytest.raises(ValueError):
        store.document_path("players")


def test_api_key_round_trip(tmp_path: Path) -> None:
    store = CacheStore(str(tmp_path))
    assert store.load_api_key() is None

    store.save_api_key("abc123")
    assert store.load_api_key() == "abc123"


def test_blank_saved_api_key_reads_as_missing(tmp_path: Path) -> None:
    store = CacheStore(str(tmp_path))
    store.save_api_key("")
    assert store.load_api_key() is None


def test_malformed_credentials_file_raises(tmp_path: Path) -> None:
    store = CacheStore(str(tmp_path))
    Path(store.credentials_path).write_text("[]", encoding="utf-8")

    with pytest.raises(CredentialError):
        store.load_api_key()
