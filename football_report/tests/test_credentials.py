from __future__ import annotations

from pathlib import Path

from football_report.services.credentials import prompt_api_key, resolve_api_key
from football_report.services.persistent_store import CacheStore


def test_explicit_key_wins(tmp_path: Path, monkeypatch) -> None:
    store = CacheStore(str(tmp_path))
    store.save_api_key("saved-key")
    monkeypatch.setenv("API_SPORTS_KEY", "env-key")

    assert resolve_api_key("  cli-key ", store) == "cli-key"


def test_environment_key_beats_saved_key(tmp_path: Path, monkeypatch) -> None:
    store = CacheStore(str(tmp_path))
    store.save_api_key("saved-key")
    monkeypatch.setenv("API_SPORTS_KEY", "env-key")

    assert resolve_api_key(None, store) == "env-key"


def test_saved_key_is_used_when_nothing_else_is_set(tmp_path: Path, monkeypatch) -> None:
    store = CacheStore(str(tmp_path))
    store.save_api_key("saved-key")
    monkeypatch.delenv("API_SPORTS_KEY", raising=False)

    assert resolve_api_key("", store) == "saved-key"


def test_missing_key_resolves_to_none_without_side_effects(tmp_path: Path, monkeypatch) -> None:
    store = CacheStore(str(tmp_path))
    monkeypatch.delenv("API_SPORTS_KEY", raising=False)

    assert resolve_api_key(None, store) is None
    assert not Path(store.credentials_path).exists()


def test_prompt_strips_input() -> None:
    prompts: list[str] = []

    def fake_reader(prompt: str) -> str:
        prompts.append(prompt)
        return "  typed-key\n"

    assert prompt_api_key(fake_reader) == "typed-key"
    assert prompts == ["API-Football key: "]
