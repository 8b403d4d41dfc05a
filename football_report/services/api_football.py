from __future__ import annotations

import datetime as dt
from typing import Any

import requests
from loguru import logger

from football_report.services.errors import ApiError
from football_report.services.persistent_store import (
    FIXTURES_LAST_ROUND,
    FIXTURES_NEXT_ROUND,
    STANDINGS,
    CacheStore,
)
from football_report.services.settings import ReportSettings

ROUND_SIZE = 6


class FootballAPI:
    def __init__(self, settings: ReportSettings, api_key: str, store: CacheStore) -> None:
        self.settings = settings
        self.api_key = api_key.strip()
        self.store = store
        self.base_url = settings.base_url.rstrip("/")
        self.timeout_seconds = settings.timeout_seconds

        self.session = requests.Session()
        host = self.base_url.split("://", 1)[-1]
        session_headers = {"x-rapidapi-host": host}
        if self.api_key:
            session_headers["x-apisports-key"] = self.api_key
        self.session.headers.update(session_headers)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> FootballAPI:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @staticmethod
    def _has_upstream_errors(upstream_errors: Any) -> bool:
        if isinstance(upstream_errors, dict):
            return any(bool(value) for value in upstream_errors.values())
        return bool(upstream_errors)

    @staticmethod
    def _format_upstream_errors(upstream_errors: Any) -> str:
        if isinstance(upstream_errors, dict):
            non_empty = {key: value for key, value in upstream_errors.items() if value}
            return str(non_empty)
        return str(upstream_errors)

    def _request_json(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        logger.info("GET /{} {}", path, params)
        try:
            response = self.session.get(
                f"{self.base_url}/{path}",
                params=params,
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
        except requests.exceptions.HTTPError as exc:
            status_code = exc.response.status_code if exc.response is not None else None
            raise ApiError(path, str(exc), status_code) from exc
        except requests.exceptions.RequestException as exc:
            raise ApiError(path, str(exc)) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise ApiError(path, f"response is not JSON: {exc}", response.status_code) from exc

        if not isinstance(payload, dict):
            raise ApiError(path, "response is not a JSON object", response.status_code)

        upstream_errors = payload.get("errors")
        if self._has_upstream_errors(upstream_errors):
            raise ApiError(path, self._format_upstream_errors(upstream_errors), response.status_code)

        return payload

    def get_last_fixtures(self, league_id: int, season: int, count: int = ROUND_SIZE) -> dict[str, Any]:
        return self._request_json(
            "fixtures", {"league": league_id, "season": season, "last": count}
        )

    def get_next_fixtures(self, league_id: int, season: int, count: int = ROUND_SIZE) -> dict[str, Any]:
        return self._request_json(
            "fixtures", {"league": league_id, "season": season, "next": count}
        )

    def get_standings(self, league_id: int, season: int) -> dict[str, Any]:
        return self._request_json("standings", {"league": league_id, "season": season})

    def sync_cache(self, now: dt.datetime | None = None) -> dt.datetime:
        """Fetch all three documents, then write them and record the sync time.

        Every request must succeed before anything is written, so a failure
        leaves the previous cache as it was.
        """
        league_id = self.settings.league_id
        season = self.settings.season

        documents = {
            FIXTURES_LAST_ROUND: self.get_last_fixtures(league_id, season),
            FIXTURES_NEXT_ROUND: self.get_next_fixtures(league_id, season),
            STANDINGS: self.get_standings(league_id, season),
        }
        for name, payload in documents.items():
            self.store.save_document(name, payload)

        synced_at = self.store.mark_synced(league_id, season, now=now)
        logger.info(
            "Cached league={} season={} at {}", league_id, season, synced_at.isoformat()
        )
        return synced_at

    def ensure_fresh_cache(self, force: bool = False, now: dt.datetime | None = None) -> bool:
        """Sync when forced or stale. Returns True when the API was queried."""
        current = now or dt.datetime.now(dt.UTC)

        if force:
            logger.info("Forced API sync requested.")
            self.sync_cache(now=current)
            return True

        reason = self.store.staleness_reason(current, self.settings.cache_ttl)
        if reason is not None:
            logger.info(f"Cache is stale ({reason}); refreshing from API.")
            self.sync_cache(now=current)
            return True

        meta = self.store.load_meta()
        cached_scope = (meta.get("league_id"), meta.get("season"))
        if cached_scope != (self.settings.league_id, self.settings.season):
            logger.warning(
                "Cache holds league={} season={}, not league={} season={}; "
                "run with --force-api-sync to replace it.",
                cached_scope[0],
                cached_scope[1],
                self.settings.league_id,
                self.settings.season,
            )
        else:
            logger.info("Cache is fresh; skipping API calls.")
        return False
