from __future__ import annotations

import datetime as dt
import os

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field

load_dotenv(find_dotenv(usecwd=True))

DEFAULT_BASE_URL = "https://v3.football.api-sports.io"
DEFAULT_LEAGUE_ID = 253  # Major League Soccer
DEFAULT_CACHE_TTL_HOURS = 24


def _env_int(name: str, default: int, minimum: int, maximum: int) -> int:
    raw = os.getenv(name, str(default)).strip()
    try:
        value = int(raw)
    except ValueError:
        value = default
    return max(minimum, min(maximum, value))


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, str(default)).strip()
    try:
        return float(raw)
    except ValueError:
        return default


def default_data_dir() -> str:
    configured = os.getenv("FOOTBALL_REPORT_HOME", "").strip()
    if configured:
        return os.path.normpath(os.path.expanduser(configured))
    return os.path.join(os.path.expanduser("~"), ".football-report")


class ReportSettings(BaseModel):
    data_dir: str
    base_url: str = DEFAULT_BASE_URL
    league_id: int = DEFAULT_LEAGUE_ID
    season: int = Field(default_factory=lambda: dt.date.today().year)
    cache_ttl_hours: int = Field(default=DEFAULT_CACHE_TTL_HOURS, ge=1)
    timeout_seconds: float = Field(default=10.0, gt=0)

    @property
    def cache_ttl(self) -> dt.timedelta:
        return dt.timedelta(hours=self.cache_ttl_hours)


def load_settings(
    data_dir: str | None = None,
    league_id: int | None = None,
    season: int | None = None,
) -> ReportSettings:
    """Build settings from the environment, letting explicit values win."""
    return ReportSettings(
        data_dir=data_dir or default_data_dir(),
        league_id=(
            league_id
            if league_id is not None
            else _env_int("DEFAULT_LEAGUE_ID", DEFAULT_LEAGUE_ID, minimum=1, maximum=100000)
        ),
        season=season if season is not None else dt.date.today().year,
        cache_ttl_hours=_env_int(
            "CACHE_TTL_HOURS", DEFAULT_CACHE_TTL_HOURS, minimum=1, maximum=168
        ),
        timeout_seconds=max(1.0, _env_float("REQUEST_TIMEOUT_SECONDS", 10.0)),
    )
