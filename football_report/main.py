from __future__ import annotations

import argparse
import os
import sys

from loguru import logger

from football_report.services.api_football import FootballAPI
from football_report.services.credentials import prompt_api_key, resolve_api_key
from football_report.services.errors import ReportError
from football_report.services.persistent_store import CacheStore
from football_report.services.report import render_cached_report
from football_report.services.settings import DEFAULT_LEAGUE_ID, load_settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="football-report",
        description="Show recent and upcoming fixtures plus the league table from API-Football.",
    )
    parser.add_argument("--api-key", default=None, help="API-Football key (saved keys are used otherwise)")
    parser.add_argument(
        "--league-id",
        type=int,
        default=None,
        help=f"API-Football league id (default {DEFAULT_LEAGUE_ID} or DEFAULT_LEAGUE_ID)",
    )
    parser.add_argument("--season", type=int, default=None, help="season year (default: current year)")
    parser.add_argument(
        "--force-api-sync",
        action="store_true",
        help="query the API even when the cache is fresh",
    )
    parser.add_argument("--data-dir", default=None, help="cache directory (default FOOTBALL_REPORT_HOME)")
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "WARNING").strip().upper() or "WARNING",
        help="loguru level for stderr output",
    )
    return parser


def configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    settings = load_settings(
        data_dir=args.data_dir,
        league_id=args.league_id,
        season=args.season,
    )
    store = CacheStore(settings.data_dir)

    try:
        api_key = resolve_api_key(args.api_key, store)
        if api_key is None:
            api_key = prompt_api_key()
            store.save_api_key(api_key)
            logger.info(f"Saved API key to {store.credentials_path}")

        with FootballAPI(settings, api_key, store) as api:
            api.ensure_fresh_cache(force=args.force_api_sync)

        report = render_cached_report(store)
    except ReportError as exc:
        logger.error(f"{type(exc).__name__}: {exc}")
        return 1

    print(report)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
