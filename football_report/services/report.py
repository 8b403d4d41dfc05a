from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from football_report.services.errors import CacheError
from football_report.services.persistent_store import (
    FIXTURES_LAST_ROUND,
    FIXTURES_NEXT_ROUND,
    STANDINGS,
    CacheStore,
)

TEAM_WIDTH = 18
COLUMN_SEPARATOR = "    ||    "
LAST_ROUND_TITLE = "Last Round"
NEXT_ROUND_TITLE = "Next Round"

POS_WIDTH = 4
STANDINGS_TEAM_WIDTH = 20
STAT_WIDTH = 4
STAT_HEADERS = ["W", "D", "L", "GF", "GA", "GD", "Pts"]
TABLE_WIDTH = POS_WIDTH + STANDINGS_TEAM_WIDTH + STAT_WIDTH * len(STAT_HEADERS)


class Fixture(BaseModel):
    home_team: str
    away_team: str
    home_goals: int | None = None
    away_goals: int | None = None


class StandingRow(BaseModel):
    rank: int
    team: str
    win: int = 0
    draw: int = 0
    lose: int = 0
    goals_for: int = 0
    goals_against: int = 0
    goal_diff: int = 0
    points: int = 0
    group: str = ""


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_int(value: Any, default: int = 0) -> int:
    if value is None:
        return default
    return int(value)


def parse_fixtures(payload: dict[str, Any]) -> list[Fixture]:
    fixtures: list[Fixture] = []
    for match in payload.get("response") or []:
        teams = _as_dict(match.get("teams"))
        goals = _as_dict(match.get("goals"))
        fixtures.append(
            Fixture(
                home_team=str(_as_dict(teams.get("home")).get("name") or ""),
                away_team=str(_as_dict(teams.get("away")).get("name") or ""),
                home_goals=goals.get("home"),
                away_goals=goals.get("away"),
            )
        )
    return fixtures


def parse_standings(payload: dict[str, Any]) -> list[list[StandingRow]]:
    """Return the standings groups in source order, one list of rows per group."""
    groups: list[list[StandingRow]] = []
    for entry in payload.get("response") or []:
        league = _as_dict(entry.get("league"))
        for group_rows in league.get("standings") or []:
            rows: list[StandingRow] = []
            for row in group_rows:
                totals = _as_dict(row.get("all"))
                goals = _as_dict(totals.get("goals"))
                rows.append(
                    StandingRow(
                        rank=_as_int(row.get("rank")),
                        team=str(_as_dict(row.get("team")).get("name") or ""),
                        win=_as_int(totals.get("win")),
                        draw=_as_int(totals.get("draw")),
                        lose=_as_int(totals.get("lose")),
                        goals_for=_as_int(goals.get("for")),
                        goals_against=_as_int(goals.get("against")),
                        goal_diff=_as_int(row.get("goalsDiff")),
                        points=_as_int(row.get("points")),
                        group=str(row.get("group") or league.get("name") or ""),
                    )
                )
            groups.append(rows)
    return groups


def format_score(fixture: Fixture) -> str:
    home = "-" if fixture.home_goals is None else str(fixture.home_goals)
    away = "-" if fixture.away_goals is None else str(fixture.away_goals)
    return f"{home}:{away}"


def format_fixture(fixture: Fixture) -> str:
    return (
        f"{fixture.home_team:<{TEAM_WIDTH}} "
        f"{format_score(fixture)} "
        f"{fixture.away_team:<{TEAM_WIDTH}}"
    )


def _panel(title: str, fixtures: list[Fixture]) -> tuple[int, list[str]]:
    rows = [format_fixture(fixture) for fixture in fixtures]
    width = max([len(title)] + [len(row) for row in rows])
    return width, rows


def render_fixture_panel(last_round: list[Fixture], next_round: list[Fixture]) -> list[str]:
    last_width, last_rows = _panel(LAST_ROUND_TITLE, last_round)
    next_width, next_rows = _panel(NEXT_ROUND_TITLE, next_round)

    lines = [
        f"{LAST_ROUND_TITLE.center(last_width)}{COLUMN_SEPARATOR}"
        f"{NEXT_ROUND_TITLE.center(next_width)}"
    ]
    for index in range(max(len(last_rows), len(next_rows))):
        left = last_rows[index] if index < len(last_rows) else ""
        right = next_rows[index] if index < len(next_rows) else ""
        lines.append(f"{left:<{last_width}}{COLUMN_SEPARATOR}{right:<{next_width}}")
    return lines


def format_standing_row(row: StandingRow) -> str:
    stats = [
        row.win,
        row.draw,
        row.lose,
        row.goals_for,
        row.goals_against,
        row.goal_diff,
        row.points,
    ]
    return (
        f"{row.rank:<{POS_WIDTH}}{row.team:<{STANDINGS_TEAM_WIDTH}}"
        + "".join(f"{value:>{STAT_WIDTH}}" for value in stats)
    )


def standings_header() -> str:
    return f"{'Pos':<{POS_WIDTH}}{'Team':<{STANDINGS_TEAM_WIDTH}}" + "".join(
        f"{label:>{STAT_WIDTH}}" for label in STAT_HEADERS
    )


def render_standings(groups: list[list[StandingRow]]) -> list[str]:
    border = "-" * TABLE_WIDTH
    lines: list[str] = []
    for rows in groups:
        group_name = rows[0].group if rows else ""
        lines.append(group_name)
        lines.append(border)
        lines.append(standings_header())
        lines.append(border)
        lines.extend(format_standing_row(row) for row in rows)
        lines.append(border)
        lines.append("")
    return lines


def render_report(
    last_round: dict[str, Any],
    next_round: dict[str, Any],
    standings: dict[str, Any],
) -> str:
    lines = render_fixture_panel(parse_fixtures(last_round), parse_fixtures(next_round))
    lines.append("")
    lines.extend(render_standings(parse_standings(standings)))
    return "\n".join(lines)


def render_cached_report(store: CacheStore) -> str:
    last_round = store.load_document(FIXTURES_LAST_ROUND)
    next_round = store.load_document(FIXTURES_NEXT_ROUND)
    standings = store.load_document(STANDINGS)
    try:
        return render_report(last_round, next_round, standings)
    except (AttributeError, TypeError, ValueError) as exc:
        raise CacheError(f"Cached documents do not match the API response shape: {exc}") from exc
