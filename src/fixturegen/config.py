"""Config loading and validation for the season fixture generator."""

from collections import defaultdict
from pathlib import Path

import yaml

from fixturegen.dates import max_league_weeks
from fixturegen.errors import ConfigurationError
from fixturegen.models import LEAGUE, LEAGUE_1, Team
from fixturegen.swiss import DEFAULT_ROUNDS


def parse_bool(value) -> bool:
    """Accept YAML booleans and the usual yes/no strings."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in ("1", "true", "yes", "y", "on")


def parse_team(raw: dict) -> Team:
    return Team(
        id=str(raw["id"]).strip(),
        name=str(raw.get("name", raw["id"])).strip(),
        reputation=float(raw.get("reputation", 0.0)),
        league_id=raw.get("league") or None,
        cup_ban=parse_bool(raw.get("cup_ban", False)),
        continental=parse_bool(raw.get("continental", False)),
    )


def load_config(path: str | Path) -> dict:
    """Load and validate the season YAML, returning structured data.

    Returns dict with:
    - season: {year, name, seed}
    - competitions: {league_ids, league_phase_rounds, max_attempts, super_cup}
    - teams: dict[id -> Team] (in file order)
    - coefficient_tables: list of {team_id: value}, oldest season first
    """
    path = Path(path)
    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    errors = []

    # Season
    raw_season = raw.get("season", {})
    if "year" not in raw_season:
        errors.append("season.year is required")
    season = {
        "year": int(raw_season.get("year", 0)),
        "name": raw_season.get("name", ""),
        "seed": raw_season.get("seed"),
    }

    # Competitions
    raw_comp = raw.get("competitions", {}) or {}
    competitions = {
        "league_ids": list(raw_comp.get("league_ids", [LEAGUE, LEAGUE_1])),
        "league_phase_rounds": int(raw_comp.get("league_phase_rounds",
                                                DEFAULT_ROUNDS)),
        "max_attempts": int(raw_comp.get("max_attempts", 50)),
        "super_cup": [str(t) for t in raw_comp.get("super_cup", [])],
    }
    # The pairing graph gives every team exactly two opponents per pot.
    if competitions["league_phase_rounds"] != DEFAULT_ROUNDS:
        errors.append(
            f"competitions.league_phase_rounds must be {DEFAULT_ROUNDS}, "
            f"got {competitions['league_phase_rounds']}"
        )

    # Teams
    teams: dict[str, Team] = {}
    for entry in raw.get("teams", []):
        if "id" not in entry:
            errors.append(f"Team entry without id: {entry}")
            continue
        team = parse_team(entry)
        if team.id in teams:
            errors.append(f"Duplicate team id {team.id}")
            continue
        if not 0.0 <= team.reputation <= 5.0:
            errors.append(
                f"Team {team.id} reputation {team.reputation} outside 0-5"
            )
        teams[team.id] = team

    # Coefficients, keyed by team id
    tables = []
    for i, table in enumerate(raw.get("coefficients", []) or []):
        parsed = {}
        for team_id, value in (table or {}).items():
            if str(team_id) not in teams:
                errors.append(
                    f"Coefficient table {i + 1} lists unknown team {team_id}"
                )
            parsed[str(team_id)] = float(value)
        tables.append(parsed)
    if len(tables) > 4:
        errors.append(f"At most 4 coefficient tables allowed, got {len(tables)}")

    # Validate
    league_sizes: dict[str, int] = defaultdict(int)
    for team in teams.values():
        if team.league_id:
            league_sizes[team.league_id] += 1
    for league_id in competitions["league_ids"]:
        size = league_sizes.get(league_id, 0)
        weeks = 2 * (size - 1)
        if size % 2 == 1:
            errors.append(f"League {league_id} has an odd number of teams ({size})")
        elif "year" in raw_season and weeks > max_league_weeks(season["year"]):
            errors.append(
                f"League {league_id} has {size} teams; its {weeks} weeks "
                f"do not fit in one season"
            )

    for code in competitions["super_cup"]:
        if code not in teams:
            errors.append(f"Super cup qualifier {code} is not a known team")

    if errors:
        raise ConfigurationError(
            f"{path}: {len(errors)} configuration error(s)", errors
        )

    return {
        "season": season,
        "competitions": competitions,
        "teams": teams,
        "coefficient_tables": tables,
    }
