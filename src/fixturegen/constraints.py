"""Constraint validation for generated season fixtures.

Works on in-memory fixtures or on fixtures re-imported from CSV.
"""

from collections import defaultdict
from datetime import date

from fixturegen.balance import home_cap
from fixturegen.dates import season_window
from fixturegen.models import EUROPE, LEAGUE_PHASE_FIRST_WEEK, Fixture, Team
from fixturegen.roundrobin import verify_round_robin
from fixturegen.swiss import DEFAULT_ROUNDS, verify_league_phase

# Bucket for violations not tied to one competition.
GENERAL = "ALL COMPETITIONS"


def validate_schedule(fixtures: list[Fixture], teams: dict[str, Team],
                      season_year: int,
                      league_ids: list[str] | None = None,
                      league_phase_rounds: int = DEFAULT_ROUNDS) -> dict:
    """Validate a season's fixtures against all constraints.

    Returns dict with:
    - fixtures: number of fixtures checked
    - valid: bool (True if no hard constraint violations)
    - errors: list of hard constraint violations
    - warnings: list of soft constraint issues
    """
    errors = []
    warnings = []
    start, end = season_window(season_year)

    ids_seen: set[str] = set()
    team_dates: dict[str, dict[date, int]] = defaultdict(lambda: defaultdict(int))

    for f in fixtures:
        h = f.home_team_id
        a = f.away_team_id

        if f.id in ids_seen:
            errors.append(f"Duplicate fixture id {f.id}")
        ids_seen.add(f.id)

        if h not in teams:
            errors.append(f"Unknown home team: {h}")
            continue
        if a not in teams:
            errors.append(f"Unknown away team: {a}")
            continue
        if h == a:
            errors.append(f"{h} plays itself on {f.date}")
            continue

        if not start <= f.date <= end:
            warnings.append(
                f"{f.competition_id} week {f.week} {h} vs {a} on {f.date} "
                f"is outside the {season_year} season"
            )

        team_dates[h][f.date] += 1
        team_dates[a][f.date] += 1

        if f.played and (f.home_score is None or f.away_score is None):
            errors.append(f"Fixture {f.id} is played but has no score")

    # Check: no team plays twice on one date, across all competitions
    for team, dates in team_dates.items():
        for d, count in dates.items():
            if count > 1:
                errors.append(f"{team} plays {count} games on {d}")

    # Leagues: complete double round-robin
    for league_id in league_ids or []:
        league_fixtures = [f for f in fixtures if f.competition_id == league_id]
        if not league_fixtures:
            continue
        league_teams = [t.id for t in teams.values() if t.league_id == league_id]
        result = verify_round_robin(league_fixtures, league_teams)
        for e in result["errors"]:
            errors.append(f"{league_id}: {e}")

    # Continental league phase: perfect matching per round, home cap
    last_week = LEAGUE_PHASE_FIRST_WEEK + league_phase_rounds - 1
    phase = [f for f in fixtures if f.competition_id == EUROPE
             and LEAGUE_PHASE_FIRST_WEEK <= f.week <= last_week]
    if phase:
        entrants = sorted({f.home_team_id for f in phase}
                          | {f.away_team_id for f in phase})
        result = verify_league_phase(phase, entrants, league_phase_rounds)
        for e in result["errors"]:
            errors.append(f"{EUROPE}: {e}")
        cap = home_cap(league_phase_rounds)
        for t, count in sorted(result["home_counts"].items()):
            if count > cap:
                errors.append(
                    f"{EUROPE}: {t} has {count} home games (max {cap})"
                )

    return {
        "fixtures": len(fixtures),
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
    }


def _competition_of(message: str) -> tuple[str, str]:
    """Split a "LEAGUE: ..." style error into (competition, message)."""
    head, sep, rest = message.partition(": ")
    if sep and head.isupper() and " " not in head:
        return head, rest
    return GENERAL, message


def format_validation_report(result: dict, title: str = "") -> str:
    """Format validation results as text.

    Hard violations are grouped by competition, with checks that span
    competitions (clashes, ids, unknown teams) listed first.
    """
    by_competition: dict[str, list[str]] = defaultdict(list)
    for e in result["errors"]:
        competition, message = _competition_of(e)
        by_competition[competition].append(message)

    heading = f"{title} SEASON CHECK".strip()
    lines = ["=" * 60, heading, "=" * 60]
    lines.append(
        f"\n{result.get('fixtures', 0)} fixtures checked: "
        f"{len(result['errors'])} violation(s), "
        f"{len(result['warnings'])} warning(s)"
    )
    if result["valid"]:
        lines.append("Every fixture passes the hard checks.")
    else:
        lines.append("Schedule is NOT usable as generated.")

    order = sorted(by_competition, key=lambda c: (c != GENERAL, c))
    for competition in order:
        messages = by_competition[competition]
        lines.append(f"\n--- {competition} ({len(messages)}) ---")
        for m in messages:
            lines.append(f"  {m}")

    if result["warnings"]:
        lines.append(f"\n--- OUTSIDE SEASON WINDOW ({len(result['warnings'])}) ---")
        for w in result["warnings"]:
            lines.append(f"  {w}")

    return "\n".join(lines)
