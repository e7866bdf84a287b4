"""Double round-robin generation for domestic leagues."""

import math
from datetime import timedelta

from fixturegen.dates import league_week_date, max_league_weeks
from fixturegen.errors import ConfigurationError
from fixturegen.models import LEAGUE, Fixture, Matchup, Round, new_fixture_id


def pair_double_round_robin(teams: list[str]) -> list[Round]:
    """Pair a league home and away using the circle method.

    For N teams (N even): 2*(N-1) rounds of N/2 matchups. In each
    Matchup, team_a is the home side.

    The first team stays fixed while the rest rotate. Home goes to the
    first listed side on even rounds and to the second on odd rounds;
    since N-1 is odd, the second pass through the rotation meets every
    pair again with the venue reversed.
    """
    n = len(teams)
    if n < 2 or n % 2 == 1:
        raise ConfigurationError(
            f"Round-robin needs an even number of teams (at least 2), got {n}"
        )
    if len(set(teams)) != n:
        raise ConfigurationError("Round-robin team list contains duplicates")

    rotation = list(teams[1:])
    fixed = teams[0]

    rounds = []
    for r in range((n - 1) * 2):
        pairs = [(fixed, rotation[-1])]
        for i in range((len(rotation) - 1) // 2):
            pairs.append((rotation[i], rotation[len(rotation) - 2 - i]))

        matchups = []
        for t1, t2 in pairs:
            if r % 2 == 0:
                matchups.append(Matchup(t1, t2))
            else:
                matchups.append(Matchup(t2, t1))
        rounds.append(Round(number=r + 1, matchups=matchups))

        # Rotate right by one
        rotation = [rotation[-1]] + rotation[:-1]

    return rounds


def generate_double_round_robin(teams: list[str], season_year: int,
                                competition_id: str = LEAGUE) -> list[Fixture]:
    """Generate dated fixtures for a full home-and-away league season.

    Round r is played in league week r+1. The first half of each round
    (rounded up) plays on the week's anchor date, the rest the day after.
    Fixtures come back sorted by date. A league too large for one season
    (more than 20 teams) raises ConfigurationError.
    """
    rounds = pair_double_round_robin(teams)
    limit = max_league_weeks(season_year)
    if len(rounds) > limit:
        raise ConfigurationError(
            f"{competition_id}: {len(teams)} teams need {len(rounds)} weeks, "
            f"only {limit} fit in the season"
        )
    split_index = math.ceil((len(teams) // 2) / 2)

    fixtures = []
    for rnd in rounds:
        base = league_week_date(rnd.number, season_year)
        for idx, m in enumerate(rnd.matchups):
            match_date = base
            if idx >= split_index:
                match_date = base + timedelta(days=1)
            fixtures.append(Fixture(
                id=new_fixture_id(season_year, competition_id, rnd.number,
                                  m.team_a, m.team_b),
                week=rnd.number,
                date=match_date,
                home_team_id=m.team_a,
                away_team_id=m.team_b,
                competition_id=competition_id,
            ))

    fixtures.sort(key=lambda f: f.date)
    return fixtures


def verify_round_robin(fixtures: list[Fixture], teams: list[str]) -> dict:
    """Verify a double round-robin is valid and complete.

    Returns dict with:
    - valid: bool
    - errors: list of error strings
    - pair_counts: dict of (home, away) -> count
    - games_per_team: dict of team -> game count
    """
    errors = []
    pair_counts: dict[tuple[str, str], int] = {}
    games_per_team: dict[str, int] = {t: 0 for t in teams}
    teams_in_week: dict[int, set[str]] = {}

    for f in fixtures:
        seen = teams_in_week.setdefault(f.week, set())
        for t in (f.home_team_id, f.away_team_id):
            if t in seen:
                errors.append(f"Week {f.week}: {t} appears twice")
            seen.add(t)
            games_per_team[t] = games_per_team.get(t, 0) + 1

        key = (f.home_team_id, f.away_team_id)
        pair_counts[key] = pair_counts.get(key, 0) + 1

    # Every ordered pair exactly once: two meetings, venue reversed
    for t1 in teams:
        for t2 in teams:
            if t1 == t2:
                continue
            count = pair_counts.get((t1, t2), 0)
            if count != 1:
                errors.append(
                    f"{t1} (home) vs {t2}: played {count} times (expected 1)"
                )

    expected_total = len(teams) * (len(teams) - 1)
    if len(fixtures) != expected_total:
        errors.append(
            f"{len(fixtures)} fixtures, expected {expected_total}"
        )

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "pair_counts": pair_counts,
        "games_per_team": games_per_team,
    }
