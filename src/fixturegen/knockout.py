"""Knockout rounds for the domestic cup, continental knockouts and super cup.

Rounds are generated one at a time: the caller asks for the next round
once the previous one has been played. Previous results are always read
through filter_season_fixtures, so a played round from an earlier season
with the same week number is never mistaken for the current one.
"""

import logging
import random

from fixturegen.dates import (
    continental_round_dates, cup_round_date, season_of, super_cup_date,
)
from fixturegen.errors import ConfigurationError
from fixturegen.models import (
    CONTINENTAL_ORDER, CONTINENTAL_WEEKS, CUP, CUP_ORDER, CUP_WEEKS, EUROPE,
    LEAGUE, LEAGUE_1, SUPER_CUP, SUPER_CUP_WEEK, Fixture, KnockoutRound,
    Team, Tie, new_fixture_id,
)

logger = logging.getLogger(__name__)

CUP_LEAGUES = (LEAGUE, LEAGUE_1)
SEEDED_TEAMS = 8
PLAYOFF_TEAMS = 16


def filter_season_fixtures(fixtures: list[Fixture], season_year: int,
                           competition_id: str | None = None,
                           week: int | None = None,
                           played_only: bool = False) -> list[Fixture]:
    """Fixtures of one season, optionally narrowed to a competition/week."""
    result = []
    for f in fixtures:
        if season_of(f.date) != season_year:
            continue
        if competition_id is not None and f.competition_id != competition_id:
            continue
        if week is not None and f.week != week:
            continue
        if played_only and not f.played:
            continue
        result.append(f)
    return result


def _coin_toss(a: str, b: str, rng: random.Random, context: str) -> str:
    logger.warning("No penalty result for %s; drawing winner at random", context)
    return a if rng.random() < 0.5 else b


def match_winner(fixture: Fixture, rng: random.Random) -> str:
    """Winner of a single-leg tie: score, then penalties, then random."""
    if not fixture.played:
        raise ConfigurationError(f"Fixture {fixture.id} has not been played")
    home, away = fixture.home_team_id, fixture.away_team_id
    hs = fixture.home_score or 0
    aws = fixture.away_score or 0
    if hs > aws:
        return home
    if aws > hs:
        return away
    if fixture.has_penalties() and fixture.pk_home != fixture.pk_away:
        return home if fixture.pk_home > fixture.pk_away else away
    return _coin_toss(home, away, rng, f"{home} vs {away}")


def tie_winner(tie: Tie, rng: random.Random) -> str:
    """Winner of a two-legged tie.

    Aggregate goals decide; a level aggregate goes to the second leg's
    penalty shoot-out, and only without one to a random draw.
    """
    team_a, team_b = tie.teams
    agg = tie.aggregate
    if agg[team_a] > agg[team_b]:
        return team_a
    if agg[team_b] > agg[team_a]:
        return team_b
    leg2 = tie.leg2
    if leg2.has_penalties() and leg2.pk_home != leg2.pk_away:
        return team_a if leg2.pk_home > leg2.pk_away else team_b
    return _coin_toss(team_a, team_b, rng, f"tie {team_a} vs {team_b}")


def find_ties(fixtures: list[Fixture], competition_id: str, leg2_week: int,
              season_year: int) -> list[Tie]:
    """Pair each played second leg with its first leg from the same season.

    The first leg is the week before, with home and away reversed. Ties
    whose first leg is missing or unplayed are left out.
    """
    season = filter_season_fixtures(fixtures, season_year, competition_id)
    first_legs = {
        (f.home_team_id, f.away_team_id): f
        for f in season if f.week == leg2_week - 1
    }
    ties = []
    for leg2 in season:
        if leg2.week != leg2_week or not leg2.played:
            continue
        leg1 = first_legs.get((leg2.away_team_id, leg2.home_team_id))
        if leg1 is None or not leg1.played:
            logger.warning(
                "No played first leg for %s vs %s (week %d); skipping",
                leg2.away_team_id, leg2.home_team_id, leg2_week - 1,
            )
            continue
        ties.append(Tie(leg1=leg1, leg2=leg2))
    return ties


def round_winners(fixtures: list[Fixture], competition_id: str, week: int,
                  season_year: int, rng: random.Random) -> list[str]:
    """Winners of a single-leg round played in the given season."""
    played = filter_season_fixtures(fixtures, season_year, competition_id,
                                    week=week, played_only=True)
    return [match_winner(f, rng) for f in played]


def tie_winners(fixtures: list[Fixture], competition_id: str, leg2_week: int,
                season_year: int, rng: random.Random) -> list[str]:
    """Winners of a two-legged round played in the given season."""
    return [tie_winner(t, rng)
            for t in find_ties(fixtures, competition_id, leg2_week, season_year)]


def _known(team_ids: list[str], roster: set[str]) -> list[str]:
    known = [t for t in team_ids if t in roster]
    for t in team_ids:
        if t not in roster:
            logger.warning("Winner %s is not in the roster; dropped", t)
    return known


def _consecutive_pairs(pool: list[str], context: str) -> list[tuple[str, str]]:
    if len(pool) < 2:
        raise ConfigurationError(
            f"{context} needs at least 2 participants, got {len(pool)}"
        )
    if len(pool) % 2 == 1:
        logger.warning("%s has an odd pool of %d; %s left unpaired",
                       context, len(pool), pool[-1])
    return [(pool[i], pool[i + 1]) for i in range(0, len(pool) - 1, 2)]


def cup_pool(teams: list[Team]) -> list[str]:
    """First-round cup entrants: domestic teams without a cup ban."""
    return [t.id for t in teams
            if not t.cup_ban and (t.league_id in CUP_LEAGUES or not t.league_id)]


def generate_cup_round(teams: list[Team], fixtures: list[Fixture],
                       round_name: KnockoutRound, season_year: int,
                       rng: random.Random | None = None,
                       competition_id: str = CUP) -> list[Fixture]:
    """Draw a single-leg cup round.

    The first round draws from all eligible teams; later rounds draw from
    the winners of this season's previous round. The pool is shuffled and
    split into consecutive pairs.
    """
    rng = rng or random.Random()
    if round_name not in CUP_WEEKS:
        raise ConfigurationError(f"{round_name.value} is not a cup round")

    pos = CUP_ORDER.index(round_name)
    if pos == 0:
        pool = cup_pool(teams)
    else:
        prev_week = CUP_WEEKS[CUP_ORDER[pos - 1]]
        winners = round_winners(fixtures, competition_id, prev_week,
                                season_year, rng)
        pool = _known(winners, {t.id for t in teams})

    rng.shuffle(pool)
    pairs = _consecutive_pairs(pool, f"Cup {round_name.value}")

    new_fixtures = []
    for pair_index, (home, away) in enumerate(pairs):
        new_fixtures.append(Fixture(
            id=new_fixture_id(season_year, competition_id,
                              CUP_WEEKS[round_name], home, away),
            week=CUP_WEEKS[round_name],
            date=cup_round_date(round_name, season_year, pair_index),
            home_team_id=home,
            away_team_id=away,
            competition_id=competition_id,
        ))
    return new_fixtures


def _continental_pairs(round_name: KnockoutRound, teams: list[Team],
                       fixtures: list[Fixture], season_year: int,
                       rng: random.Random, standings: list[str] | None,
                       competition_id: str) -> list[tuple[str, str]]:
    """Pairs for a continental round; the first team hosts leg 1."""
    roster = {t.id for t in teams}

    if round_name == KnockoutRound.PLAYOFF:
        if standings is None:
            raise ConfigurationError("Play-off draw needs league-phase standings")
        playoff = standings[SEEDED_TEAMS:SEEDED_TEAMS + PLAYOFF_TEAMS]
        if len(playoff) < 2:
            raise ConfigurationError(
                f"Play-off needs at least 2 participants, got {len(playoff)}"
            )
        # High seed i meets low seed (n-1-i); low seed hosts leg 1.
        n = len(playoff)
        return [(playoff[n - 1 - i], playoff[i]) for i in range(n // 2)]

    pos = CONTINENTAL_ORDER.index(round_name)
    prev_leg2 = CONTINENTAL_WEEKS[CONTINENTAL_ORDER[pos - 1]][-1]
    winners = _known(
        tie_winners(fixtures, competition_id, prev_leg2, season_year, rng),
        roster,
    )

    if round_name == KnockoutRound.R16:
        if standings is None:
            raise ConfigurationError("Round of 16 draw needs league-phase standings")
        seeded = list(standings[:SEEDED_TEAMS])
        rng.shuffle(seeded)
        rng.shuffle(winners)
        count = min(len(seeded), len(winners))
        if count < 1:
            raise ConfigurationError(
                "Round of 16 needs seeded teams and play-off winners"
            )
        if len(seeded) != len(winners):
            logger.warning("Round of 16: %d seeded vs %d play-off winners",
                           len(seeded), len(winners))
        # Play-off winner hosts leg 1.
        return [(winners[i], seeded[i]) for i in range(count)]

    rng.shuffle(winners)
    return _consecutive_pairs(winners, f"Continental {round_name.value}")


def generate_continental_round(teams: list[Team], fixtures: list[Fixture],
                               round_name: KnockoutRound, season_year: int,
                               rng: random.Random | None = None,
                               standings: list[str] | None = None,
                               competition_id: str = EUROPE) -> list[Fixture]:
    """Draw a continental knockout round.

    Every round but the final is two-legged, the second leg reversing
    the venue. `standings` is the league-phase table as an ordered list of
    team ids; it is needed for the play-off and round-of-16 draws.
    """
    rng = rng or random.Random()
    if round_name not in CONTINENTAL_WEEKS:
        raise ConfigurationError(f"{round_name.value} is not a continental round")

    pairs = _continental_pairs(round_name, teams, fixtures, season_year, rng,
                               standings, competition_id)
    weeks = CONTINENTAL_WEEKS[round_name]
    dates = continental_round_dates(round_name, season_year)

    new_fixtures = []
    for t1, t2 in pairs:
        new_fixtures.append(Fixture(
            id=new_fixture_id(season_year, competition_id, weeks[0], t1, t2),
            week=weeks[0],
            date=dates[0],
            home_team_id=t1,
            away_team_id=t2,
            competition_id=competition_id,
        ))
        if len(weeks) > 1:
            new_fixtures.append(Fixture(
                id=new_fixture_id(season_year, competition_id, weeks[1],
                                  t2, t1),
                week=weeks[1],
                date=dates[1],
                home_team_id=t2,
                away_team_id=t1,
                competition_id=competition_id,
            ))
    return new_fixtures


def generate_super_cup(qualifiers: list[str],
                       season_year: int) -> list[Fixture]:
    """Super cup semi-finals: 1st vs 3rd, then 2nd vs 4th the day after."""
    if len(qualifiers) < 4:
        raise ConfigurationError(
            f"Super cup needs 4 qualifiers, got {len(qualifiers)}"
        )
    q = qualifiers
    return [
        Fixture(
            id=new_fixture_id(season_year, SUPER_CUP, SUPER_CUP_WEEK,
                              home, away),
            week=SUPER_CUP_WEEK,
            date=super_cup_date(i, season_year),
            home_team_id=home,
            away_team_id=away,
            competition_id=SUPER_CUP,
        )
        for i, (home, away) in enumerate([(q[0], q[2]), (q[1], q[3])])
    ]
