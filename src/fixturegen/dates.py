"""Calendar dates for league weeks and knockout rounds.

All functions take the season's start year (2025 means the 2025/26
season). A season runs from 1 July of the start year to 30 June of the
next; months before July belong to the second calendar year.
"""

from datetime import date, timedelta

from fixturegen.errors import ConfigurationError
from fixturegen.models import KnockoutRound

SEASON_START_MONTH = 7

# (month, day) anchors for league weeks 1..34.
LEAGUE_WEEK_ANCHORS = [
    (8, 8), (8, 15), (8, 22), (8, 29), (9, 5), (9, 12), (9, 19),
    (10, 6), (10, 13), (10, 27), (11, 2), (11, 9), (11, 16),
    (12, 1), (12, 7), (12, 15), (12, 22),
    (2, 2), (2, 9), (2, 16), (2, 23), (3, 2), (3, 9), (3, 16), (3, 23),
    (4, 6), (4, 13), (4, 20), (4, 27), (5, 4), (5, 11), (5, 18), (5, 25),
    (6, 1),
]

LEAGUE_PHASE_ANCHORS = [
    (9, 24), (10, 1), (10, 22), (11, 5), (11, 26), (12, 10), (1, 21), (1, 28),
]

# Single-leg cup rounds: (first day, second day).
CUP_ROUND_ANCHORS = {
    KnockoutRound.R32: ((12, 28), (12, 29)),
    KnockoutRound.R16: ((1, 14), (1, 15)),
    KnockoutRound.QF: ((3, 27), (3, 28)),
    KnockoutRound.SF: ((5, 1), (5, 2)),
    KnockoutRound.FINAL: ((5, 14), (5, 14)),
}

# Continental knockouts: one anchor per leg.
CONTINENTAL_ROUND_ANCHORS = {
    KnockoutRound.PLAYOFF: ((2, 19), (2, 26)),
    KnockoutRound.R16: ((3, 4), (3, 11)),
    KnockoutRound.QF: ((4, 1), (4, 8)),
    KnockoutRound.SF: ((4, 29), (5, 6)),
    KnockoutRound.FINAL: ((6, 6),),
}

SUPER_CUP_ANCHORS = [(1, 5), (1, 6)]


def season_date(season_year: int, month: int, day: int) -> date:
    """Date of (month, day) inside the season starting in season_year."""
    year = season_year if month >= SEASON_START_MONTH else season_year + 1
    return date(year, month, day)


def season_of(d: date) -> int:
    """Start year of the season a date falls in."""
    return d.year if d.month >= SEASON_START_MONTH else d.year - 1


def season_window(season_year: int) -> tuple[date, date]:
    """First and last day of a season, inclusive."""
    return (date(season_year, SEASON_START_MONTH, 1),
            date(season_year + 1, SEASON_START_MONTH, 1) - timedelta(days=1))


def max_league_weeks(season_year: int) -> int:
    """Number of league weeks whose second match day is still in the season.

    Weeks beyond the defined anchors continue weekly after the last one.
    """
    last_day = season_window(season_year)[1] - timedelta(days=1)
    last_anchor = season_date(season_year, *LEAGUE_WEEK_ANCHORS[-1])
    return len(LEAGUE_WEEK_ANCHORS) + (last_day - last_anchor).days // 7


def league_week_date(week: int, season_year: int) -> date:
    """Anchor date for a 1-based league week.

    Raises ConfigurationError for a week that would spill into the next
    season.
    """
    if week < 1:
        raise ValueError(f"League weeks start at 1, got {week}")
    if week <= len(LEAGUE_WEEK_ANCHORS):
        return season_date(season_year, *LEAGUE_WEEK_ANCHORS[week - 1])
    limit = max_league_weeks(season_year)
    if week > limit:
        raise ConfigurationError(
            f"League week {week} does not fit in the {season_year} season "
            f"(last week is {limit})"
        )
    last = season_date(season_year, *LEAGUE_WEEK_ANCHORS[-1])
    return last + timedelta(days=7 * (week - len(LEAGUE_WEEK_ANCHORS)))


def league_phase_date(round_index: int, season_year: int) -> date:
    """Anchor date for a 0-based continental league-phase round."""
    idx = min(max(round_index, 0), len(LEAGUE_PHASE_ANCHORS) - 1)
    return season_date(season_year, *LEAGUE_PHASE_ANCHORS[idx])


def cup_round_date(round_name: KnockoutRound, season_year: int,
                   pair_index: int) -> date:
    """Date of the pair_index-th tie of a single-leg cup round.

    Ties alternate between the two match days; semi-finals put only the
    first tie on day one.
    """
    first, second = CUP_ROUND_ANCHORS[round_name]
    if round_name == KnockoutRound.SF:
        on_first_day = pair_index == 0
    else:
        on_first_day = pair_index % 2 == 0
    return season_date(season_year, *(first if on_first_day else second))


def continental_round_dates(round_name: KnockoutRound,
                            season_year: int) -> tuple[date, ...]:
    """Leg dates for a continental knockout round (one for the final)."""
    return tuple(season_date(season_year, m, d)
                 for m, d in CONTINENTAL_ROUND_ANCHORS[round_name])


def super_cup_date(match_index: int, season_year: int) -> date:
    return season_date(season_year, *SUPER_CUP_ANCHORS[match_index])
