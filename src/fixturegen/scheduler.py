"""Whole-season scheduling.

Opening schedule, generated in one call:
1. Domestic leagues: double round-robin per configured league
2. Continental league phase: pots, pairing search, home/away, dates
3. Domestic cup first round
4. Super cup semi-finals (when qualifiers are configured)

Knockout rounds after that are produced by advance_round once the
previous round's results are in.
"""

import logging
import random
from dataclasses import dataclass, field

from fixturegen.errors import ConfigurationError
from fixturegen.knockout import (
    cup_pool, generate_continental_round, generate_cup_round,
    generate_super_cup,
)
from fixturegen.models import (
    CONTINENTAL_WEEKS, CUP, CUP_WEEKS, EUROPE, Fixture, KnockoutRound, Team,
)
from fixturegen.roundrobin import generate_double_round_robin
from fixturegen.seeding import HistoricalCoefficientProvider
from fixturegen.swiss import LeaguePhaseSchedule, generate_league_phase

logger = logging.getLogger(__name__)


@dataclass
class SeasonSchedule:
    fixtures: list[Fixture] = field(default_factory=list)
    league_phase: LeaguePhaseSchedule | None = None

    @property
    def degraded(self) -> bool:
        """True if the league phase fell back to the sequential deal."""
        return self.league_phase is not None and self.league_phase.degraded


def league_teams(teams: dict[str, Team], league_id: str) -> list[str]:
    return [t.id for t in teams.values() if t.league_id == league_id]


def continental_teams(teams: dict[str, Team]) -> list[Team]:
    return [t for t in teams.values() if t.continental]


def schedule_season(config: dict, seed: int | None = None) -> SeasonSchedule:
    """Generate the opening fixtures of a season from a loaded config."""
    if seed is None:
        seed = config["season"].get("seed")
    rng = random.Random(seed)

    year = config["season"]["year"]
    teams: dict[str, Team] = config["teams"]
    comps = config["competitions"]
    result = SeasonSchedule()

    # Phase 1: leagues
    for league_id in comps["league_ids"]:
        ids = league_teams(teams, league_id)
        if not ids:
            logger.info("League %s has no teams; skipped", league_id)
            continue
        fixtures = generate_double_round_robin(ids, year, league_id)
        logger.info("League %s: %d teams, %d fixtures",
                    league_id, len(ids), len(fixtures))
        result.fixtures.extend(fixtures)

    # Phase 2: continental league phase
    entrants = continental_teams(teams)
    if len(entrants) >= 2:
        provider = HistoricalCoefficientProvider(config["coefficient_tables"])
        phase = generate_league_phase(
            entrants, year, rng, provider,
            rounds=comps["league_phase_rounds"],
            max_attempts=comps["max_attempts"],
        )
        logger.info("League phase: %d teams, %d fixtures, %d attempt(s)%s",
                    len(entrants), len(phase.fixtures), phase.attempts,
                    " (DEGRADED)" if phase.degraded else "")
        result.league_phase = phase
        result.fixtures.extend(phase.fixtures)

    # Phase 3: cup first round
    if len(cup_pool(list(teams.values()))) >= 2:
        cup = generate_cup_round(list(teams.values()), [], KnockoutRound.R32,
                                 year, rng)
        logger.info("Cup R32: %d fixtures", len(cup))
        result.fixtures.extend(cup)

    # Phase 4: super cup
    if comps["super_cup"]:
        result.fixtures.extend(generate_super_cup(comps["super_cup"], year))

    result.fixtures.sort(key=lambda f: (f.date, f.competition_id, f.week))
    return result


def advance_round(config: dict, fixtures: list[Fixture], competition_id: str,
                  round_name: KnockoutRound, seed: int | None = None,
                  standings: list[str] | None = None) -> list[Fixture]:
    """Generate the next knockout round from the fixtures played so far."""
    rng = random.Random(seed)
    year = config["season"]["year"]
    teams = list(config["teams"].values())

    if competition_id == CUP and round_name in CUP_WEEKS:
        return generate_cup_round(teams, fixtures, round_name, year, rng)
    if competition_id == EUROPE and round_name in CONTINENTAL_WEEKS:
        return generate_continental_round(teams, fixtures, round_name, year,
                                          rng, standings=standings)
    raise ConfigurationError(
        f"No knockout round {round_name.value} in competition {competition_id}"
    )
