"""Swiss-style continental league phase.

Four phases:
1. Seed teams into four pots by coefficient (seeding.py)
2. Build the fixed pairing graph from the pot structure
3. Split the graph's edges into rounds, each a perfect matching
   (round-by-round backtracking with restarts)
4. Home/away allocation (balance.py) and calendar dates (dates.py)

If the search cannot finish within its attempt budget, edges are dealt
into rounds by index instead. That schedule is marked degraded: a team may
then play twice in one round.
"""

import logging
import random
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import timedelta

from fixturegen.balance import balance_home_away
from fixturegen.dates import league_phase_date
from fixturegen.models import (
    EUROPE, LEAGUE_PHASE_FIRST_WEEK, Fixture, Matchup, Team, new_fixture_id,
)
from fixturegen.seeding import RankingProvider, assign_pots

logger = logging.getLogger(__name__)

DEFAULT_ROUNDS = 8
DEFAULT_MAX_ATTEMPTS = 50
DEFAULT_MAX_STEPS = 20000

POT_PAIRS = [
    (0, 1), (0, 2), (0, 3),
    (1, 2), (1, 3),
    (2, 3),
]


@dataclass
class PairingResult:
    """Round index per edge, and whether the search had to give up."""
    assignment: list[int]
    degraded: bool = False
    attempts: int = 0


@dataclass
class LeaguePhaseSchedule:
    fixtures: list[Fixture]
    pots: list[list[str]]
    degraded: bool = False
    attempts: int = 0
    edges: list[Matchup] = field(default_factory=list)


def build_pairing_graph(pots: list[list[str]]) -> list[Matchup]:
    """Build the list of pairings every team must play once.

    Intra-pot: pot[i] meets pot[(i+1) % n], giving each team two same-pot
    opponents. Inter-pot: for every pot pair (A, B), A[i] meets B[i] and
    B[(i+1) % n], giving two opponents from each other pot. With four pots
    of at least three teams each team ends up with 2 + 3*2 = 8 opponents.

    Self pairings and repeats of an existing pairing (only possible with
    pots of one or two teams) are dropped.
    """
    edges: list[Matchup] = []
    seen: set[tuple[str, str]] = set()

    def _add(a: str, b: str):
        if a == b:
            return
        m = Matchup(a, b)
        if m.key() in seen:
            return
        seen.add(m.key())
        edges.append(m)

    for pot in pots:
        n = len(pot)
        for i in range(n):
            _add(pot[i], pot[(i + 1) % n])

    for a_idx, b_idx in POT_PAIRS:
        if a_idx >= len(pots) or b_idx >= len(pots):
            continue
        pot_a = pots[a_idx]
        pot_b = pots[b_idx]
        n = min(len(pot_a), len(pot_b))
        for i in range(n):
            _add(pot_a[i], pot_b[i])
            _add(pot_a[i], pot_b[(i + 1) % n])

    return edges


def _team_edges(edges: list[Matchup],
                team_ids: list[str]) -> dict[str, list[int]]:
    """Team id -> indices of the edges it is part of."""
    index: dict[str, list[int]] = {t: [] for t in team_ids}
    for i, m in enumerate(edges):
        index.setdefault(m.team_a, []).append(i)
        index.setdefault(m.team_b, []).append(i)
    return index


def can_decompose(edges: list[Matchup], team_ids: list[str],
                  rounds: int) -> bool:
    """Quick necessary condition for splitting edges into perfect matchings.

    Every team must appear in exactly `rounds` edges and the number of
    teams must be even.
    """
    if not team_ids or len(team_ids) % 2 == 1:
        return False
    degree: dict[str, int] = defaultdict(int)
    for m in edges:
        degree[m.team_a] += 1
        degree[m.team_b] += 1
    if set(degree) - set(team_ids):
        return False
    return all(degree[t] == rounds for t in team_ids)


def _components_even(edges: list[Matchup], used: set[int]) -> bool:
    """True if every component formed by unused edges has an even team count."""
    adjacency: dict[str, list[str]] = defaultdict(list)
    for i, m in enumerate(edges):
        if i in used:
            continue
        adjacency[m.team_a].append(m.team_b)
        adjacency[m.team_b].append(m.team_a)

    visited: set[str] = set()
    for start in adjacency:
        if start in visited:
            continue
        size = 0
        stack = [start]
        visited.add(start)
        while stack:
            team = stack.pop()
            size += 1
            for opp in adjacency[team]:
                if opp not in visited:
                    visited.add(opp)
                    stack.append(opp)
        if size % 2 == 1:
            return False
    return True


def solve_rounds(edges: list[Matchup], team_ids: list[str], rounds: int,
                 rng: random.Random,
                 max_steps: int = DEFAULT_MAX_STEPS) -> list[int] | None:
    """One attempt at assigning every edge to a round.

    Rounds are solved one after another. Within a round, branch on the
    free team with the fewest legal opponents left (ties in random order),
    try its edges in random order and backtrack on dead ends. An edge is
    legal if neither team plays yet this round and it was not used in an
    earlier round. A complete round is rejected if it leaves an odd-sized
    component behind, since no later round could then cover it.

    Returns the round index per edge, or None if some round had no perfect
    matching left (or the round ran past max_steps).
    """
    team_edges = _team_edges(edges, team_ids)
    assignment = [-1] * len(edges)
    used: set[int] = set()

    for rnd in range(rounds):
        chosen: list[int] = []
        playing: set[str] = set()
        steps = 0

        def _legal(team: str) -> list[int]:
            return [i for i in team_edges[team]
                    if i not in used and edges[i].opponent(team) not in playing]

        def _solve_round() -> bool:
            nonlocal steps
            if len(playing) == len(team_ids):
                # Later rounds need a perfect matching inside every
                # component of the edges still unused.
                return rnd == rounds - 1 or _components_even(edges, used)
            steps += 1
            if steps > max_steps:
                return False

            free = [t for t in team_ids if t not in playing]
            rng.shuffle(free)
            best_team = None
            best_moves: list[int] = []
            for t in free:
                moves = _legal(t)
                if best_team is None or len(moves) < len(best_moves):
                    best_team, best_moves = t, moves
                    if not moves:
                        return False

            rng.shuffle(best_moves)
            for i in best_moves:
                opp = edges[i].opponent(best_team)
                chosen.append(i)
                used.add(i)
                playing.add(best_team)
                playing.add(opp)

                if _solve_round():
                    return True

                chosen.pop()
                used.discard(i)
                playing.discard(best_team)
                playing.discard(opp)
            return False

        if not _solve_round():
            return None

        for i in chosen:
            assignment[i] = rnd

    return assignment


def sequential_assignment(edge_count: int, rounds: int) -> list[int]:
    """Deal edges into rounds by index. Always terminates, no guarantees."""
    if edge_count == 0:
        return []
    return [min(rounds - 1, i * rounds // edge_count) for i in range(edge_count)]


def schedule_pairings(edges: list[Matchup], team_ids: list[str],
                      rounds: int = DEFAULT_ROUNDS,
                      rng: random.Random | None = None,
                      max_attempts: int = DEFAULT_MAX_ATTEMPTS,
                      max_steps: int = DEFAULT_MAX_STEPS) -> PairingResult:
    """Assign edges to rounds, restarting the whole search on failure.

    A bad choice in an early round can leave a later round unsolvable even
    when a full schedule exists, so a failed round restarts from round 0
    with fresh random tie-breaks. After max_attempts the sequential deal
    is used and the result is flagged degraded.
    """
    rng = rng or random.Random()

    if not can_decompose(edges, team_ids, rounds):
        logger.warning(
            "Pairing graph for %d teams cannot split into %d perfect "
            "rounds; using sequential fallback", len(team_ids), rounds,
        )
        return PairingResult(sequential_assignment(len(edges), rounds),
                             degraded=True, attempts=0)

    for attempt in range(1, max_attempts + 1):
        assignment = solve_rounds(edges, team_ids, rounds, rng, max_steps)
        if assignment is not None:
            logger.debug("League phase solved on attempt %d", attempt)
            return PairingResult(assignment, degraded=False, attempts=attempt)

    logger.warning(
        "League phase search failed after %d attempts; using sequential "
        "fallback (a team may play twice in a round)", max_attempts,
    )
    return PairingResult(sequential_assignment(len(edges), rounds),
                         degraded=True, attempts=max_attempts)


def generate_league_phase(teams: list[Team], season_year: int,
                          rng: random.Random | None = None,
                          provider: RankingProvider | None = None,
                          rounds: int = DEFAULT_ROUNDS,
                          max_attempts: int = DEFAULT_MAX_ATTEMPTS,
                          competition_id: str = EUROPE) -> LeaguePhaseSchedule:
    """Seed, pair, balance and date the continental league phase.

    Round r is week 201+r. Every even-indexed pairing plays the day after
    the round's anchor date, except in the final round where all games
    share one date.
    """
    rng = rng or random.Random()
    pots = assign_pots(teams, provider)
    edges = build_pairing_graph(pots)
    team_ids = [t for pot in pots for t in pot]

    result = schedule_pairings(edges, team_ids, rounds, rng, max_attempts)
    sides = balance_home_away(edges, result.assignment, rounds)

    fixtures = []
    for idx, (home, away) in enumerate(sides):
        rnd = result.assignment[idx]
        match_date = league_phase_date(rnd, season_year)
        if idx % 2 == 0 and rnd != rounds - 1:
            match_date = match_date + timedelta(days=1)
        fixtures.append(Fixture(
            id=new_fixture_id(season_year, competition_id,
                              LEAGUE_PHASE_FIRST_WEEK + rnd, home, away),
            week=LEAGUE_PHASE_FIRST_WEEK + rnd,
            date=match_date,
            home_team_id=home,
            away_team_id=away,
            competition_id=competition_id,
        ))

    return LeaguePhaseSchedule(
        fixtures=fixtures,
        pots=pots,
        degraded=result.degraded,
        attempts=result.attempts,
        edges=edges,
    )


def verify_league_phase(fixtures: list[Fixture], team_ids: list[str],
                        rounds: int = DEFAULT_ROUNDS) -> dict:
    """Verify every round is a perfect matching and no pairing repeats.

    Returns dict with valid, errors, games_per_team and home_counts.
    """
    errors = []
    games_per_team: dict[str, int] = {t: 0 for t in team_ids}
    home_counts: dict[str, int] = {t: 0 for t in team_ids}
    by_week: dict[int, list[Fixture]] = defaultdict(list)
    pairs: dict[tuple[str, str], int] = defaultdict(int)

    for f in fixtures:
        by_week[f.week].append(f)
        games_per_team[f.home_team_id] = games_per_team.get(f.home_team_id, 0) + 1
        games_per_team[f.away_team_id] = games_per_team.get(f.away_team_id, 0) + 1
        home_counts[f.home_team_id] = home_counts.get(f.home_team_id, 0) + 1
        pairs[Matchup(f.home_team_id, f.away_team_id).key()] += 1

    for rnd in range(rounds):
        week = LEAGUE_PHASE_FIRST_WEEK + rnd
        seen: dict[str, int] = defaultdict(int)
        for f in by_week.get(week, []):
            seen[f.home_team_id] += 1
            seen[f.away_team_id] += 1
        for t in team_ids:
            if seen.get(t, 0) != 1:
                errors.append(
                    f"Week {week}: {t} plays {seen.get(t, 0)} times (expected 1)"
                )

    for t in team_ids:
        if games_per_team[t] != rounds:
            errors.append(f"{t} has {games_per_team[t]} games (expected {rounds})")

    for (a, b), count in pairs.items():
        if count > 1:
            errors.append(f"{a} vs {b} paired {count} times")

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "games_per_team": games_per_team,
        "home_counts": home_counts,
    }
