"""Home/away allocation for paired schedules."""

import logging
import math
from collections import defaultdict, deque

from fixturegen.models import Matchup

logger = logging.getLogger(__name__)


def home_cap(rounds: int) -> int:
    """Most home games a team may get over `rounds` rounds."""
    return math.ceil(rounds / 2)


def balance_home_away(matchups: list[Matchup], assignment: list[int],
                      rounds: int) -> list[tuple[str, str]]:
    """Decide home and away for every matchup.

    Matchups are visited round by round, by index within a round, rather
    than in pairing-graph order; the running home counts then follow the
    order the games are played. The side with fewer home games so far
    hosts; on a tie the lower id hosts. A team already at the home cap
    hands the game to an opponent still below it. A final repair pass
    flips games along home->away paths until no team exceeds the cap.

    Returns (home, away) per matchup, indexed like `matchups`.
    """
    cap = home_cap(rounds)
    home_counts: dict[str, int] = defaultdict(int)
    sides: list[tuple[str, str]] = [("", "")] * len(matchups)

    order = sorted(range(len(matchups)), key=lambda i: (assignment[i], i))
    for idx in order:
        m = matchups[idx]
        t1, t2 = m.team_a, m.team_b
        h1, h2 = home_counts[t1], home_counts[t2]

        if h1 > h2:
            home, away = t2, t1
        elif h2 > h1:
            home, away = t1, t2
        elif t1 <= t2:
            home, away = t1, t2
        else:
            home, away = t2, t1

        if home_counts[home] >= cap and home_counts[away] < cap:
            home, away = away, home

        home_counts[home] += 1
        sides[idx] = (home, away)

    flips = _enforce_cap(sides, cap)
    if flips:
        logger.debug("Home/away repair flipped %d games", flips)
    return sides


def _enforce_cap(sides: list[tuple[str, str]], cap: int) -> int:
    """Flip games in place until every team has at most `cap` home games.

    For an overloaded team, search breadth-first along games it (and each
    team reached) hosts until a team with fewer home than away games is
    found; flipping each game on that path moves one home game from the
    start to the end and leaves the teams in between unchanged. Such a
    team is always reachable while any team sits above half its games.
    """
    flips = 0
    while True:
        home_counts: dict[str, int] = defaultdict(int)
        degree: dict[str, int] = defaultdict(int)
        hosting: dict[str, list[int]] = defaultdict(list)
        for i, (home, away) in enumerate(sides):
            home_counts[home] += 1
            degree[home] += 1
            degree[away] += 1
            hosting[home].append(i)

        over = sorted(t for t in home_counts if home_counts[t] > cap)
        if not over:
            return flips

        start = over[0]
        parent: dict[str, tuple[str, int] | None] = {start: None}
        queue = deque([start])
        target = None
        while queue:
            team = queue.popleft()
            if (team != start and home_counts[team] < cap
                    and 2 * home_counts[team] < degree[team]):
                target = team
                break
            for i in hosting[team]:
                opp = sides[i][1]
                if opp not in parent:
                    parent[opp] = (team, i)
                    queue.append(opp)

        if target is None:
            logger.warning("Cannot bring %s under %d home games", start, cap)
            return flips

        node = target
        while parent[node] is not None:
            prev, i = parent[node]
            home, away = sides[i]
            sides[i] = (away, home)
            flips += 1
            node = prev
