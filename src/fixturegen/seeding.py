"""Coefficient ranking and pot assignment for the continental league phase."""

import logging
import math
from typing import Protocol

from fixturegen.models import Team

logger = logging.getLogger(__name__)

POT_COUNT = 4


class RankingProvider(Protocol):
    """Anything that can score a team for seeding (higher is stronger)."""

    def coefficient(self, team: Team) -> float:
        ...


class HistoricalCoefficientProvider:
    """Four-season coefficient: known values from tables, formula otherwise.

    ``tables`` holds one ``{team_id: value}`` dict per past season, oldest
    first. A team missing from a season's table gets a value derived from
    its reputation plus a trigonometric term seeded by its identity, so the
    same team always scores the same without stored history.
    """

    def __init__(self, tables: list[dict[str, float]] | None = None):
        tables = list(tables or [])
        if len(tables) > 4:
            raise ValueError(f"Expected at most 4 season tables, got {len(tables)}")
        self.tables = tables + [{} for _ in range(4 - len(tables))]

    @staticmethod
    def _seed(team: Team) -> float:
        return ord(team.id[0]) + team.reputation * 100

    def season_scores(self, team: Team) -> list[float]:
        rep = team.reputation
        seed = self._seed(team)
        t1, t2, t3, t4 = self.tables

        if team.id in t1:
            s1 = t1[team.id]
        else:
            s1 = max(0.0, rep * 0.5 + math.sin(seed) * 0.5)

        if team.id in t2:
            s2 = t2[team.id]
        else:
            s2 = max(0.0, rep * 0.2 + math.cos(seed) * 0.5)

        if team.id in t3:
            s3 = t3[team.id]
        else:
            s3 = _clamp(rep * 0.65 + (math.sin(seed + 50) + 1) * 0.75)

        if team.id in t4:
            s4 = t4[team.id]
        else:
            s4 = _clamp(rep * 0.8 + (math.cos(seed + 100) + 1) * 0.5)

        return [s1, s2, s3, s4]

    def coefficient(self, team: Team) -> float:
        return sum(self.season_scores(team))


def _clamp(value: float, low: float = 0.1, high: float = 4.9) -> float:
    return min(high, max(low, value))


def rank_teams(teams: list[Team], provider: RankingProvider) -> list[Team]:
    """Teams sorted by descending coefficient (stable for equal scores)."""
    scored = [(provider.coefficient(t), i, t) for i, t in enumerate(teams)]
    scored.sort(key=lambda x: (-x[0], x[1]))
    return [t for _, _, t in scored]


def assign_pots(teams: list[Team], provider: RankingProvider | None = None,
                pot_count: int = POT_COUNT) -> list[list[str]]:
    """Split ranked teams into pots of ceil(N / pot_count).

    Always returns pot_count pots; the last absorbs any remainder and
    pots may be empty when there are too few teams.
    """
    provider = provider or HistoricalCoefficientProvider()
    ranked = [t.id for t in rank_teams(teams, provider)]
    total = len(ranked)
    if total % pot_count != 0:
        logger.warning(
            "%d teams is not divisible by %d pots; pairing may be unbalanced",
            total, pot_count,
        )
    pot_size = math.ceil(total / pot_count) if total else 0

    pots = []
    for p in range(pot_count):
        start = p * pot_size
        end = total if p == pot_count - 1 else (p + 1) * pot_size
        pots.append(ranked[start:end])
    return pots
