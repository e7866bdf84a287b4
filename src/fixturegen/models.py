"""Data models for the fixture generators."""

import uuid
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

from fixturegen.errors import ConfigurationError

LEAGUE = "LEAGUE"
LEAGUE_1 = "LEAGUE_1"
EUROPE = "EUROPE"
CUP = "CUP"
SUPER_CUP = "SUPER_CUP"

SUPER_CUP_WEEK = 90
LEAGUE_PHASE_FIRST_WEEK = 201


class KnockoutRound(Enum):
    PLAYOFF = "PLAYOFF"
    R32 = "R32"
    R16 = "R16"
    QF = "QF"
    SF = "SF"
    FINAL = "FINAL"

    @classmethod
    def from_str(cls, s: str) -> "KnockoutRound":
        return cls[s.strip().upper()]


# Cup rounds are single-leg, one week number each.
CUP_WEEKS = {
    KnockoutRound.R32: 100,
    KnockoutRound.R16: 101,
    KnockoutRound.QF: 102,
    KnockoutRound.SF: 103,
    KnockoutRound.FINAL: 104,
}
CUP_ORDER = [KnockoutRound.R32, KnockoutRound.R16, KnockoutRound.QF,
             KnockoutRound.SF, KnockoutRound.FINAL]

# Continental knockouts: one week per leg, the final is single-leg.
CONTINENTAL_WEEKS = {
    KnockoutRound.PLAYOFF: (209, 210),
    KnockoutRound.R16: (211, 212),
    KnockoutRound.QF: (213, 214),
    KnockoutRound.SF: (215, 216),
    KnockoutRound.FINAL: (217,),
}
CONTINENTAL_ORDER = [KnockoutRound.PLAYOFF, KnockoutRound.R16,
                     KnockoutRound.QF, KnockoutRound.SF, KnockoutRound.FINAL]


@dataclass
class Team:
    """A club as seen by the scheduler (seeding view)."""
    id: str
    name: str
    reputation: float = 0.0
    league_id: Optional[str] = None
    cup_ban: bool = False
    continental: bool = False


@dataclass
class Matchup:
    """An unordered pairing of two teams (no home/away yet)."""
    team_a: str
    team_b: str

    def opponent(self, team_id: str) -> str:
        if team_id == self.team_a:
            return self.team_b
        return self.team_a

    def key(self) -> tuple[str, str]:
        """Order-independent identity of the pairing."""
        if self.team_a < self.team_b:
            return (self.team_a, self.team_b)
        return (self.team_b, self.team_a)


@dataclass
class Round:
    """A set of matchups where each team plays at most once."""
    number: int
    matchups: list[Matchup]


@dataclass
class Fixture:
    """A dated match between two teams.

    Created unplayed; an external simulator fills in played/scores.
    """
    id: str
    week: int
    date: date
    home_team_id: str
    away_team_id: str
    competition_id: str
    played: bool = False
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    pk_home: Optional[int] = None
    pk_away: Optional[int] = None

    def has_penalties(self) -> bool:
        return self.pk_home is not None and self.pk_away is not None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "week": self.week,
            "date": self.date.isoformat(),
            "homeTeamId": self.home_team_id,
            "awayTeamId": self.away_team_id,
            "played": self.played,
            "homeScore": self.home_score,
            "awayScore": self.away_score,
            "pkHome": self.pk_home,
            "pkAway": self.pk_away,
            "competitionId": self.competition_id,
        }


@dataclass
class Tie:
    """A two-legged pairing: leg 2 reverses the venue of leg 1."""
    leg1: Fixture
    leg2: Fixture

    def __post_init__(self):
        if (self.leg2.home_team_id != self.leg1.away_team_id
                or self.leg2.away_team_id != self.leg1.home_team_id):
            raise ConfigurationError(
                f"Leg 2 {self.leg2.home_team_id} vs {self.leg2.away_team_id} "
                f"does not reverse leg 1 {self.leg1.home_team_id} vs "
                f"{self.leg1.away_team_id}"
            )

    @property
    def aggregate(self) -> dict[str, int]:
        """Goals per team over both legs. Away goals carry no extra weight."""
        home2, away2 = self.teams
        return {
            home2: (self.leg2.home_score or 0) + (self.leg1.away_score or 0),
            away2: (self.leg2.away_score or 0) + (self.leg1.home_score or 0),
        }

    @property
    def teams(self) -> tuple[str, str]:
        """(leg 2 home, leg 2 away)."""
        return (self.leg2.home_team_id, self.leg2.away_team_id)


# Fixture ids are name-based UUIDs under this namespace.
FIXTURE_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "fixturegen/fixture")


def new_fixture_id(season_year: int, competition_id: str, week: int,
                   home_team_id: str, away_team_id: str) -> str:
    """UUID5 string naming a fixture slot.

    A team plays at most once per competition week, so the id is unique
    within a season and the same slot always gets the same id whatever
    seed drew it.
    """
    name = f"{season_year}/{competition_id}/{week}/{home_team_id}/{away_team_id}"
    return str(uuid.uuid5(FIXTURE_NAMESPACE, name))
