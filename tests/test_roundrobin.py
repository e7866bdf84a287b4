"""Tests for roundrobin.py — double round-robin pairing and dating."""

from collections import Counter
from datetime import date

import pytest

from fixturegen.errors import ConfigurationError
from fixturegen.models import LEAGUE_1
from fixturegen.roundrobin import (
    generate_double_round_robin, pair_double_round_robin, verify_round_robin,
)


def _teams(n):
    return [f"T{i:02d}" for i in range(1, n + 1)]


class TestPairDoubleRoundRobin:
    def test_four_teams(self):
        rounds = pair_double_round_robin(_teams(4))
        assert len(rounds) == 6
        assert all(len(r.matchups) == 2 for r in rounds)
        assert [r.number for r in rounds] == [1, 2, 3, 4, 5, 6]

    def test_each_team_once_per_round(self):
        teams = _teams(18)
        for r in pair_double_round_robin(teams):
            playing = [t for m in r.matchups for t in (m.team_a, m.team_b)]
            assert sorted(playing) == sorted(teams)

    def test_every_ordered_pair_once(self):
        teams = _teams(10)
        pairs = Counter(
            (m.team_a, m.team_b)
            for r in pair_double_round_robin(teams) for m in r.matchups
        )
        assert len(pairs) == 10 * 9
        assert set(pairs.values()) == {1}

    def test_two_teams(self):
        rounds = pair_double_round_robin(["A", "B"])
        assert [(r.matchups[0].team_a, r.matchups[0].team_b) for r in rounds] == [
            ("A", "B"), ("B", "A"),
        ]

    def test_odd_team_count_rejected(self):
        with pytest.raises(ConfigurationError):
            pair_double_round_robin(_teams(5))

    def test_too_few_teams_rejected(self):
        with pytest.raises(ConfigurationError):
            pair_double_round_robin([])
        with pytest.raises(ConfigurationError):
            pair_double_round_robin(["A"])

    def test_duplicates_rejected(self):
        with pytest.raises(ConfigurationError):
            pair_double_round_robin(["A", "B", "C", "A"])


class TestGenerateDoubleRoundRobin:
    def test_eighteen_team_league(self):
        teams = _teams(18)
        fixtures = generate_double_round_robin(teams, 2025)
        assert len(fixtures) == 306
        weeks = Counter(f.week for f in fixtures)
        assert sorted(weeks) == list(range(1, 35))
        assert set(weeks.values()) == {9}

        result = verify_round_robin(fixtures, teams)
        assert result["valid"], result["errors"]
        assert set(result["games_per_team"].values()) == {34}

    def test_home_and_away_balanced(self):
        teams = _teams(18)
        fixtures = generate_double_round_robin(teams, 2025)
        homes = Counter(f.home_team_id for f in fixtures)
        assert all(homes[t] == 17 for t in teams)

    def test_round_split_over_two_days(self):
        fixtures = generate_double_round_robin(_teams(18), 2025)
        week1 = Counter(f.date for f in fixtures if f.week == 1)
        assert week1 == {date(2025, 8, 8): 5, date(2025, 8, 9): 4}

    def test_sorted_by_date(self):
        fixtures = generate_double_round_robin(_teams(16), 2025)
        dates = [f.date for f in fixtures]
        assert dates == sorted(dates)

    def test_all_within_season(self):
        fixtures = generate_double_round_robin(_teams(20), 2025)
        assert min(f.date for f in fixtures) == date(2025, 8, 8)
        # 38 weeks: four run weekly past the last anchor
        assert max(f.date for f in fixtures) == date(2026, 6, 30)

    def test_twenty_two_teams_rejected(self):
        with pytest.raises(ConfigurationError, match="42 weeks"):
            generate_double_round_robin(_teams(22), 2025)

    def test_competition_and_unplayed(self):
        fixtures = generate_double_round_robin(_teams(4), 2025, LEAGUE_1)
        assert {f.competition_id for f in fixtures} == {LEAGUE_1}
        assert not any(f.played for f in fixtures)

    def test_ids_repeat_and_unique(self):
        a = generate_double_round_robin(_teams(6), 2025)
        b = generate_double_round_robin(_teams(6), 2025)
        assert [f.id for f in a] == [f.id for f in b]
        assert len({f.id for f in a}) == len(a)

    def test_ids_differ_between_leagues(self):
        a = generate_double_round_robin(_teams(4), 2025)
        b = generate_double_round_robin(_teams(4), 2025, LEAGUE_1)
        assert not {f.id for f in a} & {f.id for f in b}


class TestVerifyRoundRobin:
    def test_missing_fixture(self):
        teams = _teams(4)
        fixtures = generate_double_round_robin(teams, 2025)
        result = verify_round_robin(fixtures[1:], teams)
        assert not result["valid"]
        assert any("played 0 times" in e for e in result["errors"])

    def test_team_twice_in_week(self):
        teams = _teams(4)
        fixtures = generate_double_round_robin(teams, 2025)
        week1 = [f for f in fixtures if f.week == 1]
        week1[1].home_team_id = week1[0].home_team_id
        result = verify_round_robin(fixtures, teams)
        assert not result["valid"]
        assert any("appears twice" in e for e in result["errors"])
