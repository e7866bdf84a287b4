"""Tests for seeding.py — coefficients and pot assignment."""

import logging
import math

import pytest

from fixturegen.models import Team
from fixturegen.seeding import (
    HistoricalCoefficientProvider, assign_pots, rank_teams,
)


def _make_team(tid, reputation=2.5):
    return Team(id=tid, name=tid, reputation=reputation, continental=True)


class _ReputationProvider:
    def coefficient(self, team):
        return team.reputation


class TestHistoricalCoefficientProvider:
    def test_formula_for_unknown_team(self):
        team = _make_team("A", 0.0)
        seed = ord("A")
        provider = HistoricalCoefficientProvider()
        s1, s2, s3, s4 = provider.season_scores(team)
        assert s1 == pytest.approx(max(0.0, math.sin(seed) * 0.5))
        assert s2 == pytest.approx(max(0.0, math.cos(seed) * 0.5))
        assert s3 == pytest.approx(
            min(4.9, max(0.1, (math.sin(seed + 50) + 1) * 0.75)))
        assert s4 == pytest.approx(
            min(4.9, max(0.1, (math.cos(seed + 100) + 1) * 0.5)))

    def test_table_values_override(self):
        team = _make_team("GOR")
        provider = HistoricalCoefficientProvider(
            [{"GOR": 10.0}, {"GOR": 20.0}, {"GOR": 30.0}, {"GOR": 40.0}]
        )
        assert provider.season_scores(team) == [10.0, 20.0, 30.0, 40.0]
        assert provider.coefficient(team) == 100.0

    def test_partial_tables(self):
        team = _make_team("GOR")
        full = HistoricalCoefficientProvider()
        partial = HistoricalCoefficientProvider([{"GOR": 7.0}])
        assert partial.season_scores(team)[0] == 7.0
        assert partial.season_scores(team)[1:] == full.season_scores(team)[1:]

    def test_deterministic(self):
        team = _make_team("ASL", 4.2)
        assert (HistoricalCoefficientProvider().coefficient(team)
                == HistoricalCoefficientProvider().coefficient(team))

    def test_recent_seasons_clamped(self):
        provider = HistoricalCoefficientProvider()
        for tid in ("A", "M", "Z", "a"):
            for rep in (0.0, 1.0, 2.5, 4.0, 5.0):
                _, _, s3, s4 = provider.season_scores(_make_team(tid, rep))
                assert 0.1 <= s3 <= 4.9
                assert 0.1 <= s4 <= 4.9

    def test_older_seasons_not_negative(self):
        provider = HistoricalCoefficientProvider()
        for tid in ("A", "B", "C", "D", "E"):
            s1, s2, _, _ = provider.season_scores(_make_team(tid, 0.0))
            assert s1 >= 0.0
            assert s2 >= 0.0

    def test_too_many_tables(self):
        with pytest.raises(ValueError):
            HistoricalCoefficientProvider([{}] * 5)


class TestRankTeams:
    def test_descending(self):
        teams = [_make_team("A", 1.0), _make_team("B", 3.0), _make_team("C", 2.0)]
        ranked = rank_teams(teams, _ReputationProvider())
        assert [t.id for t in ranked] == ["B", "C", "A"]

    def test_stable_for_equal_scores(self):
        teams = [_make_team("Z", 1.0), _make_team("A", 1.0), _make_team("M", 1.0)]
        ranked = rank_teams(teams, _ReputationProvider())
        assert [t.id for t in ranked] == ["Z", "A", "M"]


class TestAssignPots:
    def test_thirty_two_teams(self):
        teams = [_make_team(f"T{i:02d}", i / 10) for i in range(32)]
        pots = assign_pots(teams, _ReputationProvider())
        assert [len(p) for p in pots] == [8, 8, 8, 8]
        # Highest reputation lands in pot 1
        assert pots[0][0] == "T31"
        assert set(pots[0]) == {f"T{i:02d}" for i in range(24, 32)}
        assert set(pots[3]) == {f"T{i:02d}" for i in range(0, 8)}

    def test_table_leader_in_top_pot(self):
        teams = [_make_team(f"T{i:02d}", 2.0) for i in range(8)]
        provider = HistoricalCoefficientProvider([{"T05": 500.0}])
        pots = assign_pots(teams, provider)
        assert pots[0][0] == "T05"

    def test_uneven_count_warns(self, caplog):
        teams = [_make_team(f"T{i:02d}", i) for i in range(10)]
        with caplog.at_level(logging.WARNING, logger="fixturegen.seeding"):
            pots = assign_pots(teams, _ReputationProvider())
        assert [len(p) for p in pots] == [3, 3, 3, 1]
        assert "not divisible" in caplog.text

    def test_fewer_teams_than_pots(self):
        teams = [_make_team(t, 1.0) for t in ("A", "B", "C")]
        pots = assign_pots(teams, _ReputationProvider())
        assert len(pots) == 4
        assert [len(p) for p in pots] == [1, 1, 1, 0]

    def test_no_teams(self):
        assert assign_pots([], _ReputationProvider()) == [[], [], [], []]

    def test_default_provider(self):
        teams = [_make_team(f"T{i:02d}", 2.0) for i in range(8)]
        pots = assign_pots(teams)
        assert sorted(t for p in pots for t in p) == [t.id for t in teams]
