"""Integration test — full season generation, validation and CSV round trip."""

import sys
from pathlib import Path

import pytest

from fixturegen.config import load_config
from fixturegen.constraints import validate_schedule
from fixturegen.models import CUP, EUROPE, KnockoutRound
from fixturegen.output import (
    format_fixtures_csv, parse_fixtures_csv, read_fixtures_csv,
)
from fixturegen.schedule import main
from fixturegen.scheduler import advance_round, schedule_season
from fixturegen.stats import compute_stats

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.yaml"


def _validate(config, fixtures):
    return validate_schedule(
        fixtures, config["teams"], config["season"]["year"],
        league_ids=config["competitions"]["league_ids"],
        league_phase_rounds=config["competitions"]["league_phase_rounds"],
    )


def _play_all(fixtures, week, competition_id):
    """Home side wins every fixture of the week 1-0."""
    for f in fixtures:
        if f.competition_id == competition_id and f.week == week:
            f.played, f.home_score, f.away_score = True, 1, 0


class TestEndToEnd:
    def test_generate_and_validate(self):
        """Generate a season with seed 42 and check key properties."""
        config = load_config(CONFIG_PATH)
        season = schedule_season(config, seed=42)

        assert len(season.fixtures) > 0
        result = _validate(config, season.fixtures)
        assert result["valid"], (
            f"Validation failed: {result['errors']}"
        )
        assert result["warnings"] == []

    def test_reproducible(self):
        config = load_config(CONFIG_PATH)
        a = schedule_season(config, seed=42)
        b = schedule_season(config, seed=42)
        assert [f.to_dict() for f in a.fixtures] == [f.to_dict() for f in b.fixtures]

    def test_every_team_scheduled(self):
        config = load_config(CONFIG_PATH)
        season = schedule_season(config, seed=42)
        stats = compute_stats(season.fixtures, config["teams"])
        # Every configured team appears in at least one competition
        assert all(count > 0 for count in stats["totals"].values())
        for team in config["teams"].values():
            if team.continental:
                ha = stats["per_team"][team.id][EUROPE]
                assert ha["home"] + ha["away"] == 8
                assert ha["home"] == 4

    def test_cup_to_final(self):
        """Play every cup round through the CSV and advance to the final."""
        config = load_config(CONFIG_PATH)
        fixtures = schedule_season(config, seed=42).fixtures

        steps = [
            (100, KnockoutRound.R16, 8),
            (101, KnockoutRound.QF, 4),
            (102, KnockoutRound.SF, 2),
            (103, KnockoutRound.FINAL, 1),
        ]
        for played_week, next_round, size in steps:
            _play_all(fixtures, played_week, CUP)
            fixtures = parse_fixtures_csv(format_fixtures_csv(fixtures))
            new = advance_round(config, fixtures, CUP, next_round, seed=7)
            assert len(new) == size
            fixtures = fixtures + new

        result = _validate(config, fixtures)
        assert result["valid"], result["errors"]

    def test_continental_knockouts(self):
        config = load_config(CONFIG_PATH)
        season = schedule_season(config, seed=42)
        fixtures = list(season.fixtures)
        standings = [t for pot in season.league_phase.pots for t in pot]

        playoff = advance_round(config, fixtures, EUROPE, KnockoutRound.PLAYOFF,
                                seed=1, standings=standings)
        fixtures += playoff
        _play_all(fixtures, 209, EUROPE)
        _play_all(fixtures, 210, EUROPE)

        r16 = advance_round(config, fixtures, EUROPE, KnockoutRound.R16,
                            seed=1, standings=standings)
        assert len(r16) == 16
        leg1_away = {f.away_team_id for f in r16 if f.week == 211}
        assert leg1_away == set(standings[:8])
        fixtures += r16

        result = _validate(config, fixtures)
        assert result["valid"], result["errors"]


class TestCli:
    def test_generate_then_advance(self, tmp_path, monkeypatch):
        out = tmp_path / "season"
        monkeypatch.setattr(sys, "argv", [
            "fixturegen", str(CONFIG_PATH), "--seed", "42", "-o", str(out),
        ])
        main()
        for name in ("fixtures.txt", "fixtures.csv", "stats.txt"):
            assert (out / name).exists()
        generated = read_fixtures_csv(out / "fixtures.csv")

        config = load_config(CONFIG_PATH)
        standings = [t.id for t in config["teams"].values() if t.continental]
        monkeypatch.setattr(sys, "argv", [
            "fixturegen", str(CONFIG_PATH), "--advance", "EUROPE", "PLAYOFF",
            "--fixtures", str(out / "fixtures.csv"),
            "--standings", ",".join(standings),
        ])
        with pytest.raises(SystemExit) as exc:
            main()
        assert exc.value.code == 0
        assert len(read_fixtures_csv(out / "fixtures.csv")) == len(generated) + 16

    def test_missing_config(self, tmp_path, monkeypatch):
        monkeypatch.setattr(sys, "argv", [
            "fixturegen", str(tmp_path / "nope.yaml"),
        ])
        with pytest.raises(SystemExit) as exc:
            main()
        assert exc.value.code == 1
