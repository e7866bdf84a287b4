"""Tests for output.py and stats.py — text, CSV and statistics."""

from datetime import date

from fixturegen.models import CUP, EUROPE, LEAGUE, Fixture, Team
from fixturegen.output import (
    format_fixtures, format_fixtures_csv, parse_fixtures_csv, read_fixtures_csv,
    write_fixtures,
)
from fixturegen.stats import compute_stats, format_stats_report


def _fixtures():
    return [
        Fixture(id="f1", week=1, date=date(2025, 8, 8), home_team_id="A",
                away_team_id="B", competition_id=LEAGUE, played=True,
                home_score=2, away_score=1),
        Fixture(id="f2", week=100, date=date(2025, 12, 28), home_team_id="B",
                away_team_id="A", competition_id=CUP, played=True,
                home_score=1, away_score=1, pk_home=4, pk_away=3),
        Fixture(id="f3", week=201, date=date(2025, 9, 24), home_team_id="A",
                away_team_id="C", competition_id=EUROPE),
    ]


def _teams():
    return {t: Team(id=t, name=t) for t in ("A", "B", "C")}


class TestCsv:
    def test_round_trip_keeps_results(self):
        parsed = parse_fixtures_csv(format_fixtures_csv(_fixtures()))
        by_id = {f.id: f for f in parsed}
        assert by_id["f2"].pk_home == 4
        assert by_id["f2"].pk_away == 3
        assert by_id["f2"].played
        assert by_id["f1"].home_score == 2
        assert by_id["f3"].home_score is None
        assert not by_id["f3"].played
        assert by_id["f3"].date == date(2025, 9, 24)
        assert sorted(f.to_dict()["id"] for f in parsed) == ["f1", "f2", "f3"]

    def test_sorted_by_date(self):
        lines = format_fixtures_csv(_fixtures()).splitlines()
        assert lines[0].startswith("id,competition,week,date")
        assert [line.split(",")[0] for line in lines[1:]] == ["f1", "f3", "f2"]

    def test_blank_rows_skipped(self):
        text = format_fixtures_csv(_fixtures()) + ",,,,,,,,,,\n"
        assert len(parse_fixtures_csv(text)) == 3


class TestFormatFixtures:
    def test_text(self):
        text = format_fixtures(_fixtures(), title="2025/26")
        assert "2025/26 FIXTURES" in text
        assert "### CUP" in text
        assert "1-1 (4-3 pens)" in text
        assert "PER-TEAM SCHEDULES" in text

    def test_write_files(self, tmp_path):
        out = tmp_path / "season"
        write_fixtures(_fixtures(), output_prefix=str(out), title="x")
        assert (out / "fixtures.txt").exists()
        assert len(read_fixtures_csv(out / "fixtures.csv")) == 3


class TestStats:
    def test_counts(self):
        stats = compute_stats(_fixtures(), _teams())
        assert stats["totals"] == {"A": 3, "B": 2, "C": 1}
        assert stats["per_team"]["A"][LEAGUE] == {"home": 1, "away": 0}
        assert stats["per_team"]["A"][CUP] == {"home": 0, "away": 1}
        assert stats["per_competition"][EUROPE] == {"fixtures": 1, "weeks": 1, "dates": 1}
        assert stats["first_date"] == date(2025, 8, 8)
        assert stats["last_date"] == date(2025, 12, 28)

    def test_empty(self):
        stats = compute_stats([], _teams())
        assert stats["first_date"] is None
        assert stats["totals"] == {"A": 0, "B": 0, "C": 0}

    def test_report(self):
        text = format_stats_report(compute_stats(_fixtures(), _teams()), _teams())
        assert "FIXTURE STATISTICS" in text
        assert "1H/0A" in text
