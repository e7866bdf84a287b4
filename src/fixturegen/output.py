"""Output formatters and CSV interchange for season fixtures."""

import csv
from datetime import date
from io import StringIO
from pathlib import Path

from fixturegen.models import Fixture

CSV_COLUMNS = [
    "id", "competition", "week", "date", "home", "away",
    "played", "home_score", "away_score", "pk_home", "pk_away",
]


def format_fixtures(fixtures: list[Fixture], title: str = "") -> str:
    """Format fixtures as human-readable text, by competition and round."""
    lines = []
    lines.append("=" * 80)
    lines.append(f"{title or 'SEASON'} FIXTURES")
    lines.append("=" * 80)

    by_comp: dict[str, dict[int, list[Fixture]]] = {}
    for f in fixtures:
        by_comp.setdefault(f.competition_id, {}).setdefault(f.week, []).append(f)

    for comp in sorted(by_comp):
        lines.append(f"\n### {comp}")
        for week in sorted(by_comp[comp]):
            lines.append(f"\n--- ROUND {week} ---")
            for f in sorted(by_comp[comp][week], key=lambda x: (x.date, x.home_team_id)):
                day = f.date.strftime("%a %d %b %Y")
                score = ""
                if f.played:
                    score = f"  {f.home_score}-{f.away_score}"
                    if f.has_penalties():
                        score += f" ({f.pk_home}-{f.pk_away} pens)"
                lines.append(
                    f"    {day}  {f.home_team_id:<8} vs {f.away_team_id:<8}{score}"
                )

    # Per-team schedule
    lines.append("\n" + "=" * 80)
    lines.append("PER-TEAM SCHEDULES")
    lines.append("=" * 80)

    by_team: dict[str, list[Fixture]] = {}
    for f in fixtures:
        by_team.setdefault(f.home_team_id, []).append(f)
        by_team.setdefault(f.away_team_id, []).append(f)

    for team_id in sorted(by_team):
        lines.append(f"\n{team_id}:")
        team_fixtures = sorted(by_team[team_id], key=lambda x: (x.date, x.week))
        for i, f in enumerate(team_fixtures, 1):
            is_home = f.home_team_id == team_id
            opponent = f.away_team_id if is_home else f.home_team_id
            h_a = "H" if is_home else "A"
            lines.append(
                f"  {i:>2}. {f.date.strftime('%a %d/%m/%Y')} {h_a} vs "
                f"{opponent:<8} [{f.competition_id} {f.week}]"
            )

    return "\n".join(lines)


def _blank(value) -> str:
    return "" if value is None else str(value)


def format_fixtures_csv(fixtures: list[Fixture]) -> str:
    """Format fixtures as the interchange CSV (ISO dates)."""
    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(CSV_COLUMNS)
    for f in sorted(fixtures, key=lambda x: (x.date, x.competition_id, x.week)):
        writer.writerow([
            f.id, f.competition_id, f.week, f.date.isoformat(),
            f.home_team_id, f.away_team_id,
            "1" if f.played else "0",
            _blank(f.home_score), _blank(f.away_score),
            _blank(f.pk_home), _blank(f.pk_away),
        ])
    return output.getvalue()


def _opt_int(s: str | None) -> int | None:
    s = (s or "").strip()
    return int(s) if s else None


def parse_fixtures_csv(text: str) -> list[Fixture]:
    """Parse interchange CSV text back into Fixture objects."""
    fixtures = []
    reader = csv.DictReader(StringIO(text))
    for row in reader:
        date_str = (row.get("date") or "").strip()
        home = (row.get("home") or "").strip()
        away = (row.get("away") or "").strip()
        if not date_str or not home or not away:
            continue
        fixtures.append(Fixture(
            id=row["id"].strip(),
            week=int(row["week"]),
            date=date.fromisoformat(date_str[:10]),
            home_team_id=home,
            away_team_id=away,
            competition_id=row["competition"].strip(),
            played=row.get("played", "").strip().lower() in ("1", "true", "yes"),
            home_score=_opt_int(row.get("home_score")),
            away_score=_opt_int(row.get("away_score")),
            pk_home=_opt_int(row.get("pk_home")),
            pk_away=_opt_int(row.get("pk_away")),
        ))
    return fixtures


def read_fixtures_csv(csv_path: str | Path) -> list[Fixture]:
    return parse_fixtures_csv(Path(csv_path).read_text())


def write_fixtures(fixtures: list[Fixture], output_prefix: str = "output",
                   title: str = ""):
    """Write fixtures.txt and fixtures.csv into {output_prefix}/."""
    out_dir = Path(output_prefix)
    out_dir.mkdir(parents=True, exist_ok=True)

    text_path = out_dir / "fixtures.txt"
    text_path.write_text(format_fixtures(fixtures, title=title))
    print(f"Written: {text_path}")

    csv_path = out_dir / "fixtures.csv"
    csv_path.write_text(format_fixtures_csv(fixtures))
    print(f"Written: {csv_path}")
