"""Statistics and balance reporting for season fixtures."""

from collections import defaultdict

from fixturegen.models import Fixture, Team


def compute_stats(fixtures: list[Fixture], teams: dict[str, Team]) -> dict:
    """Per-team and per-competition counts for a set of fixtures.

    Returns dict with:
    - per_team: team -> {competition -> {"home": n, "away": n}}
    - totals: team -> total fixture count
    - per_competition: competition -> {"fixtures": n, "weeks": n, "dates": n}
    - first_date / last_date: overall date range (None if no fixtures)
    """
    per_team: dict[str, dict[str, dict[str, int]]] = defaultdict(
        lambda: defaultdict(lambda: {"home": 0, "away": 0})
    )
    totals: dict[str, int] = {t: 0 for t in teams}
    comp_fixtures: dict[str, int] = defaultdict(int)
    comp_weeks: dict[str, set[int]] = defaultdict(set)
    comp_dates: dict[str, set] = defaultdict(set)

    for f in fixtures:
        comp = f.competition_id
        per_team[f.home_team_id][comp]["home"] += 1
        per_team[f.away_team_id][comp]["away"] += 1
        totals[f.home_team_id] = totals.get(f.home_team_id, 0) + 1
        totals[f.away_team_id] = totals.get(f.away_team_id, 0) + 1
        comp_fixtures[comp] += 1
        comp_weeks[comp].add(f.week)
        comp_dates[comp].add(f.date)

    per_competition = {
        comp: {
            "fixtures": comp_fixtures[comp],
            "weeks": len(comp_weeks[comp]),
            "dates": len(comp_dates[comp]),
        }
        for comp in sorted(comp_fixtures)
    }

    dates = [f.date for f in fixtures]
    return {
        "per_team": per_team,
        "totals": totals,
        "per_competition": per_competition,
        "first_date": min(dates) if dates else None,
        "last_date": max(dates) if dates else None,
    }


def format_stats_report(stats: dict, teams: dict[str, Team]) -> str:
    """Format stats as a text report."""
    lines = []
    lines.append("=" * 60)
    lines.append("FIXTURE STATISTICS")
    lines.append("=" * 60)

    if stats["first_date"] is not None:
        lines.append(f"\nDates: {stats['first_date']} to {stats['last_date']}")

    lines.append("\n--- COMPETITIONS ---")
    for comp, c in stats["per_competition"].items():
        lines.append(
            f"  {comp:<10} {c['fixtures']:>4} fixtures  "
            f"{c['weeks']:>3} rounds  {c['dates']:>3} dates"
        )

    comps = list(stats["per_competition"])
    lines.append("\n--- HOME/AWAY PER TEAM ---")
    header = f"  {'Team':<8}" + "".join(f"{c:>12}" for c in comps) + f"{'Total':>8}"
    lines.append(header)
    for team_id in sorted(teams):
        row = f"  {team_id:<8}"
        for comp in comps:
            ha = stats["per_team"].get(team_id, {}).get(comp)
            if ha:
                row += f"{ha['home']}H/{ha['away']}A".rjust(12)
            else:
                row += f"{'-':>12}"
        row += f"{stats['totals'].get(team_id, 0):>8}"
        lines.append(row)

    return "\n".join(lines)
