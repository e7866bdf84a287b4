#!/usr/bin/env python3
"""Season fixture generator.

Generate mode (default):
    fixturegen [config.yaml] [--seed N] [-o DIR]

    Generates the season's opening fixtures (leagues, continental league
    phase, cup first round, super cup) and writes:
      {DIR}/fixtures.txt  - Human-readable round-by-round + per-team view
      {DIR}/fixtures.csv  - Interchange CSV (fill in results here)
      {DIR}/stats.txt     - Validation report + statistics

Advance mode:
    fixturegen [config.yaml] --advance COMPETITION ROUND --fixtures CSV
               [--standings ID,ID,...] [--seed N]

    Reads played results from the CSV, draws the next knockout round and
    appends its fixtures to the same CSV.

Examples:
    fixturegen                                   # default config, random seed
    fixturegen --seed 42 -o season2025           # reproducible
    fixturegen --advance CUP R16 --fixtures season2025/fixtures.csv
    fixturegen --advance EUROPE PLAYOFF --fixtures season2025/fixtures.csv \\
        --standings ASL,GOR,...
"""

import argparse
import logging
import sys
from pathlib import Path

from fixturegen.config import load_config
from fixturegen.constraints import validate_schedule, format_validation_report
from fixturegen.errors import ConfigurationError
from fixturegen.models import KnockoutRound
from fixturegen.output import (
    format_fixtures, format_fixtures_csv, read_fixtures_csv, write_fixtures,
)
from fixturegen.scheduler import advance_round, schedule_season
from fixturegen.stats import compute_stats, format_stats_report


def _print_config_errors(exc: ConfigurationError):
    print(f"Error: {exc}")
    for e in exc.errors:
        print(f"  {e}")


def _advance(args, config) -> int:
    competition, round_str = args.advance
    if not args.fixtures or not Path(args.fixtures).exists():
        print("Error: --advance needs an existing --fixtures CSV")
        return 1
    try:
        round_name = KnockoutRound.from_str(round_str)
    except KeyError:
        print(f"Error: unknown round {round_str}")
        return 1

    standings = None
    if args.standings:
        standings = [s.strip() for s in args.standings.split(",") if s.strip()]

    fixtures = read_fixtures_csv(args.fixtures)
    print(f"Loaded {len(fixtures)} fixtures from {args.fixtures}")

    try:
        new = advance_round(config, fixtures, competition.upper(), round_name,
                            seed=args.seed, standings=standings)
    except ConfigurationError as exc:
        _print_config_errors(exc)
        return 1

    print(format_fixtures(new, title=f"{competition.upper()} {round_name.value}"))
    Path(args.fixtures).write_text(format_fixtures_csv(fixtures + new))
    print(f"\nAppended {len(new)} fixtures to {args.fixtures}")
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Season fixture generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Output files (generate mode):
  {dir}/fixtures.txt   Human-readable fixtures
  {dir}/fixtures.csv   Interchange CSV
  {dir}/stats.txt      Validation report + balance statistics

Exit codes:
  0  Fixtures valid
  1  Configuration error, constraint violations or degraded league phase
""",
    )
    parser.add_argument(
        "config", nargs="?", default="config.yaml",
        help="Path to config YAML file (default: config.yaml)"
    )
    parser.add_argument(
        "--seed", type=int, default=None,
        help="Random seed for reproducible fixtures (default: season.seed "
             "from the config)"
    )
    parser.add_argument(
        "--output-prefix", "-o", default="output",
        help="Output directory for generated files (default: output/)"
    )
    parser.add_argument(
        "--advance", nargs=2, metavar=("COMPETITION", "ROUND"),
        help="Draw the next knockout round (e.g. CUP R16, EUROPE PLAYOFF)"
    )
    parser.add_argument(
        "--fixtures", metavar="CSV",
        help="Fixture CSV with played results (advance mode)"
    )
    parser.add_argument(
        "--standings", metavar="IDS",
        help="Comma-separated league-phase table, best first (advance mode)"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Show debug logging from the generators"
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config_path = args.config
    if not Path(config_path).exists():
        print(f"Error: config file {config_path} not found")
        sys.exit(1)

    print(f"Loading config from {config_path}...")
    try:
        config = load_config(config_path)
    except ConfigurationError as exc:
        _print_config_errors(exc)
        sys.exit(1)

    if args.advance:
        sys.exit(_advance(args, config))

    # Generation mode
    seed = args.seed if args.seed is not None else config["season"].get("seed")
    print(f"Generating fixtures (seed={seed})...")
    try:
        season = schedule_season(config, seed=seed)
    except ConfigurationError as exc:
        _print_config_errors(exc)
        sys.exit(1)

    if not season.fixtures:
        print("Error: no fixtures were generated!")
        sys.exit(1)
    if season.degraded:
        print("WARNING: league phase used the sequential fallback; "
              "some teams may play twice in a round.")

    # Validate
    print("\nValidating...")
    year = config["season"]["year"]
    result = validate_schedule(
        season.fixtures, config["teams"], year,
        league_ids=config["competitions"]["league_ids"],
        league_phase_rounds=config["competitions"]["league_phase_rounds"],
    )
    report = format_validation_report(
        result, title=config["season"].get("name", ""))
    print(report)

    # Stats
    stats = compute_stats(season.fixtures, config["teams"])
    stats_text = format_stats_report(stats, config["teams"])
    print("\n" + stats_text)

    # Write outputs
    print("\nWriting output files...")
    write_fixtures(season.fixtures, output_prefix=args.output_prefix,
                   title=config["season"].get("name", ""))

    stats_path = Path(args.output_prefix) / "stats.txt"
    stats_path.write_text(report + "\n\n" + stats_text)
    print(f"Written: {stats_path}")

    if result["valid"] and not season.degraded:
        print("\nFixtures generated successfully!")
    else:
        print(f"\nFixtures have {len(result['errors'])} constraint violations.")
        print("Review errors above and adjust config or seed.")
        sys.exit(1)


if __name__ == "__main__":
    main()
