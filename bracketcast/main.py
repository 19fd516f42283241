"""Main CLI interface for the bracketcast projection engine."""

import argparse
import logging
import sys
from datetime import date

from .config import EngineConfig
from .data.loader import DataLoader
from .pipeline import DataRequirementError, ProjectionPipeline
from .ratings.calculator import RatingCalculator


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}") from exc


def _fmt(value, spec=".1f"):
    return "-" if value is None else format(value, spec)


def _load_league(path: str):
    try:
        return DataLoader.load_league_from_json(path)
    except (OSError, ValueError) as exc:
        print(f"Error loading data: {exc}")
        return None


def run_projection(args):
    """Rate, rank and assemble pods for a league file."""
    print(f"Loading league data from {args.input}...")
    league = _load_league(args.input)
    if league is None:
        return 1
    print(f"Loaded {len(league.teams)} teams and {len(league.games)} game records")

    config = EngineConfig()
    if args.config:
        try:
            config = DataLoader.load_config_from_json(args.config)
        except (OSError, ValueError) as exc:
            print(f"Error loading config: {exc}")
            return 1

    try:
        report = ProjectionPipeline(config).run(league, as_of=args.as_of)
    except DataRequirementError as exc:
        print(f"Error: {exc}")
        return 1

    print(f"\n{'='*60}")
    print(f"PROJECTED FIELD - {league.season or 'season'}" + (f" as of {args.as_of}" if args.as_of else ""))
    print(f"{'='*60}\n")
    for entry in report.rankings[: args.top]:
        flag = " (AQ)" if entry.is_conference_champion else ""
        print(
            f"{entry.pr:>3}. {entry.name:<28} {entry.record:>6}  "
            f"RPI {entry.rpi:.4f}  QWP {entry.qwp:>5.1f}  PCR {entry.pcr}{flag}"
        )

    if report.bracket.pods:
        print(f"\nPODS: {len(report.bracket.pods)}")
        for pod in report.bracket.pods:
            visitors = ", ".join(f"{s.team.name} ({_fmt(s.distance, '.0f')} mi)" for s in pod.visitors)
            print(f"   {pod.pod_number:>2}. {pod.host.team.name}: {visitors or '-'}")

    print(f"\nSaving report to {args.output}...")
    DataLoader.save_report_to_json(report.to_dict(), args.output)
    if args.csv:
        DataLoader.save_rankings_to_csv(report.rankings_frame(), args.csv)
        print(f"Rankings written to {args.csv}")
    print("✓ Done!")
    return 0


def show_splits(args):
    """Print split summaries for one team."""
    league = _load_league(args.input)
    if league is None:
        return 1
    if not any(t.team_id == args.team for t in league.teams):
        print(f"Error: unknown team '{args.team}'")
        return 1

    splits = RatingCalculator().splits(args.team, league.games, season=league.season or None, as_of=args.as_of)
    if not splits:
        print(f"No games found for {args.team}")
        return 0

    print(f"{'Split':<12} {'G':>3} {'W-L':>7} {'PPG':>6} {'OPP':>6} {'ORtg':>6} {'DRtg':>6} {'Net':>6}")
    for s in splits:
        print(
            f"{s.split_name:<12} {s.games_played:>3} {f'{s.wins}-{s.losses}':>7} "
            f"{s.points_per_game:>6.1f} {s.points_allowed_per_game:>6.1f} "
            f"{_fmt(s.offensive_rating):>6} {_fmt(s.defensive_rating):>6} {_fmt(s.net_rating):>6}"
        )
    return 0


def create_sample(args):
    """Create sample data file."""
    print(f"Creating sample league at {args.output}...")
    try:
        DataLoader.create_sample_data(args.output, num_teams=args.teams, seed=args.seed)
    except ValueError as exc:
        print(f"Error: {exc}")
        return 1
    print("✓ Sample data created!")
    print(f"\nYou can now run a projection with:")
    print(f"  bracketcast project --input {args.output} --output report.json")
    return 0


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Bracketcast - ratings, rankings and pod projections for collegiate basketball leagues"
    )
    parser.add_argument("--verbose", "-v", action="count", default=0, help="Increase log verbosity (-v, -vv)")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    project_parser = subparsers.add_parser("project", help="Rate, rank and project the bracket")
    project_parser.add_argument("--input", "-i", required=True, help="League JSON file")
    project_parser.add_argument(
        "--output", "-o",
        default="projection_report.json",
        help="Output JSON report (default: projection_report.json)"
    )
    project_parser.add_argument("--as-of", type=_parse_date, default=None, help="Only count games on or before this date")
    project_parser.add_argument("--csv", default=None, help="Optional CSV path for the rankings table")
    project_parser.add_argument("--config", default=None, help="Optional engine config JSON")
    project_parser.add_argument("--top", type=int, default=25, help="Rows of the ranking to print (default: 25)")

    splits_parser = subparsers.add_parser("splits", help="Show split summaries for one team")
    splits_parser.add_argument("--input", "-i", required=True, help="League JSON file")
    splits_parser.add_argument("--team", "-t", required=True, help="Team id")
    splits_parser.add_argument("--as-of", type=_parse_date, default=None, help="Only count games on or before this date")

    sample_parser = subparsers.add_parser("sample", help="Create a synthetic league file")
    sample_parser.add_argument(
        "--output", "-o",
        default="sample_league.json",
        help="Output file for sample data (default: sample_league.json)"
    )
    sample_parser.add_argument("--teams", type=int, default=32, help="Number of member teams (default: 32)")
    sample_parser.add_argument("--seed", type=int, default=2026, help="Random seed")

    args = parser.parse_args(argv)

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.command == "project":
        return run_projection(args)
    elif args.command == "splits":
        return show_splits(args)
    elif args.command == "sample":
        return create_sample(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
