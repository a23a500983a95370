#!/usr/bin/env python3
"""
ORM vs raw driver benchmark CLI.

Every sweep cell is an entry point that can be run on its own:

    python -m ormbench run simple_10000_orm
    python -m ormbench run 'complex_*' --samples 200
    python -m ormbench run --all --output-json results/json

Exit status is 0 on success, 1 when a scenario fails (connection, storage,
seed mismatch or wrong query result) and 2 for usage errors.
"""

import argparse
import sys
from typing import List, Optional

import structlog

from ormbench.config import BenchmarkConfiguration
from ormbench.errors import HarnessError
from ormbench.logging_config import configure_logging
from ormbench.output import export_json, export_table
from ormbench.runner import ScenarioRunner
from ormbench.schema import create_schema
from ormbench.sweep import SCENARIOS, UnknownScenarioError, select_scenarios

logger = structlog.get_logger()

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ormbench",
        description="Benchmark SQLAlchemy ORM queries against hand-written psycopg SQL",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List every entry point
  ormbench list

  # Run one scenario against the database in DATABASE_URL
  ormbench run simple_10000_orm

  # Run the full sweep and keep the raw timings
  ormbench run --all --output-json results/json
        """
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Log scenario state transitions'
    )

    # Lets -v follow the subcommand; SUPPRESS keeps a top-level -v from being reset
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        '-v', '--verbose',
        action='store_true',
        default=argparse.SUPPRESS,
        help='Log scenario state transitions'
    )

    subparsers = parser.add_subparsers(dest='command', required=True)

    list_parser = subparsers.add_parser('list', parents=[common], help='List scenario entry points')
    list_parser.add_argument('patterns', nargs='*', help='Shell-style name patterns')

    run_parser = subparsers.add_parser('run', parents=[common], help='Run scenarios')
    run_parser.add_argument('patterns', nargs='*', help='Scenario names or shell-style patterns')
    run_parser.add_argument(
        '--all',
        action='store_true',
        help='Run every scenario in the sweep'
    )
    run_parser.add_argument(
        '--database-url',
        type=str,
        help='Connection URL (default: $DATABASE_URL)'
    )
    run_parser.add_argument(
        '--samples',
        type=int,
        help='Timed samples per scenario (default: 100)'
    )
    run_parser.add_argument(
        '--warmup',
        type=int,
        dest='warmup_iterations',
        help='Untimed warmup queries per scenario (default: 2)'
    )
    run_parser.add_argument(
        '--max-duration',
        type=float,
        dest='max_duration_s',
        help='Stop sampling a scenario after this many measured seconds'
    )
    run_parser.add_argument(
        '--output-json',
        type=str,
        help='Directory for the JSON report'
    )
    run_parser.add_argument(
        '--output-table',
        type=str,
        help='Directory for the text table report'
    )

    schema_parser = subparsers.add_parser('setup-schema', parents=[common], help='Create the users and posts tables')
    schema_parser.add_argument(
        '--database-url',
        type=str,
        help='Connection URL (default: $DATABASE_URL)'
    )
    schema_parser.add_argument(
        '--drop',
        action='store_true',
        help='Drop existing tables first'
    )

    return parser


def load_config(**overrides) -> Optional[BenchmarkConfiguration]:
    """Build the run configuration, printing problems to stderr. None means usage error."""
    try:
        config = BenchmarkConfiguration.from_env(**overrides)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return None

    errors = config.validate()
    for error in errors:
        print(f"error: {error}", file=sys.stderr)
    return None if errors else config


def cmd_list(args) -> int:
    scenarios = select_scenarios(args.patterns) if args.patterns else list(SCENARIOS.values())
    for scenario in scenarios:
        print(scenario.name)
    return EXIT_OK


def cmd_run(args) -> int:
    if args.all == bool(args.patterns):
        print("error: give scenario names/patterns or --all (not both)", file=sys.stderr)
        return EXIT_USAGE

    scenarios = list(SCENARIOS.values()) if args.all else select_scenarios(args.patterns)

    config = load_config(
        database_url=args.database_url,
        samples=args.samples,
        warmup_iterations=args.warmup_iterations,
        max_duration_s=args.max_duration_s,
    )
    if config is None:
        return EXIT_USAGE

    runner = ScenarioRunner(config)
    report = runner.run_all(scenarios)

    print(export_table(report, output_dir=args.output_table))
    if args.output_json:
        filepath = export_json(report, output_dir=args.output_json)
        logger.info("JSON report written", path=filepath)

    return EXIT_OK


def cmd_setup_schema(args) -> int:
    config = load_config(database_url=args.database_url)
    if config is None:
        return EXIT_USAGE

    create_schema(config.database_url, drop_existing=args.drop)
    return EXIT_OK


COMMANDS = {
    'list': cmd_list,
    'run': cmd_run,
    'setup-schema': cmd_setup_schema,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose)

    try:
        return COMMANDS[args.command](args)
    except UnknownScenarioError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_USAGE
    except (HarnessError, AssertionError) as e:
        print(f"benchmark aborted: {type(e).__name__}: {e}", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
