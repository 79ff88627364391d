"""Command-line interface for the analytics engine."""

import argparse
import os
import sys
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from ledger_analytics import __version__
from ledger_analytics.config import Config, ConfigError, load_config
from ledger_analytics.exceptions import AnalyticsError
from ledger_analytics.models.filters import FilterSpec, KindFilter
from ledger_analytics.models.report import RankedEntity, Report
from ledger_analytics.output.serializer import export_report, serialize
from ledger_analytics.store import AnalyticsService, SnapshotStore, StoreError
from ledger_analytics.utils.decimal_utils import format_currency, parse_amount
from ledger_analytics.utils.logging_config import get_logger, setup_logging

# Load environment variables from .env file (if it exists)
load_dotenv()

console = Console()
logger = get_logger(__name__)

STORE_ENV_VAR = "LEDGER_ANALYTICS_STORE"


def _amount(value: str) -> Decimal:
    try:
        return parse_amount(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a finite number: '{value}'") from None


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser.

    Returns:
        Configured ArgumentParser.
    """
    parser = argparse.ArgumentParser(
        prog="ledger-analytics",
        description="Build income and expense analytics reports from a store snapshot",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --store data/snapshot.json
  %(prog)s --store data/snapshot.json --kind expense --category Food -o report.json
  %(prog)s --store data/snapshot.yaml --start-date 2024-01-01 --format csv -o rows.csv
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--store",
        type=Path,
        default=None,
        help=f"Snapshot file with expenses, income, categories and users (default: ${STORE_ENV_VAR})",
    )

    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Write the export to this file instead of stdout",
    )

    parser.add_argument(
        "--format",
        choices=["json", "csv", "xlsx"],
        default=None,
        help="Export format (default: from settings, json)",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to settings.yaml (default: config/settings.yaml)",
    )

    parser.add_argument(
        "--config-dir",
        type=Path,
        default=Path("config"),
        help="Base config directory (default: ./config)",
    )

    filters = parser.add_argument_group("Filters")
    filters.add_argument(
        "--start-date",
        type=lambda s: date.fromisoformat(s),
        default=None,
        help="Include transactions on or after this date (YYYY-MM-DD)",
    )
    filters.add_argument(
        "--end-date",
        type=lambda s: date.fromisoformat(s),
        default=None,
        help="Include transactions on or before this date (YYYY-MM-DD)",
    )
    filters.add_argument(
        "--kind",
        choices=[k.value for k in KindFilter],
        default=KindFilter.ALL.value,
        help="Transaction kind to include (default: all)",
    )
    filters.add_argument(
        "--category",
        action="append",
        default=[],
        metavar="NAME",
        help="Include this category (repeatable)",
    )
    filters.add_argument(
        "--user",
        action="append",
        default=[],
        metavar="NAME",
        help="Include this user (repeatable)",
    )
    filters.add_argument(
        "--department",
        action="append",
        default=[],
        metavar="NAME",
        help="Include this department (repeatable)",
    )
    filters.add_argument(
        "--min-amount",
        type=_amount,
        default=None,
        help="Minimum amount (inclusive)",
    )
    filters.add_argument(
        "--max-amount",
        type=_amount,
        default=None,
        help="Maximum amount (inclusive)",
    )

    parser.add_argument(
        "--now",
        type=lambda s: datetime.fromisoformat(s),
        default=None,
        help="Evaluation instant for trend windows (default: current time)",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Do not print the summary tables when writing to --output",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase output verbosity (-v, -vv)",
    )

    parser.add_argument(
        "--validate-only",
        action="store_true",
        help="Validate configuration files only",
    )

    return parser


def get_log_level(verbosity: int) -> str:
    """Convert verbosity count to log level.

    Args:
        verbosity: Number of -v flags.

    Returns:
        Log level string.
    """
    if verbosity >= 2:
        return "DEBUG"
    elif verbosity >= 1:
        return "INFO"
    else:
        return "WARNING"


def filter_spec_from_args(args: argparse.Namespace) -> FilterSpec:
    """Build the FilterSpec described by the command-line filters."""
    return FilterSpec(
        start_date=args.start_date,
        end_date=args.end_date,
        kind=KindFilter(args.kind),
        categories=tuple(args.category),
        users=tuple(args.user),
        departments=tuple(args.department),
        min_amount=args.min_amount,
        max_amount=args.max_amount,
    )


def validate_config(args: argparse.Namespace) -> int:
    """Validate configuration files.

    Args:
        args: Parsed command-line arguments.

    Returns:
        0 if valid, 1 if errors found.
    """
    console.print("[bold]Validating configuration files...[/bold]\n")

    settings_path = args.config or (args.config_dir / "settings.yaml")
    if settings_path.exists():
        console.print(f"[green]✓[/green] Settings: {settings_path}")
    else:
        console.print(f"[yellow]Settings file not found: {settings_path} (defaults apply)[/yellow]")

    try:
        config = load_config(settings_path=args.config, config_dir=args.config_dir)
    except (ConfigError, FileNotFoundError) as e:
        console.print(f"\n[red]Errors:[/red]\n  - Failed to load configuration: {e}")
        return 1

    console.print("\n[green]✓[/green] Configuration loaded successfully")
    console.print(f"  - Output format: {config.output.format}")
    console.print(f"  - User efficiency scale: {config.analytics.user_efficiency_scale}")
    console.print(f"  - Department efficiency scale: {config.analytics.department_efficiency_scale}")
    console.print("\n[green]Configuration is valid.[/green]")
    return 0


def _ranking_table(title: str, entities: Sequence[RankedEntity], places: int) -> Table:
    table = Table(title=title)
    table.add_column("Rank", justify="right")
    table.add_column("Badge")
    table.add_column("Name")
    table.add_column("Amount", justify="right")
    table.add_column("Txns", justify="right")
    table.add_column("Trend %", justify="right")
    table.add_column("Efficiency", justify="right")
    for entity in entities:
        table.add_row(
            str(entity.rank),
            "" if entity.badge.value == "none" else entity.badge.value,
            entity.name,
            format_currency(entity.amount, places),
            str(entity.transaction_count),
            format_currency(entity.trend, 1),
            format_currency(entity.efficiency, 1),
        )
    return table


def display_report(report: Report, config: Config) -> None:
    """Print the summary and ranking tables.

    Args:
        report: Report to display.
        config: Application configuration (for decimal places).
    """
    places = config.output.decimal_places
    summary = report.summary

    table = Table(title="Financial Summary")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Transactions", str(report.total_records))
    table.add_row("Total income", format_currency(summary.total_income, places))
    table.add_row("Total expense", format_currency(summary.total_expense, places))
    table.add_row("Net income", format_currency(summary.net_income, places))
    table.add_row("Monthly income", format_currency(summary.monthly_income, places))
    table.add_row("Monthly expense", format_currency(summary.monthly_expense, places))
    table.add_row("Profit margin %", format_currency(summary.profit_margin, 1))
    table.add_row("Income growth %", format_currency(summary.income_growth, 1))
    table.add_row("Expense growth %", format_currency(summary.expense_growth, 1))
    console.print(table)

    if report.user_ranking:
        console.print(_ranking_table("User Ranking", report.user_ranking, places))
    if report.department_ranking:
        console.print(_ranking_table("Department Ranking", report.department_ranking, places))

    if report.total_records == 0:
        console.print("[yellow]No transactions match the filter.[/yellow]")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command-line arguments (default: sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(level=get_log_level(args.verbose), console_output=args.verbose > 0)

    if args.validate_only:
        return validate_config(args)

    store_path = args.store
    if store_path is None and os.environ.get(STORE_ENV_VAR):
        store_path = Path(os.environ[STORE_ENV_VAR])
    if store_path is None:
        console.print(f"[red]Error: --store is required (or set {STORE_ENV_VAR})[/red]")
        parser.print_usage()
        return 1

    try:
        config = load_config(settings_path=args.config, config_dir=args.config_dir)
    except (ConfigError, FileNotFoundError) as e:
        console.print(f"[red]Error: {e}[/red]")
        console.print("Run with --validate-only to check configuration files.")
        return 1

    # Settings decide the log file; -v flags still override the level
    setup_logging(
        level=get_log_level(args.verbose) if args.verbose else config.logging.level,
        log_file=config.logging.file,
        console_output=args.verbose > 0,
    )

    fmt = args.format or config.output.format
    if fmt == "xlsx" and args.output is None:
        console.print("[red]Error: --output is required for xlsx export[/red]")
        return 1

    service = AnalyticsService(SnapshotStore(store_path), config)
    try:
        report = service.build_report(filter_spec_from_args(args), now=args.now)
    except (AnalyticsError, StoreError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    if args.output is None:
        sys.stdout.write(serialize(report, fmt, config.output))
        sys.stdout.write("\n")
        return 0

    if not args.quiet:
        display_report(report, config)
    if service.skipped_records:
        console.print(f"[yellow]Skipped {service.skipped_records} invalid record(s), see log[/yellow]")
    export_report(report, args.output, fmt, config)
    console.print(f"\n[green]Report written to {args.output}[/green]")

    return 0


if __name__ == "__main__":
    sys.exit(main())
