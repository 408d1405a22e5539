"""
StudyTrack command line.

  studytrack ui                      : interactive dashboard
  studytrack stats                   : summary report to stdout
  studytrack stats --plan ID         : one plan
  studytrack stats --full -o FILE    : full report to a file
  studytrack stats --since 2024-01-01: add a daily breakdown from that date
"""

import argparse
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from rich.console import Console

from studytrack import __version__
from studytrack.models.stats import TimeRange
from studytrack.services.exporter import Exporter
from studytrack.services.stats_service import StatsService
from studytrack.services.store import InMemoryPlanService, InMemorySessionService, load_fixture
from studytrack.utils.exceptions import StudyTrackError
from studytrack.utils.helpers import get_settings
from studytrack.utils.logger import get_logger, setup_logging
from studytrack.utils.validators import Settings

logger = get_logger("cli")


def _parse_date(value: str) -> datetime:
    try:
        return datetime.strptime(value, '%Y-%m-%d')
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date (expected YYYY-MM-DD): {value}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="studytrack", description="Track progress through learning plans.")
    parser.add_argument('--version', action='version', version=f"%(prog)s {__version__}")
    parser.add_argument('--config', help="Path to config YAML (default: config/config.yaml).")
    parser.add_argument('--data', help="Plans and sessions YAML (default from config).")

    sub = parser.add_subparsers(dest='command')
    sub.required = True

    sub.add_parser('ui', help="Open the interactive dashboard.")

    stats = sub.add_parser('stats', help="Print a Markdown statistics report.")
    stats.add_argument('--plan', help="Report on a single plan.")
    stats.add_argument('--full', action='store_true', help="Full report with plan table and daily breakdown.")
    stats.add_argument('--since', type=_parse_date, help="Daily breakdown starting at YYYY-MM-DD.")
    stats.add_argument('-o', '--output', help="Write to this file instead of stdout.")
    return parser


def load_services(settings: Settings, data_file: Optional[str] = None):
    """Plan and session services seeded from the data file, or empty ones."""
    path = data_file or settings.storage.data_file
    if path and Path(path).exists():
        return load_fixture(path)
    if data_file:
        raise StudyTrackError(f"data file not found: {data_file}", error_code="DATA_NOT_FOUND")
    logger.info("No data file, starting empty", path=str(path))
    return InMemoryPlanService(), InMemorySessionService()


def run_stats(args, service: StatsService, exporter: Exporter) -> str:
    if args.plan:
        return exporter.export_plan_stats(service.get_plan_stats(args.plan))

    if args.full:
        total, plan_stats, daily = service.get_report_data()
        if args.since:
            daily = service.get_daily_stats(TimeRange.since(args.since))
        return exporter.export_full_report(total, plan_stats, daily)

    content = exporter.export_total_stats(service.get_total_stats())
    if args.since:
        content += "\n" + exporter.export_daily_stats(service.get_daily_stats(TimeRange.since(args.since)))
    return content


def run_ui(settings: Settings, plan_service, session_service):
    # Imported here so `studytrack stats` never loads the dashboard
    from studytrack.tui.app import AppShell
    from studytrack.tui.plan_module import PlanModule
    from studytrack.tui.runtime import Program
    from studytrack.tui.stats_module import StatsModule

    stats_module = StatsModule(
        stats_service=StatsService(plan_service, session_service),
        page_size=settings.tui.page_size,
        output_dir=settings.export.output_dir,
        progress_bar_width=settings.tui.progress_bar_width,
        date_format=settings.tui.date_format,
    )
    shell = AppShell([PlanModule(plan_service), stats_module])
    Program(shell).run()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    err = Console(stderr=True)

    try:
        settings = get_settings(args.config)
        setup_logging(settings.logging.log_level, settings.logging.log_file)
        plan_service, session_service = load_services(settings, args.data)

        if args.command == 'ui':
            run_ui(settings, plan_service, session_service)
            return 0

        exporter = Exporter()
        content = run_stats(args, StatsService(plan_service, session_service), exporter)
        exporter.write(content, args.output or sys.stdout)
        if args.output:
            err.print(f"[green]Report saved to {args.output}[/]")
        return 0
    except StudyTrackError as e:
        logger.error("Command failed", command=args.command, error=e.message, code=e.error_code)
        err.print(f"[red]Error: {e.message}[/]")
        return 1
    except FileNotFoundError as e:
        err.print(f"[red]Error: {e}[/]")
        return 1


if __name__ == "__main__":
    sys.exit(main())
