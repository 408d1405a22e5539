"""
Statistics Exporter

Validates stats snapshots and renders them as markdown reports. Section
headings and labels are stable so existing report readers keep working.
"""

from datetime import datetime
from pathlib import Path
from typing import IO, List, Optional, Union

from jinja2 import Environment, Template, TemplateError

from studytrack.models.stats import DailyStats, PlanStats, TotalStats
from studytrack.tui.components.progress import render_bar
from studytrack.tui.components.table import markdown_table
from studytrack.utils.exceptions import ExportError, StatsValidationError
from studytrack.utils.logger import get_logger

logger = get_logger("exporter")

PLAN_TABLE_HEADERS = ['Plan', 'Hours', 'Sessions', 'Progress', 'Status']
DATE_FORMAT = "%Y-%m-%d"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

Sink = Union[str, Path, IO[str]]


class Exporter:
    """Markdown exporter for learning statistics."""

    def __init__(self):
        self.template: Optional[Template] = None
        self._env = Environment(autoescape=False, trim_blocks=True, lstrip_blocks=True)

    # ========================================================================
    # TEMPLATES & VALIDATION
    # ========================================================================

    def with_template(self, template_str: str) -> 'Exporter':
        """
        Use a custom jinja2 template for export_total_stats.

        The template sees every TotalStats field by name plus the snapshot
        itself as `stats`. Plan, daily and full reports are not affected.
        """
        try:
            self.template = self._env.from_string(template_str)
        except TemplateError as e:
            raise ExportError(f"failed to parse template: {e}", error_code="TEMPLATE_INVALID") from e
        return self

    def validate_stats(self, stats):
        stats.validate()

    def _validated(self, stats, label: str):
        try:
            self.validate_stats(stats)
        except StatsValidationError as e:
            logger.warning("Refusing to export invalid stats", field=e.field, error=e.message)
            raise ExportError(f"{label}: {e.message}", error_code="STATS_INVALID", details=e.details) from e

    # ========================================================================
    # RENDERERS
    # ========================================================================

    def export_total_stats(self, stats: TotalStats) -> str:
        self._validated(stats, "invalid stats")

        if self.template is not None:
            context = {f: getattr(stats, f) for f in stats.__dataclass_fields__}
            try:
                return self.template.render(stats=stats, **context)
            except TemplateError as e:
                raise ExportError(f"failed to execute template: {e}", error_code="TEMPLATE_FAILED") from e

        lines = ["# Learning Statistics", "", "## Summary", ""]

        if stats.total_sessions == 0:
            lines.append("No sessions recorded yet.")
            return "\n".join(lines) + "\n"

        lines += [
            f"**Total Hours:** {stats.total_hours:.1f} hours",
            f"**Total Sessions:** {stats.total_sessions}",
            f"**Average Session:** {stats.average_session:.1f} minutes",
            "",
            "## Plans",
            "",
            f"**Active Plans:** {stats.active_plans}",
            f"**Completed Plans:** {stats.completed_plans}",
            "",
            "## Streaks",
            "",
            f"**Current Streak:** {stats.current_streak} days",
            f"**Longest Streak:** {stats.longest_streak} days",
            "",
        ]
        if stats.last_session_date is not None:
            lines.append(f"**Last Session:** {self.format_date(stats.last_session_date)}")

        return "\n".join(lines) + "\n"

    def export_plan_stats(self, stats: PlanStats) -> str:
        self._validated(stats, "invalid plan stats")

        lines = [
            f"# Plan: {stats.plan_title}",
            "",
            f"**Plan ID:** {stats.plan_id}",
            f"**Status:** {stats.status}",
            "",
            "## Progress",
            "",
            f"**Completion:** {self.format_progress(stats.progress)}",
            f"**Chunks:** {stats.completed_chunks}/{stats.total_chunks} completed",
            self.generate_progress_bar(stats.progress, 30),
            "",
            "## Time",
            "",
            f"**Actual Hours:** {stats.total_hours:.1f} hours",
            f"**Planned Hours:** {stats.planned_hours:.1f} hours",
            f"**Session Count:** {stats.session_count} sessions",
            "",
        ]

        if stats.session_count == 0:
            lines.append("No sessions recorded yet.")
        elif stats.last_session is not None:
            lines.append(f"**Last Session:** {self.format_date(stats.last_session)}")

        return "\n".join(lines) + "\n"

    def export_daily_stats(self, daily_stats: List[DailyStats]) -> str:
        lines = ["# Daily Statistics", ""]

        if not daily_stats:
            lines.append("No daily statistics available.")
            return "\n".join(lines) + "\n"

        total_minutes = sum(ds.duration for ds in daily_stats)
        total_sessions = sum(ds.session_count for ds in daily_stats)
        lines += [
            f"**Total:** {total_minutes / 60.0:.1f} hours across {total_sessions} sessions",
            "",
            "## Breakdown",
            "",
        ]

        for ds in daily_stats:
            lines += [
                f"### {ds.date.strftime(DATE_FORMAT)}",
                "",
                f"- **Duration:** {ds.hours():.1f} hours",
                f"- **Sessions:** {ds.session_count} sessions",
            ]
            if ds.plans:
                lines.append(f"- **Plans:** {', '.join(ds.plans)}")
            lines.append("")

        return "\n".join(lines) + "\n"

    def export_full_report(self, total: TotalStats, plan_stats: List[PlanStats],
                           daily_stats: List[DailyStats],
                           generated_at: Optional[datetime] = None) -> str:
        """Summary, plan table and daily breakdown in one document."""
        generated_at = generated_at or datetime.now()
        lines = [
            "# Learning Statistics Report",
            "",
            f"*Generated: {generated_at.strftime(TIMESTAMP_FORMAT)}*",
            "",
        ]

        if total.total_sessions == 0 and not plan_stats and not daily_stats:
            lines.append("No data available.")
            return "\n".join(lines) + "\n"

        lines += ["## Summary", ""]
        if total.total_sessions > 0:
            lines += [
                f"- **Total Hours:** {total.total_hours:.1f} hours",
                f"- **Total Sessions:** {total.total_sessions}",
                f"- **Average Session:** {total.average_session:.1f} minutes",
                f"- **Active Plans:** {total.active_plans}",
                f"- **Completed Plans:** {total.completed_plans}",
                f"- **Current Streak:** {total.current_streak} days",
                f"- **Longest Streak:** {total.longest_streak} days",
            ]
            if total.last_session_date is not None:
                lines.append(f"- **Last Session:** {self.format_date(total.last_session_date)}")
        else:
            lines.append("No sessions recorded.")
        lines.append("")

        if plan_stats:
            lines += ["## Plans", "", self.generate_markdown_table(plan_stats)]

        if daily_stats:
            lines += ["## Daily Breakdown", ""]
            for ds in daily_stats:
                lines.append(
                    f"- **{ds.date.strftime(DATE_FORMAT)}:** {ds.hours():.1f} hours ({ds.session_count} sessions)"
                )
            lines.append("")

        lines += ["---", "*Report generated by StudyTrack*"]
        return "\n".join(lines) + "\n"

    # ========================================================================
    # FORMATTING HELPERS
    # ========================================================================

    @staticmethod
    def format_duration(minutes: float) -> str:
        if minutes < 60:
            return f"{minutes:.0f} minutes"
        return f"{minutes / 60.0:.1f} hours"

    @staticmethod
    def format_date(date: Optional[datetime]) -> str:
        if date is None:
            return "N/A"
        return date.strftime(DATE_FORMAT)

    @staticmethod
    def format_progress(progress: float) -> str:
        return f"{int(progress * 100)}%"

    def generate_markdown_table(self, plan_stats: List[PlanStats]) -> str:
        rows = [
            [ps.plan_title, f"{ps.total_hours:.1f}", ps.session_count,
             self.format_progress(ps.progress), ps.status]
            for ps in plan_stats
        ]
        return markdown_table(PLAN_TABLE_HEADERS, rows)

    @staticmethod
    def generate_progress_bar(progress: float, width: int) -> str:
        return f"[{render_bar(progress, width)}]"

    # ========================================================================
    # SINKS
    # ========================================================================

    def export_to_file(self, stats: TotalStats, sink: Sink):
        """Render total stats and write them to a path or text stream."""
        content = self.export_total_stats(stats)
        self.write(content, sink)

    def write(self, content: str, sink: Sink):
        """
        Write a rendered report.

        A path gets its parent directories created; anything with a
        write() method is treated as an open text stream.
        """
        if hasattr(sink, 'write'):
            sink.write(content)
            logger.debug("Wrote report to stream", chars=len(content))
            return

        path = Path(sink)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding='utf-8')
        except OSError as e:
            raise ExportError(f"failed to write file: {e}", error_code="WRITE_FAILED",
                              details={'path': str(path)}) from e
        logger.info("Report written", path=str(path), chars=len(content))

    def read_file(self, path: Union[str, Path]) -> str:
        try:
            return Path(path).read_text(encoding='utf-8')
        except OSError as e:
            raise ExportError(f"failed to read file: {e}", error_code="READ_FAILED",
                              details={'path': str(path)}) from e


def get_exporter() -> Exporter:
    """Get a fresh exporter instance."""
    return Exporter()
