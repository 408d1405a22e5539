"""
Stats Module

Dashboard over TotalStats, per-plan stats and session history. Views are
navigated with a history stack: every forward move pushes the view being
left, Esc pops exactly one entry.

Keyboard Shortcuts:
  p    : Plan list
  s    : Session history (filtered to the plan when opened from its detail)
  e    : Export report
  r    : Reload data
  j/k  : Down/up (also arrow keys)
  Enter: Select
  Esc  : Back
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from rich.text import Text

from studytrack.models.session import Session
from studytrack.models.stats import PlanStats, TimeRange, TotalStats
from studytrack.services.calculator import calculate_daily_stats
from studytrack.services.exporter import Exporter
from studytrack.services.stats_service import StatsService
from studytrack.tui.components.progress import ProgressBar
from studytrack.tui.components.table import Table
from studytrack.tui.messages import (
    BroadcastMsg, KeyMsg, ModuleActivatedMsg, TOPIC_PLANS_CHANGED, status_cmd,
)
from studytrack.tui.module import Module, Shortcut
from studytrack.tui.theme import Theme
from studytrack.utils.logger import get_logger

logger = get_logger("tui.stats")

VIEW_OVERVIEW = 'overview'
VIEW_PLAN_LIST = 'plan-list'
VIEW_PLAN_DETAIL = 'plan-detail'
VIEW_SESSION_HISTORY = 'session-history'
VIEW_EXPORT = 'export-dialog'

EXPORT_OPTIONS = [
    ('summary', "Summary Report", "Quick overview of your learning progress"),
    ('full', "Full Report", "Detailed report with daily breakdowns"),
]

STATUS_LABELS = {
    'not-started': "⚪ Not Started",
    'in-progress': "🟡 In Progress",
    'completed': "🟢 Completed",
    'skipped': "⏭ Skipped",
    'archived': "📦 Archived",
}


@dataclass(frozen=True)
class StatsLoadedMsg:
    total: Optional[TotalStats] = None
    plan_stats: Optional[List[PlanStats]] = None
    sessions: Optional[List[Session]] = None
    error: Optional[Exception] = None


@dataclass(frozen=True)
class ReportExportedMsg:
    kind: str
    path: Optional[Path] = None
    error: Optional[Exception] = None


def format_plan_status(status: str) -> str:
    return STATUS_LABELS.get(status, status)


def format_long_date(t: datetime) -> str:
    """'Monday, January 2, 2006 at 3:04 PM'"""
    hour = t.hour % 12 or 12
    return f"{t:%A, %B} {t.day}, {t.year} at {hour}:{t:%M %p}"


def format_short_date(t: datetime, fmt: Optional[str] = None) -> str:
    """'Jan 2, 2006 15:04' unless a strftime pattern is given."""
    if fmt:
        return t.strftime(fmt)
    return f"{t:%b} {t.day}, {t.year} {t:%H:%M}"


def truncate(s: str, max_len: int) -> str:
    if len(s) <= max_len:
        return s
    return s[:max_len - 3] + "..."


def format_notes(notes: str, max_len: int) -> str:
    notes = truncate(notes.replace("\n", " "), max_len)
    return notes or "-"


def paginate(items: list, cursor: int, page_size: int) -> Tuple[list, int]:
    """
    Window of at most page_size items centered on cursor.

    The window never slides past either end of the list.

    Returns:
        (visible items, index of the first visible item)
    """
    if len(items) <= page_size:
        return items, 0

    start = max(0, cursor - page_size // 2)
    end = start + page_size
    if end > len(items):
        end = len(items)
        start = max(0, end - page_size)
    return items[start:end], start


class StatsModule(Module):
    """Learning statistics dashboard."""

    id = 'stats'
    title = 'Stats'

    def __init__(self, stats_service: Optional[StatsService] = None, exporter: Optional[Exporter] = None,
                 page_size: int = 20, output_dir: str = 'reports', progress_bar_width: int = 40,
                 date_format: Optional[str] = None):
        self.stats_service = stats_service
        self.exporter = exporter or Exporter()
        self.page_size = page_size
        self.output_dir = Path(output_dir)
        self.progress_bar_width = progress_bar_width
        self.date_format = date_format

        self.total_stats: Optional[TotalStats] = None
        self.all_plan_stats: List[PlanStats] = []
        self.sessions: List[Session] = []

        self.current_view = VIEW_OVERVIEW
        self.view_history: List[str] = []

        self.selected_plan_id: Optional[str] = None
        self.selected_plan: Optional[PlanStats] = None
        self.plan_list_cursor = 0

        self.session_filter_plan_id: Optional[str] = None
        self.session_cursor = 0

        self.export_cursor = 0

        self.loading = False
        self.load_error: Optional[str] = None
        self.stale = True

    # ========================================================================
    # DATA
    # ========================================================================

    def set_total_stats(self, stats: Optional[TotalStats]):
        self.total_stats = stats

    def set_all_plan_stats(self, plan_stats: List[PlanStats]):
        self.all_plan_stats = list(plan_stats)
        self.plan_list_cursor = 0

    def set_sessions(self, sessions: List[Session]):
        self.sessions = list(sessions)
        self.session_cursor = 0

    def filtered_sessions(self) -> List[Session]:
        if not self.session_filter_plan_id:
            return self.sessions
        return [s for s in self.sessions if s.plan_id == self.session_filter_plan_id]

    def _load(self):
        if self.stats_service is None:
            self.load_error = "stats service unavailable"
            return status_cmd("Stats service unavailable", True)

        self.loading = True
        service = self.stats_service

        def load():
            try:
                return StatsLoadedMsg(
                    total=service.get_total_stats(),
                    plan_stats=list(service.get_all_plan_stats().values()),
                    sessions=service.list_sessions(),
                )
            except Exception as e:
                logger.error("Loading statistics failed", error=str(e))
                return StatsLoadedMsg(error=e)
        return load

    def _on_loaded(self, msg: StatsLoadedMsg):
        self.loading = False
        if msg.error is not None:
            self.load_error = str(msg.error)
            return self, status_cmd(f"Failed to load statistics: {msg.error}", True)

        self.load_error = None
        self.stale = False
        self.total_stats = msg.total
        self.all_plan_stats = list(msg.plan_stats or [])
        self.sessions = list(msg.sessions or [])

        self.plan_list_cursor = min(self.plan_list_cursor, max(0, len(self.all_plan_stats) - 1))
        count = len(self.filtered_sessions())
        self.session_cursor = min(self.session_cursor, max(0, count - 1))
        if self.selected_plan_id:
            self.selected_plan = next(
                (ps for ps in self.all_plan_stats if ps.plan_id == self.selected_plan_id), None,
            )
            if self.selected_plan is None:
                # Plan was deleted elsewhere
                self.selected_plan_id = None
                if self.current_view == VIEW_PLAN_DETAIL:
                    self.go_back()
        return self, status_cmd("Statistics refreshed")

    # ========================================================================
    # MODULE CONTRACT
    # ========================================================================

    def shortcuts(self) -> List[Shortcut]:
        if self.current_view == VIEW_OVERVIEW:
            return [Shortcut("p", "plans"), Shortcut("s", "sessions"), Shortcut("e", "export"), Shortcut("r", "reload")]
        if self.current_view == VIEW_PLAN_LIST:
            return [Shortcut("↑/↓", "move"), Shortcut("Enter", "details"), Shortcut("Esc", "back")]
        if self.current_view == VIEW_PLAN_DETAIL:
            return [Shortcut("s", "plan sessions"), Shortcut("Esc", "back")]
        if self.current_view == VIEW_SESSION_HISTORY:
            return [Shortcut("↑/↓", "move"), Shortcut("Esc", "back")]
        if self.current_view == VIEW_EXPORT:
            return [Shortcut("↑/↓", "choose"), Shortcut("Enter", "export"), Shortcut("Esc", "cancel")]
        return []

    def update(self, msg):
        if isinstance(msg, KeyMsg):
            return self._handle_key(msg.key)
        if isinstance(msg, StatsLoadedMsg):
            return self._on_loaded(msg)
        if isinstance(msg, ReportExportedMsg):
            return self._on_exported(msg)
        if isinstance(msg, ModuleActivatedMsg):
            if msg.id == self.id and (msg.first_activation or self.stale):
                return self, self._load()
        elif isinstance(msg, BroadcastMsg):
            if msg.topic == TOPIC_PLANS_CHANGED:
                self.stale = True
        return self, None

    # ========================================================================
    # NAVIGATION
    # ========================================================================

    def switch_view(self, new_view: str):
        """Move forward to new_view; a no-op when already there."""
        if new_view == self.current_view:
            return self, None

        previous = self.current_view
        self.view_history.append(previous)
        self.current_view = new_view

        if new_view == VIEW_SESSION_HISTORY:
            self.session_cursor = 0
            self.session_filter_plan_id = self.selected_plan_id if previous == VIEW_PLAN_DETAIL else None
        elif new_view == VIEW_EXPORT:
            self.export_cursor = 0
        return self, None

    def go_back(self):
        if self.view_history:
            self.current_view = self.view_history.pop()
        return self, None

    def _handle_key(self, key: str):
        if key == 'esc':
            return self.go_back()
        if key == 'enter':
            return self._handle_enter()
        if key in ('up', 'k'):
            return self._move_cursor(-1)
        if key in ('down', 'j'):
            return self._move_cursor(1)
        if key == 'p':
            return self.switch_view(VIEW_PLAN_LIST)
        if key == 's':
            return self.switch_view(VIEW_SESSION_HISTORY)
        if key == 'e':
            return self.switch_view(VIEW_EXPORT)
        if key == 'r':
            return self, self._load()
        return self, None

    def _handle_enter(self):
        if self.current_view == VIEW_PLAN_LIST and self.all_plan_stats:
            selected = self.all_plan_stats[self.plan_list_cursor]
            self.selected_plan_id = selected.plan_id
            self.selected_plan = selected
            return self.switch_view(VIEW_PLAN_DETAIL)

        if self.current_view == VIEW_EXPORT:
            cmd = self._export(EXPORT_OPTIONS[self.export_cursor][0])
            self.go_back()
            return self, cmd

        return self, None

    def _move_cursor(self, direction: int):
        if self.current_view == VIEW_PLAN_LIST and self.all_plan_stats:
            self.plan_list_cursor = (self.plan_list_cursor + direction) % len(self.all_plan_stats)
        elif self.current_view == VIEW_SESSION_HISTORY:
            count = len(self.filtered_sessions())
            if count > 0:
                self.session_cursor = (self.session_cursor + direction) % count
        elif self.current_view == VIEW_EXPORT:
            self.export_cursor = (self.export_cursor + direction) % len(EXPORT_OPTIONS)
        return self, None

    # ========================================================================
    # EXPORT
    # ========================================================================

    def _export(self, kind: str):
        if self.total_stats is None:
            return status_cmd("No statistics loaded yet", True)

        exporter = self.exporter
        total = self.total_stats
        plan_stats = list(self.all_plan_stats)
        sessions = list(self.sessions)
        path = self.output_dir / f"studytrack-{kind}-{datetime.now():%Y%m%d-%H%M%S}.md"

        def export():
            try:
                if kind == 'summary':
                    content = exporter.export_total_stats(total)
                else:
                    daily = []
                    if sessions:
                        starts = [s.start_time for s in sessions]
                        daily = calculate_daily_stats(sessions, TimeRange(min(starts), max(starts)))
                    content = exporter.export_full_report(total, plan_stats, daily)
                exporter.write(content, path)
                return ReportExportedMsg(kind, path=path)
            except Exception as e:
                logger.error("Export failed", kind=kind, error=str(e))
                return ReportExportedMsg(kind, error=e)
        return export

    def _on_exported(self, msg: ReportExportedMsg):
        if msg.error is not None:
            return self, status_cmd(f"Export failed: {msg.error}", True)
        return self, status_cmd(f"Report saved to {msg.path}")

    # ========================================================================
    # VIEW
    # ========================================================================

    def view(self) -> Text:
        if self.current_view == VIEW_PLAN_LIST:
            return self._render_plan_list()
        if self.current_view == VIEW_PLAN_DETAIL:
            return self._render_plan_detail()
        if self.current_view == VIEW_SESSION_HISTORY:
            return self._render_session_history()
        if self.current_view == VIEW_EXPORT:
            return self._render_export()
        return self._render_overview()

    @staticmethod
    def _section(title: str, items: List) -> Text:
        text = Text(title, style=f"bold {Theme.INFO}")
        text.append("\n")
        for item in items:
            text.append("   ")
            if isinstance(item, Text):
                text.append_text(item)
            else:
                text.append(item)
            text.append("\n")
        return text

    def _render_overview(self) -> Text:
        text = Text("📊 Learning Statistics", style=Theme.HEADER)
        text.append("\n\n")

        if self.loading and self.total_stats is None:
            text.append("Loading statistics…", style=Theme.DIM)
            return text
        if self.load_error and self.total_stats is None:
            text.append(f"Failed to load statistics: {self.load_error}", style=Theme.ERROR)
            return text

        stats = self.total_stats
        if stats is None:
            text.append("No statistics available", style=Theme.DIM)
            return text

        text.append_text(self._section("⏱️  Learning Time", [
            f"Total hours:      {stats.total_hours:.1f} hours",
            f"Total sessions:   {stats.total_sessions}",
            f"Average session:  {stats.average_session:.0f} minutes",
        ]))
        text.append("\n")
        text.append_text(self._section("🔥 Learning Streaks", [
            f"Current streak:   {stats.current_streak} days",
            f"Longest streak:   {stats.longest_streak} days",
        ]))
        text.append("\n")
        text.append_text(self._section("📚 Learning Plans", [
            f"Active plans:     {stats.active_plans}",
            f"Completed plans:  {stats.completed_plans}",
            f"Total plans:      {stats.total_plans}",
        ]))
        if stats.last_session_date is not None:
            text.append("\n")
            text.append_text(self._section("📅 Last Session", [format_long_date(stats.last_session_date)]))

        text.append("\n")
        text.append("[p] plan list  |  [s] sessions  |  [e] export  |  [r] reload", style=Theme.DIM)
        return text

    def _render_plan_list(self) -> Text:
        text = Text("📚 Learning Plans", style=Theme.HEADER)
        text.append("\n\n")

        if not self.all_plan_stats:
            text.append("No plans found. Create a plan to get started!", style=Theme.DIM)
            text.append("\n\n")
            text.append("[Esc] Back", style=Theme.DIM)
            return text

        table = Table(["Title", "Progress", "Hours", "Status"])
        for i, ps in enumerate(self.all_plan_stats):
            row = [
                ps.plan_title,
                f"{ps.progress_percent()}%",
                f"{ps.total_hours:.1f} / {ps.planned_hours:.1f}",
                format_plan_status(ps.status),
            ]
            if i == self.plan_list_cursor:
                table.add_highlighted_row(row)
            else:
                table.add_row(row)

        text.append_text(table.render())
        text.append("\n\n")
        text.append(f"Showing {len(self.all_plan_stats)} plans", style=Theme.DIM)
        text.append("\n\n")
        text.append("[↑/k] Up  |  [↓/j] Down  |  [Enter] View Details  |  [Esc] Back", style=Theme.DIM)
        return text

    def _render_plan_detail(self) -> Text:
        plan = self.selected_plan
        if plan is None:
            return Text("No plan selected", style=Theme.DIM)

        text = Text(f"📊 {plan.plan_title}", style=Theme.HEADER)
        text.append("\n\n")
        text.append("Status: ", style=f"bold {Theme.INFO}")
        text.append(format_plan_status(plan.status), style=Theme.status_color(plan.status))
        text.append("\n\n")

        text.append_text(self._section("📈 Progress", [
            ProgressBar(plan.progress, self.progress_bar_width).render(),
            f"Completed: {plan.completed_chunks} / {plan.total_chunks} chunks ({plan.progress_percent()}%)",
        ]))
        text.append("\n")

        avg_minutes = 0.0
        if plan.session_count > 0:
            avg_minutes = plan.total_hours * 60 / plan.session_count
        text.append_text(self._section("⏱️  Time Investment", [
            f"Total hours:      {plan.total_hours:.1f} / {plan.planned_hours:.1f} hours",
            f"Sessions:         {plan.session_count}",
            f"Average session:  {avg_minutes:.0f} minutes",
        ]))

        if plan.last_session is not None:
            text.append("\n")
            text.append_text(self._section("📅 Last Session", [format_long_date(plan.last_session)]))

        text.append("\n")
        text.append("[s] View Sessions  |  [Esc] Back to Plan List", style=Theme.DIM)
        return text

    def _render_session_history(self) -> Text:
        title = "📅 Session History"
        if self.session_filter_plan_id:
            name = self.selected_plan.plan_title if self.selected_plan else self.session_filter_plan_id
            title = f"📅 Session History: {name}"
        text = Text(title, style=Theme.HEADER)
        text.append("\n\n")

        sessions = self.filtered_sessions()
        if not sessions:
            text.append("No sessions found.", style=Theme.DIM)
            text.append("\n\n")
            text.append("[Esc] Back", style=Theme.DIM)
            return text

        visible, offset = paginate(sessions, self.session_cursor, self.page_size)
        table = Table(["Date", "Plan", "Duration", "Notes"])
        for i, s in enumerate(visible):
            row = [
                format_short_date(s.start_time, self.date_format),
                truncate(s.plan_id, 15),
                s.elapsed_time(),
                format_notes(s.notes, 30),
            ]
            if offset + i == self.session_cursor:
                table.add_highlighted_row(row)
            else:
                table.add_row(row)

        text.append_text(table.render())
        text.append("\n\n")
        text.append(f"Showing {len(visible)} of {len(sessions)} sessions", style=Theme.DIM)
        text.append("\n\n")
        text.append("[↑/k] Up  |  [↓/j] Down  |  [Esc] Back", style=Theme.DIM)
        return text

    def _render_export(self) -> Text:
        text = Text("📤 Export Learning Report", style=Theme.HEADER)
        text.append("\n\n")
        text.append("Select export type:", style=Theme.DIM)
        text.append("\n\n")

        for i, (_, name, description) in enumerate(EXPORT_OPTIONS):
            label = f"  [{i + 1}] {name}"
            if i == self.export_cursor:
                text.append(label, style=Theme.SELECTED)
                text.append("\n")
                text.append(f"      {description}", style=Theme.DIM)
            else:
                text.append(label)
            text.append("\n\n")

        text.append(f"Reports are written to {self.output_dir}/", style=f"italic {Theme.WARNING}")
        text.append("\n\n")
        text.append("[↑/k] Up  |  [↓/j] Down  |  [Enter] Export  |  [Esc] Cancel", style=Theme.DIM)
        return text
