"""Tests for the markdown exporter."""

import io
from datetime import datetime

import pytest

from studytrack.models.stats import DailyStats, PlanStats, TotalStats
from studytrack.services.exporter import Exporter, get_exporter
from studytrack.utils.exceptions import ExportError

TOTAL = TotalStats(
    total_hours=4.0,
    total_sessions=4,
    active_plans=2,
    completed_plans=1,
    current_streak=3,
    longest_streak=3,
    average_session=60.0,
    last_session_date=datetime(2024, 3, 3, 21, 0),
)

PLAN = PlanStats(
    plan_id="go",
    plan_title="Go Concurrency",
    status="in-progress",
    total_hours=3.0,
    planned_hours=12.0,
    session_count=3,
    completed_chunks=2,
    total_chunks=4,
    progress=0.5,
    last_session=datetime(2024, 3, 3, 21, 0),
)


def test_export_total_stats():
    out = get_exporter().export_total_stats(TOTAL)

    assert out.startswith("# Learning Statistics\n\n## Summary\n")
    assert "**Total Hours:** 4.0 hours" in out
    assert "**Total Sessions:** 4" in out
    assert "**Average Session:** 60.0 minutes" in out
    assert "**Active Plans:** 2" in out
    assert "**Current Streak:** 3 days" in out
    assert "**Last Session:** 2024-03-03" in out


def test_export_total_stats_without_sessions():
    out = Exporter().export_total_stats(TotalStats(active_plans=1))
    assert "No sessions recorded yet." in out
    assert "Total Hours" not in out


def test_export_refuses_invalid_stats():
    with pytest.raises(ExportError, match="invalid stats"):
        Exporter().export_total_stats(TotalStats(total_hours=-1))


def test_export_plan_stats():
    out = Exporter().export_plan_stats(PLAN)

    assert out.startswith("# Plan: Go Concurrency\n")
    assert "**Plan ID:** go" in out
    assert "**Completion:** 50%" in out
    assert "**Chunks:** 2/4 completed" in out
    assert "[" + "█" * 15 + "░" * 15 + "]" in out
    assert "**Session Count:** 3 sessions" in out
    assert "**Last Session:** 2024-03-03" in out


def test_export_plan_stats_without_sessions():
    out = Exporter().export_plan_stats(PlanStats("p", "Plan", "not-started", planned_hours=5))
    assert "No sessions recorded yet." in out


def test_export_daily_stats():
    daily = [
        DailyStats(datetime(2024, 3, 2), 90, 1, ("go",)),
        DailyStats(datetime(2024, 3, 3), 90, 2, ("go", "sql")),
    ]
    out = Exporter().export_daily_stats(daily)

    assert "**Total:** 3.0 hours across 3 sessions" in out
    assert "### 2024-03-02" in out
    assert "- **Duration:** 1.5 hours" in out
    assert "- **Plans:** go, sql" in out


def test_export_daily_stats_empty():
    assert "No daily statistics available." in Exporter().export_daily_stats([])


def test_export_full_report():
    daily = [DailyStats(datetime(2024, 3, 3), 90, 2, ("go",))]
    out = Exporter().export_full_report(TOTAL, [PLAN], daily, generated_at=datetime(2024, 3, 4, 9, 30, 0))

    assert "*Generated: 2024-03-04 09:30:00*" in out
    assert "- **Total Hours:** 4.0 hours" in out
    assert "| Plan | Hours | Sessions | Progress | Status |" in out
    assert "| Go Concurrency | 3.0 | 3 | 50% | in-progress |" in out
    assert "- **2024-03-03:** 1.5 hours (2 sessions)" in out
    assert out.rstrip().endswith("*Report generated by StudyTrack*")


def test_export_full_report_without_data():
    out = Exporter().export_full_report(TotalStats(), [], [], generated_at=datetime(2024, 1, 1))
    assert "No data available." in out


def test_custom_template():
    exporter = Exporter().with_template('{{ total_sessions }} sessions, {{ "%.1f"|format(stats.total_hours) }}h')
    assert exporter.export_total_stats(TOTAL) == "4 sessions, 4.0h"


def test_invalid_template():
    with pytest.raises(ExportError, match="failed to parse template"):
        Exporter().with_template("{% if %}")


def test_formatting_helpers():
    assert Exporter.format_duration(45) == "45 minutes"
    assert Exporter.format_duration(90) == "1.5 hours"
    assert Exporter.format_date(None) == "N/A"
    assert Exporter.format_progress(0.999) == "99%"
    assert Exporter.generate_progress_bar(1.0, 4) == "[████]"


def test_markdown_table_separators():
    table = Exporter().generate_markdown_table([PLAN])
    lines = table.splitlines()
    assert lines[1] == "|------|-------|----------|----------|--------|"


def test_write_to_stream_and_file(tmp_path):
    exporter = Exporter()
    buf = io.StringIO()
    exporter.export_to_file(TOTAL, buf)
    assert buf.getvalue().startswith("# Learning Statistics")

    path = tmp_path / "reports" / "summary.md"
    exporter.export_to_file(TOTAL, path)
    assert exporter.read_file(path) == buf.getvalue()


def test_read_missing_file(tmp_path):
    with pytest.raises(ExportError, match="failed to read file"):
        Exporter().read_file(tmp_path / "missing.md")
