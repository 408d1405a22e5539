"""Tests for the table and progress bar components."""

from rich import box

from studytrack.tui.components import ProgressBar, Table, band_color, markdown_table, normalize_row, render_bar
from studytrack.tui.theme import Theme


def test_normalize_row_pads_and_truncates():
    assert normalize_row(["a"], 3) == ["a", "", ""]
    assert normalize_row(["a", "b", "c", "d"], 2) == ["a", "b"]
    assert normalize_row([1, None], 2) == ["1", ""]


def test_table_rows_match_header_count():
    table = Table(["A", "B", "C"])
    table.add_row(["x"])
    table.add_row(["1", "2", "3", "4", "5"])

    assert table.rows == [["x", "", ""], ["1", "2", "3"]]


def test_table_render_uses_rich_layout():
    table = Table(["ID", "Title"])
    table.add_row(["1", "Goroutines"])
    table.add_highlighted_row(["22", "Go"])

    lines = table.render().plain.split("\n")
    assert lines[0].split() == ["ID", "Title"]
    assert set(lines[1].strip()) == {"─"}
    assert lines[2].split() == ["1", "Goroutines"]
    assert lines[3].split() == ["22", "Go"]
    assert lines[2].index("Goroutines") == lines[3].index("Go")


def test_table_highlight_and_header_styles():
    table = Table(["ID", "Title"])
    table.add_row(["1", "Goroutines"])
    table.add_highlighted_row(["22", "Go"])

    built = table.build()
    assert built.header_style == Theme.HEADER
    assert built.box is box.SIMPLE_HEAD
    assert [row.style for row in built.rows] == [None, Theme.HIGHLIGHT]
    assert [col.header for col in built.columns] == ["ID", "Title"]


def test_table_with_border():
    table = Table(["A", "B"])
    table.set_border(True)
    table.add_row(["x", "yy"])

    assert table.build().box is box.SQUARE
    lines = table.render().plain.split("\n")
    assert lines[0].startswith("┌") and lines[0].endswith("┐")
    assert lines[1].split() == ["│", "A", "│", "B", "│"]
    assert lines[-2].split() == ["│", "x", "│", "yy", "│"]
    assert lines[-1].startswith("└") and lines[-1].endswith("┘")


def test_table_without_headers_renders_nothing():
    assert Table([]).render().plain == ""


def test_markdown_table():
    out = markdown_table(["Name", "N"], [["a", 1], ["b"]])
    assert out == (
        "| Name | N |\n"
        "|------|---|\n"
        "| a | 1 |\n"
        "| b |  |\n"
    )


def test_render_bar():
    assert render_bar(0.5, 10) == "█" * 5 + "░" * 5
    assert render_bar(0.0, 4) == "░░░░"
    assert render_bar(1.0, 4) == "████"
    assert render_bar(2.0, 4) == "████"
    assert render_bar(-1.0, 4) == "░░░░"


def test_progress_bar_clamps():
    assert str(ProgressBar(1.5, 4)) == "[████] 100%"
    assert str(ProgressBar(-0.5, 4)) == "[░░░░] 0%"
    assert str(ProgressBar(0.25, 4)) == "[█░░░] 25%"


def test_band_colors():
    assert band_color(0.1) == Theme.PROGRESS_LOW
    assert band_color(0.5) == Theme.PROGRESS_MED
    assert band_color(0.66) == Theme.PROGRESS_HIGH
    assert band_color(1.0) == Theme.PROGRESS_HIGH
