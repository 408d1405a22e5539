"""
Dashboard tables built on rich, plus their markdown counterpart.

Rows always have exactly one cell per header: short rows are padded with
empty cells and long rows are cut to the header count.
"""

from typing import List, Sequence

from rich import box
from rich.console import Console
from rich.table import Table as RichTable
from rich.text import Text

from studytrack.tui.theme import Theme


def normalize_row(values: Sequence, width: int) -> List[str]:
    row = [str(v) if v is not None else '' for v in list(values)[:width]]
    row.extend([''] * (width - len(row)))
    return row


def markdown_table(headers: Sequence[str], rows: Sequence[Sequence]) -> str:
    """Render a markdown table; separator dashes span each header plus padding."""
    headers = list(headers)
    lines = [
        "| " + " | ".join(headers) + " |",
        "|" + "|".join("-" * (len(h) + 2) for h in headers) + "|",
    ]
    for values in rows:
        lines.append("| " + " | ".join(normalize_row(values, len(headers))) + " |")
    return "\n".join(lines) + "\n"


def to_text(renderable, width: int = 100) -> Text:
    """Render any rich renderable into a styled Text a view can append."""
    console = Console(width=width, color_system=None)
    lines = []
    for segments in console.render_lines(renderable, console.options, pad=False):
        line = Text.assemble(*((seg.text, seg.style) for seg in segments if not seg.control))
        line.rstrip()
        lines.append(line)

    # Simple boxes render blank top and bottom edges
    while lines and not lines[0].plain:
        lines.pop(0)
    while lines and not lines[-1].plain:
        lines.pop()
    return Text("\n").join(lines)


class Table:
    """Rows collected for a rich table; the cursor row is highlighted."""

    def __init__(self, headers: Sequence[str], width: int = 100):
        self.headers = list(headers)
        self.width = width
        self.rows: List[List[str]] = []
        self.highlighted = set()
        self.border = False

    def add_row(self, values: Sequence):
        self.rows.append(normalize_row(values, len(self.headers)))

    def add_highlighted_row(self, values: Sequence):
        self.highlighted.add(len(self.rows))
        self.add_row(values)

    def set_border(self, enabled: bool):
        self.border = enabled

    def build(self) -> RichTable:
        table = RichTable(
            show_header=True,
            header_style=Theme.HEADER,
            box=box.SQUARE if self.border else box.SIMPLE_HEAD,
            border_style=Theme.BORDER,
        )
        for header in self.headers:
            table.add_column(header, no_wrap=True, overflow="ellipsis")
        for i, row in enumerate(self.rows):
            table.add_row(*row, style=Theme.HIGHLIGHT if i in self.highlighted else None)
        return table

    def render(self) -> Text:
        if not self.headers:
            return Text()
        return to_text(self.build(), self.width)
