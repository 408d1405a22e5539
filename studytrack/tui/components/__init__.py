"""Rendering primitives shared by the dashboard and report export."""

from .table import Table, markdown_table, normalize_row
from .progress import ProgressBar, render_bar, band_color

__all__ = ['Table', 'markdown_table', 'normalize_row', 'ProgressBar', 'render_bar', 'band_color']
