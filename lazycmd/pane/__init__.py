"""Pane UI components: controller, row snapshots, and terminal rendering."""

from .controller import PaneController, SortSettings
from .rendering import PaneRenderer, PaneScroll
from .rows import RowData, build_row, format_size, status_lines

__all__ = [
    "PaneController",
    "SortSettings",
    "PaneRenderer",
    "PaneScroll",
    "RowData",
    "build_row",
    "format_size",
    "status_lines",
]
