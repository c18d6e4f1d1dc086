"""Terminal rendering of one pane: path line, table, and status block."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from ..ansi import display_width, fit_cell
from ..ui_theme import DEFAULT_THEME, UITheme
from .controller import PaneController
from .rows import PENDING_LABEL, RowData, modified_label, path_label, size_label

COLUMN_TITLES: tuple[str, ...] = ("Name", "Ext", "Size", "Date", "Attr")
# Zero marks a flexible column that shares the remaining width.
DEFAULT_COLUMN_WIDTHS: tuple[int, ...] = (0, 6, 10, 16, 10)
COLUMN_ALIGN: tuple[str, ...] = ("left", "left", "right", "left", "left")
HEADER_ROWS = 2
STATUS_ROWS = 4


def selected_with_ansi(text: str) -> str:
    """Apply reverse video without discarding existing ANSI colors."""
    if not text:
        return text

    # Keep reverse video active even when the text contains internal resets.
    return "\033[7m" + text.replace("\033[0m", "\033[0;7m") + "\033[0m"


def column_widths(total_width: int, widths: Sequence[int] = DEFAULT_COLUMN_WIDTHS) -> list[int]:
    """Resolve configured widths to concrete columns filling ``total_width``.

    Columns are separated by one space. Flexible columns split whatever the
    fixed ones leave, and always get at least one column each.
    """
    separators = max(0, len(widths) - 1)
    fixed = sum(width for width in widths if width > 0)
    flex_count = sum(1 for width in widths if width <= 0)
    remaining = total_width - separators - fixed
    share = max(1, remaining // flex_count) if flex_count else 0
    leftover = max(0, remaining - share * flex_count)
    resolved: list[int] = []
    for width in widths:
        if width > 0:
            resolved.append(width)
        else:
            # Rounding leftovers go to the first flexible column.
            resolved.append(share + leftover)
            leftover = 0
    return resolved


def table_rows(pane_height: int) -> int:
    """Entry rows left once the path, header, divider, and status lines are drawn."""
    return max(1, pane_height - HEADER_ROWS - STATUS_ROWS)


@dataclass
class PaneScroll:
    """Top row of the table window; follows the active row like scroll-into-view."""

    start: int = 0

    def follow(self, active: int, visible_rows: int, row_count: int) -> int:
        visible_rows = max(1, visible_rows)
        if active < self.start:
            self.start = active
        elif active >= self.start + visible_rows:
            self.start = active - visible_rows + 1
        self.start = max(0, min(self.start, max(0, row_count - visible_rows)))
        return self.start


def _row_cells(row: RowData) -> list[str]:
    if row.placeholder:
        return [row.display_name, row.extension, "", "", ""]
    permissions = row.permissions
    if permissions is None:
        permissions = PENDING_LABEL if row.modified_pending else ""
    return [row.display_name, row.extension, size_label(row), modified_label(row), permissions]


class PaneRenderer:
    """Render a pane into exactly ``height`` lines of ``width`` columns."""

    def __init__(
        self,
        controller: PaneController,
        *,
        width: int,
        height: int,
        focused: bool = True,
        theme: UITheme | None = None,
        widths: Sequence[int] = DEFAULT_COLUMN_WIDTHS,
        scroll: PaneScroll | None = None,
    ) -> None:
        self.controller = controller
        self.width = max(1, width)
        self.height = max(HEADER_ROWS + STATUS_ROWS + 1, height)
        self.focused = focused
        self.theme = theme or DEFAULT_THEME
        self.widths = column_widths(self.width, widths)
        self.scroll = scroll if scroll is not None else PaneScroll()

    def _line(self, cells: Sequence[str]) -> str:
        parts = [
            fit_cell(cell, width, align=align)
            for cell, width, align in zip(cells, self.widths, COLUMN_ALIGN)
        ]
        return fit_cell(" ".join(parts), self.width)

    def _styled(self, text: str, style: str) -> str:
        if not style:
            return text
        return f"{style}{text}{self.theme.reset}"

    def render_path_line(self) -> str:
        theme = self.theme
        directory = self.controller.directory or ""
        text = path_label(directory)
        style = theme.path_focused if self.focused else theme.path_unfocused
        line = self._styled(text, style)
        if self.controller.message:
            line += " " + self._styled(self.controller.message, theme.message)
        return fit_cell(line, self.width)

    def render_header(self) -> str:
        return self._styled(self._line(COLUMN_TITLES), self.theme.header)

    def render_row(self, row: RowData) -> str:
        theme = self.theme
        if row.placeholder:
            style = theme.row_placeholder
        elif row.selected:
            style = theme.row_selected
        elif row.is_directory:
            style = theme.row_dir
        else:
            style = theme.row_file
        text = self._styled(self._line(_row_cells(row)), style)
        if row.active and self.focused:
            return selected_with_ansi(text)
        return text

    def render_table(self) -> list[str]:
        visible_rows = table_rows(self.height)
        viewport = self.controller.viewport
        start = self.scroll.follow(viewport.active, visible_rows, viewport.row_count)
        # Rows entering the window switch from placeholder to full rendering.
        for index in range(start, min(viewport.row_count, start + visible_rows)):
            viewport.mark_visible(index)
        rows = self.controller.rows()[start : start + visible_rows]
        lines = [self.render_row(row) for row in rows]
        lines.extend(" " * self.width for _ in range(visible_rows - len(lines)))
        return lines

    def render_status(self) -> list[str]:
        status = self.controller.status_lines()
        status.extend("" for _ in range(STATUS_ROWS - 1 - len(status)))
        divider = self._styled("-" * self.width, self.theme.divider)
        return [divider] + [self._styled(fit_cell(text, self.width), self.theme.status) for text in status]

    def render(self) -> list[str]:
        lines = [self.render_path_line(), self.render_header()]
        lines.extend(self.render_table())
        lines.extend(self.render_status())
        return lines


def join_panes(left: list[str], right: list[str], *, divider: str = "|", theme: UITheme | None = None) -> list[str]:
    """Place two rendered panes side by side with a one-column divider."""
    theme = theme or DEFAULT_THEME
    styled_divider = f"{theme.divider}{divider}{theme.reset}" if theme.divider else divider
    height = max(len(left), len(right))
    left_width = max((display_width(line) for line in left), default=0)
    out: list[str] = []
    for index in range(height):
        left_line = left[index] if index < len(left) else " " * left_width
        right_line = right[index] if index < len(right) else ""
        out.append(f"{left_line}{styled_divider}{right_line}")
    return out


__all__ = [
    "COLUMN_TITLES",
    "DEFAULT_COLUMN_WIDTHS",
    "HEADER_ROWS",
    "STATUS_ROWS",
    "PaneRenderer",
    "PaneScroll",
    "column_widths",
    "join_panes",
    "selected_with_ansi",
    "table_rows",
]
