"""Dual-pane terminal front end.

Two ``PaneController`` objects share one ``ListingCache``. The loop runs on
asyncio: key reads happen in a worker thread with a short timeout so
metadata resolutions keep landing while the user is idle, and every frame
only rewrites screen rows whose text changed.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import sys
from collections.abc import Mapping

from ..ansi import fit_cell
from ..listing import DirectoryUnavailable, InvalidPath, ListingCache, ListingError
from ..pane import PaneController, PaneRenderer, PaneScroll, SortSettings
from ..pane.rendering import DEFAULT_COLUMN_WIDTHS, join_panes, table_rows
from ..ui_theme import DEFAULT_THEME, UITheme
from ..viewer import DEFAULT_STYLE, FileView, load_file_view
from .config import PANE_SIDES, PaneState
from .keys import read_key
from .terminal import TerminalController

logger = logging.getLogger(__name__)

KEY_POLL_MS = 100
FUNCTION_BAR: tuple[tuple[str, str], ...] = (
    ("F3", "View"),
    ("F5", "Copy"),
    ("F6", "Move"),
    ("F7", "Mkdir"),
    ("F8", "Delete"),
    ("F10", "Quit"),
)
_STUB_ACTIONS = {key: label for key, label in FUNCTION_BAR if key in {"F5", "F6", "F7", "F8"}}
_SORT_KEYS = {"n": "name", "e": "ext", "d": "date", "a": "attr"}
_QUIT_KEYS = {"q", "F10", "CTRL_C"}


class ScreenBoundary:
    """Render boundary that flags the screen for the next frame."""

    def __init__(self) -> None:
        self.dirty = True

    def rows_replaced(self) -> None:
        self.dirty = True

    def row_updated(self, index: int) -> None:
        self.dirty = True


def function_bar(width: int, theme: UITheme = DEFAULT_THEME) -> str:
    parts = [f"{theme.reverse}{key}{theme.reset} {label}" for key, label in FUNCTION_BAR]
    return fit_cell("  ".join(parts), width)


class DualPaneApp:
    """Key handling and frame composition for the two panes."""

    def __init__(
        self,
        cache: ListingCache,
        *,
        sort: Mapping[str, SortSettings] | None = None,
        theme: UITheme = DEFAULT_THEME,
        widths: tuple[int, ...] = DEFAULT_COLUMN_WIDTHS,
        style: str = DEFAULT_STYLE,
        no_color: bool = False,
    ) -> None:
        self.cache = cache
        self.boundary = ScreenBoundary()
        sort = sort or {}
        self.panes: dict[str, PaneController] = {
            side: PaneController(cache, boundary=self.boundary, sort=sort.get(side))
            for side in PANE_SIDES
        }
        self.scrolls: dict[str, PaneScroll] = {side: PaneScroll() for side in PANE_SIDES}
        self.focused = PANE_SIDES[0]
        self.theme = theme
        self.widths = widths
        self.style = style
        self.no_color = no_color
        self.view: FileView | None = None

    @property
    def focused_pane(self) -> PaneController:
        return self.panes[self.focused]

    async def open_initial(
        self,
        paths: Mapping[str, str | None],
        states: Mapping[str, PaneState] | None = None,
        *,
        fallback: str | None = None,
    ) -> None:
        """Open each pane on its requested path, else its saved one, else ``fallback``.

        A saved active row is only restored when the pane opens its saved
        directory. Unreadable saved directories fall back silently.
        """
        states = states or {}
        fallback = fallback or os.getcwd()
        for side in PANE_SIDES:
            pane = self.panes[side]
            state = states.get(side, PaneState())
            requested = paths.get(side)
            target = requested or state.path or fallback
            active = state.active if target == state.path else None
            try:
                await pane.open(target, active=active)
            except (InvalidPath, DirectoryUnavailable) as exc:
                if requested:
                    raise
                logger.warning("cannot restore %s pane at %s: %s", side, target, exc)
                await pane.open(fallback)

    def pane_states(self) -> dict[str, PaneState]:
        states: dict[str, PaneState] = {}
        for side, pane in self.panes.items():
            listing = pane.listing
            settings = pane.sort_settings
            states[side] = PaneState(
                path=None if listing is None else listing.directory,
                active=0 if listing is None else max(0, listing.active),
                sort_key=settings.key,
                ascending=settings.ascending,
                dir_first=settings.dir_first,
            )
        return states

    async def wait_for_metadata(self) -> None:
        await asyncio.gather(*(pane.wait_for_metadata() for pane in self.panes.values()))

    def render_screen(self, columns: int, lines: int) -> list[str]:
        """Compose the full frame: two panes side by side plus the function bar."""
        columns = max(3, columns)
        lines = max(2, lines)
        if self.view is not None:
            return self.view.render(columns, lines)

        pane_height = lines - 1
        left_width = (columns - 1) // 2
        widths = {PANE_SIDES[0]: left_width, PANE_SIDES[1]: columns - 1 - left_width}
        rendered: dict[str, list[str]] = {}
        for side, pane in self.panes.items():
            pane.resize(table_rows(pane_height))
            renderer = PaneRenderer(
                pane,
                width=widths[side],
                height=pane_height,
                focused=side == self.focused,
                theme=self.theme,
                widths=self.widths,
                scroll=self.scrolls[side],
            )
            rendered[side] = renderer.render()
        screen = join_panes(rendered[PANE_SIDES[0]], rendered[PANE_SIDES[1]], theme=self.theme)
        screen = screen[:pane_height]
        screen.append(function_bar(columns, self.theme))
        return screen

    def open_viewer(self, path: str) -> bool:
        try:
            self.view = load_file_view(path, style=self.style, no_color=self.no_color)
        except OSError as exc:
            logger.warning("cannot view %s: %s", path, exc)
            self.focused_pane.message = f"cannot view {os.path.basename(path)}: {exc.strerror or exc}"
            return False
        self.boundary.dirty = True
        return True

    def _handle_view_key(self, key: str, screen_lines: int) -> None:
        assert self.view is not None
        body_rows = max(1, screen_lines - 1)
        if key in {"ESC", "q", "F3", "F10"}:
            self.view = None
        elif key in {"UP", "k"}:
            self.view.scroll(-1, body_rows)
        elif key in {"DOWN", "j", "ENTER"}:
            self.view.scroll(1, body_rows)
        elif key in {"PAGE_UP", "b"}:
            self.view.scroll(-body_rows, body_rows)
        elif key in {"PAGE_DOWN", "SPACE"}:
            self.view.scroll(body_rows, body_rows)
        elif key == "HOME":
            self.view.scroll(-len(self.view.lines), body_rows)
        elif key == "END":
            self.view.scroll(len(self.view.lines), body_rows)
        self.boundary.dirty = True

    async def handle_key(self, key: str, screen_lines: int = 24) -> bool:
        """Apply one key; returns ``False`` when the app should exit."""
        if self.view is not None:
            if key == "CTRL_C":
                return False
            self._handle_view_key(key, screen_lines)
            return True
        if key in _QUIT_KEYS:
            return False

        pane = self.focused_pane
        self.boundary.dirty = True
        if key in {"UP", "k"}:
            pane.move_active(-1)
        elif key in {"DOWN", "j"}:
            pane.move_active(1)
        elif key == "PAGE_UP":
            pane.page_move(-1)
        elif key == "PAGE_DOWN":
            pane.page_move(1)
        elif key == "HOME":
            pane.move_home()
        elif key == "END":
            pane.move_end()
        elif key == "TAB":
            self.focused = PANE_SIDES[1] if self.focused == PANE_SIDES[0] else PANE_SIDES[0]
        elif key == "SPACE":
            pane.toggle_selection()
        elif key == "INSERT":
            pane.toggle_selection()
            pane.move_active(1)
        elif key == "ENTER":
            path = await pane.open_active()
            if path is not None:
                self.open_viewer(path)
        elif key in {"F3", "v"}:
            probe = pane.active_entry()
            if probe is not None and not probe.is_directory:
                self.open_viewer(probe.path)
        elif key == "BACKSPACE":
            await self._open_parent(pane)
        elif key in {"r", "CTRL_R"}:
            for each in self.panes.values():
                await each.refresh()
        elif key in _SORT_KEYS:
            await pane.toggle_sort(_SORT_KEYS[key])
        elif key == "f":
            await pane.set_sort(dir_first=not pane.sort_settings.dir_first)
        elif key in _STUB_ACTIONS:
            pane.message = f"{_STUB_ACTIONS[key]} is not available"
        return True

    async def _open_parent(self, pane: PaneController) -> None:
        directory = pane.directory
        if directory is None:
            return
        parent = os.path.dirname(directory)
        if parent == directory:
            return
        try:
            await pane.open(parent, focus_name=os.path.basename(directory))
        except ListingError as exc:
            pane.message = str(exc)


async def run_loop(app: DualPaneApp, terminal: TerminalController, *, poll_ms: int = KEY_POLL_MS) -> None:
    """Draw frames and dispatch keys until a quit key arrives."""
    previous: list[str] = []
    previous_size: tuple[int, int] | None = None
    with terminal.raw_mode():
        while True:
            term = shutil.get_terminal_size((80, 24))
            size = (term.columns, term.lines)
            if size != previous_size:
                terminal.write("\x1b[H\x1b[J")
                previous = []
                previous_size = size
                app.boundary.dirty = True
            if app.boundary.dirty:
                app.boundary.dirty = False
                frame = app.render_screen(term.columns, term.lines)
                changed = {
                    row: line
                    for row, line in enumerate(frame)
                    if row >= len(previous) or previous[row] != line
                }
                terminal.draw_lines(changed)
                previous = frame

            key = await asyncio.to_thread(read_key, terminal.stdin_fd, poll_ms)
            if key and not await app.handle_key(key, term.lines):
                return


async def render_once(app: DualPaneApp, columns: int, lines: int) -> str:
    """Wait until both panes settle and return one frame as text."""
    await app.wait_for_metadata()
    frame = app.render_screen(columns, lines)
    return "\n".join(line.rstrip() for line in frame) + "\n"


async def run_interactive(
    app: DualPaneApp,
    paths: Mapping[str, str | None],
    states: Mapping[str, PaneState] | None = None,
) -> None:
    """Open both panes and run the TUI on stdin/stdout until the user quits."""
    await app.open_initial(paths, states)
    terminal = TerminalController(sys.stdin.fileno(), sys.stdout.fileno())
    await run_loop(app, terminal)


__all__ = [
    "DualPaneApp",
    "FUNCTION_BAR",
    "ScreenBoundary",
    "function_bar",
    "render_once",
    "run_interactive",
    "run_loop",
]
