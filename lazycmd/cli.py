"""Command-line front door for lazycmd.

Parses CLI options, restores saved pane state, and either prints one frame
(``--render``), prints a highlighted file (``--view``), or runs the
interactive dual-pane browser.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import shutil
import sys
from collections.abc import Sequence

from .listing import DirectoryUnavailable, InvalidPath, ListingCache, SortKey
from .pane import SortSettings
from .runtime.app import DualPaneApp, render_once, run_interactive
from .runtime.config import (
    PANE_SIDES,
    PaneState,
    load_cache_capacity,
    load_column_widths,
    load_focused_side,
    load_pane_state,
    load_theme_name,
    save_pane_states,
)
from .runtime.logging_config import setup_logger
from .ui_theme import available_theme_names, resolve_theme
from .viewer import DEFAULT_STYLE, load_file_view

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lazycmd",
        description="Browse two directories side by side in the terminal.",
    )
    parser.add_argument("path", nargs="?", default=None, help="Left pane directory (a file opens its parent).")
    parser.add_argument("--right", metavar="PATH", default=None, help="Right pane directory.")
    parser.add_argument(
        "--sort",
        choices=[key.value for key in SortKey],
        default=None,
        help="Sort column for both panes (default: saved order, else name).",
    )
    parser.add_argument("--desc", action="store_true", help="Sort descending.")
    parser.add_argument("--no-dir-first", action="store_true", help="Mix directories in with files.")
    parser.add_argument("--cache-size", type=_positive_int, default=None, help="Directory listings kept in memory.")
    parser.add_argument("--style", default=DEFAULT_STYLE, help="Pygments style name for the file viewer.")
    parser.add_argument(
        "--theme",
        default=None,
        help=f"UI theme name ({', '.join(available_theme_names())}).",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable color output.")
    parser.add_argument("--render", action="store_true", help="Print both panes once and exit.")
    parser.add_argument("--view", metavar="FILE", default=None, help="Print FILE with syntax highlighting and exit.")
    parser.add_argument("--max-cols", type=_positive_int, default=None, help="Width for --render/--view output.")
    parser.add_argument("--lines", type=_positive_int, default=None, help="Height for --render output.")
    parser.add_argument("--verbose", action="store_true", help="Log debug messages to stderr.")
    return parser


def sort_settings_for(args: argparse.Namespace, state: PaneState) -> SortSettings:
    """Command-line sort flags override the pane's saved order."""
    return SortSettings(
        key=SortKey.parse(args.sort) if args.sort else state.sort_key,
        ascending=False if args.desc else state.ascending,
        dir_first=False if args.no_dir_first else state.dir_first,
    )


def _print_view(path: str, args: argparse.Namespace, columns: int) -> None:
    try:
        view = load_file_view(path, style=args.style, no_color=args.no_color)
    except OSError as exc:
        raise SystemExit(f"Cannot read {path}: {exc.strerror or exc}") from exc
    for line in view.render(columns, len(view.lines) + 1)[1:]:
        sys.stdout.write(line + "\n")


async def _render(app: DualPaneApp, paths: dict[str, str | None], columns: int, lines: int) -> str:
    await app.open_initial(paths)
    return await render_once(app, columns, lines)


def main(argv: Sequence[str] | None = None) -> None:
    """Parse CLI arguments and launch lazycmd."""
    args = build_parser().parse_args(argv)
    interactive = not (args.render or args.view)
    setup_logger(
        console=args.verbose or not interactive,
        console_level=logging.DEBUG if args.verbose else logging.WARNING,
    )

    term = shutil.get_terminal_size((80, 24))
    columns = args.max_cols or term.columns
    if args.view is not None:
        _print_view(args.view, args, columns)
        return

    paths = {PANE_SIDES[0]: args.path, PANE_SIDES[1]: args.right}
    # --render is reproducible: it ignores saved pane state.
    states = {side: PaneState() if args.render else load_pane_state(side) for side in PANE_SIDES}
    cache = ListingCache(args.cache_size or load_cache_capacity())
    app = DualPaneApp(
        cache,
        sort={side: sort_settings_for(args, states[side]) for side in PANE_SIDES},
        theme=resolve_theme(args.theme or load_theme_name(), no_color=args.no_color),
        widths=load_column_widths(),
        style=args.style,
        no_color=args.no_color,
    )
    if not args.render:
        app.focused = load_focused_side()

    try:
        if args.render:
            sys.stdout.write(asyncio.run(_render(app, paths, columns, args.lines or term.lines)))
            return
        asyncio.run(run_interactive(app, paths, states))
    except InvalidPath as exc:
        raise SystemExit(f"Path not found: {exc.path}") from exc
    except DirectoryUnavailable as exc:
        raise SystemExit(str(exc)) from exc
    save_pane_states(app.pane_states(), focused=app.focused)


__all__ = ["build_parser", "main", "sort_settings_for"]
