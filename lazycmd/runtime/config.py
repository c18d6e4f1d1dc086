"""Persistent JSON config helpers.

Stores per-pane state (directory, active row, sort order), the listing cache
capacity, column widths, and the UI theme name.
All access is defensive: malformed or missing config falls back safely.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

from ..listing import DEFAULT_CACHE_CAPACITY, SortKey
from ..pane.rendering import DEFAULT_COLUMN_WIDTHS

logger = logging.getLogger(__name__)

APP_NAME = "lazycmd"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
PANE_SIDES: tuple[str, ...] = ("left", "right")


@dataclass(frozen=True)
class PaneState:
    """What a pane restores on the next start."""

    path: str | None = None
    active: int = 0
    sort_key: SortKey = SortKey.NAME
    ascending: bool = True
    dir_first: bool = True

    def to_json(self) -> dict[str, object]:
        return {
            "path": self.path,
            "active": max(0, self.active),
            "sort_key": self.sort_key.value,
            "ascending": self.ascending,
            "dir_first": self.dir_first,
        }


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        if not isinstance(exc, FileNotFoundError):
            logger.debug("ignoring unreadable config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Filesystem errors are logged and otherwise ignored to keep runtime
    behavior non-fatal when config cannot be written.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        logger.warning("could not write config %s: %s", CONFIG_PATH, exc)


def _coerce_nonnegative_int(value: object) -> int:
    """Booleans and non-integers are treated as invalid and coerced to ``0``."""
    if isinstance(value, bool) or not isinstance(value, int):
        return 0
    return max(0, value)


def _coerce_bool(value: object, default: bool) -> bool:
    return value if isinstance(value, bool) else default


def _coerce_sort_key(value: object) -> SortKey:
    if isinstance(value, str):
        try:
            return SortKey.parse(value)
        except ValueError:
            pass
    return SortKey.NAME


def load_pane_state(side: str) -> PaneState:
    """Load the saved state of the ``left`` or ``right`` pane.

    Unknown sort keys fall back to name order; a non-string or empty path
    means "no saved directory".
    """
    if side not in PANE_SIDES:
        raise ValueError(f"unknown pane side: {side!r}")
    raw = load_config().get(side)
    if not isinstance(raw, dict):
        return PaneState()
    raw_path = raw.get("path")
    return PaneState(
        path=raw_path if isinstance(raw_path, str) and raw_path else None,
        active=_coerce_nonnegative_int(raw.get("active", 0)),
        sort_key=_coerce_sort_key(raw.get("sort_key")),
        ascending=_coerce_bool(raw.get("ascending"), True),
        dir_first=_coerce_bool(raw.get("dir_first"), True),
    )


def save_pane_states(states: dict[str, PaneState], *, focused: str | None = None) -> None:
    """Persist several pane states, and optionally the focused side, in one write."""
    config = load_config()
    if focused is not None:
        if focused not in PANE_SIDES:
            raise ValueError(f"unknown pane side: {focused!r}")
        config["focused"] = focused
    for side, state in states.items():
        if side not in PANE_SIDES:
            raise ValueError(f"unknown pane side: {side!r}")
        config[side] = state.to_json()
    save_config(config)


def load_focused_side() -> str:
    """Return the side that had focus when lazycmd last exited."""
    value = load_config().get("focused")
    return value if isinstance(value, str) and value in PANE_SIDES else PANE_SIDES[0]


def load_cache_capacity() -> int:
    """Return the persisted listing cache capacity, or the default.

    Only positive integers are accepted.
    """
    value = load_config().get("cache_capacity")
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        return DEFAULT_CACHE_CAPACITY
    return value


def load_column_widths() -> tuple[int, ...]:
    """Return persisted column widths (one per table column).

    The list must have one entry per column, all non-negative integers;
    anything else falls back to the defaults.
    """
    value = load_config().get("widths")
    if not isinstance(value, list) or len(value) != len(DEFAULT_COLUMN_WIDTHS):
        return DEFAULT_COLUMN_WIDTHS
    if any(isinstance(width, bool) or not isinstance(width, int) or width < 0 for width in value):
        return DEFAULT_COLUMN_WIDTHS
    return tuple(value)


def load_theme_name() -> str | None:
    """Load persisted UI theme name, returning ``None`` when unset/invalid."""
    value = load_config().get("theme")
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped if stripped else None


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "PANE_SIDES",
    "PaneState",
    "load_config",
    "save_config",
    "load_pane_state",
    "save_pane_states",
    "load_focused_side",
    "load_cache_capacity",
    "load_column_widths",
    "load_theme_name",
]
