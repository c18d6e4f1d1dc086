"""UI theme definitions and selection helpers.

Themes are ANSI palettes for the pane chrome and table rows. Syntax
highlighting style for the file viewer remains a separate setting.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by renderers."""

    name: str
    divider: str
    reverse: str
    reset: str
    path_focused: str
    path_unfocused: str
    header: str
    row_dir: str
    row_file: str
    row_selected: str
    row_placeholder: str
    status: str
    message: str


DEFAULT_THEME = UITheme(
    name="default",
    divider="\033[2m",
    reverse="\033[7m",
    reset="\033[0m",
    path_focused="\033[1;38;5;81m",
    path_unfocused="\033[2;38;5;250m",
    header="\033[1;38;5;229m",
    row_dir="\033[1;34m",
    row_file="\033[38;5;252m",
    row_selected="\033[1;38;5;214m",
    row_placeholder="\033[2;38;5;250m",
    status="\033[38;5;109m",
    message="\033[38;5;203m",
)

OCEAN_THEME = UITheme(
    name="ocean",
    divider="\033[2;38;5;31m",
    reverse="\033[7m",
    reset="\033[0m",
    path_focused="\033[1;38;5;45m",
    path_unfocused="\033[2;38;5;110m",
    header="\033[1;38;5;153m",
    row_dir="\033[1;38;5;45m",
    row_file="\033[38;5;252m",
    row_selected="\033[1;38;5;215m",
    row_placeholder="\033[2;38;5;110m",
    status="\033[38;5;73m",
    message="\033[38;5;210m",
)

PLAIN_THEME = UITheme(
    name="plain",
    divider="",
    reverse="",
    reset="",
    path_focused="",
    path_unfocused="",
    header="",
    row_dir="",
    row_file="",
    row_selected="",
    row_placeholder="",
    status="",
    message="",
)

_THEMES: dict[str, UITheme] = {
    DEFAULT_THEME.name: DEFAULT_THEME,
    OCEAN_THEME.name: OCEAN_THEME,
}


def available_theme_names() -> tuple[str, ...]:
    """Return selectable non-plain theme names."""
    return tuple(sorted(_THEMES.keys()))


def normalize_theme_name(name: str | None) -> str:
    """Return a valid theme name, falling back to default."""
    if not name:
        return DEFAULT_THEME.name
    candidate = str(name).strip().lower()
    if candidate in _THEMES:
        return candidate
    return DEFAULT_THEME.name


def resolve_theme(name: str | None, *, no_color: bool = False) -> UITheme:
    """Return concrete theme for requested name and color mode."""
    if no_color:
        return PLAIN_THEME
    return _THEMES[normalize_theme_name(name)]


__all__ = [
    "UITheme",
    "DEFAULT_THEME",
    "OCEAN_THEME",
    "PLAIN_THEME",
    "available_theme_names",
    "normalize_theme_name",
    "resolve_theme",
]
