"""Read-only file viewer: loading, sanitization, and Pygments highlighting.

Opened on the active file of the focused pane. Terminal control bytes in
the file are neutralized before anything reaches the screen.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from pygments import highlight
from pygments.formatters import TerminalFormatter
from pygments.lexers import TextLexer, get_lexer_for_filename
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from .ansi import clip_ansi_line

logger = logging.getLogger(__name__)

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
DEFAULT_STYLE = "monokai"
MAX_VIEW_BYTES = 1024 * 1024
BINARY_SNIFF_BYTES = 8192


def read_text(path: Path, limit: int = MAX_VIEW_BYTES) -> tuple[str, bool]:
    """Read up to ``limit`` bytes as text; return ``(text, truncated)``.

    Attempts UTF-8, UTF-8 with BOM, then latin-1.
    """
    with path.open("rb") as handle:
        raw = handle.read(limit + 1)
    truncated = len(raw) > limit
    raw = raw[:limit]
    for encoding in ("utf-8", "utf-8-sig", "latin-1"):
        try:
            return raw.decode(encoding), truncated
        except UnicodeDecodeError:
            continue
    return raw.decode("utf-8", errors="replace"), truncated


def looks_binary(path: Path) -> bool:
    with path.open("rb") as handle:
        return b"\x00" in handle.read(BINARY_SNIFF_BYTES)


def sanitize_terminal_text(source: str) -> str:
    """Escape terminal control bytes to avoid side effects (bell, cursor moves, etc.)."""
    if _CONTROL_RE.search(source) is None:
        return source

    out: list[str] = []
    for ch in source:
        code = ord(ch)
        if ch in {"\n", "\r", "\t"}:
            out.append(ch)
            continue
        # C0 controls + DEL + C1 controls.
        if code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
            continue
        out.append(ch)
    return "".join(out)


@lru_cache(maxsize=None)
def normalize_style(style: str) -> str:
    """Return ``style`` when Pygments knows it, otherwise the default style."""
    try:
        get_style_by_name(style)
    except ClassNotFound:
        logger.debug("unknown pygments style %r, using %s", style, DEFAULT_STYLE)
        return DEFAULT_STYLE
    return style


@lru_cache(maxsize=None)
def _formatter_for_style(style: str) -> TerminalFormatter:
    return TerminalFormatter(style=style)


def colorize_source(source: str, path: Path, style: str = DEFAULT_STYLE) -> str:
    """Highlight ``source`` with a lexer picked from the file name."""
    try:
        lexer = get_lexer_for_filename(path.name, source)
    except ClassNotFound:
        lexer = TextLexer()
    return highlight(source, lexer, _formatter_for_style(normalize_style(style)))


@dataclass
class FileView:
    """Scrollable, already-styled lines of one file."""

    path: Path
    lines: list[str] = field(default_factory=list)
    offset: int = 0
    truncated: bool = False

    def scroll(self, delta: int, visible_rows: int) -> int:
        last_start = max(0, len(self.lines) - max(1, visible_rows))
        self.offset = max(0, min(self.offset + delta, last_start))
        return self.offset

    def render(self, width: int, height: int) -> list[str]:
        """Title line plus ``height - 1`` body lines clipped to ``width``."""
        suffix = " (truncated)" if self.truncated else ""
        title = clip_ansi_line(f"{self.path}{suffix}", width)
        body_rows = max(0, height - 1)
        body = [
            clip_ansi_line(line, width) + "\033[0m"
            for line in self.lines[self.offset : self.offset + body_rows]
        ]
        body.extend("" for _ in range(body_rows - len(body)))
        return [title] + body


def load_file_view(path: str | Path, *, style: str = DEFAULT_STYLE, no_color: bool = False) -> FileView:
    """Load ``path`` for viewing; raises ``OSError`` when it cannot be read."""
    file_path = Path(path)
    if looks_binary(file_path):
        return FileView(path=file_path, lines=["<binary file>"])
    source, truncated = read_text(file_path)
    source = sanitize_terminal_text(source)
    rendered = source if no_color else colorize_source(source, file_path, style)
    return FileView(path=file_path, lines=rendered.splitlines(), truncated=truncated)


__all__ = [
    "DEFAULT_STYLE",
    "FileView",
    "colorize_source",
    "load_file_view",
    "looks_binary",
    "normalize_style",
    "read_text",
    "sanitize_terminal_text",
]
