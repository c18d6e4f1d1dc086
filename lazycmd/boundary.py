"""Render-boundary observer protocol.

The listing engine never touches presentation. It reports changes by row
index through this interface, and the host layer turns them into concrete
view updates.
"""

from __future__ import annotations

from typing import Protocol


class RenderBoundary(Protocol):
    """Receiver of index-addressed row change notifications."""

    def rows_replaced(self) -> None:
        """The whole row sequence changed (enumeration or sort)."""

    def row_updated(self, index: int) -> None:
        """Only the row at ``index`` needs re-rendering."""


class NullBoundary:
    """Boundary that ignores every notification."""

    def rows_replaced(self) -> None:
        return None

    def row_updated(self, index: int) -> None:
        return None


__all__ = ["RenderBoundary", "NullBoundary"]
