"""Per-pane row virtualization state.

Rows within ``budget`` of the active row are eligible for full rendering;
everything else renders as a cheap placeholder until it scrolls into the
window. Once a row has been rendered in full it stays that way for the rest
of the listing's lifetime, so scrolling away never collapses it again.
"""

from __future__ import annotations

from .boundary import NullBoundary, RenderBoundary

DEFAULT_VISIBLE_BUDGET = 50


def compute_budget(container_height: float, row_height: float) -> int:
    """Rows that fit in ``container_height``; floor division, 0 for bad input."""
    if row_height <= 0 or container_height <= 0:
        return 0
    return int(container_height // row_height)


class ViewportModel:
    """Visible-row window, active row, and one-shot full-render flags."""

    def __init__(
        self,
        row_count: int = 0,
        active: int = 0,
        *,
        budget: int = DEFAULT_VISIBLE_BUDGET,
        boundary: RenderBoundary | None = None,
    ) -> None:
        self.boundary: RenderBoundary = boundary if boundary is not None else NullBoundary()
        self._budget = max(1, int(budget))
        self._row_count = 0
        self._active = 0
        self._rendered: set[int] = set()
        self.reset(row_count, active)

    @property
    def budget(self) -> int:
        return self._budget

    @property
    def active(self) -> int:
        return self._active

    @property
    def row_count(self) -> int:
        return self._row_count

    compute_budget = staticmethod(compute_budget)

    def resize(self, container_height: float, row_height: float) -> int:
        """Recompute the budget from container geometry; never below 1."""
        self._budget = max(1, compute_budget(container_height, row_height))
        return self._budget

    def reset(self, row_count: int, active: int = 0) -> None:
        """Start a new listing lifetime: forget rendered rows, re-seat active."""
        self._row_count = max(0, int(row_count))
        self._active = self._clamp(active)
        self._rendered.clear()
        for index in self.visible_range():
            self._rendered.add(index)

    def _clamp(self, index: int) -> int:
        if self._row_count <= 0:
            return 0
        return max(0, min(int(index), self._row_count - 1))

    def is_visible(self, index: int) -> bool:
        return abs(index - self._active) < self._budget

    def visible_range(self) -> range:
        if self._row_count <= 0:
            return range(0)
        start = max(0, self._active - self._budget + 1)
        stop = min(self._row_count, self._active + self._budget)
        return range(start, stop)

    def is_rendered(self, index: int) -> bool:
        """Whether ``index`` has transitioned to full rendering."""
        return index in self._rendered

    def mark_visible(self, index: int) -> bool:
        """Transition ``index`` from placeholder to full rendering.

        Returns ``True`` only on the first transition; the boundary is told to
        re-render that row once.
        """
        if index < 0 or index >= self._row_count or index in self._rendered:
            return False
        self._rendered.add(index)
        self.boundary.row_updated(index)
        return True

    def set_active(self, index: int) -> tuple[int, int]:
        """Move the active row to ``index`` (clamped); return ``(previous, new)``."""
        previous = self._active
        self._active = self._clamp(index)
        for visible in self.visible_range():
            self.mark_visible(visible)
        return previous, self._active

    def move_active(self, delta: int) -> tuple[int, int]:
        return self.set_active(self._active + int(delta))

    def page_move(self, page_size: int, direction: int) -> tuple[int, int]:
        """Move by ``page_size`` rows toward ``direction`` (its sign only)."""
        step = 1 if direction > 0 else -1 if direction < 0 else 0
        return self.move_active(max(0, int(page_size)) * step)


__all__ = ["DEFAULT_VISIBLE_BUDGET", "ViewportModel", "compute_budget"]
