"""Pane controller: user actions against a shared listing and its viewport.

The controller is the seam between the listing core and the host UI. It
observes its ``DirectoryListing`` as a render boundary and forwards row
notifications to the boundary the host injected.

Listings come from a ``ListingCache`` shared by both panes. When both panes
show the same directory they hold the same listing object, so the active
row, selection, and sort order are per-directory state seen by both panes.
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass

from ..boundary import NullBoundary, RenderBoundary
from ..listing import (
    DirectoryListing,
    DirectoryUnavailable,
    EntryKind,
    ListingCache,
    ListingError,
    MetadataProbe,
    SortKey,
)
from ..viewport import DEFAULT_VISIBLE_BUDGET, ViewportModel
from .rows import RowData, build_row, status_lines

logger = logging.getLogger(__name__)


@dataclass
class SortSettings:
    """Sort order a pane applies whenever its listing changes."""

    key: SortKey = SortKey.NAME
    ascending: bool = True
    dir_first: bool = True


class PaneController:
    """Bind one pane's viewport to a cached ``DirectoryListing``."""

    def __init__(
        self,
        cache: ListingCache,
        *,
        boundary: RenderBoundary | None = None,
        sort: SortSettings | None = None,
        budget: int = DEFAULT_VISIBLE_BUDGET,
    ) -> None:
        self.cache = cache
        self.boundary: RenderBoundary = boundary if boundary is not None else NullBoundary()
        self.sort_settings = sort if sort is not None else SortSettings()
        self.viewport = ViewportModel(budget=budget, boundary=self.boundary)
        self.listing: DirectoryListing | None = None
        self.message: str | None = None
        self._resolving: dict[MetadataProbe, asyncio.Future] = {}

    @property
    def directory(self) -> str | None:
        return None if self.listing is None else self.listing.directory

    # Render-boundary side: notifications coming from the listing.

    def rows_replaced(self) -> None:
        if self.listing is not None:
            self.viewport.reset(len(self.listing), max(0, self.listing.active))
        self.boundary.rows_replaced()

    def row_updated(self, index: int) -> None:
        self.boundary.row_updated(index)

    def _attach(self, listing: DirectoryListing) -> None:
        if self.listing is not listing:
            if self.listing is not None:
                self.listing.remove_observer(self)
            listing.add_observer(self)
            self.listing = listing
        self.viewport.reset(len(listing), max(0, listing.active))
        self.boundary.rows_replaced()

    def detach(self) -> None:
        if self.listing is not None:
            self.listing.remove_observer(self)

    async def open(
        self,
        path: str | os.PathLike[str],
        *,
        active: int | None = None,
        focus_name: str | None = None,
    ) -> DirectoryListing:
        """Show ``path`` in this pane.

        A listing that was already cached and populated is re-enumerated in
        place; if that rescan fails its stale entries stay on screen. A new
        listing whose first scan fails raises ``DirectoryUnavailable`` and
        the pane keeps showing what it showed before. ``InvalidPath`` from
        the cache propagates unchanged.
        """
        listing = self.cache.acquire(path)
        was_populated = listing.is_populated
        if active is not None:
            listing.set_active(active)
        self.message = None
        try:
            if was_populated:
                await listing.enumerate()
            else:
                await listing.populated()
        except DirectoryUnavailable as exc:
            if not listing.is_populated:
                raise
            self.message = str(exc)
            logger.warning("showing stale entries for %s: %s", listing.directory, exc)

        self._attach(listing)
        await self.apply_sort()
        if focus_name is not None and not was_populated:
            index = listing.index_of_name(focus_name)
            if index >= 0:
                self.set_active(index)
        return listing

    async def refresh(self) -> None:
        """Force a rescan of the current directory, keeping stale data on failure."""
        if self.listing is None:
            return
        self.message = None
        try:
            await self.listing.enumerate()
        except DirectoryUnavailable as exc:
            self.message = str(exc)
            return
        await self.apply_sort()

    async def apply_sort(self) -> bool:
        if self.listing is None:
            return False
        settings = self.sort_settings
        return await self.listing.sort(settings.dir_first, settings.key, settings.ascending)

    async def set_sort(
        self,
        key: SortKey | str | None = None,
        *,
        ascending: bool | None = None,
        dir_first: bool | None = None,
    ) -> bool:
        if key is not None:
            self.sort_settings.key = SortKey.parse(key)
        if ascending is not None:
            self.sort_settings.ascending = ascending
        if dir_first is not None:
            self.sort_settings.dir_first = dir_first
        return await self.apply_sort()

    async def toggle_sort(self, key: SortKey | str) -> bool:
        """Sort by ``key``; choosing the current key again flips the direction."""
        sort_key = SortKey.parse(key)
        if sort_key is self.sort_settings.key:
            return await self.set_sort(ascending=not self.sort_settings.ascending)
        return await self.set_sort(sort_key, ascending=True)

    def _sync_active(self) -> None:
        # Another pane on the same listing may have moved the shared active row.
        if self.listing is not None and self.listing.active >= 0 and self.listing.active != self.viewport.active:
            self.viewport.set_active(self.listing.active)

    def _moved(self, pair: tuple[int, int]) -> tuple[int, int]:
        previous, new = pair
        if self.listing is not None:
            self.listing.set_active(new)
        if previous != new:
            self.boundary.row_updated(previous)
            self.boundary.row_updated(new)
        return pair

    def move_active(self, delta: int) -> tuple[int, int]:
        self._sync_active()
        return self._moved(self.viewport.move_active(delta))

    def set_active(self, index: int) -> tuple[int, int]:
        self._sync_active()
        return self._moved(self.viewport.set_active(index))

    def page_move(self, direction: int) -> tuple[int, int]:
        self._sync_active()
        return self._moved(self.viewport.page_move(self.viewport.budget, direction))

    def move_home(self) -> tuple[int, int]:
        return self.set_active(0)

    def move_end(self) -> tuple[int, int]:
        return self.set_active(self.viewport.row_count - 1)

    def resize(self, table_rows: int, row_height: int = 1) -> None:
        """Adopt a new table height and render whatever scrolled into the window."""
        self.viewport.resize(table_rows * row_height, row_height)
        self.viewport.set_active(self.viewport.active)

    def active_entry(self) -> MetadataProbe | None:
        return None if self.listing is None else self.listing.active_entry()

    def toggle_selection(self, index: int | None = None) -> bool:
        """Flip selection of row ``index`` (the active row by default)."""
        if self.listing is None:
            return False
        entries = self.listing.entries
        target = self.listing.active if index is None else index
        if target < 0 or target >= len(entries):
            return False
        probe = entries[target]
        if probe.is_synthetic:
            return False
        self.listing.set_selected(probe, not probe.is_selected())
        return True

    async def open_active(self) -> str | None:
        """Enter the active directory, or return the active file's path.

        ``.`` is inert. ``..`` re-focuses the directory just left when the
        parent listing is new to the cache.
        """
        probe = self.active_entry()
        if probe is None or probe.name == ".":
            return None
        enters = probe.is_directory or (probe.kind is EntryKind.SYMLINK and os.path.isdir(probe.path))
        if not enters:
            return probe.path
        focus_name = None
        if probe.name == ".." and self.directory is not None:
            focus_name = os.path.basename(self.directory)
        try:
            await self.open(probe.path, focus_name=focus_name)
        except ListingError as exc:
            logger.warning("cannot enter %s: %s", probe.path, exc)
            self.message = str(exc)
        return None

    def _resolve_rendered(self, probe: MetadataProbe) -> None:
        if not probe.metadata_pending or probe in self._resolving:
            return
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return
        task = asyncio.ensure_future(self._resolve_row(probe))
        self._resolving[probe] = task
        task.add_done_callback(lambda _task, probe=probe: self._resolving.pop(probe, None))

    async def _resolve_row(self, probe: MetadataProbe) -> None:
        await probe.resolve_metadata()
        if self.listing is not None:
            index = self.listing.index_of(probe)
            if index >= 0:
                self.boundary.row_updated(index)

    def rows(self) -> list[RowData]:
        """Row data for every entry; rows never scrolled into view are placeholders.

        Fully rendered rows whose metadata is still unknown start resolving
        here and report back through ``row_updated`` when it lands.
        """
        if self.listing is None:
            return []
        active = self.viewport.active
        rows: list[RowData] = []
        for index, probe in enumerate(self.listing.entries):
            rendered = self.viewport.is_rendered(index)
            if rendered:
                self._resolve_rendered(probe)
            rows.append(build_row(probe, index, active=index == active, placeholder=not rendered))
        return rows

    def status_lines(self) -> list[str]:
        if self.listing is None:
            return []
        return status_lines(self.listing.counters)

    async def wait_for_metadata(self) -> None:
        if self.listing is not None:
            await self.listing.wait_for_metadata()


__all__ = ["PaneController", "SortSettings"]
