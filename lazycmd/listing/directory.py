"""One directory's entries, counters, selection, active row, and sort order.

``DirectoryListing`` owns a sequence of ``MetadataProbe`` objects. The
sequence is replaced atomically by ``enumerate()``; each replacement bumps a
generation counter so that work started against an older sequence (metadata
sorts, selected-size deltas, total-size accumulation) never mutates the new
one.

Counters are eventually consistent: file and directory counts change
immediately, byte totals catch up as sizes resolve. ``wait_for_metadata()``
is the point where everything pending has settled.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from enum import Enum

from ..boundary import RenderBoundary
from . import fs
from .errors import DirectoryUnavailable
from .fs import EntryMetadata, ScannedEntry
from .probe import SYNTHETIC_NAMES, MetadataProbe

logger = logging.getLogger(__name__)


class SortKey(Enum):
    """Column a listing can be ordered by."""

    NAME = "name"
    EXTENSION = "ext"
    MODIFIED = "date"
    PERMISSIONS = "attr"

    @property
    def requires_metadata(self) -> bool:
        return self in (SortKey.MODIFIED, SortKey.PERMISSIONS)

    @classmethod
    def parse(cls, value: "SortKey | str") -> "SortKey":
        """Accept an enum member, its value (``"ext"``) or its name (``"extension"``)."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        for member in cls:
            if text in (member.value, member.name.lower()):
                return member
        raise ValueError(f"unknown sort key: {value!r}")


@dataclass
class ListingCounters:
    """Aggregate counts shown in a pane's status lines."""

    total_files: int = 0
    total_directories: int = 0
    selected_files: int = 0
    selected_directories: int = 0
    total_size: int = 0
    selected_size: int = 0


def _sort_key_for(key: SortKey) -> Callable[[MetadataProbe], object]:
    if key is SortKey.NAME:
        return lambda probe: probe.name.casefold()
    if key is SortKey.EXTENSION:
        return lambda probe: probe.extension.casefold()

    # Entries whose stat failed sort ahead of every resolved entry.
    def metadata_key(probe: MetadataProbe) -> tuple[bool, float]:
        metadata = probe.metadata
        if metadata is None:
            return (False, 0.0)
        return (True, metadata.mtime if key is SortKey.MODIFIED else float(metadata.mode))

    return metadata_key


async def _settle(previous: asyncio.Future | None) -> None:
    if previous is not None and not previous.done():
        await asyncio.wait([previous])


def _consume_failure(task: asyncio.Future) -> None:
    # Background enumerations may have no awaiting caller.
    if not task.cancelled():
        task.exception()


class DirectoryListing:
    """Entry sequence and pane-visible state for one absolute directory.

    One listing may be shared by several panes through ``ListingCache``;
    active index, selection, and sort order are directory-scoped, so every
    holder sees every mutation.
    """

    def __init__(
        self,
        directory: str,
        *,
        scan: Callable[[str], list[ScannedEntry]] = fs.scan_directory,
        stat_entry: Callable[[str], EntryMetadata] = fs.stat_entry,
        folder_size: Callable[[str], int] = fs.folder_size,
    ) -> None:
        self.directory = directory
        self.counters = ListingCounters()
        self._scan = scan
        self._stat_entry = stat_entry
        self._folder_size = folder_size
        self._entries: list[MetadataProbe] = []
        self._generation = 0
        self._active = 0
        self._enumeration: asyncio.Future | None = None
        self._pending: set[asyncio.Future] = set()
        self._observers: list[RenderBoundary] = []

    def __repr__(self) -> str:
        return f"DirectoryListing({self.directory!r}, entries={len(self._entries)}, generation={self._generation})"

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> tuple[MetadataProbe, ...]:
        return tuple(self._entries)

    @property
    def generation(self) -> int:
        """Number of entry sequences installed so far; 0 until first enumeration."""
        return self._generation

    @property
    def is_populated(self) -> bool:
        return self._generation > 0

    @property
    def active(self) -> int:
        """Active row clamped to the current entries, ``-1`` when empty."""
        if not self._entries:
            return -1
        return max(0, min(self._active, len(self._entries) - 1))

    def add_observer(self, observer: RenderBoundary) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def remove_observer(self, observer: RenderBoundary) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def _notify_replaced(self) -> None:
        for observer in list(self._observers):
            observer.rows_replaced()

    def _notify_row(self, index: int) -> None:
        if index < 0:
            return
        for observer in list(self._observers):
            observer.row_updated(index)

    def _track(self, coro: Coroutine[object, object, None]) -> asyncio.Future:
        task = asyncio.ensure_future(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    def _new_probe(self, name: str, kind: fs.EntryKind) -> MetadataProbe:
        return MetadataProbe(
            self.directory,
            name,
            kind,
            stat_entry=self._stat_entry,
            folder_size=self._folder_size,
        )

    def start(self) -> None:
        """Begin the first enumeration in the background when a loop is running.

        A first enumeration that already failed is started over.
        """
        if self._enumeration is not None and not (self._enumeration.done() and not self.is_populated):
            return
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return
        self._enumeration = asyncio.ensure_future(self._enumerate_after(None))
        self._enumeration.add_done_callback(_consume_failure)

    async def populated(self) -> None:
        """Wait for the latest enumeration, starting the first one if needed.

        Raises ``DirectoryUnavailable`` when that enumeration failed. Until
        one succeeds, each call scans again.
        """
        if not self.is_populated:
            self.start()
        assert self._enumeration is not None
        await asyncio.shield(self._enumeration)

    async def enumerate(self) -> None:
        """Rescan the directory and replace the entry sequence.

        Runs after any enumeration already in flight. On failure raises
        ``DirectoryUnavailable`` and keeps the previous entries.
        """
        task = asyncio.ensure_future(self._enumerate_after(self._enumeration))
        task.add_done_callback(_consume_failure)
        self._enumeration = task
        await asyncio.shield(task)

    async def _enumerate_after(self, previous: asyncio.Future | None) -> None:
        await _settle(previous)
        try:
            scanned = await asyncio.to_thread(self._scan, self.directory)
        except DirectoryUnavailable as exc:
            logger.warning("keeping previous entries of %s: %s", self.directory, exc)
            raise

        probes = [
            MetadataProbe.synthetic(
                self.directory,
                name,
                stat_entry=self._stat_entry,
                folder_size=self._folder_size,
            )
            for name in SYNTHETIC_NAMES
        ]
        probes.extend(self._new_probe(entry.name, entry.kind) for entry in scanned)
        self._install(probes)

    def _install(self, probes: list[MetadataProbe]) -> None:
        self._generation += 1
        self._entries = probes
        counters = ListingCounters()
        files: list[MetadataProbe] = []
        for probe in probes:
            if probe.is_synthetic:
                continue
            if probe.is_directory:
                counters.total_directories += 1
            else:
                counters.total_files += 1
                files.append(probe)
        self.counters = counters
        self._active = self.active
        logger.debug(
            "enumerated %s: %d files, %d directories (generation %d)",
            self.directory,
            counters.total_files,
            counters.total_directories,
            self._generation,
        )
        self._track(self._accumulate_total_size(self._generation, files))
        self._notify_replaced()

    async def _accumulate_total_size(self, generation: int, files: list[MetadataProbe]) -> None:
        async def add(probe: MetadataProbe) -> None:
            size = await probe.resolve_size()
            if size is not None and generation == self._generation:
                self.counters.total_size += size

        await asyncio.gather(*(add(probe) for probe in files))

    async def sort(
        self,
        dir_first: bool = True,
        key: SortKey | str = SortKey.NAME,
        ascending: bool = True,
    ) -> bool:
        """Stable-sort entries; return ``False`` when the result was discarded.

        Metadata keys wait for every current entry's ``stat`` first. If the
        entries are replaced meanwhile, the stale sort is dropped. With
        ``dir_first`` directories (``.`` and ``..`` included) precede files;
        inside each group the key decides.
        """
        sort_key = SortKey.parse(key)
        if not self.is_populated:
            await self.populated()
        generation = self._generation
        if sort_key.requires_metadata:
            await asyncio.gather(*(probe.resolve_metadata() for probe in list(self._entries)))
            if generation != self._generation:
                logger.debug("discarding stale %s sort of %s", sort_key.value, self.directory)
                return False

        entries = list(self._entries)
        entries.sort(key=_sort_key_for(sort_key), reverse=not ascending)
        if dir_first:
            entries.sort(key=lambda probe: not probe.is_directory)
        self._entries = entries
        self._active = self.active
        self._notify_replaced()
        return True

    def set_active(self, index: int) -> int:
        """Store ``index`` clamped to the entries; no I/O, no re-sort.

        Before the first enumeration the value is kept (non-negative) and
        clamped once entries arrive.
        """
        self._active = max(0, int(index))
        if self._entries:
            self._active = self.active
        return self._active

    def active_entry(self) -> MetadataProbe | None:
        index = self.active
        return self._entries[index] if index >= 0 else None

    def index_of(self, probe: MetadataProbe) -> int:
        for index, entry in enumerate(self._entries):
            if entry is probe:
                return index
        return -1

    def index_of_name(self, name: str) -> int:
        for index, entry in enumerate(self._entries):
            if entry.name == name:
                return index
        return -1

    def selected_entries(self) -> list[MetadataProbe]:
        return [probe for probe in self._entries if probe.is_selected()]

    def set_selected(self, probe: MetadataProbe, selected: bool) -> None:
        """Change one entry's selection and update the counters.

        Counts change now; the byte delta lands once the entry's size is
        known. Synthetic ``.``/``..`` rows cannot be selected.
        """
        selected = bool(selected)
        index = self.index_of(probe)
        if index < 0 or probe.is_synthetic or probe.is_selected() == selected:
            return

        probe.set_selected(selected)
        step = 1 if selected else -1
        if probe.is_directory:
            self.counters.selected_directories += step
        else:
            self.counters.selected_files += step

        generation = self._generation
        if probe.size_pending:
            self._track(self._resolve_selected_size(generation, probe, selected))
        else:
            self._apply_selected_size(generation, probe, selected, probe.size)
        self._notify_row(index)

    async def _resolve_selected_size(self, generation: int, probe: MetadataProbe, selected: bool) -> None:
        size = await probe.resolve_size()
        self._apply_selected_size(generation, probe, selected, size)
        if generation == self._generation:
            self._notify_row(self.index_of(probe))

    def _apply_selected_size(self, generation: int, probe: MetadataProbe, selected: bool, size: int | None) -> None:
        if size is None or generation != self._generation:
            return
        delta = size if selected else -size
        self.counters.selected_size += delta
        if probe.is_directory:
            self.counters.total_size += delta

    async def wait_for_metadata(self) -> None:
        """Return once every entry's metadata and every counter update settled.

        A failed rescan does not raise here once entries exist; the previous
        entries are the ones waited on.
        """
        if not self.is_populated:
            await self.populated()
        while True:
            generation = self._generation
            await asyncio.gather(*(probe.resolve_metadata() for probe in list(self._entries)))
            if self._pending:
                await asyncio.wait(set(self._pending))
            if generation == self._generation and not self._pending:
                return


__all__ = ["DirectoryListing", "ListingCounters", "SortKey"]
