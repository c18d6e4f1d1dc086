"""Lazy per-entry metadata with shared in-flight resolution.

A ``MetadataProbe`` wraps one directory entry. ``stat`` and (for directories)
recursive size are resolved on first request, memoized, and shared: callers
that arrive while a resolution is pending await the same task instead of
issuing another filesystem call.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable

from . import fs
from .errors import DirectorySizeFailure, EntryStatFailure
from .fs import EntryKind, EntryMetadata

logger = logging.getLogger(__name__)

SYNTHETIC_NAMES: tuple[str, str] = (".", "..")


async def _settle(previous: asyncio.Future | None) -> None:
    """Wait for a superseded resolution without consuming its result."""
    if previous is not None and not previous.done():
        await asyncio.wait([previous])


class MetadataProbe:
    """One listing entry with lazily resolved metadata and size."""

    def __init__(
        self,
        directory: str,
        name: str,
        kind: EntryKind,
        *,
        is_synthetic: bool = False,
        stat_entry: Callable[[str], EntryMetadata] = fs.stat_entry,
        folder_size: Callable[[str], int] = fs.folder_size,
    ) -> None:
        self.name = name
        self.kind = kind
        self.path = os.path.normpath(os.path.join(directory, name))
        self.is_synthetic = is_synthetic
        self.stat_error: EntryStatFailure | None = None
        self.size_error: DirectorySizeFailure | None = None
        self._stat_entry = stat_entry
        self._folder_size = folder_size
        self._selected = False
        # Bumped by refresh(); resolutions from an older epoch do not commit.
        self._epoch = 0
        self._metadata: EntryMetadata | None = None
        self._metadata_task: asyncio.Future | None = None
        self._metadata_superseded: asyncio.Future | None = None
        self._folder_bytes: int | None = None
        self._size_task: asyncio.Future | None = None
        self._size_superseded: asyncio.Future | None = None

    @classmethod
    def synthetic(cls, directory: str, name: str, **kwargs) -> "MetadataProbe":
        """Build the always-present ``.`` or ``..`` probe for ``directory``."""
        if name not in SYNTHETIC_NAMES:
            raise ValueError(f"not a synthetic entry name: {name!r}")
        return cls(directory, name, EntryKind.DIRECTORY, is_synthetic=True, **kwargs)

    def __repr__(self) -> str:
        return f"MetadataProbe({self.path!r}, kind={self.kind.value}, selected={self._selected})"

    @property
    def is_directory(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    @property
    def extension(self) -> str:
        """Extension without the leading dot; empty for dot-files and synthetic rows."""
        if self.is_synthetic:
            return ""
        return os.path.splitext(self.name)[1][1:]

    @property
    def metadata(self) -> EntryMetadata | None:
        """Memoized metadata, or ``None`` while pending or after a failure."""
        return self._metadata

    @property
    def metadata_pending(self) -> bool:
        return self._metadata is None and self.stat_error is None

    @property
    def size(self) -> int | None:
        """Memoized size (recursive for directories), ``None`` when unknown."""
        if self.is_directory:
            return self._folder_bytes
        if self._metadata is None:
            return None
        return self._metadata.size

    @property
    def size_pending(self) -> bool:
        if self.is_directory:
            return self._folder_bytes is None and self.size_error is None
        return self.metadata_pending

    def is_selected(self) -> bool:
        return self._selected

    def set_selected(self, selected: bool) -> None:
        self._selected = bool(selected)

    async def resolve_metadata(self) -> EntryMetadata | None:
        """Return metadata, starting one shared ``stat`` task if needed.

        A failed ``stat`` resolves to ``None`` and is recorded on
        ``stat_error``; it is not retried until ``refresh()``.
        """
        if self._metadata_task is None:
            self._metadata_task = asyncio.ensure_future(
                self._load_metadata(self._metadata_superseded, self._epoch)
            )
            self._metadata_superseded = None
        return await asyncio.shield(self._metadata_task)

    async def _load_metadata(self, previous: asyncio.Future | None, epoch: int) -> EntryMetadata | None:
        await _settle(previous)
        try:
            metadata = await asyncio.to_thread(self._stat_entry, self.path)
        except OSError as exc:
            if epoch == self._epoch:
                self.stat_error = EntryStatFailure(self.path, f"stat failed for {self.path}: {exc}")
            logger.debug("stat failed for %s: %s", self.path, exc)
            return None
        if epoch == self._epoch:
            self._metadata = metadata
            self.stat_error = None
        return metadata

    async def resolve_size(self) -> int | None:
        """Return the entry size in bytes.

        Files read it from metadata. Directories compute the recursive size
        once, off the event loop, shared by every concurrent caller.
        """
        if not self.is_directory:
            metadata = await self.resolve_metadata()
            return None if metadata is None else metadata.size
        if self._size_task is None:
            self._size_task = asyncio.ensure_future(self._load_folder_size(self._size_superseded, self._epoch))
            self._size_superseded = None
        return await asyncio.shield(self._size_task)

    async def _load_folder_size(self, previous: asyncio.Future | None, epoch: int) -> int | None:
        await _settle(previous)
        try:
            total = await asyncio.to_thread(self._folder_size, self.path)
        except OSError as exc:
            if epoch == self._epoch:
                self.size_error = DirectorySizeFailure(self.path, f"folder size failed for {self.path}: {exc}")
            logger.debug("folder size failed for %s: %s", self.path, exc)
            return None
        if epoch == self._epoch:
            self._folder_bytes = int(total)
            self.size_error = None
        return int(total)

    def refresh(self) -> None:
        """Invalidate memoized metadata and size.

        In-flight resolutions are not cancelled: their callers still get the
        old result, and the next resolution starts only after they finish.
        """
        self._epoch += 1
        self._metadata = None
        self._folder_bytes = None
        self.stat_error = None
        self.size_error = None
        if self._metadata_task is not None and not self._metadata_task.done():
            self._metadata_superseded = self._metadata_task
        self._metadata_task = None
        if self._size_task is not None and not self._size_task.done():
            self._size_superseded = self._size_task
        self._size_task = None


__all__ = ["MetadataProbe", "SYNTHETIC_NAMES"]
