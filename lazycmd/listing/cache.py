"""Bounded, borrow-counted registry of directory listings.

Every ``acquire`` of a path bumps that path's borrow count; nothing ever
releases a borrow explicitly. Counts only go down during eviction sweeps,
which run after a new listing is inserted and the cache holds more than
``capacity`` paths. A sweep walks the eviction queue from the front: an entry
borrowed once is dropped, an entry borrowed more often loses one borrow and
stays. Each entry is decremented at most once per sweep, so capacity is a
soft bound: heavily re-used directories may keep the cache above capacity
until later sweeps wear their counts down.
"""

from __future__ import annotations

import logging
import os
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass

from . import fs
from .directory import DirectoryListing

logger = logging.getLogger(__name__)

DEFAULT_CACHE_CAPACITY = 5


@dataclass
class _CacheSlot:
    listing: DirectoryListing
    borrows: int


class ListingCache:
    """Map of absolute directory path to shared ``DirectoryListing``.

    One instance per browser window; panes that open the same directory get
    the same listing object.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CACHE_CAPACITY,
        *,
        listing_factory: Callable[[str], DirectoryListing] = DirectoryListing,
        resolve_path: Callable[[str], str] = fs.resolve_listing_path,
    ) -> None:
        if capacity < 1:
            raise ValueError("cache capacity must be >= 1")
        self.capacity = capacity
        self._listing_factory = listing_factory
        self._resolve_path = resolve_path
        self._slots: dict[str, _CacheSlot] = {}
        # Insertion/recency order of eviction candidates; values unused.
        self._queue: OrderedDict[str, None] = OrderedDict()

    def __len__(self) -> int:
        return len(self._slots)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, os.PathLike)):
            return False
        return os.path.normpath(os.path.abspath(os.fspath(path))) in self._slots

    def paths(self) -> list[str]:
        """Cached paths in eviction order, next candidate first."""
        return list(self._queue)

    def borrow_count(self, path: str) -> int:
        slot = self._slots.get(os.path.normpath(os.path.abspath(path)))
        return 0 if slot is None else slot.borrows

    def acquire(self, path: str | os.PathLike[str]) -> DirectoryListing:
        """Return the shared listing for ``path``, creating it on a miss.

        Files resolve to their parent directory. Raises ``InvalidPath``
        synchronously, before anything is created or cached. Never awaits;
        a new listing starts enumerating in the background when an event
        loop is running.
        """
        directory = self._resolve_path(path)
        slot = self._slots.get(directory)
        if slot is not None:
            slot.borrows += 1
            self._queue.move_to_end(directory)
            return slot.listing

        listing = self._listing_factory(directory)
        self._slots[directory] = _CacheSlot(listing=listing, borrows=1)
        self._queue[directory] = None
        self._sweep(inserted=directory)
        listing.start()
        return listing

    def _sweep(self, inserted: str) -> None:
        protected: list[str] = []
        while len(self._slots) > self.capacity and self._queue:
            candidate, _ = self._queue.popitem(last=False)
            if candidate == inserted:
                continue
            slot = self._slots[candidate]
            if slot.borrows <= 1:
                del self._slots[candidate]
                logger.debug("evicted listing %s", candidate)
                continue
            slot.borrows -= 1
            protected.append(candidate)
        for candidate in protected:
            self._queue[candidate] = None
        self._queue[inserted] = None
        self._queue.move_to_end(inserted)
        if len(self._slots) > self.capacity:
            logger.debug(
                "listing cache holds %d paths over capacity %d (borrow-protected)",
                len(self._slots),
                self.capacity,
            )


__all__ = ["ListingCache", "DEFAULT_CACHE_CAPACITY"]
