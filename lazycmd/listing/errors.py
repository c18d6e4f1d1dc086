"""Error taxonomy for directory listings.

Per-entry failures (stat, folder size) are recorded on the probe and never
raised to callers. Listing-level failures surface from ``enumerate`` and
``ListingCache.acquire``.
"""

from __future__ import annotations

from pathlib import Path


class ListingError(Exception):
    """Base class for listing-engine failures."""

    def __init__(self, path: str | Path, message: str | None = None) -> None:
        self.path = str(path)
        super().__init__(message or self.path)


class EntryStatFailure(ListingError):
    """One entry's metadata could not be resolved."""


class DirectorySizeFailure(ListingError):
    """Recursive size computation failed for a directory entry."""


class DirectoryUnavailable(ListingError):
    """The listing's own directory could not be enumerated."""


class InvalidPath(ListingError, ValueError):
    """Path is neither a directory nor a file inside one."""


__all__ = [
    "ListingError",
    "EntryStatFailure",
    "DirectorySizeFailure",
    "DirectoryUnavailable",
    "InvalidPath",
]
