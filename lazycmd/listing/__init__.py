"""Directory-listing engine: lazy entry metadata, listings, and the shared cache.

This package contains the non-UI core:
- ``MetadataProbe`` entries with memoized, de-duplicated stat and folder size
- ``DirectoryListing`` with counters, selection, active row, and stable sort
- ``ListingCache`` mapping paths to borrow-counted shared listings
- blocking filesystem primitives the async layer delegates to
"""

from __future__ import annotations

from .cache import DEFAULT_CACHE_CAPACITY, ListingCache
from .directory import DirectoryListing, ListingCounters, SortKey
from .errors import (
    DirectorySizeFailure,
    DirectoryUnavailable,
    EntryStatFailure,
    InvalidPath,
    ListingError,
)
from .fs import (
    EntryKind,
    EntryMetadata,
    ScannedEntry,
    folder_size,
    permission_string,
    resolve_listing_path,
    scan_directory,
    stat_entry,
)
from .probe import SYNTHETIC_NAMES, MetadataProbe

__all__ = [
    "DEFAULT_CACHE_CAPACITY",
    "ListingCache",
    "DirectoryListing",
    "ListingCounters",
    "SortKey",
    "ListingError",
    "EntryStatFailure",
    "DirectorySizeFailure",
    "DirectoryUnavailable",
    "InvalidPath",
    "EntryKind",
    "EntryMetadata",
    "ScannedEntry",
    "folder_size",
    "permission_string",
    "resolve_listing_path",
    "scan_directory",
    "stat_entry",
    "SYNTHETIC_NAMES",
    "MetadataProbe",
]
