"""Filesystem primitives consumed by the listing engine.

Everything here is blocking; the async layer runs these via
``asyncio.to_thread`` so the event loop never waits on disk.
"""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from enum import Enum

from .errors import DirectoryUnavailable, InvalidPath


class EntryKind(Enum):
    """Directory-entry discriminant observed without following symlinks."""

    FILE = "file"
    DIRECTORY = "directory"
    CHAR_DEVICE = "char"
    BLOCK_DEVICE = "block"
    FIFO = "fifo"
    SYMLINK = "symlink"
    SOCKET = "socket"
    OTHER = "other"


KIND_TYPE_CHARS: dict[EntryKind, str] = {
    EntryKind.FILE: "-",
    EntryKind.DIRECTORY: "d",
    EntryKind.CHAR_DEVICE: "c",
    EntryKind.BLOCK_DEVICE: "b",
    EntryKind.FIFO: "f",
    EntryKind.SYMLINK: "l",
    EntryKind.SOCKET: "s",
    EntryKind.OTHER: "e",
}


@dataclass(frozen=True)
class EntryMetadata:
    """Resolved ``stat`` fields shown in the size/date/attr columns."""

    size: int
    mtime: float
    mode: int


@dataclass(frozen=True)
class ScannedEntry:
    """One raw directory entry as enumerated, before any metadata."""

    name: str
    kind: EntryKind


def kind_from_mode(mode: int) -> EntryKind:
    """Map ``st_mode`` file-type bits to an ``EntryKind``."""
    if stat.S_ISREG(mode):
        return EntryKind.FILE
    if stat.S_ISDIR(mode):
        return EntryKind.DIRECTORY
    if stat.S_ISLNK(mode):
        return EntryKind.SYMLINK
    if stat.S_ISCHR(mode):
        return EntryKind.CHAR_DEVICE
    if stat.S_ISBLK(mode):
        return EntryKind.BLOCK_DEVICE
    if stat.S_ISFIFO(mode):
        return EntryKind.FIFO
    if stat.S_ISSOCK(mode):
        return EntryKind.SOCKET
    return EntryKind.OTHER


def _kind_of(entry: os.DirEntry) -> EntryKind:
    try:
        if entry.is_symlink():
            return EntryKind.SYMLINK
        if entry.is_dir(follow_symlinks=False):
            return EntryKind.DIRECTORY
        if entry.is_file(follow_symlinks=False):
            return EntryKind.FILE
        return kind_from_mode(entry.stat(follow_symlinks=False).st_mode)
    except OSError:
        return EntryKind.OTHER


def resolve_listing_path(path: str | os.PathLike[str]) -> str:
    """Normalize ``path`` to the absolute directory a listing should show.

    Files resolve to their parent directory. Raises ``InvalidPath`` when the
    path does not exist or is neither a directory nor a file inside one.
    """
    normalized = os.path.normpath(os.path.abspath(os.fspath(path)))
    try:
        mode = os.stat(normalized).st_mode
    except OSError as exc:
        raise InvalidPath(normalized, f"path not found: {normalized}") from exc
    if stat.S_ISDIR(mode):
        return normalized
    parent = os.path.dirname(normalized)
    if not os.path.isdir(parent):
        raise InvalidPath(normalized, f"not a directory: {normalized}")
    return parent


def scan_directory(directory: str) -> list[ScannedEntry]:
    """Enumerate ``directory`` in raw ``scandir`` order.

    Raises ``DirectoryUnavailable`` when the directory is gone or unreadable.
    """
    try:
        with os.scandir(directory) as entries:
            return [ScannedEntry(name=entry.name, kind=_kind_of(entry)) for entry in entries]
    except OSError as exc:
        raise DirectoryUnavailable(directory, f"cannot read directory {directory}: {exc}") from exc


def stat_entry(path: str) -> EntryMetadata:
    """Return metadata for ``path`` following symlinks. Raises ``OSError``."""
    st = os.stat(path)
    return EntryMetadata(size=int(st.st_size), mtime=float(st.st_mtime), mode=int(st.st_mode))


def folder_size(path: str) -> int:
    """Return the total byte size of regular files below ``path``.

    Symlinks are not followed. Unreadable subdirectories and files that vanish
    mid-walk are skipped; an unreadable top-level directory raises ``OSError``.
    """
    total = 0
    stack = [path]
    first = True
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as entries:
                for entry in entries:
                    try:
                        if entry.is_dir(follow_symlinks=False):
                            stack.append(entry.path)
                        elif entry.is_file(follow_symlinks=False):
                            total += int(entry.stat(follow_symlinks=False).st_size)
                    except OSError:
                        continue
        except OSError:
            if first:
                raise
        first = False
    return total


def permission_string(kind: EntryKind, mode: int) -> str:
    """Format ``mode`` as a type character plus ``rwxrwxrwx`` bits."""
    bits = (
        (stat.S_IRUSR, "r"),
        (stat.S_IWUSR, "w"),
        (stat.S_IXUSR, "x"),
        (stat.S_IRGRP, "r"),
        (stat.S_IWGRP, "w"),
        (stat.S_IXGRP, "x"),
        (stat.S_IROTH, "r"),
        (stat.S_IWOTH, "w"),
        (stat.S_IXOTH, "x"),
    )
    return KIND_TYPE_CHARS[kind] + "".join(char if mode & mask else "-" for mask, char in bits)


__all__ = [
    "EntryKind",
    "EntryMetadata",
    "ScannedEntry",
    "KIND_TYPE_CHARS",
    "kind_from_mode",
    "resolve_listing_path",
    "scan_directory",
    "stat_entry",
    "folder_size",
    "permission_string",
]
