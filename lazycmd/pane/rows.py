"""Row data handed to renderers plus column formatting.

``RowData`` is the contract between the listing core and whatever draws the
table: everything is either resolved or explicitly pending, so a renderer
never has to await anything.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..listing import ListingCounters, MetadataProbe, permission_string

SIZE_UNITS: tuple[str, ...] = ("B", "KB", "MB", "GB", "TB")
DIR_SIZE_LABEL = "<DIR>"
PENDING_LABEL = "..."


@dataclass(frozen=True)
class RowData:
    """One table row; ``placeholder`` rows carry only index and name."""

    index: int
    name: str
    is_directory: bool
    extension: str
    size: int | None
    size_pending: bool
    modified: datetime | None
    modified_pending: bool
    permissions: str | None
    active: bool
    selected: bool
    placeholder: bool = False

    @property
    def display_name(self) -> str:
        """Base name without extension; directories are bracketed."""
        base = self.name
        if self.extension and base.endswith("." + self.extension):
            base = base[: -(len(self.extension) + 1)]
        return f"[{base}]" if self.is_directory else base


def format_size(size: float) -> str:
    """Render bytes with two decimals and the largest unit up to TB."""
    value = float(size)
    unit_index = 0
    while value > 1024 and unit_index < len(SIZE_UNITS) - 1:
        value /= 1024
        unit_index += 1
    return f"{value:.2f} {SIZE_UNITS[unit_index]}"


def format_timestamp(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%d %H:%M")


def size_label(row: RowData) -> str:
    """Size column text: ``<DIR>`` for unselected directories."""
    if row.placeholder:
        return ""
    if row.is_directory and not row.selected:
        return DIR_SIZE_LABEL
    if row.size is not None:
        return format_size(row.size)
    return PENDING_LABEL if row.size_pending else ""


def modified_label(row: RowData) -> str:
    if row.modified is not None:
        return format_timestamp(row.modified)
    return PENDING_LABEL if row.modified_pending and not row.placeholder else ""


def build_row(probe: MetadataProbe, index: int, *, active: bool, placeholder: bool = False) -> RowData:
    """Snapshot ``probe`` as a ``RowData`` without triggering any I/O."""
    if placeholder:
        return RowData(
            index=index,
            name=probe.name,
            is_directory=probe.is_directory,
            extension=probe.extension,
            size=None,
            size_pending=True,
            modified=None,
            modified_pending=True,
            permissions=None,
            active=active,
            selected=probe.is_selected(),
            placeholder=True,
        )
    metadata = probe.metadata
    modified: datetime | None = None
    permissions: str | None = None
    if metadata is not None:
        modified = datetime.fromtimestamp(metadata.mtime)
        permissions = permission_string(probe.kind, metadata.mode)
    return RowData(
        index=index,
        name=probe.name,
        is_directory=probe.is_directory,
        extension=probe.extension,
        size=probe.size,
        size_pending=probe.size_pending,
        modified=modified,
        modified_pending=probe.metadata_pending,
        permissions=permissions,
        active=active,
        selected=probe.is_selected(),
    )


def status_lines(counters: ListingCounters) -> list[str]:
    """Three status lines summarizing selection against totals."""
    return [
        f"selected: {format_size(counters.selected_size)} of {format_size(counters.total_size)}",
        f"files: {counters.selected_files} of {counters.total_files}",
        f"directories: {counters.selected_directories} of {counters.total_directories}",
    ]


def path_label(directory: str) -> str:
    return f"{directory}:"


__all__ = [
    "RowData",
    "SIZE_UNITS",
    "DIR_SIZE_LABEL",
    "PENDING_LABEL",
    "format_size",
    "format_timestamp",
    "size_label",
    "modified_label",
    "build_row",
    "status_lines",
    "path_label",
]
