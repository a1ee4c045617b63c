"""Domain datatypes for directory listing rows and snapshots."""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass, replace

SYNTHETIC_NAMES = (".", "..")

DEFAULT_SHOW_DOTFILES = True
DEFAULT_SHOW_META_FILES = True
DEFAULT_MAX_ENTRIES = 5_000


@dataclass(frozen=True)
class FileRow:
    """One directory entry as shown on a listing line.

    ``filename_column`` is the 0-based offset of ``name`` inside the encoded
    line. It is ``None`` only for rows that were never encoded or decoded.
    """

    directory: str
    name: str
    is_directory: bool = False
    is_regular_file: bool = True
    owner: str | None = None
    group: str | None = None
    size_bytes: int = 0
    month: str | int = 0
    day: int = 0
    hour: int = 0
    minute: int = 0
    mode_token: str = ""
    marked: bool = False
    filename_column: int | None = None

    @property
    def path(self) -> str:
        return os.path.join(self.directory, self.name)

    @property
    def is_synthetic(self) -> bool:
        return self.name in SYNTHETIC_NAMES

    def with_marked(self, marked: bool) -> "FileRow":
        """Return a copy with the selection marker set to ``marked``."""
        return replace(self, marked=bool(marked))


@dataclass(frozen=True)
class EncodedRow:
    """Rendered listing line plus the column where the filename starts."""

    line: str
    filename_column: int


class DecodeStrategy(enum.Enum):
    STRICT = "strict"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class DecodeResult:
    """Decoded row tagged with the strategy that produced it."""

    row: FileRow
    strategy: DecodeStrategy

    @property
    def is_strict(self) -> bool:
        return self.strategy is DecodeStrategy.STRICT


@dataclass(frozen=True)
class ListingOptions:
    """Visibility filters and entry cap used when building a snapshot."""

    show_dotfiles: bool = DEFAULT_SHOW_DOTFILES
    show_meta_files: bool = DEFAULT_SHOW_META_FILES
    max_entries: int = DEFAULT_MAX_ENTRIES


@dataclass(frozen=True)
class ListingWarning:
    """Non-fatal failure observed while building a snapshot."""

    path: str
    message: str


@dataclass(frozen=True)
class ListingSnapshot:
    """Ordered rows for one directory plus the mtime observed at capture."""

    directory: str
    rows: tuple[FileRow, ...] = ()
    captured_at: int | None = None
    truncated: bool = False
    options: ListingOptions = ListingOptions()
    warnings: tuple[ListingWarning, ...] = ()

    @property
    def names(self) -> list[str]:
        return [row.name for row in self.rows]


__all__ = [
    "SYNTHETIC_NAMES",
    "DEFAULT_SHOW_DOTFILES",
    "DEFAULT_SHOW_META_FILES",
    "DEFAULT_MAX_ENTRIES",
    "FileRow",
    "EncodedRow",
    "DecodeStrategy",
    "DecodeResult",
    "ListingOptions",
    "ListingWarning",
    "ListingSnapshot",
]
