"""Directory scanning into listing snapshots and their text rendering."""

from __future__ import annotations

import logging
import os
import re

from .codec import encode_line, row_from_stat
from .identity import IdentityResolver
from .types import SYNTHETIC_NAMES, FileRow, ListingOptions, ListingSnapshot, ListingWarning

logger = logging.getLogger(__name__)

META_SUFFIX = ".meta"
TRUNCATION_NOTE = "(listing truncated to {count} entries)"
_TRUNCATION_NOTE_RE = re.compile(r"\s*\(listing truncated to \d+ entries\)\s*")


def safe_directory_mtime_ns(directory: str) -> int | None:
    """Return ``st_mtime_ns`` for ``directory`` or ``None`` on stat failure."""
    try:
        return int(os.stat(directory).st_mtime_ns)
    except OSError:
        return None


def filter_listing_names(names: list[str], options: ListingOptions) -> tuple[list[str], bool]:
    """Apply visibility filters and the entry cap.

    Returns ``(kept_names, truncated)``. ``.`` and ``..`` survive the dotfile
    filter but count toward ``max_entries``.
    """
    kept: list[str] = []
    for name in names:
        if not options.show_dotfiles and name.startswith(".") and name not in SYNTHETIC_NAMES:
            continue
        if not options.show_meta_files and name.lower().endswith(META_SUFFIX):
            continue
        kept.append(name)

    limit = max(0, int(options.max_entries))
    if len(kept) > limit:
        return kept[:limit], True
    return kept, False


def build_listing_snapshot(
    directory: str | os.PathLike[str],
    options: ListingOptions | None = None,
    identity: IdentityResolver | None = None,
) -> ListingSnapshot:
    """Stat every visible entry of ``directory`` and capture a snapshot.

    Missing or non-directory targets yield an empty snapshot. Entries whose
    stat fails are skipped and reported through ``ListingSnapshot.warnings``.
    The directory mtime is sampled after the scan so edits made while
    scanning are caught by the next freshness check.
    """
    options = options or ListingOptions()
    directory = os.path.abspath(os.fspath(directory))

    if not os.path.isdir(directory):
        logger.debug("not a readable directory: %s", directory)
        return ListingSnapshot(directory=directory, options=options)

    try:
        entries = os.listdir(directory)
    except OSError as exc:
        logger.warning("cannot list %s: %s", directory, exc)
        return ListingSnapshot(
            directory=directory,
            options=options,
            captured_at=safe_directory_mtime_ns(directory),
            warnings=(ListingWarning(path=directory, message=str(exc)),),
        )

    names, truncated = filter_listing_names([*SYNTHETIC_NAMES, *entries], options)

    rows: list[FileRow] = []
    warnings: list[ListingWarning] = []
    for name in names:
        path = os.path.join(directory, name)
        try:
            st = os.stat(path)
        except OSError as exc:
            logger.warning("cannot stat %s: %s", path, exc)
            warnings.append(ListingWarning(path=path, message=str(exc)))
            continue
        rows.append(row_from_stat(directory, name, st, identity))

    return ListingSnapshot(
        directory=directory,
        rows=tuple(rows),
        captured_at=safe_directory_mtime_ns(directory),
        truncated=truncated,
        options=options,
        warnings=tuple(warnings),
    )


def is_truncation_note(line: str) -> bool:
    """Return whether ``line`` is the note ``render_listing`` appends when truncated."""
    return _TRUNCATION_NOTE_RE.fullmatch(line) is not None


def render_header(directory: str) -> str:
    return f"{directory}:"


def render_listing(snapshot: ListingSnapshot) -> str:
    """Render header, one encoded line per row, and the truncation note."""
    lines = [render_header(snapshot.directory)]
    lines.extend(encode_line(row) for row in snapshot.rows)
    if snapshot.truncated:
        lines.append(TRUNCATION_NOTE.format(count=snapshot.options.max_entries))
    return "\n".join(lines)


__all__ = [
    "META_SUFFIX",
    "TRUNCATION_NOTE",
    "safe_directory_mtime_ns",
    "filter_listing_names",
    "build_listing_snapshot",
    "is_truncation_note",
    "render_header",
    "render_listing",
]
