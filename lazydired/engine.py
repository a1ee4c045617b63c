"""Boundary facade tying the listing cache, codec, reconciler and notifier together.

``DiredEngine`` is what a host editor talks to: render a directory, map a
line back to a row, write an edited buffer back as renames, toggle markers,
and keep the listing current through a debounced watch.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Callable

from .config import DiredSettings
from .listing_model import (
    FileRow,
    IdentityResolver,
    ListingCache,
    ListingSnapshot,
    SystemIdentityResolver,
    decode_line,
    decode_row,
    encode_line,
    filename_range,
    render_listing,
)
from .reconcile import RenameResult, reconcile, resolve_directory, split_listing_lines
from .watch import ChangeNotifier

logger = logging.getLogger(__name__)

_LEGACY_HEADER_PREFIX_RE = re.compile(r"^Dired:\s*")
_HEADER_SUFFIX_RE = re.compile(r":\s*$")


def directory_from_header(line: str) -> str:
    """Return the directory named by a listing header line.

    Accepts the plain ``"<dir>:"`` header and the older ``"Dired: <dir>:"``.
    """
    header = _HEADER_SUFFIX_RE.sub("", line or "")
    return _LEGACY_HEADER_PREFIX_RE.sub("", header).strip()


def parent_directory(directory: str) -> str:
    """Return the parent of ``directory``; the root is its own parent."""
    return os.path.dirname(os.path.abspath(directory).rstrip(os.sep)) or os.sep


class DiredEngine:
    """Render, parse and reconcile editable directory listings."""

    def __init__(
        self,
        settings: DiredSettings | None = None,
        *,
        identity: IdentityResolver | None = None,
        rename: Callable[[str, str], None] = os.rename,
    ) -> None:
        self.settings = settings or DiredSettings()
        self.cache = ListingCache(
            self.settings.listing_options(),
            max_directories=self.settings.max_cached_directories,
            identity=identity if identity is not None else SystemIdentityResolver(),
        )
        self._rename = rename
        self._notifier: ChangeNotifier | None = None
        self._on_refresh: Callable[[str, str], None] | None = None

    def update_settings(self, settings: DiredSettings) -> None:
        """Apply new listing options; snapshots built with old options go stale."""
        self.settings = settings
        self.cache.set_options(settings.listing_options())

    def toggle_dotfiles(self) -> DiredSettings:
        self.update_settings(self.settings.with_overrides(show_dotfiles=not self.settings.show_dotfiles))
        return self.settings

    def toggle_meta_files(self) -> DiredSettings:
        self.update_settings(self.settings.with_overrides(show_meta_files=not self.settings.show_meta_files))
        return self.settings

    def snapshot(self, directory: str | os.PathLike[str]) -> ListingSnapshot:
        return self.cache.get(directory)

    def render(self, directory: str | os.PathLike[str]) -> str:
        """Return the full listing text for ``directory``."""
        return render_listing(self.snapshot(directory))

    def parse_line(self, directory: str, line: str) -> FileRow:
        return decode_row(directory, line)

    def filename_range(self, directory: str, line: str) -> tuple[int, int] | None:
        return filename_range(directory, line)

    def path_at_line(self, directory: str, line: str) -> str:
        """Return the filesystem path a listing line points at.

        ``.``/``..`` and the header resolve to ``directory`` itself.
        """
        directory = os.path.abspath(directory)
        row = decode_row(directory, line)
        if not row.name or row.is_synthetic or line == f"{directory}:":
            return directory
        return os.path.abspath(row.path)

    def reconcile(self, directory: str | os.PathLike[str], old_text: str, new_text: str) -> list[RenameResult]:
        """Apply filename edits and invalidate the cached listing afterwards."""
        resolved = resolve_directory(directory)
        try:
            return reconcile(resolved, old_text, new_text, rename=self._rename)
        finally:
            self.cache.invalidate(resolved)

    def apply_edit(
        self,
        directory: str | os.PathLike[str],
        new_text: str,
        old_text: str | None = None,
    ) -> list[RenameResult]:
        """Reconcile ``new_text``; without ``old_text`` the current filesystem rendering is the baseline."""
        resolved = resolve_directory(directory)
        if old_text is None:
            self.cache.invalidate(resolved)
            old_text = self.render(resolved)
        return self.reconcile(resolved, old_text, new_text)

    def mark_lines(
        self,
        directory: str,
        text: str,
        start: int,
        end: int,
        value: bool = True,
        *,
        allow_dot: bool = False,
    ) -> str:
        """Set the ``*`` marker on lines ``[start, end)`` and return the new text.

        The header is never touched, ``.``/``..`` are skipped unless
        ``allow_dot`` is set, and lines that are not well-formed rows are left
        as they are.
        """
        lines = split_listing_lines(text)
        for idx in range(max(1, start), min(end, len(lines))):
            decoded = decode_line(directory, lines[idx])
            if not decoded.is_strict:
                continue
            if decoded.row.is_synthetic and not allow_dot:
                continue
            lines[idx] = encode_line(decoded.row.with_marked(value))
        return "\n".join(lines)

    def marked_paths(self, directory: str, text: str) -> list[str]:
        """Return paths of marked rows in listing order."""
        out: list[str] = []
        for line in split_listing_lines(text)[1:]:
            decoded = decode_line(directory, line)
            if decoded.is_strict and decoded.row.marked and not decoded.row.is_synthetic:
                out.append(decoded.row.path)
        return out

    def invalidate(self, directory: str | os.PathLike[str]) -> None:
        self.cache.invalidate(directory)

    def clear_all(self) -> None:
        self.cache.clear()

    def watch(self, directory: str | os.PathLike[str], on_refresh: Callable[[str, str], None]) -> bool:
        """Watch ``directory``; ``on_refresh(directory, text)`` runs after each quiet period."""
        if self._notifier is None:
            self._notifier = ChangeNotifier(self._handle_change, self.settings.debounce_window_ms)
        self._on_refresh = on_refresh
        return self._notifier.watch(directory)

    def unwatch(self) -> None:
        if self._notifier is not None:
            self._notifier.unwatch()
        self._on_refresh = None

    def _handle_change(self, directory: str) -> None:
        self.cache.invalidate(directory)
        callback = self._on_refresh
        if callback is None:
            return
        logger.debug("refreshing listing for %s", directory)
        callback(directory, self.render(directory))

    def close(self) -> None:
        """Stop watching and drop every cached listing."""
        if self._notifier is not None:
            self._notifier.close()
            self._notifier = None
        self._on_refresh = None
        self.cache.clear()


__all__ = [
    "DiredEngine",
    "directory_from_header",
    "parent_directory",
]
