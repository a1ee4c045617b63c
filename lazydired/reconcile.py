"""Write-back of edited listings as same-directory renames.

Old and new listing texts are compared line by line (the header line is never
touched). Each line pair whose decoded filenames differ becomes one rename.
Renames run in line order; a failing rename is recorded and the rest still
run.
"""

from __future__ import annotations

import enum
import errno
import logging
import os
import re
from collections.abc import Callable
from dataclasses import dataclass

from .listing_model import SYNTHETIC_NAMES, decode_row, is_truncation_note

logger = logging.getLogger(__name__)

_LINE_BREAK_RE = re.compile(r"\r?\n")


class RenameStatus(enum.Enum):
    RENAMED = "renamed"
    FAILED = "failed"


@dataclass(frozen=True)
class RenameRequest:
    """One rename derived from a changed listing line."""

    line_number: int
    source: str
    target: str


@dataclass(frozen=True)
class RenameResult:
    """Outcome of one attempted rename."""

    line_number: int
    source: str
    target: str
    status: RenameStatus
    error: OSError | None = None

    @property
    def ok(self) -> bool:
        return self.status is RenameStatus.RENAMED

    def describe(self) -> str:
        source_name = os.path.basename(self.source)
        target_name = os.path.basename(self.target)
        if self.ok:
            return f"{source_name} -> {target_name}"
        return f"Failed to rename {source_name} -> {target_name}: {self.error}"


def split_listing_lines(text: str) -> list[str]:
    return _LINE_BREAK_RE.split(text) if text else []


def resolve_directory(directory: str | os.PathLike[str] | None) -> str:
    """Return ``directory`` as an absolute path or raise ``ValueError``."""
    if directory is None:
        raise ValueError("directory is required")
    raw = os.fspath(directory)
    if not raw or not raw.strip():
        raise ValueError("directory is required")
    return os.path.abspath(raw)


def _row_text(lines: list[str], idx: int) -> str:
    """Return line ``idx``; missing lines and the truncation note read as empty."""
    if idx >= len(lines) or is_truncation_note(lines[idx]):
        return ""
    return lines[idx]


def _leaves_directory(request: RenameRequest) -> bool:
    target_parent = os.path.dirname(os.path.normpath(request.target))
    return target_parent != os.path.dirname(os.path.normpath(request.source))


def diff_renames(directory: str | os.PathLike[str], old_text: str, new_text: str) -> list[RenameRequest]:
    """Derive rename requests from an old and an edited listing text."""
    directory = resolve_directory(directory)
    old_lines = split_listing_lines(old_text)
    new_lines = split_listing_lines(new_text)

    requests: list[RenameRequest] = []
    for idx in range(1, max(len(old_lines), len(new_lines))):
        old_line = _row_text(old_lines, idx)
        new_line = _row_text(new_lines, idx)
        if not old_line and not new_line:
            continue

        old_name = decode_row(directory, old_line).name
        new_name = decode_row(directory, new_line).name
        if not old_name or not new_name or old_name == new_name:
            continue
        if old_name in SYNTHETIC_NAMES or new_name in SYNTHETIC_NAMES:
            logger.debug("line %d: ignoring rename involving %r/%r", idx, old_name, new_name)
            continue

        source = os.path.join(directory, old_name)
        target = os.path.join(directory, new_name)
        if os.path.normpath(source) == os.path.normpath(target):
            continue
        requests.append(RenameRequest(line_number=idx, source=source, target=target))
    return requests


def apply_renames(
    requests: list[RenameRequest],
    rename: Callable[[str, str], None] = os.rename,
) -> list[RenameResult]:
    """Execute ``requests`` sequentially, recording failures instead of raising."""
    results: list[RenameResult] = []
    for request in requests:
        try:
            if _leaves_directory(request):
                raise OSError(errno.EXDEV, "target is outside the listed directory", request.target)
            rename(request.source, request.target)
        except OSError as exc:
            logger.warning("rename %s -> %s failed: %s", request.source, request.target, exc)
            results.append(
                RenameResult(
                    line_number=request.line_number,
                    source=request.source,
                    target=request.target,
                    status=RenameStatus.FAILED,
                    error=exc,
                )
            )
            continue
        logger.info("renamed %s -> %s", request.source, request.target)
        results.append(
            RenameResult(
                line_number=request.line_number,
                source=request.source,
                target=request.target,
                status=RenameStatus.RENAMED,
            )
        )
    return results


def reconcile(
    directory: str | os.PathLike[str],
    old_text: str,
    new_text: str,
    *,
    rename: Callable[[str, str], None] = os.rename,
) -> list[RenameResult]:
    """Apply filename edits in ``new_text`` relative to ``old_text``.

    Callers own cache invalidation; ``DiredEngine.reconcile`` does it for
    every call regardless of how many renames succeeded.
    """
    return apply_renames(diff_renames(directory, old_text, new_text), rename=rename)


__all__ = [
    "RenameStatus",
    "RenameRequest",
    "RenameResult",
    "split_listing_lines",
    "resolve_directory",
    "diff_renames",
    "apply_renames",
    "reconcile",
]
