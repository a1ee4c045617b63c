"""Fixed-column encoding and decoding of directory listing lines.

A row renders as::

    * -rw-r--r-- alice staff     5.5K Dec 06 05:09 notes.txt

Decoding runs a strict structured match first and falls back to token
scanning for free text, so decoding never raises.
"""

from __future__ import annotations

import os
import re
import stat as stat_module
import time
from dataclasses import replace

from .identity import IdentityResolver
from .sizes import format_size, parse_size
from .types import DecodeResult, DecodeStrategy, EncodedRow, FileRow

MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
SIZE_COLUMN_WIDTH = 8
ABSENT_PLACEHOLDER = "-"
_ABSENT_TOKENS = frozenset({"-", "undefined", "null"})

_STRICT_ROW_RE = re.compile(
    r"\s*(\*?)\s+([-d][-rwxsStT]{9})\s+(\S+)\s+(\S+)\s+(\S+)\s+(\S+)\s+(\d+)\s+(\d+):(\d+)\s(.+)"
)
_TIME_TOKEN_RE = re.compile(r"\d{2}:\d{2}")
_WHITESPACE_RE = re.compile(r"\s+")


def _field_token(value: str | None) -> str:
    """Render an optional owner/group name as one non-blank token."""
    if value is None:
        return ABSENT_PLACEHOLDER
    token = _WHITESPACE_RE.sub("_", value.strip())
    if not token or token.lower() in _ABSENT_TOKENS:
        return ABSENT_PLACEHOLDER
    return token


def _month_token(month: str | int) -> str:
    if isinstance(month, int):
        return f"{month:02d}"
    return (str(month) + "   ")[:3]


def _optional_field(token: str) -> str | None:
    if token.strip().lower() in _ABSENT_TOKENS:
        return None
    return token


def _parse_month(token: str) -> str | int:
    if token.isdigit():
        return int(token)
    return token


def encode_row(row: FileRow) -> EncodedRow:
    """Encode ``row`` into its listing line and filename column."""
    marker = "*" if row.marked else " "
    size = format_size(row.size_bytes).rjust(SIZE_COLUMN_WIDTH)
    prefix = (
        f"{marker} {row.mode_token} {_field_token(row.owner)} {_field_token(row.group)} "
        f"{size} {_month_token(row.month)} {row.day:02d} {row.hour:02d}:{row.minute:02d} "
    )
    return EncodedRow(line=prefix + row.name, filename_column=len(prefix))


def encode_line(row: FileRow) -> str:
    return encode_row(row).line


def normalize_mode_token(st_mode: int) -> str:
    """Return a 10-char mode token whose first char is ``d`` or ``-``."""
    token = stat_module.filemode(st_mode)
    if stat_module.S_ISDIR(st_mode):
        return "d" + token[1:]
    return "-" + token[1:]


def row_from_stat(
    directory: str,
    name: str,
    st: os.stat_result,
    identity: IdentityResolver | None = None,
) -> FileRow:
    """Build an encoded-ready row from ``os.stat`` metadata.

    The timestamp shown is the entry's ctime in local time. ``filename_column``
    is filled from the row's own encoding.
    """
    is_directory = stat_module.S_ISDIR(st.st_mode)
    owner = identity.username(st.st_uid) if identity is not None else None
    group = identity.groupname(st.st_gid) if identity is not None else None
    ctime = time.localtime(st.st_ctime)
    row = FileRow(
        directory=directory,
        name=name,
        is_directory=is_directory,
        is_regular_file=not is_directory,
        owner=owner,
        group=group,
        size_bytes=max(0, int(st.st_size)),
        month=MONTHS[ctime.tm_mon - 1],
        day=ctime.tm_mday,
        hour=ctime.tm_hour,
        minute=ctime.tm_min,
        mode_token=normalize_mode_token(st.st_mode),
    )
    return replace(row, filename_column=encode_row(row).filename_column)


def try_strict_decode(directory: str, line: str) -> FileRow | None:
    """Decode a line produced by ``encode_row``; ``None`` when it does not match."""
    match = _STRICT_ROW_RE.fullmatch(line)
    if match is None:
        return None

    mode_token = match.group(2)
    is_directory = mode_token.startswith("d")
    return FileRow(
        directory=directory,
        name=match.group(10),
        is_directory=is_directory,
        is_regular_file=not is_directory,
        owner=_optional_field(match.group(3)),
        group=_optional_field(match.group(4)),
        size_bytes=parse_size(match.group(5)),
        month=_parse_month(match.group(6)),
        day=int(match.group(7)),
        hour=int(match.group(8)),
        minute=int(match.group(9)),
        mode_token=mode_token,
        marked=match.group(1) == "*",
        filename_column=match.start(10),
    )


def fallback_decode(directory: str, line: str) -> FileRow:
    """Best-effort name recovery for lines that are not strict rows.

    The name is whatever follows the last ``HH:MM`` token. Without a time
    token it is the last whitespace-delimited token, located by its last
    occurrence in the line.
    """
    last_time = None
    for last_time in _TIME_TOKEN_RE.finditer(line):
        pass

    if last_time is not None:
        tail = line[last_time.end() :]
        name = tail.strip()
        column = last_time.end() + (len(tail) - len(tail.lstrip())) if name else None
    else:
        parts = line.split()
        name = parts[-1] if parts else ""
        column = line.rfind(name) if name else None

    return FileRow(directory=directory, name=name, mode_token="", filename_column=column)


def decode_line(directory: str, line: str) -> DecodeResult:
    """Decode ``line`` with the strict pattern, falling back to token scanning."""
    row = try_strict_decode(directory, line)
    if row is not None:
        return DecodeResult(row=row, strategy=DecodeStrategy.STRICT)
    return DecodeResult(row=fallback_decode(directory, line), strategy=DecodeStrategy.FALLBACK)


def decode_row(directory: str, line: str) -> FileRow:
    return decode_line(directory, line).row


def filename_range(directory: str, line: str) -> tuple[int, int] | None:
    """Return ``(start, end)`` columns of the filename on ``line``, if any."""
    row = decode_row(directory, line)
    if not row.name or row.filename_column is None:
        return None
    return row.filename_column, row.filename_column + len(row.name)


__all__ = [
    "MONTHS",
    "SIZE_COLUMN_WIDTH",
    "ABSENT_PLACEHOLDER",
    "encode_row",
    "encode_line",
    "normalize_mode_token",
    "row_from_stat",
    "try_strict_decode",
    "fallback_decode",
    "decode_line",
    "decode_row",
    "filename_range",
]
