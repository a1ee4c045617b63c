"""Domain model for editable directory listings.

This package contains the non-UI listing primitives:
- row datatypes and the fixed-column line codec
- compact decimal size tokens
- directory scanning into snapshots plus text rendering
- the mtime-validated, LRU-bounded per-directory snapshot cache
"""

from __future__ import annotations

from .types import (
    SYNTHETIC_NAMES,
    DecodeResult,
    DecodeStrategy,
    EncodedRow,
    FileRow,
    ListingOptions,
    ListingSnapshot,
    ListingWarning,
)
from .sizes import format_size, parse_size
from .codec import (
    decode_line,
    decode_row,
    encode_line,
    encode_row,
    fallback_decode,
    filename_range,
    row_from_stat,
    try_strict_decode,
)
from .identity import IdentityResolver, StaticIdentityResolver, SystemIdentityResolver
from .snapshot import build_listing_snapshot, is_truncation_note, render_header, render_listing
from .cache import DEFAULT_MAX_CACHED_DIRECTORIES, CacheEntry, ListingCache, LRUCache

__all__ = [
    "SYNTHETIC_NAMES",
    "FileRow",
    "EncodedRow",
    "DecodeStrategy",
    "DecodeResult",
    "ListingOptions",
    "ListingWarning",
    "ListingSnapshot",
    "format_size",
    "parse_size",
    "encode_row",
    "encode_line",
    "row_from_stat",
    "try_strict_decode",
    "fallback_decode",
    "decode_line",
    "decode_row",
    "filename_range",
    "IdentityResolver",
    "SystemIdentityResolver",
    "StaticIdentityResolver",
    "build_listing_snapshot",
    "is_truncation_note",
    "render_header",
    "render_listing",
    "DEFAULT_MAX_CACHED_DIRECTORIES",
    "CacheEntry",
    "LRUCache",
    "ListingCache",
]
