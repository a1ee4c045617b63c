"""Compact decimal size tokens for listing rows.

``format_size`` renders byte counts as ``532``, ``5.5K``, ``1.2M``; units are
powers of 1000. ``parse_size`` is the lossy inverse used when decoding rows.
"""

from __future__ import annotations

import math
import re

SIZE_UNITS = ("K", "M", "G", "T", "P")
_UNIT_MULTIPLIERS = {unit: 1000 ** (idx + 1) for idx, unit in enumerate(SIZE_UNITS)}

_LEADING_FLOAT_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)")
_LEADING_INT_RE = re.compile(r"[+-]?\d+")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_size(size_bytes: int) -> str:
    """Return a compact size token for ``size_bytes``."""
    if size_bytes < 1000:
        return str(int(size_bytes))

    value = float(size_bytes)
    unit_idx = -1
    while value >= 1000 and unit_idx < len(SIZE_UNITS) - 1:
        value /= 1000
        unit_idx += 1

    tenths = _round_half_up(value * 10) / 10
    if value < 10 and tenths != _round_half_up(value):
        formatted = f"{tenths:.1f}"
    else:
        formatted = str(_round_half_up(value))
    return f"{formatted}{SIZE_UNITS[unit_idx]}"


def parse_size(token: str) -> int:
    """Parse a size token back to bytes, returning ``0`` when unparseable."""
    text = (token or "").strip()
    if not text:
        return 0

    multiplier = _UNIT_MULTIPLIERS.get(text[-1].upper())
    if multiplier is not None:
        match = _LEADING_FLOAT_RE.match(text[:-1])
        if match is None:
            return 0
        return _round_half_up(float(match.group(0)) * multiplier)

    match = _LEADING_INT_RE.match(text)
    if match is None:
        return 0
    return int(match.group(0))


__all__ = ["SIZE_UNITS", "format_size", "parse_size"]
