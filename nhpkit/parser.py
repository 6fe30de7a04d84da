"""Lenient number and flag parsing that falls back to zero."""

from __future__ import annotations

import re

_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1
_UINT64_MAX = (1 << 64) - 1

_SIGNED = re.compile(r"[+-]?[0-9]+")
_UNSIGNED = re.compile(r"[0-9]+")


def parse_bool(v: int) -> bool:
    """Return True only when ``v`` is 1."""
    return v == 1


def parse_int(v: str) -> int:
    """Parse a signed 64-bit decimal integer; return 0 when invalid."""
    if not _SIGNED.fullmatch(v):
        return 0
    result = int(v)
    return result if _INT64_MIN <= result <= _INT64_MAX else 0


def parse_uint64(v: str) -> int:
    """Parse an unsigned 64-bit decimal integer; return 0 when invalid."""
    if not _UNSIGNED.fullmatch(v):
        return 0
    result = int(v)
    return result if result <= _UINT64_MAX else 0


def parse_int64_to_int(v: int) -> int:
    """Return ``v`` when it fits a signed 64-bit integer, else 0."""
    return v if _INT64_MIN <= v <= _INT64_MAX else 0