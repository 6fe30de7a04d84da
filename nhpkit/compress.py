"""Gzip compression of strings."""

from __future__ import annotations

import base64
import binascii
import gzip
import zlib


def compression(data: str) -> bytes:
    """Gzip-compress ``data`` and return the raw gzip bytes."""
    return gzip.compress(data.encode("utf-8"))


def decompression(data: str) -> str:
    """Decompress base64-encoded gzip data and return the text.

    Invalid base64 is treated as empty input; raises ``ValueError`` when
    the payload is not valid gzip.
    """
    try:
        raw = base64.b64decode(data, validate=True)
    except binascii.Error:
        raw = b""
    try:
        return gzip.decompress(raw).decode("utf-8", errors="replace")
    except (OSError, EOFError, zlib.error) as exc:
        raise ValueError(f"invalid gzip data: {exc}") from exc