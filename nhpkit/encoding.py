"""Standard base64 encoding helpers."""

from __future__ import annotations

import base64


def decode_string(s: str) -> bytes:
    """Decode standard, padded base64; raise ``ValueError`` if malformed."""
    return base64.b64decode(s, validate=True)


def encoding_string(data: bytes) -> str:
    """Encode ``data`` as standard, padded base64."""
    return base64.b64encode(data).decode("ascii")