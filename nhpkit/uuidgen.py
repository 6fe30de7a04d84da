"""Random identifiers and numbers."""

from __future__ import annotations

import random
import time


def _rng() -> random.Random:
    return random.Random(time.time_ns())


def new_uuid() -> str:
    """Return a random version-4, variant-1 UUID string."""
    raw = bytearray(_rng().randbytes(16))
    raw[6] = (raw[6] & 0x0F) | 0x40
    raw[8] = (raw[8] & 0x3F) | 0x80
    return "-".join(
        raw[start:end].hex() for start, end in ((0, 4), (4, 6), (6, 8), (8, 10), (10, 16))
    )


def rand_number() -> int:
    """Return a random four-digit number (1000 to 9999)."""
    number = _rng().randrange(10000)
    if number < 1000:
        number += 1000
    return number