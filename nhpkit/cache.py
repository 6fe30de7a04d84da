"""In-memory key/value cache with per-entry expiry and size limits."""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from typing import Callable, Optional, Union

CACHE_SIZE = 1 * 1024 * 1024
EXPIRE_GRPC_DNS = 60 * 60 * 2
EXPIRE_GRPC_SMARTSENCE = 60 * 60 * 2
EXPIRE_LINKER_LEASE = 60 * 5
EXPIRE_LOG_TIMEGAP = 5
EXPIRE_LINKER_PEER = 60
EXPIRE_PEER_POLICY_IP = 10
EXPIRE_USER_FORBIDDEN_IP = 10
EXPIRE = 0

ENTRY_HEADER_SIZE = 24
MIN_CACHE_SIZE = 512 * 1024
MAX_KEY_SIZE = 65535

Data = Union[str, bytes]


def _as_bytes(data: Data) -> bytes:
    return data.encode("utf-8") if isinstance(data, str) else bytes(data)


class ExpiringCache:
    """Bounded cache; entries larger than 1/1024 of the size are refused.

    A timeout of zero or less means the entry never expires. When the cache
    is full the least recently used entries are evicted.
    """

    def __init__(self, size: int = CACHE_SIZE, clock: Callable[[], float] = time.time) -> None:
        self.size = max(size, MIN_CACHE_SIZE)
        self.max_entry_size = self.size // 1024 - ENTRY_HEADER_SIZE
        self._clock = clock
        self._entries: "OrderedDict[bytes, tuple[bytes, int]]" = OrderedDict()
        self._used = 0
        self._lock = threading.Lock()

    def _now(self) -> int:
        return int(self._clock())

    @staticmethod
    def _cost(key: bytes, value: bytes) -> int:
        return ENTRY_HEADER_SIZE + len(key) + len(value)

    def _remove(self, key: bytes) -> None:
        value, _ = self._entries.pop(key)
        self._used -= self._cost(key, value)

    def set(self, key: Data, value: Data, timeout: int) -> None:
        """Store ``value`` under ``key``; raise ``ValueError`` if too large."""
        key_bytes, value_bytes = _as_bytes(key), _as_bytes(value)
        if len(key_bytes) > MAX_KEY_SIZE:
            raise ValueError("the key is larger than 65535")
        if len(key_bytes) + len(value_bytes) > self.max_entry_size:
            raise ValueError("the entry size needs to be less than 1/1024 of the cache size")
        expire_at = self._now() + timeout if timeout > 0 else 0
        with self._lock:
            if key_bytes in self._entries:
                self._remove(key_bytes)
            cost = self._cost(key_bytes, value_bytes)
            while self._entries and self._used + cost > self.size:
                self._remove(next(iter(self._entries)))
            self._entries[key_bytes] = (value_bytes, expire_at)
            self._used += cost

    def get(self, key: Data) -> Optional[bytes]:
        """Return the stored value, or None if missing or expired."""
        key_bytes = _as_bytes(key)
        with self._lock:
            entry = self._entries.get(key_bytes)
            if entry is None:
                return None
            value, expire_at = entry
            if expire_at != 0 and expire_at <= self._now():
                self._remove(key_bytes)
                return None
            self._entries.move_to_end(key_bytes)
            return value

    def delete(self, key: Data) -> bool:
        """Remove ``key``; return whether it was present."""
        key_bytes = _as_bytes(key)
        with self._lock:
            if key_bytes not in self._entries:
                return False
            self._remove(key_bytes)
            return True


_store = ExpiringCache(CACHE_SIZE)


def format_cache_key(*args: str) -> str:
    """Join key parts with ``/``."""
    return "/".join(args)


def cache_write_value(key: str, value: str, timeout: int) -> None:
    """Store a value in the shared cache."""
    _store.set(key, value, timeout)


def cache_read_value(key: str) -> str:
    """Read a value from the shared cache, or "" when absent."""
    value = _store.get(key)
    if not value:
        return ""
    return value.decode("utf-8", errors="replace")


def cache_delete_value(key: str) -> bool:
    """Delete a value from the shared cache."""
    return _store.delete(key)