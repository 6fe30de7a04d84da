"""Object pool that limits how many objects may be out at once."""

from __future__ import annotations

import threading
from collections import deque
from typing import Any, Callable


class WaitPool:
    """Pool of reusable objects; ``get`` blocks while ``max`` are in use.

    A ``max`` of zero means no limit.
    """

    def __init__(self, max: int, new: Callable[[], Any]) -> None:
        self.max = max
        self._new = new
        self._free: deque[Any] = deque()
        self._count = 0
        self._cond = threading.Condition()

    @property
    def count(self) -> int:
        return self._count

    def get(self) -> Any:
        """Take an object, creating one if none is free."""
        with self._cond:
            if self.max != 0:
                while self._count >= self.max:
                    self._cond.wait()
                self._count += 1
            if self._free:
                return self._free.pop()
        return self._new()

    def put(self, item: Any) -> None:
        """Return an object to the pool."""
        with self._cond:
            self._free.append(item)
            if self.max == 0:
                return
            self._count -= 1
            self._cond.notify()