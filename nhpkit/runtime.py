"""Runtime helpers: random values, exception guards and dates."""

from __future__ import annotations

import random
import time
import traceback
from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Iterator, Optional

from . import logger as log


def get_random_uint32() -> int:
    """Return a random non-zero 32-bit unsigned integer."""
    rng = random.Random(time.time_ns())
    while True:
        value = rng.getrandbits(32)
        if value != 0:
            return value


def _log_exception(exc: BaseException) -> None:
    text = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    for line in [str(exc), *text.split("\n")]:
        if line.strip():
            log.error(line)


@contextmanager
def catch_panic() -> Iterator[None]:
    """Swallow an exception raised in the block, logging it line by line."""
    try:
        yield
    except Exception as exc:
        _log_exception(exc)


@contextmanager
def catch_panic_then_run(catch_fun: Optional[Callable[[], None]]) -> Iterator[None]:
    """Like :func:`catch_panic`, then call ``catch_fun`` if an exception was caught."""
    try:
        yield
    except Exception as exc:
        _log_exception(exc)
        if catch_fun is not None:
            catch_fun()


def get_current_date() -> str:
    """Return today's date as ``YYYYMMDD``."""
    return datetime.now().strftime("%Y%m%d")