"""Shared MySQL database engine."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine

from .crypto import aes_decrypt

MAX_IDLE_CONNECTIONS = 10
MAX_OPEN_CONNECTIONS = 100
CONNECTION_MAX_LIFETIME = 10

_engine: Optional[Engine] = None


def _split_host(host: str) -> tuple[str, Optional[int]]:
    name, sep, port = host.rpartition(":")
    if sep and name and port.isdigit():
        return name.strip("[]"), int(port)
    return host, None


def new_database(
    host: str, user: str, password: str, db: str, is_encrypted: bool
) -> Engine:
    """Connect to MySQL at ``host`` (``name[:port]``) and make it the shared engine.

    With ``is_encrypted`` the user and password are decrypted first.
    Raises on bad credentials encoding or when the server cannot be reached.
    """
    global _engine
    if is_encrypted:
        user = aes_decrypt(user)
        password = aes_decrypt(password)

    hostname, port = _split_host(host)
    url = URL.create(
        "mysql+pymysql",
        username=user,
        password=password,
        host=hostname,
        port=port,
        database=db,
        query={"charset": "utf8mb4"},
    )
    engine = create_engine(
        url,
        pool_size=MAX_IDLE_CONNECTIONS,
        max_overflow=MAX_OPEN_CONNECTIONS - MAX_IDLE_CONNECTIONS,
        pool_recycle=CONNECTION_MAX_LIFETIME,
    )
    try:
        with engine.connect():
            pass
    except Exception:
        engine.dispose()
        raise
    _engine = engine
    return engine


def get_db() -> Optional[Engine]:
    """Return the shared engine, or None before a successful connection."""
    return _engine