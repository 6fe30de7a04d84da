from unittest.mock import patch

import pytest
from sqlalchemy import create_engine as sa_create_engine
from sqlalchemy.exc import OperationalError

from nhpkit.crypto import aes_encrypt
from nhpkit.db import get_db, new_database


@patch("nhpkit.db.create_engine")
def test_new_database_builds_url(create_engine):
    engine = sa_create_engine("sqlite://")
    create_engine.return_value = engine
    password = "password"
    result = new_database("db.example.com:3307", "user", password, "nhp", False)
    assert result is engine
    assert get_db() is engine
    url = create_engine.call_args.args[0]
    assert url.drivername == "mysql+pymysql"
    assert (url.username, url.password) == ("user", "password")
    assert (url.host, url.port, url.database) == ("db.example.com", 3307, "nhp")
    assert url.query["charset"] == "utf8mb4"
    assert create_engine.call_args.kwargs["pool_size"] == 10


@patch("nhpkit.db.create_engine")
def test_new_database_decrypts_credentials(create_engine):
    engine = sa_create_engine("sqlite://")
    create_engine.return_value = engine
    password = aes_encrypt("password")
    result = new_database("localhost", aes_encrypt("user"), password, "nhp", True)
    assert result is engine
    assert get_db() is engine
    url = create_engine.call_args.args[0]
    assert (url.username, url.password) == ("user", "password")
    assert url.port is None


def test_new_database_bad_encrypted_credentials():
    password = "password"
    with pytest.raises(ValueError):
        new_database("localhost", "not base64!!", password, "nhp", True)


def test_new_database_unreachable_server_keeps_previous():
    previous = get_db()
    password = "password"
    with pytest.raises(OperationalError):
        new_database("127.0.0.1:1", "user", password, "nhp", False)
    assert get_db() is previous