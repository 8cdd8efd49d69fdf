"""Unit tests for the pooled connectors' engine factory."""

import sqlite3

import pytest
from sqlalchemy.engine import make_url

from cursorspec.adapters.connectors.engine import autocommit_connect_args, make_engine


@pytest.mark.parametrize(
    "url, expected",
    [
        ("sqlite:///:memory:", {"isolation_level": None}),
        (make_url("sqlite+pysqlite:///file.db"), {"isolation_level": None}),
        ("postgresql+psycopg://u:p@localhost/db", {"autocommit": True}),
    ],
)
def test_autocommit_connect_args(url, expected):
    assert autocommit_connect_args(url) == expected


def test_unknown_backend_is_rejected():
    with pytest.raises(ValueError, match="'mysql'"):
        autocommit_connect_args("mysql://u:p@localhost/db")


def test_pooled_sqlite_connections_autocommit(tmp_path):
    """A write through one pooled connection is visible to a fresh one at once."""
    path = tmp_path / "test.db"
    engine = make_engine(f"sqlite+pysqlite:///{path}")
    try:
        raw = engine.raw_connection()
        try:
            assert raw.driver_connection.isolation_level is None
            cur = raw.cursor()
            cur.execute("CREATE TABLE t (x INTEGER)")
            cur.execute("INSERT INTO t VALUES (1)")
            cur.close()
        finally:
            raw.close()
    finally:
        engine.dispose()

    other = sqlite3.connect(path)
    try:
        assert other.execute("SELECT x FROM t").fetchall() == [(1,)]
    finally:
        other.close()
