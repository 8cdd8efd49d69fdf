"""SQLite connectors.

Two connectors exercise the same engine through different client stacks:

- `Sqlite3Connector` opens plain ``sqlite3`` connections, one per
  `Connection.open()`.
- `SqlAlchemySqliteConnector` borrows connections from a SQLAlchemy pool and
  clears the pool on teardown.

Both share `SqliteFixture`: SQLite has no boolean type (``1``/``0``) and
writes binary literals as ``X'..'``.
"""

from __future__ import annotations

import sqlite3
from typing import Any, ClassVar

import sqlalchemy
from sqlalchemy import exc as sa_exc
from sqlalchemy.engine import URL

from cursorspec.adapters.dbapi import BRACKET_QUOTES, DbApiConnectionFactory, Dialect
from cursorspec.config import get_sqlite_database
from cursorspec.interfaces.connector import Connector, ConnectorLifecycleError
from cursorspec.interfaces.fixture import DbFactoryFixture

from .engine import make_engine


class SqliteDialect(Dialect):
    """SQLite: dynamically typed, column types inferred from the first row."""

    name = "sqlite"
    quotes = BRACKET_QUOTES


class SqliteFixture(DbFactoryFixture):
    """Fixture for SQLite-backed connectors."""

    def create_boolean_literal(self, value: bool) -> str:
        return "1" if value else "0"

    def create_hex_literal(self, value: bytes) -> str:
        return f"X'{value.hex().upper()}'"

    @property
    def select_no_rows(self) -> str:
        return "SELECT 1 WHERE 0 = 1;"


class Sqlite3Connector(Connector):
    """The standard library ``sqlite3`` driver, in autocommit mode.

    Args:
        database: Database path, or ``":memory:"``. Defaults to
            `CURSORSPEC_SQLITE_DATABASE`.
    """

    key: ClassVar[str] = "sqlite"

    def __init__(self, database: str | None = None) -> None:
        super().__init__()
        self.database = database or get_sqlite_database()
        self._factory = DbApiConnectionFactory(
            self._connect, SqliteDialect(driver_errors=(sqlite3.Error,))
        )

    @property
    def name(self) -> str:
        return f"sqlite3 {sqlite3.sqlite_version}"

    @property
    def factory(self) -> DbApiConnectionFactory:
        return self._factory

    def create_fixture(self) -> SqliteFixture:
        return SqliteFixture(self._factory, self.database)

    @staticmethod
    def _connect(connection_string: str) -> sqlite3.Connection:
        return sqlite3.connect(connection_string, isolation_level=None)


class SqlAlchemySqliteConnector(Connector):
    """SQLite through a SQLAlchemy connection pool.

    The engine is created by `initialize()` and disposed by `uninitialize()`;
    opening a connection outside that window is a lifecycle error.

    Args:
        database: Database path, or ``":memory:"``. Defaults to
            `CURSORSPEC_SQLITE_DATABASE`.
    """

    key: ClassVar[str] = "sqlalchemy-sqlite"

    def __init__(self, database: str | None = None) -> None:
        super().__init__()
        self.database = database or get_sqlite_database()
        self.url = URL.create("sqlite+pysqlite", database=self.database)
        self._engine: Any = None
        self._factory = DbApiConnectionFactory(
            self._connect,
            SqliteDialect(driver_errors=(sqlite3.Error, sa_exc.DBAPIError)),
        )

    @property
    def name(self) -> str:
        return f"sqlalchemy {sqlalchemy.__version__} (sqlite {sqlite3.sqlite_version})"

    @property
    def factory(self) -> DbApiConnectionFactory:
        return self._factory

    def create_fixture(self) -> SqliteFixture:
        return SqliteFixture(self._factory, self.url.render_as_string())

    def _on_initialize(self) -> None:
        self._engine = make_engine(self.url)

    def _on_uninitialize(self) -> None:
        engine, self._engine = self._engine, None
        engine.dispose()

    def _connect(self, connection_string: str) -> Any:  # pylint: disable=unused-argument
        if self._engine is None:
            raise ConnectorLifecycleError(self.name, "connect", "not initialized")
        return self._engine.raw_connection()
