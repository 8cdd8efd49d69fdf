"""PostgreSQL connector: psycopg (v3) connections from a SQLAlchemy pool.

PostgreSQL is statically typed, so column metadata comes from the type OIDs in
the cursor description rather than from the first row.

Documented deviations from the default checks, published as overrides:

- unquoted identifiers fold to lower case, so checks comparing a column alias
  quote it;
- the empty-scalar statement reads a system catalog.
"""

from __future__ import annotations

import datetime
import uuid
from decimal import Decimal
from typing import Any, ClassVar

import psycopg
import sqlalchemy
from psycopg.postgres import types as pg_types
from sqlalchemy import exc as sa_exc
from sqlalchemy.engine import make_url

from cursorspec.adapters.dbapi import DbApiConnectionFactory, Dialect
from cursorspec.config import get_pg_url
from cursorspec.interfaces.connector import Connector, ConnectorLifecycleError
from cursorspec.interfaces.fixture import DbFactoryFixture, Override

from .engine import make_engine

#: Python types of the built-in type OIDs the connector reports.
OID_TYPES: dict[int, type] = {
    16: bool,  # bool
    17: bytes,  # bytea
    19: str,  # name
    20: int,  # int8
    21: int,  # int2
    23: int,  # int4
    25: str,  # text
    700: float,  # float4
    701: float,  # float8
    705: str,  # unknown (untyped literals)
    1043: str,  # varchar
    1114: datetime.datetime,  # timestamp
    1184: datetime.datetime,  # timestamptz
    1700: Decimal,  # numeric
    2950: uuid.UUID,  # uuid
}

QUOTED_ALIAS = 'SELECT 1 AS "Id";'


class PostgresDialect(Dialect):
    """Column metadata from PostgreSQL type OIDs."""

    name = "postgresql"

    def field_type(self, type_code: Any, sample: Any) -> type:
        if type_code in OID_TYPES:
            return OID_TYPES[type_code]
        return super().field_type(type_code, sample)

    def data_type_name(self, type_code: Any, sample: Any) -> str:
        if (info := pg_types.get(type_code)) is not None:
            return info.name
        return super().data_type_name(type_code, sample)


class PostgresFixture(DbFactoryFixture):
    """Fixture for the PostgreSQL connector."""

    overrides = {
        "reader.get_name_works": Override(statement=QUOTED_ALIAS),
        "reader.get_ordinal_works": Override(statement=QUOTED_ALIAS),
        "command.execute_scalar_returns_absent_when_empty": Override(
            statement="SELECT 1 FROM pg_catalog.pg_class WHERE 0 = 1;"
        ),
    }

    def create_boolean_literal(self, value: bool) -> str:
        return "TRUE" if value else "FALSE"

    def create_hex_literal(self, value: bytes) -> str:
        return f"decode('{value.hex()}', 'hex')"

    @property
    def select_no_rows(self) -> str:
        return "SELECT 1 WHERE 0 = 1;"


class PostgresConnector(Connector):
    """PostgreSQL through SQLAlchemy's pool and the psycopg driver.

    Args:
        url: SQLAlchemy URL (``postgresql+psycopg://...``). Defaults to
            `CURSORSPEC_PG_URL`.

    Raises:
        ConnectorNotConfiguredError: If no URL is given and
            `CURSORSPEC_PG_URL` is not set.
    """

    key: ClassVar[str] = "postgres"

    def __init__(self, url: str | None = None) -> None:
        super().__init__()
        self.url = make_url(url or get_pg_url()).set(drivername="postgresql+psycopg")
        self._engine: Any = None
        self._factory = DbApiConnectionFactory(
            self._connect,
            PostgresDialect(driver_errors=(psycopg.Error, sa_exc.DBAPIError)),
        )

    @property
    def name(self) -> str:
        return f"postgresql (psycopg {psycopg.__version__}, sqlalchemy {sqlalchemy.__version__})"

    @property
    def factory(self) -> DbApiConnectionFactory:
        return self._factory

    def create_fixture(self) -> PostgresFixture:
        return PostgresFixture(self._factory, self.url.render_as_string(hide_password=True))

    def _on_initialize(self) -> None:
        self._engine = make_engine(self.url)

    def _on_uninitialize(self) -> None:
        engine, self._engine = self._engine, None
        engine.dispose()

    def _connect(self, connection_string: str) -> Any:  # pylint: disable=unused-argument
        if self._engine is None:
            raise ConnectorLifecycleError(self.name, "connect", "not initialized")
        return self._engine.raw_connection()
