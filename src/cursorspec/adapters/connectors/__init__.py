"""Registry of the connectors shipped with cursorspec.

Connectors are registered under a short key (``sqlite``, ``postgres``, ...)
and built on demand, so a connector whose configuration is missing only
fails when it is actually requested.
"""

from __future__ import annotations

from collections.abc import Callable

from cursorspec.interfaces.connector import Connector, ConnectorError

from .postgres import PostgresConnector, PostgresDialect, PostgresFixture
from .sqlite import (
    SqlAlchemySqliteConnector,
    Sqlite3Connector,
    SqliteDialect,
    SqliteFixture,
)

ConnectorBuilder = Callable[[], Connector]

_REGISTRY: dict[str, ConnectorBuilder] = {}


class UnknownConnectorError(ConnectorError):
    """Raised when no connector is registered under a key."""

    def __init__(self, key: str, available: list[str]) -> None:
        super().__init__(
            f"Unknown connector '{key}'. Available: {', '.join(available) or '<none>'}."
        )
        self.key = key


def register_connector(key: str, builder: ConnectorBuilder) -> None:
    """Register ``builder`` under ``key``, replacing any previous registration."""
    _REGISTRY[key] = builder


def available_connectors() -> list[str]:
    """Registered connector keys, in registration order."""
    return list(_REGISTRY)


def get_connector(key: str) -> Connector:
    """Build the connector registered under ``key``.

    Raises:
        UnknownConnectorError: If nothing is registered under ``key``.
        ConnectorNotConfiguredError: If the connector's configuration is missing.
    """
    try:
        builder = _REGISTRY[key]
    except KeyError as e:
        raise UnknownConnectorError(key, available_connectors()) from e
    return builder()


register_connector(Sqlite3Connector.key, Sqlite3Connector)
register_connector(SqlAlchemySqliteConnector.key, SqlAlchemySqliteConnector)
register_connector(PostgresConnector.key, PostgresConnector)

__all__ = [
    "PostgresConnector",
    "PostgresDialect",
    "PostgresFixture",
    "SqlAlchemySqliteConnector",
    "Sqlite3Connector",
    "SqliteDialect",
    "SqliteFixture",
    "UnknownConnectorError",
    "available_connectors",
    "get_connector",
    "register_connector",
]
