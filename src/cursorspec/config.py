"""Configuration utilities for cursorspec.

This module centralizes the environment variables the connectors read.
"""

import os

SQLITE_DATABASE_ENV = "CURSORSPEC_SQLITE_DATABASE"  # pragma: no mutate
PG_URL_ENV = "CURSORSPEC_PG_URL"  # pragma: no mutate

DEFAULT_SQLITE_DATABASE = ":memory:"


class ConnectorNotConfiguredError(Exception):
    """Raised when a connector's configuration variable is not set.

    Attributes:
        connector: Name of the connector that cannot be configured.
        variable: Name of the missing environment variable.
    """

    def __init__(self, connector: str, variable: str) -> None:
        super().__init__(
            f"Connector '{connector}' is not configured: set {variable}."
        )
        self.connector = connector
        self.variable = variable


def get_sqlite_database() -> str:
    """Get the SQLite database path from the environment.

    Returns:
        The value of `CURSORSPEC_SQLITE_DATABASE`, or ``":memory:"`` when unset.
    """
    return os.environ.get(SQLITE_DATABASE_ENV) or DEFAULT_SQLITE_DATABASE


def get_pg_url() -> str:
    """Get the PostgreSQL SQLAlchemy URL from the environment.

    Returns:
        The value of the `CURSORSPEC_PG_URL` environment variable.

    Raises:
        ConnectorNotConfiguredError: If `CURSORSPEC_PG_URL` is not set.
    """
    if not (url := os.environ.get(PG_URL_ENV)):
        raise ConnectorNotConfiguredError("postgres", PG_URL_ENV)
    return url
