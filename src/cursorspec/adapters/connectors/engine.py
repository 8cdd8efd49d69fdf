"""SQLAlchemy engines for the pooled connectors.

Connectors built on SQLAlchemy do not use the ORM or Core execution layer:
they borrow DB-API connections from the engine's pool through
``Engine.raw_connection()`` and hand them to the generic DB-API reader.
The engine is what owns process-wide state (the pool), so connector
teardown is ``Engine.dispose()``.

Pooled connections are opened in driver-level autocommit, the mode the plain
``sqlite3`` connector uses, so a batch sees the same transaction behavior
whichever client stack runs it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, make_url

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

#: DB-API ``connect()`` arguments that switch each driver to autocommit.
AUTOCOMMIT_CONNECT_ARGS: dict[str, dict[str, Any]] = {
    "sqlite": {"isolation_level": None},
    "postgresql": {"autocommit": True},
}


def autocommit_connect_args(url: str | URL) -> dict[str, Any]:
    """Return the driver arguments that put connections to ``url`` in autocommit.

    Raises:
        ValueError: If the backend of ``url`` has no known autocommit switch.
    """
    backend = make_url(url).get_backend_name()
    try:
        return dict(AUTOCOMMIT_CONNECT_ARGS[backend])
    except KeyError:
        raise ValueError(f"No autocommit mode known for backend {backend!r}.") from None


def make_engine(url: str | URL, *, echo: bool = False) -> Engine:
    """Create the engine whose pool hands out autocommit DB-API connections.

    Nothing is connected until the first ``raw_connection()``.
    """
    return create_engine(url, echo=echo, connect_args=autocommit_connect_args(url))
