"""Connection, command and factory implementations over PEP 249 drivers.

The factory is parameterized by a ``connect`` callable that turns a
connection string into a DB-API connection (``sqlite3.connect``, a SQLAlchemy
engine's ``raw_connection``, ...), and by the `Dialect` describing the
backend. It counts open connections so connector teardown can report leaks.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from cursorspec.interfaces.connection import (
    Command,
    Connection,
    ConnectionFactory,
    ConnectionState,
)
from cursorspec.interfaces.errors import CommandStateError
from cursorspec.interfaces.values import ABSENT

from .dialect import Dialect
from .reader import DbApiReader

logger = logging.getLogger(__name__)


class DbApiConnectionFactory(ConnectionFactory):
    """Creates `DbApiConnection` objects for one backend.

    Args:
        connect: Callable returning a DB-API connection for a connection string.
        dialect: Backend-specific reader behavior.
    """

    def __init__(self, connect: Callable[[str], Any], dialect: Dialect) -> None:
        self.connect = connect
        self.dialect = dialect
        self._open = 0

    def create_connection(self, connection_string: str) -> DbApiConnection:
        return DbApiConnection(self, connection_string)

    @property
    def open_connections(self) -> int:
        return self._open

    def _opened(self) -> None:
        self._open += 1

    def _closed(self) -> None:
        self._open -= 1


class DbApiConnection(Connection):
    """A connection wrapping one DB-API connection.

    At most one reader may be open on a connection at a time; a new command
    can execute only after the previous reader is closed.
    """

    def __init__(self, factory: DbApiConnectionFactory, connection_string: str) -> None:
        self._factory = factory
        self.connection_string = connection_string
        self._dbapi: Any = None
        self._state = ConnectionState.CLOSED
        self._active_reader: DbApiReader | None = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def dialect(self) -> Dialect:
        return self._factory.dialect

    def open(self) -> None:
        if self._state is ConnectionState.OPEN:
            raise CommandStateError("open", "the connection is already open")
        with self.dialect.translate_errors("connect"):
            self._dbapi = self._factory.connect(self.connection_string)
        self._state = ConnectionState.OPEN
        self._factory._opened()  # pylint: disable=protected-access
        logger.debug("%s: connection opened", self.dialect.name)

    def close(self) -> None:
        if self._state is ConnectionState.CLOSED:
            return
        reader, self._active_reader = self._active_reader, None
        self._state = ConnectionState.CLOSED
        self._factory._closed()  # pylint: disable=protected-access
        try:
            if reader is not None:
                reader.close()
        finally:
            dbapi, self._dbapi = self._dbapi, None
            with self.dialect.translate_errors("close connection"):
                dbapi.close()
        logger.debug("%s: connection closed", self.dialect.name)

    def create_command(self, command_text: str = "") -> DbApiCommand:
        return DbApiCommand(self, command_text)

    def _start_reader(self, operation: str, command_text: str) -> DbApiReader:
        if self._state is not ConnectionState.OPEN:
            raise CommandStateError(operation, "the connection is not open")
        if self._active_reader is not None:
            raise CommandStateError(
                operation, "a reader is still open on this connection"
            )
        statements = self.dialect.split(command_text)
        with self.dialect.translate_errors("create cursor"):
            cursor = self._dbapi.cursor()
        reader = DbApiReader(cursor, statements, self.dialect, self._reader_closed)
        self._active_reader = reader
        return reader

    def _reader_closed(self, reader: DbApiReader) -> None:
        if self._active_reader is reader:
            self._active_reader = None


class DbApiCommand(Command):
    """A command bound to one `DbApiConnection`."""

    def __init__(self, connection: DbApiConnection, command_text: str = "") -> None:
        self._connection = connection
        self.command_text = command_text
        self._closed = False

    @property
    def connection(self) -> DbApiConnection:
        return self._connection

    def execute_reader(self) -> DbApiReader:
        self._require_executable("execute_reader")
        return self._connection._start_reader(  # pylint: disable=protected-access
            "execute_reader", self.command_text
        )

    def execute_scalar(self) -> Any:
        self._require_executable("execute_scalar")
        with self.execute_reader() as reader:
            if reader.field_count == 0 or not reader.read():
                return ABSENT
            return reader.get_value(0)

    def execute_non_query(self) -> int:
        self._require_executable("execute_non_query")
        with self.execute_reader() as reader:
            while reader.next_result():
                pass
            return reader.records_affected

    def close(self) -> None:
        self._closed = True

    def _require_executable(self, operation: str) -> None:
        if self._closed:
            raise CommandStateError(operation, "the command is closed")
        if not self.command_text or not self.command_text.strip():
            raise CommandStateError(operation, "command_text is empty")
