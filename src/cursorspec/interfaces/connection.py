"""Connection, command and connection-factory interfaces.

A `ConnectionFactory` is the handle a connector registers. It creates
unopened `Connection` objects; each open connection creates `Command` objects
bound to it, and each command produces `Reader` objects one at a time.

All three are context managers. Leaving a ``with`` block releases the
resource on every exit path, which the contract requires: a leaked connection
corrupts the pool that `Connector.uninitialize()` clears.
"""

from __future__ import annotations

import abc
from enum import Enum
from types import TracebackType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .reader import Reader


class ConnectionState(str, Enum):
    """Lifecycle states of a connection."""

    CLOSED = "closed"
    OPEN = "open"


class Command(abc.ABC):
    """A unit of work bound to one open connection.

    Attributes:
        command_text (str): The statement or ``;``-separated batch to execute.
    """

    command_text: str

    @property
    @abc.abstractmethod
    def connection(self) -> Connection:
        """The connection this command is bound to."""

    @abc.abstractmethod
    def execute_reader(self) -> Reader:
        """Execute `command_text` and return a reader over its result sets.

        Raises:
            CommandStateError: If `command_text` is empty, the connection is
                not open, or a previous reader of this command is still open.
            BackendIOError: If the driver fails.
        """

    @abc.abstractmethod
    def execute_scalar(self) -> Any:
        """Return the first column of the first row of the first result set.

        Returns `ABSENT` when the result set is empty or the value is absent.
        """

    @abc.abstractmethod
    def execute_non_query(self) -> int:
        """Execute `command_text` and return the number of rows affected (-1 if unknown)."""

    @abc.abstractmethod
    def close(self) -> None:
        """Release the command. Idempotent."""

    def __enter__(self) -> Command:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class Connection(abc.ABC):
    """An opened, stateful channel to a backend."""

    @property
    @abc.abstractmethod
    def state(self) -> ConnectionState:
        """Current state. Valid at any time, including after `close()`."""

    @abc.abstractmethod
    def open(self) -> None:
        """Open the connection.

        Raises:
            CommandStateError: If the connection is already open.
            BackendIOError: If the backend cannot be reached.
        """

    @abc.abstractmethod
    def close(self) -> None:
        """Close the connection. Idempotent."""

    @abc.abstractmethod
    def create_command(self, command_text: str = "") -> Command:
        """Create a command bound to this connection."""

    def __enter__(self) -> Connection:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class ConnectionFactory(abc.ABC):
    """Creates connections for one backend and tracks how many are open."""

    @abc.abstractmethod
    def create_connection(self, connection_string: str) -> Connection:
        """Return a new, unopened connection for ``connection_string``."""

    @property
    @abc.abstractmethod
    def open_connections(self) -> int:
        """Number of connections created by this factory that are still open."""
