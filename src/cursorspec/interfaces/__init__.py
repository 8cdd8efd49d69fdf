"""cursorspec interfaces package.

The contract surface every connector implements (`Reader`, `Command`,
`Connection`, `ConnectionFactory`), the error taxonomy, the value model and
the fixture/connector seams the suites are run through.
"""

from .connection import Command, Connection, ConnectionFactory, ConnectionState
from .connector import Connector, ConnectorError, ConnectorLifecycleError
from .errors import (
    BackendIOError,
    CommandStateError,
    ErrorKind,
    IndexRangeError,
    ReadBeforeRowError,
    ReaderClosedError,
    ReaderError,
    ReaderExhaustedError,
    StateMisuseError,
    TypeMismatchError,
    error_kind,
)
from .fixture import UNSET, DbFactoryFixture, Override
from .reader import Reader, ReaderState, Record
from .values import ABSENT, Absent, FieldValue, Present, is_absent

__all__ = [
    "ABSENT",
    "Absent",
    "BackendIOError",
    "Command",
    "CommandStateError",
    "Connection",
    "ConnectionFactory",
    "ConnectionState",
    "Connector",
    "ConnectorError",
    "ConnectorLifecycleError",
    "DbFactoryFixture",
    "ErrorKind",
    "FieldValue",
    "IndexRangeError",
    "Override",
    "Present",
    "ReadBeforeRowError",
    "Reader",
    "ReaderClosedError",
    "ReaderError",
    "ReaderExhaustedError",
    "ReaderState",
    "Record",
    "StateMisuseError",
    "TypeMismatchError",
    "UNSET",
    "error_kind",
    "is_absent",
]
