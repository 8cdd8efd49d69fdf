"""Error taxonomy for readers, commands and connections.

Every failure the contract defines belongs to one `ErrorKind`. Conformance
checks assert on the kind rather than on a concrete exception class, so a
connector is free to raise its own subclasses as long as they derive from the
classes below.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from .reader import ReaderState


class ErrorKind(str, Enum):
    """Closed set of failure kinds surfaced by the contract.

    Attributes:
        STATE_MISUSE: Operation invoked in a state that forbids it.
        TYPE_MISMATCH: Requested type is incompatible with the stored value.
        INDEX_RANGE: Ordinal or column name outside the current column set.
        BACKEND_IO: Failure originating below the contract (driver, network).
    """

    STATE_MISUSE = "state-misuse"
    TYPE_MISMATCH = "type-mismatch"
    INDEX_RANGE = "index-range"
    BACKEND_IO = "backend-io"


class ReaderError(Exception):
    """Base class for every error defined by the contract."""

    kind: ClassVar[ErrorKind]


# ============================================================================
#                           State misuse
# ============================================================================


class StateMisuseError(ReaderError, RuntimeError):
    """Raised when an operation is invoked in a state that forbids it.

    Attributes:
        operation (str): Name of the rejected operation.
        state (ReaderState | None): Reader state at the time of the call, if
            the error concerns a reader.
    """

    kind = ErrorKind.STATE_MISUSE

    def __init__(
        self, operation: str, message: str, state: ReaderState | None = None
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.state = state


class ReadBeforeRowError(StateMisuseError):
    """Row data was requested before the first `read()` of the result set."""

    def __init__(self, operation: str, state: ReaderState) -> None:
        super().__init__(
            operation,
            f"Cannot call {operation}() before read() has positioned the reader on a row.",
            state,
        )


class ReaderExhaustedError(StateMisuseError):
    """Row data was requested after `read()` returned False."""

    def __init__(self, operation: str, state: ReaderState) -> None:
        super().__init__(
            operation,
            f"Cannot call {operation}() after the last row has been read.",
            state,
        )


class ReaderClosedError(StateMisuseError):
    """Any operation other than a lifecycle query was invoked on a closed reader."""

    def __init__(self, operation: str, state: ReaderState) -> None:
        super().__init__(
            operation, f"Cannot call {operation}() on a closed reader.", state
        )


class CommandStateError(StateMisuseError):
    """A command or connection was used in a state that forbids the call."""

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(operation, f"Cannot call {operation}(): {reason}.")
        self.reason = reason


# ============================================================================
#                           Type and index errors
# ============================================================================


class TypeMismatchError(ReaderError, TypeError):
    """Raised when a value cannot be returned as the requested type.

    Attributes:
        ordinal (int): Column ordinal of the value.
        requested (type): The type asked for.
        actual (type): The type of the stored value (``NoneType`` when absent).
    """

    kind = ErrorKind.TYPE_MISMATCH

    def __init__(
        self, ordinal: int, requested: type, actual: type, detail: str | None = None
    ) -> None:
        super().__init__(
            detail
            or f"Column {ordinal} holds a value of type '{actual.__name__}' "
            f"that cannot be read as '{requested.__name__}'."
        )
        self.ordinal = ordinal
        self.requested = requested
        self.actual = actual


class IndexRangeError(ReaderError, IndexError):
    """Raised when an ordinal, column name or buffer range is out of bounds.

    Attributes:
        key (int | str): The rejected ordinal or column name.
    """

    kind = ErrorKind.INDEX_RANGE

    def __init__(self, key: int | str, message: str | None = None) -> None:
        if message is None:
            message = (
                f"No column named {key!r}."
                if isinstance(key, str)
                else f"Ordinal {key} is out of range."
            )
        super().__init__(message)
        self.key = key


# ============================================================================
#                           Backend errors
# ============================================================================


class BackendIOError(ReaderError):
    """Raised when the driver below the contract fails.

    The original driver exception is always chained as ``__cause__``.
    """

    kind = ErrorKind.BACKEND_IO


def error_kind(exc: BaseException) -> ErrorKind | None:
    """Return the contract error kind of ``exc``, or None for foreign exceptions."""
    if isinstance(exc, ReaderError):
        return exc.kind
    return None
