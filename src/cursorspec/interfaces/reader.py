"""Reader interface: the forward-only result cursor under test.

A `Reader` is produced by `Command.execute_reader()`. It walks an ordered
sequence of result sets; each result set has a fixed list of named columns and
zero or more rows. The reader is always in exactly one `ReaderState`:

    BEFORE_ROW ──read()=True──▶ ON_ROW ──read()=False──▶ AFTER_LAST_ROW
        │                         │                          │
        └────────────── next_result() ───────────────────────┘
                               │
                               ▼
                     RESULT_SET_ADVANCED ──read()=True──▶ ON_ROW ...

    any state ──close()──▶ CLOSED (terminal)

Row-scoped operations (`get_value`, `get_field_value`, typed getters,
`is_null`, partial reads) are valid only in ``ON_ROW``. Metadata operations
(`field_count`, `get_name`, `get_ordinal`, ...) are valid in every state except
``CLOSED``. `is_closed` is the only query valid after `close()`.

Implementations provide the abstract primitives; the typed getters are built
on `get_field_value()` and may be overridden when a driver has a faster path.
"""

from __future__ import annotations

import abc
import uuid
from collections.abc import Iterator, Mapping, MutableSequence
from datetime import datetime
from decimal import Decimal
from enum import Enum
from types import TracebackType
from typing import Any, TypeVar, overload

from .errors import ReaderClosedError, TypeMismatchError
from .values import Absent, FieldValue

T = TypeVar("T")

INT16_RANGE = range(-(2**15), 2**15)
INT32_RANGE = range(-(2**31), 2**31)
INT64_RANGE = range(-(2**63), 2**63)
BYTE_RANGE = range(0, 2**8)


class ReaderState(str, Enum):
    """Lifecycle states of a reader."""

    BEFORE_ROW = "before-row"
    ON_ROW = "on-row"
    AFTER_LAST_ROW = "after-last-row"
    RESULT_SET_ADVANCED = "result-set-advanced"
    CLOSED = "closed"


class Record(Mapping[str, Any]):
    """Immutable snapshot of one row, addressable by column name or ordinal."""

    __slots__ = ("_names", "_values")

    def __init__(self, names: tuple[str, ...], values: tuple[Any, ...]) -> None:
        self._names = names
        self._values = values

    @overload
    def __getitem__(self, key: str) -> Any: ...
    @overload
    def __getitem__(self, key: int) -> Any: ...

    def __getitem__(self, key: str | int) -> Any:
        if isinstance(key, int):
            return self._values[key]
        try:
            return self._values[self._names.index(key)]
        except ValueError as e:
            raise KeyError(key) from e

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    @property
    def values_tuple(self) -> tuple[Any, ...]:
        """Values of the row in ordinal order."""
        return self._values

    def __repr__(self) -> str:
        pairs = ", ".join(f"{n}={v!r}" for n, v in zip(self._names, self._values))
        return f"Record({pairs})"


class Reader(abc.ABC):
    """Abstract forward-only result reader."""

    # --- Lifecycle ---

    @property
    @abc.abstractmethod
    def state(self) -> ReaderState:
        """Current lifecycle state. Valid in every state."""

    @property
    def is_closed(self) -> bool:
        """True once `close()` has been called. Valid in every state."""
        return self.state is ReaderState.CLOSED

    @abc.abstractmethod
    def close(self) -> None:
        """Close the reader. Idempotent; never closes the command or connection."""

    def __enter__(self) -> Reader:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # --- Navigation ---

    @abc.abstractmethod
    def read(self) -> bool:
        """Advance to the next row of the current result set.

        Returns:
            bool: True if a row became current, False once the result set is exhausted.

        Raises:
            ReaderClosedError: If the reader is closed.
        """

    @abc.abstractmethod
    def next_result(self) -> bool:
        """Advance to the next result set of the batch.

        Column metadata is reset to the new result set and the reader is
        positioned before its first row. Once this returns False it keeps
        returning False.

        Raises:
            ReaderClosedError: If the reader is closed.
        """

    @property
    @abc.abstractmethod
    def has_rows(self) -> bool:
        """Whether the current result set contains at least one row."""

    @property
    def depth(self) -> int:
        """Nesting depth of the current row. Always 0 for flat result sets."""
        self._require_open("depth")
        return 0

    @property
    def records_affected(self) -> int:
        """Rows changed by non-query statements of the batch, -1 when none ran."""
        return -1

    # --- Metadata ---

    @property
    @abc.abstractmethod
    def field_count(self) -> int:
        """Number of columns in the current result set."""

    @abc.abstractmethod
    def get_name(self, ordinal: int) -> str:
        """Return the name of the column at ``ordinal``."""

    @abc.abstractmethod
    def get_ordinal(self, name: str) -> int:
        """Return the ordinal of the column called ``name``."""

    @abc.abstractmethod
    def get_field_type(self, ordinal: int) -> type:
        """Return the Python type values of column ``ordinal`` are returned as."""

    @abc.abstractmethod
    def get_data_type_name(self, ordinal: int) -> str:
        """Return the backend's name for the declared type of column ``ordinal``."""

    # --- Row access ---

    @abc.abstractmethod
    def get_value(self, ordinal: int) -> Any:
        """Return the native value at ``ordinal`` or `ABSENT`."""

    @abc.abstractmethod
    def get_field_value(self, ordinal: int, type_: type[T]) -> T:
        """Return the value at ``ordinal`` coerced to ``type_``.

        Raises:
            TypeMismatchError: If the value cannot be returned as ``type_``,
                including when it is absent and ``type_`` is not `Absent`, or
                present and ``type_`` is `Absent`.
            ReadBeforeRowError: Before the first `read()` of the result set.
            ReaderExhaustedError: After `read()` returned False.
            ReaderClosedError: After `close()`.
            IndexRangeError: If ``ordinal`` is out of range.
        """

    @abc.abstractmethod
    def read_field(self, ordinal: int) -> FieldValue:
        """Return the value at ``ordinal`` as `Present` or `ABSENT`."""

    @abc.abstractmethod
    def is_null(self, ordinal: int) -> bool:
        """Return True if the value at ``ordinal`` is absent."""

    @abc.abstractmethod
    def get_values(self, values: MutableSequence[Any]) -> int:
        """Copy the current row into ``values`` from index 0.

        Copies ``min(field_count, len(values))`` items and returns that count.
        """

    @abc.abstractmethod
    def get_bytes(
        self,
        ordinal: int,
        data_offset: int,
        buffer: bytearray | None,
        buffer_offset: int,
        length: int,
    ) -> int:
        """Copy up to ``length`` bytes of a binary value into ``buffer``.

        Reading starts at ``data_offset`` within the value and writing at
        ``buffer_offset`` within the buffer. With ``buffer=None`` the total
        length of the value is returned and nothing is copied.

        Returns:
            int: Number of bytes copied.
        """

    @abc.abstractmethod
    def get_chars(
        self,
        ordinal: int,
        data_offset: int,
        buffer: MutableSequence[str] | None,
        buffer_offset: int,
        length: int,
    ) -> int:
        """Copy up to ``length`` characters of a text value into ``buffer``.

        Offsets and lengths count code points. See `get_bytes` for the
        ``buffer=None`` behavior.
        """

    @abc.abstractmethod
    def __iter__(self) -> Iterator[Record]:
        """Yield a `Record` for each remaining row of the current result set."""

    def __getitem__(self, key: int | str) -> Any:
        if isinstance(key, str):
            key = self.get_ordinal(key)
        return self.get_value(key)

    # --- Typed getters ---

    def get_boolean(self, ordinal: int) -> bool:
        return self.get_field_value(ordinal, bool)

    def get_byte(self, ordinal: int) -> int:
        return self._get_sized_int(ordinal, BYTE_RANGE)

    def get_int16(self, ordinal: int) -> int:
        return self._get_sized_int(ordinal, INT16_RANGE)

    def get_int32(self, ordinal: int) -> int:
        return self._get_sized_int(ordinal, INT32_RANGE)

    def get_int64(self, ordinal: int) -> int:
        return self._get_sized_int(ordinal, INT64_RANGE)

    def get_float(self, ordinal: int) -> float:
        return self.get_field_value(ordinal, float)

    def get_double(self, ordinal: int) -> float:
        return self.get_field_value(ordinal, float)

    def get_decimal(self, ordinal: int) -> Decimal:
        return self.get_field_value(ordinal, Decimal)

    def get_string(self, ordinal: int) -> str:
        return self.get_field_value(ordinal, str)

    def get_datetime(self, ordinal: int) -> datetime:
        return self.get_field_value(ordinal, datetime)

    def get_guid(self, ordinal: int) -> uuid.UUID:
        return self.get_field_value(ordinal, uuid.UUID)

    def get_absent(self, ordinal: int) -> Absent:
        """Return `ABSENT` if the value is absent; raise TypeMismatchError otherwise."""
        return self.get_field_value(ordinal, Absent)

    def _get_sized_int(self, ordinal: int, bounds: range) -> int:
        value = self.get_field_value(ordinal, int)
        if value not in bounds:
            raise TypeMismatchError(
                ordinal,
                int,
                type(value),
                f"Value {value} in column {ordinal} is outside "
                f"[{bounds.start}, {bounds.stop - 1}].",
            )
        return value

    def _require_open(self, operation: str) -> None:
        if self.is_closed:
            raise ReaderClosedError(operation, self.state)
