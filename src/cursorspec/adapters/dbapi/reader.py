"""Reader implementation over a PEP 249 cursor.

`DbApiReader` executes a batch lazily: the first statement that produces
columns is executed when the reader is created, and each `next_result()`
executes statements until the next one that produces columns. Statements
without a result description (DDL, DML) are executed and skipped; their row
counts accumulate in `records_affected`. A statement that fails ends the
batch: the error propagates and no later statement is executed.

Each result set is activated with one row of lookahead, which makes
`has_rows` exact before the first `read()` and fixes the column metadata
(names, types) for the whole life of the result set.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, MutableSequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

from cursorspec.interfaces.errors import (
    IndexRangeError,
    ReadBeforeRowError,
    ReaderClosedError,
    ReaderExhaustedError,
)
from cursorspec.interfaces.reader import Reader, ReaderState, Record
from cursorspec.interfaces.values import ABSENT, FieldValue, Present

from .coercion import coerce

if TYPE_CHECKING:
    from .dialect import Dialect

T = TypeVar("T")

logger = logging.getLogger(__name__)

ROW_STATES = {
    ReaderState.BEFORE_ROW: ReadBeforeRowError,
    ReaderState.RESULT_SET_ADVANCED: ReadBeforeRowError,
    ReaderState.AFTER_LAST_ROW: ReaderExhaustedError,
    ReaderState.CLOSED: ReaderClosedError,
}


@dataclass(frozen=True)
class Column:
    """Metadata of one column of a result set."""

    name: str
    ordinal: int
    field_type: type
    data_type_name: str


class ResultSet:
    """One result set of a batch, with one row of lookahead."""

    def __init__(
        self,
        columns: tuple[Column, ...],
        fetch: Callable[[], tuple[Any, ...] | None],
        first_row: tuple[Any, ...] | None,
    ) -> None:
        self.columns = columns
        self.has_rows = first_row is not None
        self._fetch = fetch
        self._lookahead = first_row
        self._names = tuple(c.name for c in columns)

    @classmethod
    def empty(cls) -> ResultSet:
        """A result set with no columns and no rows."""
        return cls((), lambda: None, None)

    @classmethod
    def from_cursor(cls, cursor: Any, dialect: Dialect) -> ResultSet:
        """Activate the result set currently held by a DB-API ``cursor``."""

        def fetch() -> tuple[Any, ...] | None:
            row = cursor.fetchone()
            if row is None:
                return None
            return tuple(dialect.normalize(v) for v in row)

        first_row = fetch()
        columns = tuple(
            Column(
                name=item[0],
                ordinal=ordinal,
                field_type=dialect.field_type(item[1], _sample(first_row, ordinal)),
                data_type_name=dialect.data_type_name(
                    item[1], _sample(first_row, ordinal)
                ),
            )
            for ordinal, item in enumerate(cursor.description)
        )
        return cls(columns, fetch, first_row)

    @property
    def names(self) -> tuple[str, ...]:
        return self._names

    def fetch(self) -> tuple[Any, ...] | None:
        """Return the next row, or None when the result set is exhausted."""
        if self._lookahead is not None:
            row, self._lookahead = self._lookahead, None
            return row
        return self._fetch()


def _sample(row: tuple[Any, ...] | None, ordinal: int) -> Any:
    return None if row is None else row[ordinal]


class DbApiReader(Reader):
    """Forward-only reader over the statements of a batch.

    Args:
        cursor: An open DB-API cursor, owned by the reader from now on.
        statements: The statements of the batch, in textual order.
        dialect: Backend-specific behavior.
        on_close: Called once when the reader closes.
    """

    def __init__(
        self,
        cursor: Any,
        statements: list[str],
        dialect: Dialect,
        on_close: Callable[[DbApiReader], None] | None = None,
    ) -> None:
        self._cursor = cursor
        self._pending = iter(statements)
        self._dialect = dialect
        self._on_close = on_close
        self._records_affected = -1
        self._results_exhausted = False
        self._row: tuple[Any, ...] = ()
        self._state = ReaderState.BEFORE_ROW
        try:
            self._current = self._advance() or ResultSet.empty()
        except BaseException:
            self._close_cursor()
            raise

    # --- Lifecycle ---

    @property
    def state(self) -> ReaderState:
        return self._state

    def close(self) -> None:
        if self._state is ReaderState.CLOSED:
            return
        self._state = ReaderState.CLOSED
        self._row = ()
        self._current = ResultSet.empty()
        try:
            self._close_cursor()
        finally:
            if self._on_close is not None:
                self._on_close(self)

    def _close_cursor(self) -> None:
        with self._dialect.translate_errors("close cursor"):
            self._cursor.close()

    # --- Navigation ---

    def read(self) -> bool:
        self._require_open("read")
        if self._state is ReaderState.AFTER_LAST_ROW:
            return False
        with self._dialect.translate_errors("fetch"):
            row = self._current.fetch()
        if row is None:
            self._row = ()
            self._state = ReaderState.AFTER_LAST_ROW
            return False
        self._row = row
        self._state = ReaderState.ON_ROW
        return True

    def next_result(self) -> bool:
        self._require_open("next_result")
        if self._results_exhausted:
            return False
        self._row = ()
        self._state = ReaderState.RESULT_SET_ADVANCED
        self._current = ResultSet.empty()
        try:
            result_set = self._advance()
        except BaseException:
            # a failed statement ends the batch
            self._results_exhausted = True
            raise
        if result_set is None:
            return False
        self._current = result_set
        return True

    def _advance(self) -> ResultSet | None:
        """Execute pending statements up to the next one that returns columns."""
        for statement in self._pending:
            logger.debug("%s: executing %r", self._dialect.name, statement)
            with self._dialect.translate_errors("execute"):
                self._cursor.execute(statement)
                if self._cursor.description is not None:
                    return ResultSet.from_cursor(self._cursor, self._dialect)
                rowcount = self._cursor.rowcount
            if rowcount is not None and rowcount >= 0:
                self._records_affected = max(self._records_affected, 0) + rowcount
        self._results_exhausted = True
        return None

    @property
    def has_rows(self) -> bool:
        self._require_open("has_rows")
        return self._current.has_rows

    @property
    def records_affected(self) -> int:
        return self._records_affected

    # --- Metadata ---

    @property
    def field_count(self) -> int:
        self._require_open("field_count")
        return len(self._current.columns)

    def get_name(self, ordinal: int) -> str:
        return self._column("get_name", ordinal).name

    def get_ordinal(self, name: str) -> int:
        self._require_open("get_ordinal")
        names = self._current.names
        if name in names:
            return names.index(name)
        # fall back to a case-insensitive match, as most drivers do
        folded = [n.casefold() for n in names]
        if name.casefold() in folded:
            return folded.index(name.casefold())
        raise IndexRangeError(name)

    def get_field_type(self, ordinal: int) -> type:
        return self._column("get_field_type", ordinal).field_type

    def get_data_type_name(self, ordinal: int) -> str:
        return self._column("get_data_type_name", ordinal).data_type_name

    def _column(self, operation: str, ordinal: int) -> Column:
        self._require_open(operation)
        self._check_ordinal(ordinal)
        return self._current.columns[ordinal]

    # --- Row access ---

    def get_value(self, ordinal: int) -> Any:
        value = self._raw("get_value", ordinal)
        return ABSENT if value is None else value

    def get_field_value(self, ordinal: int, type_: type[T]) -> T:
        return coerce(ordinal, self._raw("get_field_value", ordinal), type_)

    def read_field(self, ordinal: int) -> FieldValue:
        value = self._raw("read_field", ordinal)
        return ABSENT if value is None else Present(value)

    def is_null(self, ordinal: int) -> bool:
        return self._raw("is_null", ordinal) is None

    def get_values(self, values: MutableSequence[Any]) -> int:
        self._require_row("get_values")
        count = min(len(self._row), len(values))
        for i in range(count):
            values[i] = ABSENT if self._row[i] is None else self._row[i]
        return count

    def get_bytes(
        self,
        ordinal: int,
        data_offset: int,
        buffer: bytearray | None,
        buffer_offset: int,
        length: int,
    ) -> int:
        data = coerce(ordinal, self._raw("get_bytes", ordinal), bytes)
        return _copy_partial(data, data_offset, buffer, buffer_offset, length)

    def get_chars(
        self,
        ordinal: int,
        data_offset: int,
        buffer: MutableSequence[str] | None,
        buffer_offset: int,
        length: int,
    ) -> int:
        text = coerce(ordinal, self._raw("get_chars", ordinal), str)
        return _copy_partial(text, data_offset, buffer, buffer_offset, length)

    def __iter__(self) -> Iterator[Record]:
        self._require_open("__iter__")
        return self._records()

    def _records(self) -> Iterator[Record]:
        names = self._current.names
        while self.read():
            yield Record(
                names, tuple(ABSENT if v is None else v for v in self._row)
            )

    # --- Guards ---

    def _raw(self, operation: str, ordinal: int) -> Any:
        self._require_row(operation)
        self._check_ordinal(ordinal)
        return self._row[ordinal]

    def _require_row(self, operation: str) -> None:
        error = ROW_STATES.get(self._state)
        if error is not None:
            raise error(operation, self._state)

    def _check_ordinal(self, ordinal: int) -> None:
        if (
            not isinstance(ordinal, int)
            or isinstance(ordinal, bool)
            or not 0 <= ordinal < len(self._current.columns)
        ):
            raise IndexRangeError(ordinal)


def _copy_partial(
    data: bytes | str,
    data_offset: int,
    buffer: MutableSequence[Any] | None,
    buffer_offset: int,
    length: int,
) -> int:
    """Copy ``data[data_offset:data_offset + length]`` into ``buffer``."""
    if buffer is None:
        return len(data)
    if data_offset < 0 or buffer_offset < 0 or length < 0:
        raise IndexRangeError(
            min(data_offset, buffer_offset, length),
            "Offsets and length must not be negative.",
        )
    chunk = data[data_offset : data_offset + length]
    end = buffer_offset + len(chunk)
    if end > len(buffer):
        raise IndexRangeError(
            buffer_offset,
            f"Buffer of length {len(buffer)} cannot hold {len(chunk)} "
            f"element(s) at offset {buffer_offset}.",
        )
    buffer[buffer_offset:end] = chunk if isinstance(buffer, bytearray) else list(chunk)
    return len(chunk)
