"""Backend-specific behavior of the DB-API reader.

A `Dialect` tells the generic reader how to split a batch, which driver
exceptions count as backend I/O failures, and how to describe columns. The
base class suits dynamically typed backends (SQLite): column types are
inferred from the first row of a result set. Statically typed backends
override `field_type()` and `data_type_name()` to read the driver's type
codes instead.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from typing import Any, ClassVar

from cursorspec.interfaces.errors import BackendIOError

from .batch import QUOTES, split_statements


class Dialect:
    """Generic DB-API dialect with first-row type inference."""

    name: ClassVar[str] = "generic"

    #: Quote pairs honored when splitting a batch.
    quotes: ClassVar[dict[str, str]] = QUOTES

    #: Backend names for Python types, used when the driver reports no type code.
    VALUE_TYPE_NAMES: ClassVar[dict[type, str]] = {
        bool: "BOOLEAN",
        int: "INTEGER",
        float: "REAL",
        Decimal: "NUMERIC",
        str: "TEXT",
        bytes: "BLOB",
        datetime: "TIMESTAMP",
        type(None): "NULL",
    }

    def __init__(self, driver_errors: tuple[type[BaseException], ...]) -> None:
        self.driver_errors = driver_errors

    def split(self, text: str) -> list[str]:
        """Split a batch into statements."""
        return split_statements(text, self.quotes)

    def normalize(self, value: Any) -> Any:
        """Convert driver-specific containers to plain Python values."""
        if isinstance(value, (memoryview, bytearray)):
            return bytes(value)
        return value

    def field_type(self, type_code: Any, sample: Any) -> type:
        """Return the Python type of a column.

        Args:
            type_code: The ``type_code`` item of the column's DB-API description.
            sample: The column's value in the first row, or None.
        """
        if sample is None:
            return object
        return type(sample)

    def data_type_name(self, type_code: Any, sample: Any) -> str:
        """Return the backend's name for a column's type."""
        return self.VALUE_TYPE_NAMES.get(type(sample), type(sample).__name__.upper())

    @contextmanager
    def translate_errors(self, operation: str) -> Iterator[None]:
        """Re-raise driver exceptions as `BackendIOError`, chaining the original."""
        try:
            yield
        except self.driver_errors as e:
            raise BackendIOError(f"{self.name}: {operation} failed: {e}") from e
