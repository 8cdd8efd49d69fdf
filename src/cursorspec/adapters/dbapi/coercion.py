"""Value coercion for typed reader access.

`coerce()` implements the null/type policy of the reader contract:

- an absent value (``None`` from the driver) can be read only as `Absent` or
  ``object``; every other requested type is a `TypeMismatchError`;
- a present value requested as `Absent` is a `TypeMismatchError`;
- otherwise the value is converted by the converter registered for the
  requested type, and any conversion failure is a `TypeMismatchError`.

No default is ever substituted for an absent value.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from datetime import datetime
from decimal import Decimal
from typing import Any, TypeVar

from cursorspec.interfaces.errors import TypeMismatchError
from cursorspec.interfaces.values import ABSENT, Absent

T = TypeVar("T")

BYTES_LIKE = (bytes, bytearray, memoryview)


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _to_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if _is_int(value) and value in (0, 1):
        return bool(value)
    raise TypeError(value)


def _to_int(value: object) -> int:
    if _is_int(value):
        return value  # type: ignore[return-value]
    if isinstance(value, Decimal) and value == value.to_integral_value():
        return int(value)
    raise TypeError(value)


def _to_float(value: object) -> float:
    if _is_int(value) or isinstance(value, (float, Decimal)):
        return float(value)  # type: ignore[arg-type]
    raise TypeError(value)


def _to_decimal(value: object) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if _is_int(value):
        return Decimal(value)  # type: ignore[arg-type]
    if isinstance(value, float):
        return Decimal(repr(value))
    raise TypeError(value)


def _to_str(value: object) -> str:
    if isinstance(value, str):
        return value
    raise TypeError(value)


def _to_bytes(value: object) -> bytes:
    if isinstance(value, BYTES_LIKE):
        return bytes(value)
    raise TypeError(value)


def _to_datetime(value: object) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        return datetime.fromisoformat(value)
    raise TypeError(value)


def _to_uuid(value: object) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    if isinstance(value, BYTES_LIKE):
        return uuid.UUID(bytes=bytes(value))
    if isinstance(value, str):
        return uuid.UUID(value)
    raise TypeError(value)


CONVERTERS: dict[type, Callable[[object], Any]] = {
    bool: _to_bool,
    int: _to_int,
    float: _to_float,
    Decimal: _to_decimal,
    str: _to_str,
    bytes: _to_bytes,
    datetime: _to_datetime,
    uuid.UUID: _to_uuid,
}

SUPPORTED_TYPES: tuple[type, ...] = tuple(CONVERTERS)


def coerce(ordinal: int, value: Any, type_: type[T]) -> T:
    """Return ``value`` (a raw driver value) as ``type_``.

    Args:
        ordinal: Column ordinal, used in error messages.
        value: The raw value; ``None`` means absent.
        type_: Requested type.

    Raises:
        TypeMismatchError: If the value cannot be returned as ``type_``.
    """
    if value is None or value is ABSENT:
        if type_ is Absent or type_ is object:
            return ABSENT  # type: ignore[return-value]
        raise TypeMismatchError(
            ordinal,
            type_,
            Absent,
            f"Column {ordinal} is absent and cannot be read as '{type_.__name__}'.",
        )
    if type_ is Absent:
        raise TypeMismatchError(ordinal, Absent, type(value))
    if type_ is object:
        return value

    converter = CONVERTERS.get(type_)
    if converter is None:
        if isinstance(value, type_):
            return value
        raise TypeMismatchError(ordinal, type_, type(value))
    try:
        return converter(value)
    except (TypeError, ValueError, ArithmeticError) as e:
        raise TypeMismatchError(ordinal, type_, type(value)) from e
