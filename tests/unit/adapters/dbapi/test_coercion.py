"""Unit tests for typed-access coercion.

The null/type policy: an absent value is readable only as `Absent` or
``object``; a present value is never readable as `Absent`; every failed
conversion is a `TypeMismatchError`, never a default.
"""

import uuid
from datetime import datetime
from decimal import Decimal

import pytest

from cursorspec.adapters.dbapi.coercion import SUPPORTED_TYPES, coerce
from cursorspec.interfaces.errors import TypeMismatchError
from cursorspec.interfaces.values import ABSENT, Absent

GUID = uuid.UUID("dc0d7e0e-365d-4948-ab9b-8ca8056bf93a")


@pytest.mark.parametrize("type_", SUPPORTED_TYPES)
@pytest.mark.parametrize("absent", [None, ABSENT])
def test_absent_value_rejects_every_concrete_type(type_: type, absent: object) -> None:
    with pytest.raises(TypeMismatchError) as info:
        coerce(3, absent, type_)
    assert info.value.ordinal == 3
    assert info.value.requested is type_
    assert info.value.actual is Absent


@pytest.mark.parametrize("type_", [Absent, object])
def test_absent_value_readable_as_absent_or_object(type_: type) -> None:
    assert coerce(0, None, type_) is ABSENT


def test_present_value_is_not_absent() -> None:
    with pytest.raises(TypeMismatchError):
        coerce(0, 0, Absent)


def test_object_returns_value_unchanged() -> None:
    value = object()
    assert coerce(0, value, object) is value


@pytest.mark.parametrize(
    "value, type_, expected",
    [
        (True, bool, True),
        (1, bool, True),
        (0, bool, False),
        (7, int, 7),
        (Decimal("12"), int, 12),
        (3, float, 3.0),
        (Decimal("1.5"), float, 1.5),
        (2.5, float, 2.5),
        (5, Decimal, Decimal(5)),
        (0.1, Decimal, Decimal("0.1")),
        ("text", str, "text"),
        (bytearray(b"\x01\x02"), bytes, b"\x01\x02"),
        (memoryview(b"ab"), bytes, b"ab"),
        ("2014-04-15 10:47:16", datetime, datetime(2014, 4, 15, 10, 47, 16)),
        (datetime(2020, 1, 1), datetime, datetime(2020, 1, 1)),
        (GUID.bytes, uuid.UUID, GUID),
        (str(GUID), uuid.UUID, GUID),
        (GUID, uuid.UUID, GUID),
    ],
)
def test_supported_conversions(value: object, type_: type, expected: object) -> None:
    result = coerce(0, value, type_)
    assert result == expected
    assert type(result) is type(expected)


@pytest.mark.parametrize(
    "value, type_",
    [
        (2, bool),
        ("true", bool),
        (True, int),
        (1.5, int),
        (Decimal("1.5"), int),
        ("1", int),
        ("1.0", float),
        ("1", Decimal),
        (1, str),
        (b"x", str),
        ("x", bytes),
        ("yesterday", datetime),
        (b"\x00" * 15, uuid.UUID),
        ("not-a-guid", uuid.UUID),
    ],
)
def test_failed_conversions_are_type_mismatches(value: object, type_: type) -> None:
    with pytest.raises(TypeMismatchError) as info:
        coerce(1, value, type_)
    assert info.value.actual is type(value)
    assert isinstance(info.value, TypeError)


def test_unregistered_type_uses_isinstance() -> None:
    class Point(tuple):  # pylint: disable=too-few-public-methods
        pass

    p = Point((1, 2))
    assert coerce(0, p, tuple) is p
    with pytest.raises(TypeMismatchError):
        coerce(0, (1, 2), Point)
