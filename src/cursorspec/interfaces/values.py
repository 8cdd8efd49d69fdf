"""Value model for column data.

A column value is either present or absent. Absence is represented by the
`ABSENT` singleton, which is distinct from every default of a declared type
(it is never ``0``, ``""`` or ``None``). `read_field()` on a reader returns the
tagged union `FieldValue` so callers can pattern-match:

    match reader.read_field(0):
        case Present(value):
            ...
        case Absent():
            ...
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeAlias, TypeVar

T = TypeVar("T")


class Absent:
    """Type of the absent-value marker. Only one instance, `ABSENT`, exists."""

    _instance: Absent | None = None

    __slots__ = ()
    __match_args__ = ()

    def __new__(cls) -> Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return "ABSENT"


ABSENT = Absent()


@dataclass(frozen=True)
class Present(Generic[T]):
    """A present column value."""

    value: T


FieldValue: TypeAlias = "Present[Any] | Absent"


def is_absent(value: object) -> bool:
    """Return True if ``value`` is the absent marker."""
    return value is ABSENT
