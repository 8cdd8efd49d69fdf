"""Fixture interface: the per-backend supplier used by the contract suites.

The suites embed literals in SQL text and need one statement that is
guaranteed to return no rows. Those are the only backend-specific pieces of
SQL they use; everything else is expressed through a `DbFactoryFixture`.

Backends that deviate legitimately from a default check publish an `Override`
for that check's id instead of subclassing the suite.
"""

from __future__ import annotations

import abc
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, TypeAlias

if TYPE_CHECKING:
    from .connection import Connection, ConnectionFactory

StatementSource: TypeAlias = "str | Callable[[DbFactoryFixture], str]"


class _Unset:
    """Sentinel type for "no override"."""

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


@dataclass(frozen=True)
class Override:
    """Backend-specific replacement for parts of one contract check.

    Attributes:
        statement: SQL text (or a callable building it from the fixture) run
            instead of the check's default statement.
        expected: Value compared against instead of the check's default.
        skip: Reason the check does not apply to the backend. A skipped check
            is reported, never silently dropped.
    """

    statement: StatementSource | None = None
    expected: Any = UNSET
    skip: str | None = None


class DbFactoryFixture(abc.ABC):
    """Supplies open connections and backend-correct SQL fragments."""

    overrides: ClassVar[Mapping[str, Override]] = {}

    def __init__(self, factory: ConnectionFactory, connection_string: str) -> None:
        self.factory = factory
        self.connection_string = connection_string

    def create_open_connection(self) -> Connection:
        """Create and open a connection.

        The caller owns the returned connection and must close it, usually by
        using it as a context manager.
        """
        connection = self.factory.create_connection(self.connection_string)
        try:
            connection.open()
        except BaseException:
            connection.close()
            raise
        return connection

    @abc.abstractmethod
    def create_boolean_literal(self, value: bool) -> str:
        """Return the SQL literal for ``value``."""

    @abc.abstractmethod
    def create_hex_literal(self, value: bytes) -> str:
        """Return the SQL literal for the binary ``value``."""

    @property
    @abc.abstractmethod
    def select_no_rows(self) -> str:
        """A terminated, single-column statement guaranteed to return zero rows."""
