"""Machinery shared by the contract suites.

A suite is a class whose check methods are declared with `contract_check`.
Each declaration carries the check's default statement and expected value;
a backend's fixture may replace either (or skip the check) through its
`overrides` table, keyed by the qualified check id ``"<suite>.<check>"``.
The suite resolves overrides before falling back to the defaults, so
backend-specific deviations never require subclassing a suite.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, TypeVar

from cursorspec.interfaces.fixture import UNSET, Override

if TYPE_CHECKING:
    from cursorspec.interfaces.connection import Connection
    from cursorspec.interfaces.fixture import DbFactoryFixture, StatementSource
    from cursorspec.interfaces.reader import Reader

logger = logging.getLogger(__name__)

S = TypeVar("S", bound="ContractSuite")

CHECK_ATTR = "__contract_check__"


class CheckSkipped(Exception):
    """Raised by `ContractSuite.run()` when an override skips the check."""

    def __init__(self, check_id: str, reason: str) -> None:
        super().__init__(f"{check_id} skipped: {reason}")
        self.check_id = check_id
        self.reason = reason


class UnknownCheckError(KeyError):
    """Raised when a check id is not defined by a suite."""

    def __init__(self, check_id: str) -> None:
        super().__init__(check_id)
        self.check_id = check_id


@dataclass(frozen=True)
class CheckSpec:
    """Declared defaults of one check."""

    name: str
    method_name: str
    statement: StatementSource | None
    expected: Any
    description: str


@dataclass(frozen=True)
class CheckContext:
    """Everything a check method needs, after overrides are applied.

    Attributes:
        check_id: Qualified id of the running check.
        fixture: The backend fixture.
        statement: Resolved SQL text, or None for checks without one.
        expected: Resolved expected value (`UNSET` when none was declared).
    """

    check_id: str
    fixture: DbFactoryFixture
    statement: str | None
    expected: Any

    def open_connection(self) -> Connection:
        """Open a connection through the fixture. The caller must close it."""
        return self.fixture.create_open_connection()

    @contextmanager
    def reader(self, statement: str | None = None) -> Iterator[Reader]:
        """Yield a reader over ``statement`` (default: the resolved statement).

        The reader, its command and its connection are released on every
        exit path.
        """
        text = self.statement if statement is None else statement
        if text is None:
            raise ValueError(f"{self.check_id} declares no statement")
        with self.open_connection() as connection:
            with connection.create_command(text) as command:
                with command.execute_reader() as reader:
                    yield reader


def contract_check(
    statement: StatementSource | None = None, expected: Any = UNSET
) -> Callable[[Callable[[S, CheckContext], None]], Callable[[S, CheckContext], None]]:
    """Declare a suite method as a contract check.

    The check's id is the method name.

    Args:
        statement: Default SQL text, or a callable building it from the fixture.
        expected: Default expected value.
    """

    def decorate(
        func: Callable[[S, CheckContext], None],
    ) -> Callable[[S, CheckContext], None]:
        doc = (func.__doc__ or "").strip().splitlines()
        setattr(
            func,
            CHECK_ATTR,
            CheckSpec(
                name=func.__name__,
                method_name=func.__name__,
                statement=statement,
                expected=expected,
                description=doc[0] if doc else "",
            ),
        )
        return func

    return decorate


def resolve_statement(source: StatementSource | None, fixture: DbFactoryFixture) -> str | None:
    """Turn a statement source into SQL text."""
    if source is None or isinstance(source, str):
        return source
    return source(fixture)


class ContractSuite:
    """Base class of the contract suites.

    Subclasses set `name` and declare checks with `contract_check`. Check ids
    are collected when the subclass is created, in definition order.
    """

    name: ClassVar[str] = ""
    checks: ClassVar[dict[str, CheckSpec]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        checks: dict[str, CheckSpec] = {}
        for klass in reversed(cls.__mro__):
            for attr in vars(klass).values():
                spec = getattr(attr, CHECK_ATTR, None)
                if spec is not None:
                    checks[spec.name] = spec
        cls.checks = checks

    def __init__(self, fixture: DbFactoryFixture) -> None:
        self.fixture = fixture

    @classmethod
    def qualify(cls, name: str) -> str:
        """Return the qualified id ``"<suite>.<name>"``."""
        return f"{cls.name}.{name}"

    @classmethod
    def check_ids(cls) -> list[str]:
        """Qualified ids of every check of the suite, in definition order."""
        return [cls.qualify(name) for name in cls.checks]

    @classmethod
    def spec(cls, check_id: str) -> CheckSpec:
        """Return the declared defaults of ``check_id`` (qualified or bare)."""
        prefix = f"{cls.name}."
        name = check_id[len(prefix) :] if check_id.startswith(prefix) else check_id
        try:
            return cls.checks[name]
        except KeyError as e:
            raise UnknownCheckError(check_id) from e

    def override(self, check_id: str) -> Override:
        """Return the fixture's override for ``check_id`` (empty when none)."""
        return self.fixture.overrides.get(self.qualify(self.spec(check_id).name), Override())

    def context(self, check_id: str) -> CheckContext:
        """Resolve the statement and expected value of ``check_id``."""
        spec = self.spec(check_id)
        override = self.override(check_id)
        source = override.statement if override.statement is not None else spec.statement
        expected = override.expected if override.expected is not UNSET else spec.expected
        return CheckContext(
            check_id=self.qualify(spec.name),
            fixture=self.fixture,
            statement=resolve_statement(source, self.fixture),
            expected=expected,
        )

    def run(self, check_id: str) -> None:
        """Run one check.

        Raises:
            CheckSkipped: If the fixture's override skips the check.
            ContractViolation: If the connector does not conform.
            UnknownCheckError: If the suite defines no such check.
            Exception: Anything else raised by the connector, unchanged.
        """
        spec = self.spec(check_id)
        override = self.override(check_id)
        if override.skip is not None:
            raise CheckSkipped(self.qualify(spec.name), override.skip)
        ctx = self.context(check_id)
        logger.debug("Running %s (statement=%r)", ctx.check_id, ctx.statement)
        getattr(self, spec.method_name)(ctx)
