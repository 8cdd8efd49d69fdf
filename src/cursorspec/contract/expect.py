"""Expectation helpers used by the contract checks.

Checks never use bare ``assert`` so they behave the same under ``python -O``.
A failed expectation raises `ContractViolation`. Exceptions raised by the code
under test propagate unchanged, except inside `expect_error()`, where any error
other than the expected kind (or a backend failure) is a violation.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from cursorspec.interfaces.errors import ErrorKind, ReaderError


class ContractViolation(AssertionError):
    """A connector did not behave as the contract requires.

    Attributes:
        actual_kind (ErrorKind | None): Kind of the error the connector raised
            instead of the expected behavior, if any.
    """

    def __init__(self, message: str, actual_kind: ErrorKind | None = None) -> None:
        super().__init__(message)
        self.actual_kind = actual_kind


def expect_equal(actual: Any, expected: Any, what: str = "value") -> None:
    """Require ``actual == expected`` (and matching types for bool/int)."""
    if actual != expected or isinstance(actual, bool) != isinstance(expected, bool):
        raise ContractViolation(f"{what}: expected {expected!r}, got {actual!r}")


def expect_is(actual: Any, expected: Any, what: str = "value") -> None:
    """Require ``actual is expected``."""
    if actual is not expected:
        raise ContractViolation(f"{what}: expected {expected!r}, got {actual!r}")


def expect_true(condition: bool, what: str) -> None:
    if condition is not True:
        raise ContractViolation(f"{what}: expected True, got {condition!r}")


def expect_false(condition: bool, what: str) -> None:
    if condition is not False:
        raise ContractViolation(f"{what}: expected False, got {condition!r}")


def expect_instance(value: Any, type_: type, what: str = "value") -> None:
    if not isinstance(value, type_):
        raise ContractViolation(
            f"{what}: expected an instance of {type_.__name__}, "
            f"got {type(value).__name__} ({value!r})"
        )


def expect_error(
    kind: ErrorKind, action: Callable[..., Any], *args: Any, what: str | None = None
) -> ReaderError:
    """Require ``action(*args)`` to raise a contract error of ``kind``.

    Args:
        kind: The expected error kind.
        action: Callable under test.
        *args: Positional arguments for ``action``.
        what: Description used in the violation message.

    Returns:
        ReaderError: The raised error, for further inspection.

    Raises:
        ContractViolation: If nothing was raised, an error of another
            contract kind was raised, or the error is not a contract error
            at all (e.g. a bare ``IndexError``).
        BackendIOError: Propagated unchanged; backend failures are not
            conformance results.
    """
    label = what or getattr(action, "__name__", repr(action))
    try:
        result = action(*args)
    except ReaderError as e:
        if e.kind is kind:
            return e
        if e.kind is ErrorKind.BACKEND_IO:
            raise
        raise ContractViolation(
            f"{label}: expected a {kind.value} error, got {e.kind.value}: {e}",
            actual_kind=e.kind,
        ) from e
    except Exception as e:  # pylint: disable=broad-except
        raise ContractViolation(
            f"{label}: expected a {kind.value} error, "
            f"got {type(e).__name__}: {e}"
        ) from e
    raise ContractViolation(
        f"{label}: expected a {kind.value} error, but it returned {result!r}"
    )
