"""Connector interface: a registered backend implementation under test.

A connector names a backend, exposes its `ConnectionFactory`, builds the
`DbFactoryFixture` the suites consume, and owns process-wide setup/teardown
(e.g. clearing a connection pool). The runner calls `initialize()` and
`uninitialize()` exactly once around a connector's whole run; the suites never
call them.
"""

from __future__ import annotations

import abc
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .connection import ConnectionFactory
    from .fixture import DbFactoryFixture

logger = logging.getLogger(__name__)


class ConnectorError(Exception):
    """Base class for connector registration and lifecycle errors."""


class ConnectorLifecycleError(ConnectorError):
    """Raised when initialize/uninitialize are called out of order."""

    def __init__(self, name: str, operation: str, reason: str) -> None:
        super().__init__(f"Connector '{name}': cannot {operation}: {reason}.")
        self.name = name
        self.operation = operation
        self.reason = reason


class Connector(abc.ABC):
    """Abstract backend connector.

    Subclasses implement `name`, `factory` and `create_fixture()`, and may
    hook `_on_initialize()` / `_on_uninitialize()` for process-wide setup.
    """

    def __init__(self) -> None:
        self._initialized = False

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Human-readable backend name, e.g. ``"sqlite3 3.45.1"``."""

    @property
    @abc.abstractmethod
    def factory(self) -> ConnectionFactory:
        """The connection factory handle for this backend."""

    @abc.abstractmethod
    def create_fixture(self) -> DbFactoryFixture:
        """Return the fixture the contract suites run against."""

    @property
    def initialized(self) -> bool:
        """True between `initialize()` and `uninitialize()`."""
        return self._initialized

    def initialize(self) -> None:
        """Perform process-wide setup for this backend.

        Raises:
            ConnectorLifecycleError: If already initialized.
        """
        if self._initialized:
            raise ConnectorLifecycleError(self.name, "initialize", "already initialized")
        logger.info("Initializing connector %s", self.name)
        self._on_initialize()
        self._initialized = True

    def uninitialize(self) -> None:
        """Perform process-wide teardown for this backend.

        Connections still open at this point are leaks; they are reported as a
        warning before the teardown hook runs.

        Raises:
            ConnectorLifecycleError: If not initialized.
        """
        if not self._initialized:
            raise ConnectorLifecycleError(self.name, "uninitialize", "not initialized")
        if leaked := self.factory.open_connections:
            logger.warning(
                "Connector %s: %d connection(s) still open at teardown",
                self.name,
                leaked,
            )
        logger.info("Uninitializing connector %s", self.name)
        try:
            self._on_uninitialize()
        finally:
            self._initialized = False

    @contextmanager
    def session(self) -> Iterator[Connector]:
        """Context manager wrapping `initialize()` / `uninitialize()`."""
        self.initialize()
        try:
            yield self
        finally:
            self.uninitialize()

    def _on_initialize(self) -> None:
        """Backend-specific setup. Default: nothing."""

    def _on_uninitialize(self) -> None:
        """Backend-specific teardown. Default: nothing."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"
