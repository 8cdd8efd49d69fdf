"""Pytest fixtures for the contract tests.

Provided fixtures
-----------------
- **connector**: Parametrized over the in-process connectors. Each connector
  is initialized once per module and uninitialized at teardown, mirroring the
  runner's one initialize/uninitialize pair per connector.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from cursorspec.interfaces.connector import Connector
from tests.fixtures.connectors import IN_PROCESS_CONNECTORS, build_connector


@pytest.fixture(scope="module", params=IN_PROCESS_CONNECTORS)
def connector(request: pytest.FixtureRequest) -> Iterator[Connector]:
    """Initialized connector for the requested backend."""
    built = build_connector(request.param)
    with built.session():
        yield built
    assert not built.initialized
