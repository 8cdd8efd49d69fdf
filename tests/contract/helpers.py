"""Shared helper for running one contract check under pytest."""

from __future__ import annotations

import pytest

from cursorspec.contract import CheckSkipped, ContractSuite
from cursorspec.interfaces.connector import Connector


def run_check(connector: Connector, suite_cls: type[ContractSuite], check_id: str) -> None:
    """Run ``check_id`` against ``connector`` and require that nothing leaked.

    A check skipped by the connector's overrides is reported as a pytest skip.
    """
    suite = suite_cls(connector.create_fixture())
    try:
        suite.run(check_id)
    except CheckSkipped as e:
        pytest.skip(e.reason)
    leaked = connector.factory.open_connections
    assert leaked == 0, f"{check_id} left {leaked} connection(s) open"
