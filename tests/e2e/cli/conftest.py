"""Fixtures and test helpers for end-to-end CLI tests.

Provides a test-only `log-demo` Click command that emits structured log
messages, a connector that deliberately violates one check, plus fixtures to
register them, obtain a CliRunner, and run tests within an isolated
filesystem.
"""

import logging

import click
import pytest
from click.testing import CliRunner

from cursorspec.adapters import connectors
from cursorspec.adapters.connectors import Sqlite3Connector
from cursorspec.config import PG_URL_ENV
from cursorspec.entrypoints.cli.main import cursorspec
from cursorspec.interfaces.fixture import Override

# pylint: disable=redefined-outer-name


@click.command()
def log_demo():
    """Emit representative log messages for CLI/flight-recorder tests.

    Emits DEBUG/INFO/WARNING/ERROR/CRITICAL messages on the 'cursorspec.demo'
    logger and additional messages on a 'some.thirdparty' logger to exercise
    logger-level filtering and flight-recorder behavior.
    """
    logger = logging.getLogger("cursorspec.demo")
    logger.debug("This is a debug-level test message.")
    logger.info("This is an info-level test message.")
    logger.warning("This is a warning-level test message.")
    logger.error("This is an error-level test message.")
    logger.critical("This is a critical-level test message.")
    third_party_logger = logging.getLogger("some.thirdparty")
    third_party_logger.debug("This is a debug-level third-party test message.")
    third_party_logger.info("This is an info-level third-party test message.")
    third_party_logger.warning("This is a warning-level third-party test message.")
    logger.debug("This is a final debug-level test message.")


class MiscountingConnector(Sqlite3Connector):
    """SQLite connector whose fixture expects the wrong scalar."""

    key = "miscounting"

    @property
    def name(self) -> str:
        return "miscounting sqlite"

    def create_fixture(self):
        fixture = super().create_fixture()
        fixture.overrides = {
            "command.execute_scalar_returns_first_column": Override(expected=43)
        }
        return fixture


def _remove_command_everywhere(group, name: str) -> None:
    """Remove a command from a Click group and its internal sections."""
    group.commands.pop(name, None)
    if hasattr(group, "_default_section"):
        group._default_section.commands.pop(name, None)  # pylint: disable=protected-access
    for sec in getattr(group, "_sections", []):
        getattr(sec, "commands", {}).pop(name, None)


@pytest.fixture
def registered_log_demo():
    """Register the 'log-demo' command for the duration of a test."""
    cursorspec.add_command(log_demo, name="log-demo")
    try:
        yield
    finally:
        _remove_command_everywhere(cursorspec, "log-demo")


@pytest.fixture
def miscounting_connector(monkeypatch):
    """Register `MiscountingConnector` under 'miscounting' for one test."""
    monkeypatch.setitem(
        connectors._REGISTRY,  # pylint: disable=protected-access
        MiscountingConnector.key,
        lambda: MiscountingConnector(":memory:"),
    )
    return MiscountingConnector.key


@pytest.fixture
def no_postgres(monkeypatch):
    """Make sure the postgres connector is not configured."""
    monkeypatch.delenv(PG_URL_ENV, raising=False)


@pytest.fixture
def runner():
    """Return a Click CliRunner for invoking CLI commands in tests."""
    return CliRunner()


@pytest.fixture
def fs(runner):
    """Provide an isolated filesystem context for tests using CliRunner."""
    with runner.isolated_filesystem():
        yield
