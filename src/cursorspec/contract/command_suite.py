"""Command contract suite.

Checks of `Command` and `Connection` behavior that is orthogonal to row
iteration: scalar execution, empty command text, closed connections, and the
ownership rule that closing a reader releases neither its command nor its
connection.
"""

from __future__ import annotations

from cursorspec.interfaces.connection import ConnectionState
from cursorspec.interfaces.errors import ErrorKind
from cursorspec.interfaces.values import ABSENT

from .base import CheckContext, ContractSuite, contract_check
from .expect import expect_equal, expect_error, expect_is, expect_true


class CommandContractSuite(ContractSuite):
    """Contract checks for `Command` and `Connection` implementations."""

    name = "command"

    @contract_check(lambda fixture: fixture.select_no_rows, ABSENT)
    def execute_scalar_returns_absent_when_empty(self, ctx: CheckContext) -> None:
        """execute_scalar of a zero-row statement returns the absent marker.

        Backends override the statement; the expectation stays fixed.
        """
        with ctx.open_connection() as connection:
            with connection.create_command(ctx.statement) as command:
                expect_is(command.execute_scalar(), ctx.expected, "execute_scalar()")

    @contract_check("SELECT 42, 'ignored';", 42)
    def execute_scalar_returns_first_column(self, ctx: CheckContext) -> None:
        """execute_scalar returns the first column of the first row."""
        with ctx.open_connection() as connection:
            with connection.create_command(ctx.statement) as command:
                expect_equal(command.execute_scalar(), ctx.expected, "execute_scalar()")

    @contract_check("SELECT NULL;", ABSENT)
    def execute_scalar_returns_absent_when_null(self, ctx: CheckContext) -> None:
        """execute_scalar of a NULL value returns the absent marker."""
        with ctx.open_connection() as connection:
            with connection.create_command(ctx.statement) as command:
                expect_is(command.execute_scalar(), ctx.expected, "execute_scalar()")

    @contract_check()
    def execute_reader_throws_when_no_command_text(self, ctx: CheckContext) -> None:
        """execute_reader with empty command text is a state-misuse error."""
        with ctx.open_connection() as connection:
            with connection.create_command() as command:
                expect_error(ErrorKind.STATE_MISUSE, command.execute_reader)
                command.command_text = "   "
                expect_error(ErrorKind.STATE_MISUSE, command.execute_reader)

    @contract_check("SELECT 1;")
    def execute_reader_throws_when_connection_closed(self, ctx: CheckContext) -> None:
        """execute_reader on a closed connection is a state-misuse error."""
        with ctx.open_connection() as connection:
            with connection.create_command(ctx.statement) as command:
                connection.close()
                expect_is(connection.state, ConnectionState.CLOSED, "connection state")
                expect_error(ErrorKind.STATE_MISUSE, command.execute_reader)

    @contract_check("SELECT 1;", 1)
    def closing_reader_keeps_command_and_connection_open(
        self, ctx: CheckContext
    ) -> None:
        """Closing a reader leaves its command and connection usable."""
        with ctx.open_connection() as connection:
            with connection.create_command(ctx.statement) as command:
                reader = command.execute_reader()
                reader.close()
                expect_true(reader.is_closed, "reader.is_closed")
                expect_is(connection.state, ConnectionState.OPEN, "connection state")
                with command.execute_reader() as again:
                    expect_true(again.read(), "read() on a second reader")
                    expect_equal(again.get_int64(0), ctx.expected, "get_int64(0)")

    @contract_check()
    def connection_close_is_idempotent(self, ctx: CheckContext) -> None:
        """Connection.close() can be called repeatedly."""
        with ctx.open_connection() as connection:
            expect_is(connection.state, ConnectionState.OPEN, "connection state")
            for _ in range(3):
                connection.close()
            expect_is(connection.state, ConnectionState.CLOSED, "connection state")
