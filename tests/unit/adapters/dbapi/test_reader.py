"""Unit tests for `DbApiReader` over in-memory ``sqlite3``.

These go beyond the contract checks into implementation details: lookahead,
metadata inference, records-affected accounting and error translation.
"""

from __future__ import annotations

import sqlite3

import pytest

from cursorspec.interfaces.errors import (
    BackendIOError,
    IndexRangeError,
    ReadBeforeRowError,
    ReaderClosedError,
    ReaderExhaustedError,
    TypeMismatchError,
)
from cursorspec.interfaces.reader import ReaderState
from cursorspec.interfaces.values import ABSENT

# pylint: disable=magic-value-comparison


def open_reader(connection, text: str):
    return connection.create_command(text).execute_reader()


class TestStateMachine:
    """The reader is always in exactly one state, and row access follows it."""

    @staticmethod
    def test_row_errors_by_state(sqlite_connection) -> None:
        with open_reader(sqlite_connection, "SELECT 1") as reader:
            with pytest.raises(ReadBeforeRowError):
                reader.get_value(0)
            assert reader.read()
            assert reader.get_value(0) == 1
            assert not reader.read()
            with pytest.raises(ReaderExhaustedError):
                reader.get_value(0)
            assert not reader.next_result()
            assert reader.state is ReaderState.RESULT_SET_ADVANCED
            with pytest.raises(ReadBeforeRowError):
                reader.get_value(0)
            reader.close()
            with pytest.raises(ReaderClosedError):
                reader.get_value(0)

    @staticmethod
    def test_read_after_exhaustion_stays_false(sqlite_connection) -> None:
        with open_reader(sqlite_connection, "SELECT 1") as reader:
            assert reader.read()
            assert [reader.read() for _ in range(3)] == [False, False, False]
            assert reader.state is ReaderState.AFTER_LAST_ROW

    @staticmethod
    def test_closed_reader_rejects_metadata(sqlite_connection) -> None:
        reader = open_reader(sqlite_connection, "SELECT 1 AS a")
        reader.close()
        for action in (
            lambda: reader.field_count,
            lambda: reader.get_name(0),
            lambda: reader.get_ordinal("a"),
            lambda: reader.has_rows,
            lambda: reader.depth,
            lambda: iter(reader),
        ):
            with pytest.raises(ReaderClosedError):
                action()
        assert reader.is_closed
        assert reader.records_affected == -1


class TestMetadata:
    """Column metadata is fixed when a result set is activated."""

    @staticmethod
    def test_types_are_inferred_from_first_row(sqlite_connection) -> None:
        text = "SELECT 1 AS i, 'x' AS s, X'00' AS b, 1.5 AS f, NULL AS n"
        with open_reader(sqlite_connection, text) as reader:
            assert [reader.get_field_type(i) for i in range(5)] == [
                int,
                str,
                bytes,
                float,
                object,
            ]
            assert [reader.get_data_type_name(i) for i in range(5)] == [
                "INTEGER",
                "TEXT",
                "BLOB",
                "REAL",
                "NULL",
            ]

    @staticmethod
    def test_get_ordinal_prefers_exact_then_folds_case(sqlite_connection) -> None:
        with open_reader(sqlite_connection, "SELECT 1 AS Id, 2 AS id2") as reader:
            assert reader.get_ordinal("Id") == 0
            assert reader.get_ordinal("ID") == 0
            assert reader.get_ordinal("ID2") == 1
            with pytest.raises(IndexRangeError):
                reader.get_ordinal("nope")

    @staticmethod
    @pytest.mark.parametrize("ordinal", [-1, 1, True, "0"])
    def test_bad_ordinals(sqlite_connection, ordinal) -> None:
        with open_reader(sqlite_connection, "SELECT 1") as reader:
            assert reader.read()
            with pytest.raises(IndexRangeError):
                reader.get_value(ordinal)

    @staticmethod
    def test_has_rows_is_known_before_read(sqlite_connection) -> None:
        with open_reader(sqlite_connection, "SELECT 1 WHERE 0 = 1; SELECT 2") as reader:
            assert reader.has_rows is False
            assert reader.field_count == 1
            assert reader.next_result()
            assert reader.has_rows is True
            assert reader.read()
            assert reader.has_rows is True


class TestBatches:
    """Non-query statements are executed and skipped."""

    @staticmethod
    def test_records_affected_accumulates(sqlite_connection) -> None:
        text = (
            "CREATE TABLE t (x INTEGER); "
            "INSERT INTO t VALUES (1), (2); "
            "SELECT count(*) FROM t; "
            "UPDATE t SET x = x + 1; "
            "SELECT sum(x) FROM t"
        )
        with open_reader(sqlite_connection, text) as reader:
            assert reader.records_affected == 2
            assert reader.read()
            assert reader.get_int64(0) == 2
            assert reader.next_result()
            assert reader.records_affected == 4
            assert reader.read()
            assert reader.get_int64(0) == 5
            assert not reader.next_result()

    @staticmethod
    def test_batch_without_result_sets(sqlite_connection) -> None:
        with open_reader(sqlite_connection, "CREATE TABLE u (x)") as reader:
            assert reader.field_count == 0
            assert reader.has_rows is False
            assert not reader.read()
            assert not reader.next_result()
            assert reader.records_affected == -1


class TestRowAccess:
    @staticmethod
    def test_absent_values(sqlite_connection) -> None:
        with open_reader(sqlite_connection, "SELECT NULL, 1") as reader:
            assert reader.read()
            assert reader.get_value(0) is ABSENT
            assert reader[0] is ABSENT
            assert reader.is_null(0)
            assert not reader.is_null(1)
            values = [None, None, "untouched"]
            assert reader.get_values(values) == 2
            assert values == [ABSENT, 1, "untouched"]

    @staticmethod
    @pytest.mark.parametrize(
        "getter, value",
        [
            ("get_byte", -1),
            ("get_byte", 256),
            ("get_int16", 2**15),
            ("get_int32", -(2**31) - 1),
        ],
    )
    def test_sized_getters_check_range(sqlite_connection, getter: str, value: int) -> None:
        with open_reader(sqlite_connection, f"SELECT {value}") as reader:
            assert reader.read()
            with pytest.raises(TypeMismatchError, match="outside"):
                getattr(reader, getter)(0)
            assert reader.get_int64(0) == value

    @staticmethod
    def test_partial_read_guards(sqlite_connection) -> None:
        with open_reader(sqlite_connection, "SELECT X'0102030405', 'abc'") as reader:
            assert reader.read()
            with pytest.raises(IndexRangeError):
                reader.get_bytes(0, -1, bytearray(5), 0, 1)
            with pytest.raises(IndexRangeError):
                reader.get_bytes(0, 0, bytearray(2), 0, 5)
            assert reader.get_bytes(0, 10, bytearray(2), 0, 2) == 0
            with pytest.raises(TypeMismatchError):
                reader.get_chars(0, 0, [""] * 5, 0, 5)
            with pytest.raises(TypeMismatchError):
                reader.get_bytes(1, 0, bytearray(3), 0, 3)
            assert reader.get_chars(1, 0, None, 0, 0) == 3

    @staticmethod
    def test_iteration_continues_from_current_row(sqlite_connection) -> None:
        text = "SELECT 1 AS n UNION ALL SELECT 2 UNION ALL SELECT 3"
        with open_reader(sqlite_connection, text) as reader:
            assert reader.read()
            assert [record["n"] for record in reader] == [2, 3]
            assert reader.state is ReaderState.AFTER_LAST_ROW


class TestBackendErrors:
    """Driver exceptions surface as `BackendIOError` with the cause chained."""

    @staticmethod
    def test_bad_sql(sqlite_connection) -> None:
        with pytest.raises(BackendIOError) as info:
            open_reader(sqlite_connection, "SELEC 1")
        assert isinstance(info.value.__cause__, sqlite3.Error)
        # the failed reader did not stay active on the connection
        with open_reader(sqlite_connection, "SELECT 1") as reader:
            assert reader.read()

    @staticmethod
    def test_error_in_later_statement(sqlite_connection) -> None:
        with open_reader(sqlite_connection, "SELECT 1; SELECT * FROM missing") as reader:
            assert reader.read()
            with pytest.raises(BackendIOError):
                reader.next_result()

    @staticmethod
    def test_failed_statement_ends_the_batch(sqlite_connection) -> None:
        text = "SELECT 1 AS a; SELECT * FROM missing; SELECT 2 AS b"
        with open_reader(sqlite_connection, text) as reader:
            assert reader.read()
            with pytest.raises(BackendIOError):
                reader.next_result()
            # nothing of the first result set survives the failure
            assert reader.state is ReaderState.RESULT_SET_ADVANCED
            assert reader.field_count == 0
            assert not reader.has_rows
            with pytest.raises(ReadBeforeRowError):
                reader.get_value(0)
            # and the statements after the failed one are never run
            assert not reader.next_result()
            assert not reader.next_result()
            assert not reader.read()

    @staticmethod
    def test_bracket_identifier_with_semicolon(sqlite_connection) -> None:
        with open_reader(sqlite_connection, "SELECT 1 AS [a;b];") as reader:
            assert reader.get_name(0) == "a;b"
            assert reader.read()
            assert reader.get_value(0) == 1
            assert not reader.next_result()
