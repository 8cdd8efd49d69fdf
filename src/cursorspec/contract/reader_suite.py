"""Reader contract suite.

Behavior under test:
    - lifecycle: before-row, on-row, after-last-row, result-set-advanced, closed
    - typed getters and their coercions
    - absent values: readable only as `Absent`, ``object``, `get_value()` or
      `read_field()`; every other type is a type-mismatch
    - row access before `read()`, after the last row and after `close()` is a
      state-misuse error, every time
    - ordinal/name resolution and index-range errors
    - multi-result-set batches, including zero-row result sets
    - partial reads (`get_bytes`, `get_chars`) and `get_values` truncation
    - UTF-8 text with 1-, 2-, 3- and 4-byte code points

Every check opens its own connection and releases it on every exit path.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from datetime import datetime
from decimal import Decimal
from typing import Any

from cursorspec.interfaces.errors import ErrorKind
from cursorspec.interfaces.reader import Reader, ReaderState, Record
from cursorspec.interfaces.values import ABSENT, Absent, Present

from .base import CheckContext, ContractSuite, contract_check
from .expect import (
    ContractViolation,
    expect_equal,
    expect_error,
    expect_false,
    expect_instance,
    expect_is,
    expect_true,
)

# pylint: disable=too-many-public-methods

ReaderAction = Callable[[Reader], Any]

SELECT_NULL = "SELECT NULL;"
SELECT_ONE = "SELECT 1;"

TEST_GUID = uuid.UUID("dc0d7e0e-365d-4948-ab9b-8ca8056bf93a")
TEST_BLOB = bytes([0x7E, 0x57])

#: Every type `get_field_value()` must refuse for an absent value.
TYPED_ACCESS_TYPES: tuple[type, ...] = (
    bool,
    int,
    float,
    Decimal,
    str,
    bytes,
    datetime,
    uuid.UUID,
)

UNTOUCHED = object()


def _hex(value: bytes) -> Callable[[Any], str]:
    return lambda fixture: f"SELECT {fixture.create_hex_literal(value)};"


class ReaderContractSuite(ContractSuite):
    """Contract checks for `Reader` implementations."""

    name = "reader"

    # ------------------------------------------------------------------
    #                           Shared shapes
    # ------------------------------------------------------------------

    @staticmethod
    def _get_x_works(ctx: CheckContext, action: ReaderAction) -> None:
        with ctx.reader() as reader:
            expect_true(reader.read(), "read()")
            expect_equal(action(reader), ctx.expected)

    @staticmethod
    def _get_x_throws_type_mismatch(ctx: CheckContext, action: ReaderAction) -> None:
        with ctx.reader() as reader:
            expect_true(reader.read(), "read()")
            expect_error(ErrorKind.TYPE_MISMATCH, action, reader)

    @staticmethod
    def _x_throws_before_read(ctx: CheckContext, action: ReaderAction) -> None:
        with ctx.reader() as reader:
            expect_error(ErrorKind.STATE_MISUSE, action, reader)
            expect_is(reader.state, ReaderState.BEFORE_ROW, "state")

    @staticmethod
    def _x_throws_when_done(ctx: CheckContext, action: ReaderAction) -> None:
        with ctx.reader() as reader:
            expect_true(reader.read(), "first read()")
            expect_false(reader.read(), "second read()")
            expect_error(ErrorKind.STATE_MISUSE, action, reader)
            expect_is(reader.state, ReaderState.AFTER_LAST_ROW, "state")

    @staticmethod
    def _x_throws_when_closed(ctx: CheckContext, action: ReaderAction) -> None:
        with ctx.reader() as reader:
            reader.close()
            expect_error(ErrorKind.STATE_MISUSE, action, reader)

    @staticmethod
    def _x_throws_when_out_of_range(ctx: CheckContext, action: ReaderAction) -> None:
        with ctx.reader() as reader:
            expect_error(ErrorKind.INDEX_RANGE, action, reader)

    # ------------------------------------------------------------------
    #                           Metadata
    # ------------------------------------------------------------------

    @contract_check(SELECT_ONE, 0)
    def depth_returns_zero(self, ctx: CheckContext) -> None:
        """depth is 0 for a flat result set."""
        with ctx.reader() as reader:
            expect_equal(reader.depth, ctx.expected, "depth")

    @contract_check(SELECT_ONE, 1)
    def field_count_works(self, ctx: CheckContext) -> None:
        """field_count reports the number of columns before any read()."""
        with ctx.reader() as reader:
            expect_equal(reader.field_count, ctx.expected, "field_count")

    @contract_check(lambda fixture: fixture.select_no_rows, 1)
    def field_count_works_when_no_rows(self, ctx: CheckContext) -> None:
        """A zero-row result set still exposes its column count."""
        with ctx.reader() as reader:
            expect_equal(reader.field_count, ctx.expected, "field_count")
            expect_false(reader.read(), "read()")
            expect_equal(reader.field_count, ctx.expected, "field_count after read()")

    @contract_check(SELECT_ONE)
    def field_count_throws_when_closed(self, ctx: CheckContext) -> None:
        """field_count on a closed reader is a state-misuse error."""
        self._x_throws_when_closed(ctx, lambda r: r.field_count)

    @contract_check("SELECT 1 AS Id;", "Id")
    def get_name_works(self, ctx: CheckContext) -> None:
        """get_name returns the column alias."""
        with ctx.reader() as reader:
            expect_equal(reader.get_name(0), ctx.expected, "get_name(0)")

    @contract_check(SELECT_ONE)
    def get_name_throws_when_ordinal_out_of_range(self, ctx: CheckContext) -> None:
        """get_name with an ordinal past the last column is an index-range error."""
        self._x_throws_when_out_of_range(ctx, lambda r: r.get_name(1))

    @contract_check(SELECT_ONE)
    def get_name_throws_when_closed(self, ctx: CheckContext) -> None:
        """get_name on a closed reader is a state-misuse error."""
        self._x_throws_when_closed(ctx, lambda r: r.get_name(0))

    @contract_check("SELECT 1 AS Id;", "Id")
    def get_ordinal_works(self, ctx: CheckContext) -> None:
        """get_ordinal resolves a column alias to its ordinal."""
        with ctx.reader() as reader:
            expect_equal(reader.get_ordinal(ctx.expected), 0, "get_ordinal")

    @contract_check(SELECT_ONE)
    def get_ordinal_throws_when_out_of_range(self, ctx: CheckContext) -> None:
        """get_ordinal with an unknown name is an index-range error."""
        self._x_throws_when_out_of_range(ctx, lambda r: r.get_ordinal("Name"))

    @contract_check(SELECT_ONE)
    def get_ordinal_throws_when_closed(self, ctx: CheckContext) -> None:
        """get_ordinal on a closed reader is a state-misuse error."""
        self._x_throws_when_closed(ctx, lambda r: r.get_ordinal("Id"))

    @contract_check("SELECT 'test';", str)
    def get_field_type_works(self, ctx: CheckContext) -> None:
        """get_field_type reports the Python type of a text column."""
        with ctx.reader() as reader:
            expect_is(reader.get_field_type(0), ctx.expected, "get_field_type(0)")

    @contract_check(SELECT_ONE)
    def get_field_type_throws_when_ordinal_out_of_range(self, ctx: CheckContext) -> None:
        """get_field_type past the last column is an index-range error."""
        self._x_throws_when_out_of_range(ctx, lambda r: r.get_field_type(1))

    @contract_check(SELECT_ONE)
    def get_field_type_throws_when_closed(self, ctx: CheckContext) -> None:
        """get_field_type on a closed reader is a state-misuse error."""
        self._x_throws_when_closed(ctx, lambda r: r.get_field_type(0))

    @contract_check(SELECT_ONE)
    def get_data_type_name_works(self, ctx: CheckContext) -> None:
        """get_data_type_name returns a non-empty backend type name."""
        with ctx.reader() as reader:
            name = reader.get_data_type_name(0)
            expect_instance(name, str, "get_data_type_name(0)")
            expect_true(bool(name), "get_data_type_name(0) is non-empty")

    @contract_check(SELECT_ONE)
    def get_data_type_name_throws_when_ordinal_out_of_range(
        self, ctx: CheckContext
    ) -> None:
        """get_data_type_name past the last column is an index-range error."""
        self._x_throws_when_out_of_range(ctx, lambda r: r.get_data_type_name(1))

    @contract_check(SELECT_ONE)
    def get_data_type_name_throws_when_closed(self, ctx: CheckContext) -> None:
        """get_data_type_name on a closed reader is a state-misuse error."""
        self._x_throws_when_closed(ctx, lambda r: r.get_data_type_name(0))

    # ------------------------------------------------------------------
    #                           Typed getters
    # ------------------------------------------------------------------

    @contract_check(lambda fixture: f"SELECT {fixture.create_boolean_literal(True)};", True)
    def get_boolean_works(self, ctx: CheckContext) -> None:
        """get_boolean reads the backend's boolean literal."""
        self._get_x_works(ctx, lambda r: r.get_boolean(0))

    @contract_check(SELECT_NULL)
    def get_boolean_throws_when_null(self, ctx: CheckContext) -> None:
        """get_boolean on an absent value is a type-mismatch."""
        self._get_x_throws_type_mismatch(ctx, lambda r: r.get_boolean(0))

    @contract_check(SELECT_ONE, 1)
    def get_byte_works(self, ctx: CheckContext) -> None:
        """get_byte reads a small integer."""
        self._get_x_works(ctx, lambda r: r.get_byte(0))

    @contract_check("SELECT 256;")
    def get_byte_throws_when_out_of_range(self, ctx: CheckContext) -> None:
        """get_byte on a value above 255 is a type-mismatch."""
        self._get_x_throws_type_mismatch(ctx, lambda r: r.get_byte(0))

    @contract_check(SELECT_ONE, 1)
    def get_int16_works(self, ctx: CheckContext) -> None:
        """get_int16 reads a small integer."""
        self._get_x_works(ctx, lambda r: r.get_int16(0))

    @contract_check(SELECT_ONE, 1)
    def get_int32_works(self, ctx: CheckContext) -> None:
        """get_int32 reads a small integer."""
        self._get_x_works(ctx, lambda r: r.get_int32(0))

    @contract_check(SELECT_ONE, 1)
    def get_int64_works(self, ctx: CheckContext) -> None:
        """get_int64 reads a small integer."""
        self._get_x_works(ctx, lambda r: r.get_int64(0))

    @contract_check(SELECT_NULL)
    def get_int64_throws_when_null(self, ctx: CheckContext) -> None:
        """get_int64 on an absent value is a type-mismatch."""
        self._get_x_throws_type_mismatch(ctx, lambda r: r.get_int64(0))

    @contract_check("SELECT 3;", 3.0)
    def get_float_works(self, ctx: CheckContext) -> None:
        """get_float widens an integer."""
        self._get_x_works(ctx, lambda r: r.get_float(0))

    @contract_check("SELECT 3;", 3.0)
    def get_double_works(self, ctx: CheckContext) -> None:
        """get_double widens an integer."""
        self._get_x_works(ctx, lambda r: r.get_double(0))

    @contract_check(SELECT_NULL)
    def get_double_throws_when_null(self, ctx: CheckContext) -> None:
        """get_double on an absent value is a type-mismatch."""
        self._get_x_throws_type_mismatch(ctx, lambda r: r.get_double(0))

    @contract_check(SELECT_NULL)
    def get_decimal_throws_when_null(self, ctx: CheckContext) -> None:
        """get_decimal on an absent value is a type-mismatch."""
        self._get_x_throws_type_mismatch(ctx, lambda r: r.get_decimal(0))

    @contract_check("SELECT '2014-04-15 10:47:16';", datetime(2014, 4, 15, 10, 47, 16))
    def get_datetime_works_with_text(self, ctx: CheckContext) -> None:
        """get_datetime parses ISO-8601 text."""
        self._get_x_works(ctx, lambda r: r.get_datetime(0))

    @contract_check(SELECT_NULL)
    def get_datetime_throws_when_null(self, ctx: CheckContext) -> None:
        """get_datetime on an absent value is a type-mismatch."""
        self._get_x_throws_type_mismatch(ctx, lambda r: r.get_datetime(0))

    @contract_check(_hex(TEST_GUID.bytes), TEST_GUID)
    def get_guid_works_when_blob(self, ctx: CheckContext) -> None:
        """get_guid reads a 16-byte binary value."""
        self._get_x_works(ctx, lambda r: r.get_guid(0))

    @contract_check(f"SELECT '{TEST_GUID}';", TEST_GUID)
    def get_guid_works_when_text(self, ctx: CheckContext) -> None:
        """get_guid parses canonical UUID text."""
        self._get_x_works(ctx, lambda r: r.get_guid(0))

    @contract_check(SELECT_NULL)
    def get_guid_throws_when_null(self, ctx: CheckContext) -> None:
        """get_guid on an absent value is a type-mismatch."""
        self._get_x_throws_type_mismatch(ctx, lambda r: r.get_guid(0))

    @contract_check("SELECT 'test';", "test")
    def get_string_works(self, ctx: CheckContext) -> None:
        """get_string reads text."""
        self._get_x_works(ctx, lambda r: r.get_string(0))

    @contract_check(SELECT_NULL)
    def get_string_throws_when_null(self, ctx: CheckContext) -> None:
        """get_string on an absent value is a type-mismatch."""
        self._get_x_throws_type_mismatch(ctx, lambda r: r.get_string(0))

    @contract_check("SELECT 'a';", "a")
    def get_string_works_utf8_one_byte(self, ctx: CheckContext) -> None:
        """get_string reads a 1-byte UTF-8 code point."""
        self._get_x_works(ctx, lambda r: r.get_string(0))

    @contract_check("SELECT 'Ä';", "Ä")
    def get_string_works_utf8_two_bytes(self, ctx: CheckContext) -> None:
        """get_string reads a 2-byte UTF-8 code point."""
        self._get_x_works(ctx, lambda r: r.get_string(0))

    @contract_check("SELECT 'Ḁ';", "Ḁ")
    def get_string_works_utf8_three_bytes(self, ctx: CheckContext) -> None:
        """get_string reads a 3-byte UTF-8 code point."""
        self._get_x_works(ctx, lambda r: r.get_string(0))

    @contract_check("SELECT '😀';", "😀")
    def get_string_works_utf8_four_bytes(self, ctx: CheckContext) -> None:
        """get_string reads a 4-byte UTF-8 code point."""
        self._get_x_works(ctx, lambda r: r.get_string(0))

    @contract_check("SELECT 'aÄḀ😀aÄḀ😀';", "aÄḀ😀aÄḀ😀")
    def get_string_works_utf8_mixed_widths(self, ctx: CheckContext) -> None:
        """get_string reads text mixing every UTF-8 width."""
        self._get_x_works(ctx, lambda r: r.get_string(0))

    # ------------------------------------------------------------------
    #                           get_field_value
    # ------------------------------------------------------------------

    @contract_check("SELECT 'test';", "test")
    def get_field_value_of_string_works(self, ctx: CheckContext) -> None:
        """get_field_value(str) reads text."""
        self._get_x_works(ctx, lambda r: r.get_field_value(0, str))

    @contract_check(_hex(TEST_BLOB), TEST_BLOB)
    def get_field_value_of_bytes_works(self, ctx: CheckContext) -> None:
        """get_field_value(bytes) reads a binary literal."""
        self._get_x_works(ctx, lambda r: r.get_field_value(0, bytes))

    @contract_check(_hex(b""), b"")
    def get_field_value_of_bytes_empty(self, ctx: CheckContext) -> None:
        """get_field_value(bytes) reads an empty binary literal as b''."""
        self._get_x_works(ctx, lambda r: r.get_field_value(0, bytes))

    @contract_check(SELECT_NULL)
    def get_field_value_of_bytes_throws_when_null(self, ctx: CheckContext) -> None:
        """get_field_value(bytes) on an absent value is a type-mismatch."""
        self._get_x_throws_type_mismatch(ctx, lambda r: r.get_field_value(0, bytes))

    @contract_check(SELECT_NULL, ABSENT)
    def get_field_value_of_absent_works(self, ctx: CheckContext) -> None:
        """get_field_value(Absent) returns the absent marker for NULL."""
        with ctx.reader() as reader:
            expect_true(reader.read(), "read()")
            expect_is(reader.get_field_value(0, Absent), ctx.expected)

    @contract_check(SELECT_ONE)
    def get_field_value_of_absent_throws_when_not_null(self, ctx: CheckContext) -> None:
        """get_field_value(Absent) on a present value is a type-mismatch."""
        self._get_x_throws_type_mismatch(ctx, lambda r: r.get_field_value(0, Absent))

    @contract_check(SELECT_NULL, ABSENT)
    def get_absent_works(self, ctx: CheckContext) -> None:
        """get_absent returns the absent marker for NULL."""
        with ctx.reader() as reader:
            expect_true(reader.read(), "read()")
            expect_is(reader.get_absent(0), ctx.expected)

    @contract_check(SELECT_ONE)
    def get_absent_throws_when_not_null(self, ctx: CheckContext) -> None:
        """get_absent on a present value is a type-mismatch."""
        self._get_x_throws_type_mismatch(ctx, lambda r: r.get_absent(0))

    @contract_check(SELECT_NULL, ABSENT)
    def get_field_value_throws_when_null_for_every_type(self, ctx: CheckContext) -> None:
        """An absent value is readable only as Absent, object or untyped."""
        with ctx.reader() as reader:
            expect_true(reader.read(), "read()")
            for type_ in TYPED_ACCESS_TYPES:
                expect_error(
                    ErrorKind.TYPE_MISMATCH,
                    reader.get_field_value,
                    0,
                    type_,
                    what=f"get_field_value(0, {type_.__name__})",
                )
            expect_is(reader.get_field_value(0, Absent), ctx.expected, "Absent")
            expect_is(reader.get_field_value(0, object), ctx.expected, "object")
            expect_is(reader.get_value(0), ctx.expected, "get_value(0)")

    @contract_check(SELECT_NULL)
    def get_field_value_throws_before_read(self, ctx: CheckContext) -> None:
        """get_field_value before read() is a state-misuse error."""
        self._x_throws_before_read(ctx, lambda r: r.get_field_value(0, Absent))

    @contract_check(SELECT_NULL)
    def get_field_value_throws_when_done(self, ctx: CheckContext) -> None:
        """get_field_value after the last row is a state-misuse error."""
        self._x_throws_when_done(ctx, lambda r: r.get_field_value(0, Absent))

    @contract_check(SELECT_ONE)
    def get_field_value_throws_when_closed(self, ctx: CheckContext) -> None:
        """get_field_value on a closed reader is a state-misuse error."""
        self._x_throws_when_closed(ctx, lambda r: r.get_field_value(0, int))

    @contract_check("SELECT 'a';", "a")
    def get_field_value_works_utf8_one_byte(self, ctx: CheckContext) -> None:
        """get_field_value(str) reads a 1-byte UTF-8 code point."""
        self._get_x_works(ctx, lambda r: r.get_field_value(0, str))

    @contract_check("SELECT 'Ä';", "Ä")
    def get_field_value_works_utf8_two_bytes(self, ctx: CheckContext) -> None:
        """get_field_value(str) reads a 2-byte UTF-8 code point."""
        self._get_x_works(ctx, lambda r: r.get_field_value(0, str))

    @contract_check("SELECT 'Ḁ';", "Ḁ")
    def get_field_value_works_utf8_three_bytes(self, ctx: CheckContext) -> None:
        """get_field_value(str) reads a 3-byte UTF-8 code point."""
        self._get_x_works(ctx, lambda r: r.get_field_value(0, str))

    @contract_check("SELECT '😀';", "😀")
    def get_field_value_works_utf8_four_bytes(self, ctx: CheckContext) -> None:
        """get_field_value(str) reads a 4-byte UTF-8 code point."""
        self._get_x_works(ctx, lambda r: r.get_field_value(0, str))

    # ------------------------------------------------------------------
    #                           Untyped access
    # ------------------------------------------------------------------

    @contract_check("SELECT 'test';", "test")
    def get_value_works_when_string(self, ctx: CheckContext) -> None:
        """get_value returns text as str."""
        self._get_x_works(ctx, lambda r: r.get_value(0))

    @contract_check(_hex(TEST_BLOB), TEST_BLOB)
    def get_value_works_when_blob(self, ctx: CheckContext) -> None:
        """get_value returns binary data as bytes."""
        self._get_x_works(ctx, lambda r: r.get_value(0))

    @contract_check(SELECT_NULL, ABSENT)
    def get_value_works_when_null(self, ctx: CheckContext) -> None:
        """get_value returns the absent marker for NULL."""
        with ctx.reader() as reader:
            expect_true(reader.read(), "read()")
            expect_is(reader.get_value(0), ctx.expected, "get_value(0)")

    @contract_check(SELECT_NULL)
    def get_value_throws_before_read(self, ctx: CheckContext) -> None:
        """get_value before read() is a state-misuse error."""
        self._x_throws_before_read(ctx, lambda r: r.get_value(0))

    @contract_check(SELECT_NULL)
    def get_value_throws_when_done(self, ctx: CheckContext) -> None:
        """get_value after the last row is a state-misuse error."""
        self._x_throws_when_done(ctx, lambda r: r.get_value(0))

    @contract_check(SELECT_ONE)
    def get_value_throws_when_closed(self, ctx: CheckContext) -> None:
        """get_value on a closed reader is a state-misuse error."""
        self._x_throws_when_closed(ctx, lambda r: r.get_value(0))

    @contract_check(SELECT_ONE)
    def get_value_throws_when_ordinal_out_of_range(self, ctx: CheckContext) -> None:
        """get_value past the last column is an index-range error."""
        with ctx.reader() as reader:
            expect_true(reader.read(), "read()")
            expect_error(ErrorKind.INDEX_RANGE, reader.get_value, 1)

    @contract_check("SELECT 'a';", "a")
    def get_value_to_string_works_utf8_one_byte(self, ctx: CheckContext) -> None:
        """get_value returns a 1-byte UTF-8 code point intact."""
        self._get_x_works(ctx, lambda r: r.get_value(0))

    @contract_check("SELECT 'Ä';", "Ä")
    def get_value_to_string_works_utf8_two_bytes(self, ctx: CheckContext) -> None:
        """get_value returns a 2-byte UTF-8 code point intact."""
        self._get_x_works(ctx, lambda r: r.get_value(0))

    @contract_check("SELECT 'Ḁ';", "Ḁ")
    def get_value_to_string_works_utf8_three_bytes(self, ctx: CheckContext) -> None:
        """get_value returns a 3-byte UTF-8 code point intact."""
        self._get_x_works(ctx, lambda r: r.get_value(0))

    @contract_check("SELECT '😀';", "😀")
    def get_value_to_string_works_utf8_four_bytes(self, ctx: CheckContext) -> None:
        """get_value returns a 4-byte UTF-8 code point intact."""
        self._get_x_works(ctx, lambda r: r.get_value(0))

    @contract_check("SELECT 'test';", "test")
    def read_field_returns_present(self, ctx: CheckContext) -> None:
        """read_field wraps a present value in Present."""
        with ctx.reader() as reader:
            expect_true(reader.read(), "read()")
            expect_equal(reader.read_field(0), Present(ctx.expected), "read_field(0)")

    @contract_check(SELECT_NULL, ABSENT)
    def read_field_returns_absent_when_null(self, ctx: CheckContext) -> None:
        """read_field returns the absent marker for NULL."""
        with ctx.reader() as reader:
            expect_true(reader.read(), "read()")
            expect_is(reader.read_field(0), ctx.expected, "read_field(0)")

    @contract_check("SELECT 'a', 'b';", ("a", "b"))
    def get_values_works(self, ctx: CheckContext) -> None:
        """get_values fills a wider list and leaves the extra slots untouched."""
        with ctx.reader() as reader:
            expect_true(reader.read(), "read()")
            values: list[Any] = [UNTOUCHED] * (len(ctx.expected) + 1)
            expect_equal(reader.get_values(values), len(ctx.expected), "get_values()")
            expect_equal(tuple(values[: len(ctx.expected)]), ctx.expected, "values")
            expect_is(values[-1], UNTOUCHED, "slot past the row")

    @contract_check(SELECT_ONE)
    def get_values_when_too_narrow(self, ctx: CheckContext) -> None:
        """get_values with an empty list copies nothing and returns 0."""
        with ctx.reader() as reader:
            expect_true(reader.read(), "read()")
            expect_equal(reader.get_values([]), 0, "get_values([])")

    @contract_check("SELECT 'a', 'b', 'c';", ("a", "b"))
    def get_values_truncates_to_list_length(self, ctx: CheckContext) -> None:
        """get_values copies only as many values as the list holds."""
        with ctx.reader() as reader:
            expect_true(reader.read(), "read()")
            values: list[Any] = [UNTOUCHED] * len(ctx.expected)
            expect_equal(reader.get_values(values), len(ctx.expected), "get_values()")
            expect_equal(tuple(values), ctx.expected, "values")

    @contract_check("SELECT 'test';", "test")
    def item_by_ordinal_works(self, ctx: CheckContext) -> None:
        """reader[ordinal] returns the value."""
        self._get_x_works(ctx, lambda r: r[0])

    @contract_check("SELECT 'test' AS Id;", "test")
    def item_by_name_works(self, ctx: CheckContext) -> None:
        """reader[name] returns the value."""
        self._get_x_works(ctx, lambda r: r[r.get_name(0)])

    @contract_check("SELECT 'test' AS Id, 2 AS Other;")
    def item_by_name_and_ordinal_agree(self, ctx: CheckContext) -> None:
        """Indexing by name and by ordinal resolve to the same value."""
        with ctx.reader() as reader:
            expect_true(reader.read(), "read()")
            for ordinal in range(reader.field_count):
                name = reader.get_name(ordinal)
                expect_equal(reader[name], reader[ordinal], f"reader[{name!r}]")
                expect_equal(reader.get_ordinal(name), ordinal, f"get_ordinal({name!r})")

    # ------------------------------------------------------------------
    #                           Partial reads
    # ------------------------------------------------------------------

    @contract_check(_hex(TEST_BLOB), TEST_BLOB)
    def get_bytes_works(self, ctx: CheckContext) -> None:
        """get_bytes copies a whole binary value into an exact-size buffer."""
        with ctx.reader() as reader:
            expect_true(reader.read(), "read()")
            buffer = bytearray(len(ctx.expected))
            copied = reader.get_bytes(0, 0, buffer, 0, len(buffer))
            expect_equal(copied, len(ctx.expected), "get_bytes()")
            expect_equal(bytes(buffer), ctx.expected, "buffer")

    @contract_check(_hex(bytes(range(1, 6))), bytes(range(1, 6)))
    def get_bytes_copies_at_most_length(self, ctx: CheckContext) -> None:
        """get_bytes honors data offset, buffer offset and length."""
        with ctx.reader() as reader:
            expect_true(reader.read(), "read()")
            buffer = bytearray(10)
            expect_equal(reader.get_bytes(0, 1, buffer, 2, 3), 3, "get_bytes(0, 1, buf, 2, 3)")
            expected = bytearray(10)
            expected[2:5] = ctx.expected[1:4]
            expect_equal(buffer, expected, "buffer")

    @contract_check(_hex(bytes(range(1, 6))), 5)
    def get_bytes_returns_length_when_buffer_is_none(self, ctx: CheckContext) -> None:
        """get_bytes with no buffer returns the full length of the value."""
        with ctx.reader() as reader:
            expect_true(reader.read(), "read()")
            expect_equal(reader.get_bytes(0, 0, None, 0, 0), ctx.expected, "get_bytes()")

    @contract_check(_hex(bytes(range(1, 6))), 2)
    def get_bytes_returns_remaining_count_near_end(self, ctx: CheckContext) -> None:
        """get_bytes copies only what remains after the data offset."""
        with ctx.reader() as reader:
            expect_true(reader.read(), "read()")
            buffer = bytearray(8)
            copied = reader.get_bytes(0, 3, buffer, 0, len(buffer))
            expect_equal(copied, ctx.expected, "get_bytes(0, 3, buf, 0, 8)")

    @contract_check(_hex(TEST_BLOB))
    def get_bytes_throws_when_ordinal_out_of_range(self, ctx: CheckContext) -> None:
        """get_bytes past the last column is an index-range error."""
        with ctx.reader() as reader:
            expect_true(reader.read(), "read()")
            expect_error(ErrorKind.INDEX_RANGE, reader.get_bytes, 1, 0, bytearray(2), 0, 2)

    @contract_check("SELECT 'test';", "test")
    def get_chars_works(self, ctx: CheckContext) -> None:
        """get_chars copies a whole text value into an exact-size buffer."""
        with ctx.reader() as reader:
            expect_true(reader.read(), "read()")
            buffer = [""] * len(ctx.expected)
            copied = reader.get_chars(0, 0, buffer, 0, len(buffer))
            expect_equal(copied, len(ctx.expected), "get_chars()")
            expect_equal(buffer, list(ctx.expected), "buffer")

    @contract_check("SELECT 'hÄḀ😀o';", "hÄḀ😀o")
    def get_chars_does_not_split_code_points(self, ctx: CheckContext) -> None:
        """get_chars offsets count code points, whatever their UTF-8 width."""
        with ctx.reader() as reader:
            expect_true(reader.read(), "read()")
            buffer = [""] * 5
            expect_equal(reader.get_chars(0, 1, buffer, 1, 3), 3, "get_chars(0, 1, buf, 1, 3)")
            expect_equal(buffer, ["", *ctx.expected[1:4], ""], "buffer")
            expect_equal(reader.get_chars(0, 0, None, 0, 0), len(ctx.expected), "length")

    @contract_check("SELECT 'test';")
    def get_chars_throws_when_ordinal_out_of_range(self, ctx: CheckContext) -> None:
        """get_chars past the last column is an index-range error."""
        with ctx.reader() as reader:
            expect_true(reader.read(), "read()")
            expect_error(ErrorKind.INDEX_RANGE, reader.get_chars, 1, 0, [""] * 4, 0, 4)

    # ------------------------------------------------------------------
    #                           Null checks
    # ------------------------------------------------------------------

    @contract_check(SELECT_NULL)
    def is_null_works(self, ctx: CheckContext) -> None:
        """is_null is True for NULL."""
        with ctx.reader() as reader:
            expect_true(reader.read(), "read()")
            expect_true(reader.is_null(0), "is_null(0)")

    @contract_check(SELECT_ONE)
    def is_null_returns_false_when_present(self, ctx: CheckContext) -> None:
        """is_null is False for a present value."""
        with ctx.reader() as reader:
            expect_true(reader.read(), "read()")
            expect_false(reader.is_null(0), "is_null(0)")

    @contract_check(SELECT_NULL)
    def is_null_throws_before_read(self, ctx: CheckContext) -> None:
        """is_null before read() is a state-misuse error."""
        self._x_throws_before_read(ctx, lambda r: r.is_null(0))

    @contract_check(SELECT_NULL)
    def is_null_throws_when_done(self, ctx: CheckContext) -> None:
        """is_null after the last row is a state-misuse error."""
        self._x_throws_when_done(ctx, lambda r: r.is_null(0))

    @contract_check(SELECT_ONE)
    def is_null_throws_when_closed(self, ctx: CheckContext) -> None:
        """is_null on a closed reader is a state-misuse error."""
        self._x_throws_when_closed(ctx, lambda r: r.is_null(0))

    # ------------------------------------------------------------------
    #                           Rows and result sets
    # ------------------------------------------------------------------

    @contract_check(SELECT_ONE, True)
    def has_rows_returns_true_when_rows(self, ctx: CheckContext) -> None:
        """has_rows is True before read() when the result set has rows."""
        with ctx.reader() as reader:
            expect_equal(reader.has_rows, ctx.expected, "has_rows")

    @contract_check(lambda fixture: fixture.select_no_rows, False)
    def has_rows_returns_false_when_no_rows(self, ctx: CheckContext) -> None:
        """has_rows is False for a zero-row result set."""
        with ctx.reader() as reader:
            expect_equal(reader.has_rows, ctx.expected, "has_rows")

    @contract_check(lambda fixture: fixture.select_no_rows + "SELECT 1;", 1)
    def has_rows_works_when_batching(self, ctx: CheckContext) -> None:
        """has_rows follows the current result set of a batch."""
        with ctx.reader() as reader:
            expect_false(reader.has_rows, "has_rows of the first result set")
            expect_true(reader.next_result(), "next_result()")
            expect_true(reader.has_rows, "has_rows of the second result set")
            expect_true(reader.read(), "read()")
            expect_equal(reader.get_int64(0), ctx.expected, "get_int64(0)")

    @contract_check(SELECT_ONE)
    def has_rows_throws_when_closed(self, ctx: CheckContext) -> None:
        """has_rows on a closed reader is a state-misuse error."""
        self._x_throws_when_closed(ctx, lambda r: r.has_rows)

    @contract_check(SELECT_ONE, 1)
    def read_works_once(self, ctx: CheckContext) -> None:
        """A one-row result set reads exactly once."""
        with ctx.reader() as reader:
            expect_true(reader.read(), "first read()")
            expect_equal(reader.get_int64(0), ctx.expected, "get_int64(0)")
            expect_false(reader.read(), "second read()")
            expect_false(reader.read(), "third read()")

    @contract_check("SELECT 1 UNION ALL SELECT 2;", (1, 2))
    def read_works(self, ctx: CheckContext) -> None:
        """read() walks every row in order, then returns False."""
        with ctx.reader() as reader:
            for value in ctx.expected:
                expect_true(reader.read(), "read()")
                expect_equal(reader.get_int64(0), value, "get_int64(0)")
            expect_false(reader.read(), "read() past the last row")

    @contract_check(SELECT_ONE)
    def read_throws_when_closed(self, ctx: CheckContext) -> None:
        """read() on a closed reader is a state-misuse error."""
        self._x_throws_when_closed(ctx, lambda r: r.read())

    @contract_check("SELECT 1; SELECT 2", (1, 2))
    def next_result_works(self, ctx: CheckContext) -> None:
        """next_result moves through a batch in textual order."""
        with ctx.reader() as reader:
            first, second = ctx.expected
            expect_true(reader.read(), "read()")
            expect_equal(reader.get_int64(0), first, "first result set")
            expect_true(reader.next_result(), "next_result()")
            expect_true(reader.read(), "read()")
            expect_equal(reader.get_int64(0), second, "second result set")
            expect_false(reader.next_result(), "next_result() at the end")

    @contract_check(SELECT_ONE)
    def next_result_can_be_called_more_than_once(self, ctx: CheckContext) -> None:
        """next_result keeps returning False once the batch is exhausted."""
        with ctx.reader() as reader:
            for attempt in range(3):
                expect_false(reader.next_result(), f"next_result() #{attempt + 1}")
            expect_false(reader.read(), "read() after the last result set")

    @contract_check("SELECT 1 AS a; SELECT 'x' AS b, 2 AS c;", ("b", "c"))
    def next_result_resets_column_metadata(self, ctx: CheckContext) -> None:
        """next_result replaces the column metadata with the next result set's."""
        with ctx.reader() as reader:
            expect_equal(reader.field_count, 1, "field_count of the first result set")
            expect_true(reader.next_result(), "next_result()")
            expect_equal(reader.field_count, len(ctx.expected), "field_count")
            names = tuple(reader.get_name(i) for i in range(reader.field_count))
            expect_equal(names, ctx.expected, "column names")
            expect_error(ErrorKind.STATE_MISUSE, reader.get_value, 0, what="get_value before read()")

    @contract_check("SELECT 1 UNION ALL SELECT 2; SELECT 3;", 3)
    def next_result_skips_unread_rows(self, ctx: CheckContext) -> None:
        """next_result discards rows of the current result set that were not read."""
        with ctx.reader() as reader:
            expect_true(reader.read(), "read()")
            expect_true(reader.next_result(), "next_result()")
            expect_true(reader.read(), "read()")
            expect_equal(reader.get_int64(0), ctx.expected, "get_int64(0)")

    @contract_check(SELECT_ONE)
    def next_result_throws_when_closed(self, ctx: CheckContext) -> None:
        """next_result on a closed reader is a state-misuse error."""
        self._x_throws_when_closed(ctx, lambda r: r.next_result())

    @contract_check("SELECT 1 AS x UNION ALL SELECT 2;", (1, 2))
    def iteration_yields_remaining_rows(self, ctx: CheckContext) -> None:
        """Iterating a reader yields one record per row of the current result set."""
        with ctx.reader() as reader:
            records = list(reader)
            expect_equal(len(records), len(ctx.expected), "record count")
            for record, value in zip(records, ctx.expected):
                expect_instance(record, Record, "record")
                expect_equal(record[0], value, "record[0]")
            expect_false(reader.read(), "read() after iteration")

    @contract_check(SELECT_ONE)
    def iteration_throws_when_closed(self, ctx: CheckContext) -> None:
        """Iterating a closed reader is a state-misuse error."""
        self._x_throws_when_closed(ctx, iter)

    # ------------------------------------------------------------------
    #                           Lifecycle
    # ------------------------------------------------------------------

    @contract_check(SELECT_ONE)
    def is_closed_returns_false_when_active(self, ctx: CheckContext) -> None:
        """is_closed is False while the reader is open."""
        with ctx.reader() as reader:
            expect_false(reader.is_closed, "is_closed")

    @contract_check(SELECT_ONE)
    def is_closed_returns_true_when_closed(self, ctx: CheckContext) -> None:
        """is_closed is True after close()."""
        with ctx.reader() as reader:
            reader.close()
            expect_true(reader.is_closed, "is_closed")
            expect_is(reader.state, ReaderState.CLOSED, "state")

    @contract_check(SELECT_ONE)
    def close_is_idempotent(self, ctx: CheckContext) -> None:
        """close() can be called repeatedly."""
        with ctx.reader() as reader:
            for _ in range(3):
                reader.close()
            expect_true(reader.is_closed, "is_closed")

    @contract_check(SELECT_ONE)
    def operations_throw_repeatedly_after_close(self, ctx: CheckContext) -> None:
        """Closing is irreversible: every later operation fails, every time."""
        actions: dict[str, ReaderAction] = {
            "read()": lambda r: r.read(),
            "next_result()": lambda r: r.next_result(),
            "get_int64(0)": lambda r: r.get_int64(0),
            "get_value(0)": lambda r: r.get_value(0),
            "is_null(0)": lambda r: r.is_null(0),
            "field_count": lambda r: r.field_count,
        }
        with ctx.reader() as reader:
            expect_true(reader.read(), "read()")
            reader.close()
            for _ in range(2):
                for label, action in actions.items():
                    expect_error(ErrorKind.STATE_MISUSE, action, reader, what=label)
                expect_true(reader.is_closed, "is_closed")

    @contract_check(SELECT_ONE)
    def state_follows_lifecycle(self, ctx: CheckContext) -> None:
        """state reports before-row, on-row, after-last-row, advanced, closed."""
        with ctx.reader() as reader:
            observed = [reader.state]
            reader.read()
            observed.append(reader.state)
            reader.read()
            observed.append(reader.state)
            reader.next_result()
            observed.append(reader.state)
            reader.close()
            observed.append(reader.state)
        expected = [
            ReaderState.BEFORE_ROW,
            ReaderState.ON_ROW,
            ReaderState.AFTER_LAST_ROW,
            ReaderState.RESULT_SET_ADVANCED,
            ReaderState.CLOSED,
        ]
        if observed != expected:
            raise ContractViolation(f"state sequence: expected {expected}, got {observed}")
