"""Unit tests for statement-batch splitting."""

import pytest

from cursorspec.adapters.dbapi.batch import BRACKET_QUOTES, split_statements


@pytest.mark.parametrize(
    "text, expected",
    [
        ("SELECT 1", ["SELECT 1"]),
        ("SELECT 1;", ["SELECT 1"]),
        ("SELECT 1; SELECT 2", ["SELECT 1", "SELECT 2"]),
        ("  SELECT 1 ;\n\n SELECT 2 ;  ", ["SELECT 1", "SELECT 2"]),
        (";;SELECT 1;;", ["SELECT 1"]),
        ("", []),
        ("   ", []),
    ],
)
def test_splits_on_semicolons(text: str, expected: list[str]) -> None:
    assert split_statements(text) == expected


@pytest.mark.parametrize(
    "text, expected",
    [
        ("SELECT 'a;b'; SELECT 2", ["SELECT 'a;b'", "SELECT 2"]),
        ('SELECT 1 AS "x;y"', ['SELECT 1 AS "x;y"']),
        ("SELECT 1 AS `x;y`", ["SELECT 1 AS `x;y`"]),
        ("SELECT 'it''s; fine'; SELECT 2", ["SELECT 'it''s; fine'", "SELECT 2"]),
        ("SELECT ''; SELECT 2", ["SELECT ''", "SELECT 2"]),
    ],
)
def test_semicolons_inside_quotes_do_not_split(text: str, expected: list[str]) -> None:
    assert split_statements(text) == expected


@pytest.mark.parametrize(
    "text, expected",
    [
        ("SELECT 1 AS [a;b]; SELECT 2", ["SELECT 1 AS [a;b]", "SELECT 2"]),
        # no escape inside brackets: the first ] closes the span
        ("SELECT 1 AS [a]]; SELECT 2", ["SELECT 1 AS [a]]", "SELECT 2"]),
        ("SELECT '['; SELECT 2", ["SELECT '['", "SELECT 2"]),
    ],
)
def test_bracket_identifiers(text: str, expected: list[str]) -> None:
    assert split_statements(text, BRACKET_QUOTES) == expected


def test_brackets_are_not_quotes_by_default() -> None:
    assert split_statements("SELECT a[1]; SELECT 2") == ["SELECT a[1]", "SELECT 2"]
    assert split_statements("SELECT [a;b]") == ["SELECT [a", "b]"]


class TestComments:
    """Comments are kept with their statement but never split it."""

    @staticmethod
    def test_line_comment() -> None:
        assert split_statements("SELECT 1 -- a; b\n; SELECT 2") == [
            "SELECT 1 -- a; b",
            "SELECT 2",
        ]

    @staticmethod
    def test_block_comment() -> None:
        assert split_statements("SELECT /* ; */ 1; SELECT 2") == [
            "SELECT /* ; */ 1",
            "SELECT 2",
        ]

    @staticmethod
    def test_comment_only_statements_are_dropped() -> None:
        assert split_statements("-- nothing here;\n/* nor; here */; SELECT 1") == [
            "SELECT 1"
        ]

    @staticmethod
    def test_unterminated_block_comment_runs_to_end() -> None:
        assert split_statements("SELECT 1; /* open ; comment") == ["SELECT 1"]


def test_unterminated_quote_keeps_the_rest_as_one_statement() -> None:
    assert split_statements("SELECT 'a; SELECT 2") == ["SELECT 'a; SELECT 2"]
