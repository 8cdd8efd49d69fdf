"""Hypothesis property tests for statement-batch splitting.

Properties:

- **Order and content**: joining plain statements with ``;`` and splitting
  the result gives the statements back, in order.
- **Quote opacity**: a ``;`` inside a quoted literal, or inside a bracketed
  identifier when brackets are quotes, never introduces a split.
- **Terminator insensitivity**: a trailing ``;`` and surrounding whitespace do
  not change the result.
"""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from cursorspec.adapters.dbapi.batch import BRACKET_QUOTES, split_statements

pytestmark = [pytest.mark.property]

# Statement bodies without quotes, comments or separators
plain_statement = st.text(
    alphabet=st.characters(
        whitelist_categories=("Lu", "Ll", "Nd"), whitelist_characters=" ,()=*"
    ),
    min_size=1,
    max_size=30,
).map(str.strip).filter(bool)

literal_body = st.text(
    alphabet=st.characters(blacklist_characters="'", blacklist_categories=("Cs",)),
    max_size=20,
)


@given(st.lists(plain_statement, min_size=1, max_size=6))
def test_join_then_split_preserves_statements(statements: list[str]) -> None:
    assert split_statements(";".join(statements)) == statements


@given(literal_body, plain_statement)
def test_semicolon_in_literal_never_splits(body: str, tail: str) -> None:
    literal = f"SELECT '{body}'"
    assert split_statements(f"{literal};{tail}") == [literal, tail]


identifier_body = st.text(
    alphabet=st.characters(blacklist_characters="]", blacklist_categories=("Cs",)),
    max_size=20,
)


@given(identifier_body, plain_statement)
def test_semicolon_in_bracket_identifier_never_splits(body: str, tail: str) -> None:
    statement = f"SELECT 1 AS [{body}]"
    assert split_statements(f"{statement};{tail}", BRACKET_QUOTES) == [statement, tail]


@given(st.lists(plain_statement, min_size=1, max_size=4), st.sampled_from(["", ";", " ;\n", ";;"]))
def test_trailing_terminator_is_ignored(statements: list[str], suffix: str) -> None:
    text = " ; ".join(statements)
    assert split_statements(text + suffix) == split_statements(text)
