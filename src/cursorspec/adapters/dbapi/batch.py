"""Statement-batch splitting.

PEP 249 drivers execute one statement per ``cursor.execute()`` call, so a
``;``-separated batch is split here and its statements are executed one at a
time as the reader advances through result sets.

Quoted literals and identifiers (``'...'``, ``"..."``, `````...`````, with
doubled-quote escapes) and comments (``-- ...`` and ``/* ... */``) are
honored, so a ``;`` inside them never splits a statement. Backends with extra
quoting pass their own quote pairs: SQLite adds ``[...]`` identifiers
(`BRACKET_QUOTES`), which have no escape. Dollar-quoted PostgreSQL bodies are
not recognized.
"""

from __future__ import annotations

from collections.abc import Mapping

#: Opening quote -> closing quote.
QUOTES = {"'": "'", '"': '"', "`": "`"}
BRACKET_QUOTES = {**QUOTES, "[": "]"}


def split_statements(text: str, quotes: Mapping[str, str] = QUOTES) -> list[str]:
    """Split ``text`` into individual statements.

    Statements are returned stripped and without their terminating ``;``.
    Empty statements and statements made only of comments are dropped.

    Args:
        text: A single statement or a ``;``-separated batch.
        quotes: Opening -> closing character of each quoted span.

    Returns:
        list[str]: The statements in textual order.
    """
    statements: list[str] = []
    current: list[str] = []
    has_code = False
    quote: str | None = None  # closing character of the open quoted span
    escapable = False  # whether a doubled closing character is an escape
    i, n = 0, len(text)

    while i < n:
        ch = text[i]

        if quote is not None:
            current.append(ch)
            if ch == quote:
                if escapable and i + 1 < n and text[i + 1] == quote:
                    # doubled quote is an escaped quote character
                    current.append(ch)
                    i += 2
                    continue
                quote = None
            i += 1
            continue

        if ch in quotes:
            quote = quotes[ch]
            escapable = quote == ch
            has_code = True
            current.append(ch)
            i += 1
        elif text.startswith("--", i):
            end = text.find("\n", i)
            end = n if end == -1 else end
            current.append(text[i:end])
            i = end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            end = n if end == -1 else end + 2
            current.append(text[i:end])
            i = end
        elif ch == ";":
            if has_code:
                statements.append("".join(current).strip())
            current = []
            has_code = False
            i += 1
        else:
            if not ch.isspace():
                has_code = True
            current.append(ch)
            i += 1

    if has_code:
        statements.append("".join(current).strip())
    return statements
