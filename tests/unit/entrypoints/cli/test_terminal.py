"""Unit tests for :mod:`cursorspec.entrypoints.cli.helpers.terminal`.

This suite verifies two behaviors:

1) Emoji/ASCII glyph selection respects the *current* stderr encoding
   reported by ``click.get_text_stream("stderr")``.
2) ``warn``/``success``/``error`` emit **styled** (ANSI color + bold + reset)
   lines to **stderr** (and not stdout).
"""

import io
import sys

import click
import pytest

from cursorspec.entrypoints.cli.helpers.terminal import _glyph, error, success, warn

SET_YELLOW = "\x1b[33m"
SET_GREEN = "\x1b[32m"
SET_RED = "\x1b[31m"
SET_BOLD = "\x1b[1m"
RESET = "\x1b[0m"


class FakeTTY(io.StringIO):
    """A text stream that mimics a TTY and exposes a controllable encoding."""

    def __init__(self, encoding: str):
        super().__init__()
        self._encoding = encoding

    @property
    def encoding(self) -> str:
        """Declared character encoding (e.g., ``'ascii'`` or ``'utf-8'``)."""
        return self._encoding

    def isatty(self) -> bool:
        """Report that this stream is a TTY (prevents Click from stripping ANSI)."""
        return True


def test_glyph_requeries_stream_each_call(monkeypatch):
    """_glyph must consult Click's stream on every call (no caching)."""
    calls: list[str] = []

    def stream_factory(name: str):  # pylint: disable=unused-argument
        enc = "ascii" if not calls else "utf-8"
        calls.append(enc)
        return FakeTTY(enc)

    monkeypatch.setattr(click, "get_text_stream", stream_factory)

    assert _glyph("✅", "[OK]") == "[OK]"
    assert _glyph("✅", "[OK]") == "✅"
    assert calls == ["ascii", "utf-8"]


@pytest.mark.parametrize(
    ("encoding", "glyph", "color_code", "func"),
    [
        ("ascii", "[!]", SET_YELLOW, warn),
        ("utf-8", "⚠️", SET_YELLOW, warn),
        ("ascii", "[OK]", SET_GREEN, success),
        ("utf-8", "✅", SET_GREEN, success),
        ("ascii", "[X]", SET_RED, error),
        ("utf-8", "❌", SET_RED, error),
    ],
)
def test_messages_emit_styled_stderr(monkeypatch, encoding, glyph, color_code, func):
    """warn/success/error write bold, colored lines to stderr with the right glyph."""
    stream = FakeTTY(encoding)

    # Same stream for the tty check and the writer
    monkeypatch.setattr(click, "get_text_stream", lambda name: stream)
    monkeypatch.setattr(sys, "stderr", stream, raising=False)

    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.setenv("CLICOLOR", "1")

    func("3 checks failed")

    out = stream.getvalue()
    assert glyph in out
    assert "3 checks failed" in out
    assert SET_BOLD in out
    assert color_code in out
    assert RESET in out


def test_error_writes_to_stderr_only(monkeypatch, capsys):
    """error should leave stdout untouched (it may carry --json output)."""
    monkeypatch.setattr(click, "get_text_stream", lambda name: FakeTTY("utf-8"))
    error("conformance failures")
    captured = capsys.readouterr()
    assert "conformance failures" in captured.err
    assert captured.out == ""
