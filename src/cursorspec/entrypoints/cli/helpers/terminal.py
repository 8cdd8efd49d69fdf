"""Terminal output helpers for the cursorspec CLI.

Status lines go to stderr with emoji glyphs that fall back to ASCII when the
stream cannot encode them, so stdout stays machine-readable (``--json``).
"""

import click


def _glyph(emoji: str, fallback: str) -> str:
    """Return ``emoji`` if stderr can encode it, else ``fallback``."""
    stream = click.get_text_stream("stderr")  # pragma: no mutate
    try:
        emoji.encode(getattr(stream, "encoding", None) or "ascii")
    except UnicodeEncodeError:
        return fallback
    return emoji


def warn(msg: str) -> None:
    """Emit a yellow warning line to stderr."""
    click.secho(f"{_glyph('⚠️', '[!]')}  {msg}", fg="yellow", bold=True, err=True)


def success(msg: str) -> None:
    """Emit a green success line to stderr."""
    click.secho(f"{_glyph('✅', '[OK]')}  {msg}", fg="green", bold=True, err=True)


def error(msg: str) -> None:
    """Emit a red error line to stderr."""
    click.secho(f"{_glyph('❌', '[X]')}  {msg}", fg="red", bold=True, err=True)
