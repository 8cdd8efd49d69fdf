"""Helpers for parsing logger-level CLI options.

Options take NAME=LEVEL items, either repeated (``-L a=INFO -L b=DEBUG``) or
as one comma/space-separated list (from ``CURSORSPEC_LOGGER_LEVELS``).
"""

import logging
import re

import click

# Driver stacks are chatty at INFO (pool checkouts, connection setup)
DEFAULT_LIB_LEVELS = {"sqlalchemy": logging.WARNING, "psycopg": logging.WARNING}


def _normalize_items(value: str | list[str] | tuple[str, ...] | None) -> list[str]:
    """Flatten a string or sequence of strings into non-empty NAME=LEVEL items."""
    if value is None:
        return []
    chunks = [value] if isinstance(value, str) else list(value)
    return [s for chunk in chunks for s in re.split(r"[,\s]+", chunk) if s]


def parse_log_level(
    ctx: click.Context,  # pylint: disable=unused-argument
    param: click.Parameter | None,  # pylint: disable=unused-argument
    value: str | list[str] | tuple[str, ...] | None,
) -> dict[str, int]:
    """Click callback that parses NAME=LEVEL pairs into a name->level dict.

    Starts from `DEFAULT_LIB_LEVELS`; later items override earlier ones.

    Raises:
        click.BadParameter: If an item is not NAME=LEVEL or LEVEL is not a
            standard logging level name.
    """
    levels = dict(DEFAULT_LIB_LEVELS)
    for item in _normalize_items(value):
        name, sep, level_str = item.partition("=")
        if not sep or not name.strip():
            raise click.BadParameter(f"Expected NAME=LEVEL, got {item!r}")
        lvl = logging.getLevelNamesMapping().get(level_str.strip().upper())
        if lvl is None:
            raise click.BadParameter(f"Invalid log level: {level_str}")
        levels[name.strip()] = lvl
    return levels
