"""Reference reader/command/connection implementation over PEP 249 drivers."""

from .batch import BRACKET_QUOTES, QUOTES, split_statements
from .coercion import SUPPORTED_TYPES, coerce
from .connection import DbApiCommand, DbApiConnection, DbApiConnectionFactory
from .dialect import Dialect
from .reader import Column, DbApiReader, ResultSet

__all__ = [
    "BRACKET_QUOTES",
    "Column",
    "DbApiCommand",
    "DbApiConnection",
    "DbApiConnectionFactory",
    "DbApiReader",
    "Dialect",
    "QUOTES",
    "ResultSet",
    "SUPPORTED_TYPES",
    "coerce",
    "split_statements",
]
