"""Adapters (infrastructure) for cursorspec.

Concrete implementations of the contract surface: the generic DB-API reader
in `cursorspec.adapters.dbapi`, and the connectors binding it to real drivers
in `cursorspec.adapters.connectors`.

Dependency rule: may import `cursorspec.interfaces`; the interfaces must not
import this package.
"""
