"""cursorspec

A conformance suite for cursor-style query-result APIs. One behavioral
contract for result readers is run unchanged against every registered
database connector so that independent drivers can be held to the same
semantics.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
