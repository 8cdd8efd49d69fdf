"""Entrypoints (inbound adapters) for cursorspec.

Expose the conformance runner to the outside world: parse and validate
inputs, call the runner, and present results.

Dependency rule: may import `cursorspec.runner` and the connector registry.
"""
