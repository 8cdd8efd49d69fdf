"""cursorspec test suite.

Folder taxonomy
- unit/         : Isolated, fast checks of a single module/class/function.
- contract/     : The shipped contract suites run against the in-process connectors.
- integration/  : Contract suites against external services (PostgreSQL in Docker).
- e2e/          : The ``cursorspec`` command line, invoked through Click's CliRunner.
- fixtures/     : Shared pytest fixtures (no tests here).

General guidance
- Keep unit fast and deterministic; SQLite (in memory or under tmp_path) is the only database they touch.
- Every connection a test opens must be closed; contract tests assert it.
- Property-based tests live with the layer they exercise and use @pytest.mark.property.
"""
