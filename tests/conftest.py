"""Global pytest configuration for cursorspec.

Tests are marked by the top-level folder they live in (``tests/unit`` ->
``unit`` and so on) unless they already carry that marker.
"""

from __future__ import annotations

from pathlib import Path

import pytest

# pylint: disable=unused-argument

pytest_plugins = [
    "tests.fixtures.connectors",
    "tests.fixtures.postgres",
]

TESTS_ROOT = Path(__file__).parent.resolve()
FOLDER_MARKERS = {
    "unit": pytest.mark.unit,
    "contract": pytest.mark.contract,
    "integration": pytest.mark.integration,
    "e2e": pytest.mark.e2e,
}


@pytest.hookimpl(tryfirst=True)
def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Add the default folder mark to every collected item."""
    for item in items:
        try:
            folder = item.path.resolve().relative_to(TESTS_ROOT).parts[0]
        except ValueError:
            continue
        marker = FOLDER_MARKERS.get(folder)
        if marker is None:
            continue
        if not any(m.name == marker.name for m in item.iter_markers()):
            item.add_marker(marker)
