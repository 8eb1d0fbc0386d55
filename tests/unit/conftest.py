"""Unit test collection hooks."""

import pytest


def pytest_collection_modifyitems(config, items):
    """Mark every test collected below tests/unit with ``pytest.mark.unit``."""
    for item in items:
        if "unit" in item.path.parts and item.get_closest_marker("unit") is None:
            item.add_marker(pytest.mark.unit)
