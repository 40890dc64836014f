"""Pytest fixtures shared across the chartspec test suite."""

from __future__ import annotations

from collections.abc import Sequence

import pytest


@pytest.fixture
def sales_rows() -> list[dict[str, object]]:
    """Return a small inline dataset."""

    return [
        {"region": "north", "month": 1, "sales": 12},
        {"region": "north", "month": 2, "sales": 15},
        {"region": "south", "month": 1, "sales": 7},
        {"region": "south", "month": 2, "sales": 9},
    ]


@pytest.fixture
def cost_rows() -> list[dict[str, object]]:
    """Return a second inline dataset, distinct from `sales_rows`."""

    return [
        {"region": "north", "month": 1, "cost": 4},
        {"region": "south", "month": 1, "cost": 3},
    ]


def pytest_collection_modifyitems(items: Sequence[pytest.Item]) -> None:
    """Enforce that every test has exactly one speed marker.

    - `unit`: pure tests over the builder and compiler.
    - `integration`: tests touching Django settings, templates or serialization.
    """

    invalid: list[str] = []
    for item in items:
        has_unit = item.get_closest_marker("unit") is not None
        has_integration = item.get_closest_marker("integration") is not None
        if has_unit == has_integration:
            markers = []
            if has_unit:
                markers.append("unit")
            if has_integration:
                markers.append("integration")
            invalid.append(f"{item.nodeid} (markers={markers or 'none'})")

    if invalid:
        joined = "\n".join(f"- {nodeid}" for nodeid in invalid)
        raise pytest.UsageError(
            "Each test must have exactly one speed marker: `@pytest.mark.unit` or "
            "`@pytest.mark.integration`.\n"
            f"Offending tests:\n{joined}"
        )
