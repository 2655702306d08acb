from __future__ import annotations

from pathlib import Path

import pytest

INTEGRATION_DIR = Path(__file__).parent / "integration"


def test_default_run_collects_unit_tests(request: pytest.FixtureRequest) -> None:
    items = request.session.items
    assert request.node in items
    assert request.node.get_closest_marker("integration") is None
    assert any("unit" in Path(item.path).parts for item in items)


def test_only_integration_directory_is_marked(request: pytest.FixtureRequest) -> None:
    for item in request.session.items:
        marked = item.get_closest_marker("integration") is not None
        assert marked == Path(item.path).is_relative_to(INTEGRATION_DIR), item.nodeid
