"""Shared pytest fixtures and configuration for all tests."""

import os

import pytest
from _pytest.config import Config

from tests.utils.fake_tracker import FakeTrackerClient, make_work_item


def pytest_configure(config: Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: mark a test as a unit test")
    config.addinivalue_line("markers", "functional: mark a test as a functional test")
    config.addinivalue_line(
        "markers",
        "integration: mark a test as an integration test against a live organization",
    )


def _env_flag(name: str, default: bool = False) -> bool:
    """Read boolean environment flag (true/false)."""
    val = os.environ.get(name, "true" if default else "false").strip().lower()
    return val in {"1", "true", "yes", "on"}


def pytest_collection_modifyitems(config: Config, items: list[pytest.Item]) -> None:
    """Skip integration tests and unmarked tests by default.

    - Integration tests need WICLONE_RUN_INTEGRATION=true.
    - Unmarked tests are skipped unless WICLONE_RUN_ALL_TESTS=true.
    """
    run_all = _env_flag("WICLONE_RUN_ALL_TESTS", False)
    run_integration = _env_flag("WICLONE_RUN_INTEGRATION", False) or run_all

    skip_integration = pytest.mark.skip(
        reason="Integration tests disabled by default. Set WICLONE_RUN_INTEGRATION=true to enable.",
    )
    skip_unmarked = pytest.mark.skip(
        reason="Unmarked test skipped by default. Mark with unit/functional or set WICLONE_RUN_ALL_TESTS=true.",
    )

    for item in items:
        kws = item.keywords
        if "integration" in kws and not run_integration:
            item.add_marker(skip_integration)
            continue
        if not run_all and not any(m in kws for m in ("unit", "functional", "integration")):
            item.add_marker(skip_unmarked)


@pytest.fixture
def tracker() -> FakeTrackerClient:
    """Tracker holding a small tree: 1 -> (2 -> 4, 3)."""
    return FakeTrackerClient(
        [
            make_work_item(1, "Epic {{Release}}", children=[2, 3], work_item_type="Epic"),
            make_work_item(2, "Feature A", children=[4], work_item_type="Feature"),
            make_work_item(3, "Feature B", work_item_type="Feature"),
            make_work_item(4, "Story A1"),
        ],
    )
