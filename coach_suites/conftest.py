"""
================================================================================
Suite Pytest Configuration
================================================================================

This module registers the suite's markers, sets up logging and applies the
CI policy to the collected items:

  - ``focus`` narrows a local run to the focused tests and is rejected in CI
  - In CI every UI test is rerun on failure (pytest-rerunfailures)

================================================================================
"""

import pytest
from loguru import logger

from coach_tools.common import get_config, init_logger, is_ci


MARKERS = {
    # Priority markers
    "P0": "Critical priority tests - must pass for deployment",
    "P1": "High priority tests - important functionality",
    "P2": "Medium priority tests - edge cases and minor features",
    "P3": "Low priority tests - extensive validation",
    # Test type markers
    "smoke": "Quick verification tests",
    "regression": "Full regression test suite",
    "e2e": "End-to-end tests simulating user flows",
    "ui": "Tests that drive a real browser",
    "live": "Tests that need the Decision Coach app running at ui.base_url",
    "layout": "Layout centering tests",
    "focus": "Run only focused tests locally; rejected when CI is set",
}


def pytest_configure(config):
    """Configure pytest with project-wide custom markers and logging."""
    for name, description in MARKERS.items():
        config.addinivalue_line("markers", f"{name}: {description}")

    init_logger()


def pytest_collection_modifyitems(config, items):
    """
    Apply directory markers, the focus policy and CI reruns.

    Raises:
        pytest.UsageError: A focused test was collected while CI is set
    """
    for item in items:
        if "ui_testing" in str(item.fspath):
            item.add_marker(pytest.mark.ui)

    focused = [item for item in items if item.get_closest_marker("focus")]
    if focused:
        if is_ci():
            names = ", ".join(item.nodeid for item in focused)
            raise pytest.UsageError(
                f"Focused tests are not allowed in CI; remove @pytest.mark.focus from: {names}"
            )

        deselected = [item for item in items if not item.get_closest_marker("focus")]
        if deselected:
            config.hook.pytest_deselected(items=deselected)
            items[:] = focused
        logger.warning(f"🎯 Running {len(focused)} focused test(s) only")

    if is_ci() and config.pluginmanager.hasplugin("rerunfailures"):
        reruns = int(get_config("ci_settings.reruns", 2))
        for item in items:
            if item.get_closest_marker("ui") and not item.get_closest_marker("flaky"):
                item.add_marker(pytest.mark.flaky(reruns=reruns))


def pytest_report_header(config):
    """Add custom header to pytest output."""
    return [
        "",
        "=" * 60,
        "Decision Coach UI Test Suite",
        f"Base URL: {get_config('ui.base_url')}  Browser: {get_config('ui.browser')}  "
        f"CI: {is_ci()}",
        "=" * 60,
        "",
    ]
