"""
Repository-level pytest configuration.

Responsibilities:
  - Seed demo-safe environment defaults (no secrets embedded)
  - Register the ``--ui-*`` command line options
  - Map those options onto the environment so every worker and the
    ConfigLoader see the same values

Values below are placeholders for local runs; CI provides its own
environment.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator

import pytest


# Applied with setdefault, so anything already exported wins.
DEMO_ENV_DEFAULTS = {
    "UI_BASE_URL": "http://localhost:3000",
    "UI_BROWSER": "chromium",
    "ARTIFACTS_DIR": "artifacts",
}

# pytest option dest -> environment variable read by ConfigLoader
OPTION_ENV_MAP = {
    "ui_base_url": "UI_BASE_URL",
    "ui_browser": "UI_BROWSER",
    "ui_slow_mo": "UI_SLOW_MO",
}


def pytest_addoption(parser):
    group = parser.getgroup("decision-coach", "Decision Coach UI suite")
    group.addoption(
        "--ui-base-url",
        action="store",
        default=None,
        help="Base URL of the Decision Coach frontend (env: UI_BASE_URL)",
    )
    group.addoption(
        "--ui-browser",
        action="store",
        default=None,
        choices=("chromium", "firefox", "webkit"),
        help="Browser engine to run scenarios in (env: UI_BROWSER)",
    )
    group.addoption(
        "--ui-headed",
        action="store_true",
        default=False,
        help="Show the browser window (env: UI_HEADLESS=false)",
    )
    group.addoption(
        "--ui-slow-mo",
        action="store",
        default=None,
        type=int,
        help="Delay in ms between browser actions (env: UI_SLOW_MO)",
    )


def pytest_configure(config):
    """Export command line choices so ConfigLoader.get() picks them up."""
    for key, value in DEMO_ENV_DEFAULTS.items():
        os.environ.setdefault(key, value)

    for dest, env_key in OPTION_ENV_MAP.items():
        value = config.getoption(dest, default=None)
        if value is not None:
            os.environ[env_key] = str(value)

    if config.getoption("ui_headed", default=False):
        os.environ["UI_HEADLESS"] = "false"


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return Path(__file__).parent


@pytest.fixture(scope="session", autouse=True)
def _artifacts_ready() -> Generator[Path, None, None]:
    """Make sure the artifacts directory exists before any scenario writes to it."""
    from coach_tools.common import artifacts_dir

    yield artifacts_dir()
