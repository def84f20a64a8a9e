"""
================================================================================
UI Testing Pytest Configuration
================================================================================

This module configures pytest for UI scenarios, providing fixtures for browser
management, page objects and the application readiness gate.

Key Features:
- Browser, context and page per scenario (function scope)
- DecisionCoachPage fixture behind a readiness check
- Screenshot and backend-response capture on failure
- Local runs skip when no browser or app is available; CI fails instead

================================================================================
"""

from pathlib import Path
from typing import AsyncGenerator, Dict

import pytest
from loguru import logger
from playwright.async_api import BrowserContext, Page

from coach_tools.common import get_config, is_ci
from coach_suites.ui_testing.framework.browser_manager import BrowserManager
from coach_suites.ui_testing.framework.page_base import BasePage
from coach_suites.ui_testing.framework.readiness_checker import (
    AppNotReadyError,
    ReadinessResult,
    check_readiness,
)
from coach_suites.ui_testing.pages.coach_page import DecisionCoachPage


DATA_DIR = Path(__file__).parent / "data"

# One readiness probe per base URL and process.
_readiness_cache: Dict[str, ReadinessResult] = {}


# ================================================================================
# Test Lifecycle Hooks
# ================================================================================

@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Expose each phase's report on the item as ``rep_setup``/``rep_call``/``rep_teardown``."""
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)


# ================================================================================
# Browser Fixtures
# ================================================================================

@pytest.fixture
async def browser_manager() -> AsyncGenerator[BrowserManager, None]:
    """
    Function-scoped browser manager.

    Each scenario owns its browser so scenarios can run in separate
    xdist workers without sharing state.
    """
    manager = BrowserManager()
    try:
        await manager.start()
    except Exception as e:
        if is_ci():
            raise
        pytest.skip(f"Browser '{manager.browser_type}' could not be launched: {e}")

    yield manager
    await manager.close()


@pytest.fixture
async def context(browser_manager: BrowserManager) -> AsyncGenerator[BrowserContext, None]:
    """Isolated browser context for one scenario."""
    context = await browser_manager.new_context()
    yield context
    await context.close()


@pytest.fixture
async def page(request, context: BrowserContext) -> AsyncGenerator[Page, None]:
    """
    Page for one scenario.

    When the scenario body failed, a full-page screenshot, the current URL
    and the recent backend responses are attached before the page closes.
    """
    page = await context.new_page()
    yield page

    report = getattr(request.node, "rep_call", None)
    if report is not None and report.failed and not page.is_closed():
        page_object = getattr(request.node, "page_object", None) or BasePage(page)
        await page_object.capture_failure(request.node.name)

    await page.close()


# ================================================================================
# Readiness Gate
# ================================================================================

@pytest.fixture
async def app_ready() -> ReadinessResult:
    """
    Probe ``ui.base_url`` once per process.

    An unreachable app skips the scenario locally and fails it in CI.
    """
    base_url = get_config("ui.base_url")
    result = _readiness_cache.get(base_url)
    if result is None:
        result = await check_readiness(base_url)
        _readiness_cache[base_url] = result

    if not result.ready:
        message = f"Decision Coach application is not ready at {base_url}: {result.error}"
        if is_ci():
            raise AppNotReadyError(message)
        pytest.skip(message)

    return result


# ================================================================================
# Page Object Fixtures
# ================================================================================

@pytest.fixture
async def coach_page(request, page: Page, app_ready: ReadinessResult) -> DecisionCoachPage:
    """DecisionCoachPage opened on the live application."""
    coach = DecisionCoachPage(page)
    request.node.page_object = coach
    await coach.open()
    logger.info(f"🌐 Decision Coach opened ({app_ready.response_time or 0:.3f}s readiness)")
    return coach


@pytest.fixture
def mock_response_html() -> str:
    """Static answer page used by the mock-response scenario."""
    return (DATA_DIR / "mock_response.html").read_text(encoding="utf-8")
