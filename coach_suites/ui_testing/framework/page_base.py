"""
================================================================================
Base Page Object
================================================================================

Foundation class for Page Object Model implementation.

Provides:
    - Navigation relative to the configured base URL
    - Smart element location
    - Screenshot, HTML dump and failure capture utilities
    - Backend response capture for debugging

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import allure
from loguru import logger
from playwright.async_api import Page, Response

from coach_tools.common import artifact_path, get_config
from coach_tools.report_tools import attach_html, attach_json, attach_png, attach_text

from .smart_locator import SmartLocator


class BasePage:
    """
    Base class for all page objects.

    Provides common functionality for:
        - Navigation and URL handling
        - Smart element interaction
        - Screenshot capture and HTML dumps
        - Backend request/response logging

    Usage:
        class CoachPage(BasePage):
            URL_PATH = "/"

            async def ask(self, query: str):
                await self.smart.fill("query_input", query)
                await self.smart.click("ask_button")
    """

    # Override in subclasses
    URL_PATH: str = "/"
    PAGE_TITLE: str = ""

    # Responses whose URL contains this marker are kept for failure reports
    CAPTURE_URL_MARKER: str = "/api/"

    def __init__(
        self,
        page: Page,
        base_url: str = "",
    ):
        """
        Initialize page object.

        Args:
            page: Playwright Page object
            base_url: Base URL for the application (defaults to ``ui.base_url``)
        """
        self.page = page
        self.base_url = (base_url or get_config("ui.base_url")).rstrip("/")
        self.smart = SmartLocator(page)

        self._captured_requests: List[Dict[str, Any]] = []
        self._setup_request_capture()

    def _setup_request_capture(self) -> None:
        """Set up backend request/response capture for debugging."""

        async def capture_response(response: Response) -> None:
            if self.CAPTURE_URL_MARKER not in response.url:
                return
            try:
                body = await response.text()
            except Exception:
                body = "<unable to read>"

            self._captured_requests.append({
                "timestamp": datetime.now().isoformat(),
                "url": response.url,
                "status": response.status,
                "body": body[:1000],
            })

            # Keep only last 20 requests
            if len(self._captured_requests) > 20:
                self._captured_requests.pop(0)

        self.page.on("response", capture_response)

    @property
    def url(self) -> str:
        """Get full page URL."""
        return f"{self.base_url}{self.URL_PATH}"

    async def navigate(self, wait_for: str = "networkidle") -> None:
        """
        Navigate to this page.

        Args:
            wait_for: Wait condition - 'load', 'domcontentloaded', 'networkidle'
        """
        with allure.step(f"Navigate to {self.URL_PATH}"):
            await self.page.goto(
                self.url,
                wait_until=wait_for,
                timeout=int(get_config("ui.timeouts.page_load", 30000)),
            )
            logger.debug(f"Navigated to: {self.url}")

    async def wait_for_page_load(
        self,
        state: str = "networkidle",
        timeout: Optional[int] = None,
    ) -> None:
        """
        Wait for the page to reach a stable load state.

        Args:
            state: Playwright load state ('load', 'domcontentloaded', 'networkidle')
            timeout: Timeout in milliseconds
        """
        timeout = timeout or int(get_config("ui.timeouts.page_load", 30000))
        await self.page.wait_for_load_state(state, timeout=timeout)

    async def title(self) -> str:
        """Return the document title."""
        return await self.page.title()

    # =========================================================================
    # Screenshot and Debug Utilities
    # =========================================================================

    async def screenshot(
        self,
        name: str,
        full_page: bool = False,
        attach_to_allure: bool = True,
    ) -> Path:
        """
        Take screenshot and optionally attach to Allure.

        Args:
            name: Screenshot name (sanitized into the filename)
            full_page: Capture full scrollable page
            attach_to_allure: Whether to attach to Allure report

        Returns:
            Path to saved screenshot
        """
        filepath = artifact_path(name)

        await self.page.screenshot(path=str(filepath), full_page=full_page)

        if attach_to_allure:
            attach_png(filepath, name=name)

        logger.debug(f"Screenshot saved: {filepath}")
        return filepath

    async def dump_html(self, name: str = "page") -> Path:
        """
        Save the current DOM as HTML for offline inspection.

        Returns:
            Path to the saved HTML file
        """
        html = await self.page.content()
        filepath = artifact_path(name, suffix=".html")
        filepath.write_text(html, encoding="utf-8")
        attach_html(html, name=name)
        logger.info(f"💾 Saved page HTML ({len(html)} chars) to {filepath}")
        return filepath

    async def capture_failure(self, test_name: str) -> Optional[Path]:
        """
        Capture debugging information on test failure.

        Saves:
            - Screenshot
            - Current URL
            - Recent backend responses

        A capture problem is logged and never raised, so it cannot
        hide the failure being reported.
        """
        with allure.step("Capture failure details"):
            path = None
            try:
                path = await self.screenshot(f"failure-{test_name}", full_page=True)
            except Exception as e:
                logger.warning(f"Failed to capture failure screenshot: {e}")

            attach_text(self.page.url, name="Current URL")

            if self._captured_requests:
                attach_json(self._captured_requests[-10:], name="Recent API Requests")
            return path

    def get_locator_health_report(self) -> str:
        """Get smart locator health report."""
        return self.smart.get_health_report()


__all__ = [
    "BasePage",
]
