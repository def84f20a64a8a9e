"""
================================================================================
Browser Manager
================================================================================

Browser lifecycle management for UI automation.

Features:
    - Engine selection (chromium / firefox / webkit)
    - Headed and slow-motion debug modes
    - Isolated contexts per scenario
    - Configurable default timeouts and viewport

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from loguru import logger
from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Playwright,
)

from coach_tools.common import get_config


SUPPORTED_BROWSERS = ("chromium", "firefox", "webkit")


class BrowserManager:
    """
    Manages the browser instance and contexts for one scenario.

    Usage:
        manager = BrowserManager(browser_type="firefox")
        await manager.start()
        context = await manager.new_context()
        page = await context.new_page()
        ...
        await manager.close()
    """

    # Default context options
    DEFAULT_CONTEXT_OPTIONS: Dict[str, Any] = {
        "ignore_https_errors": True,
    }

    def __init__(
        self,
        headless: Optional[bool] = None,
        browser_type: Optional[str] = None,
        slow_mo: Optional[int] = None,
    ):
        """
        Initialize browser manager.

        Args:
            headless: Run browser in headless mode (``ui.headless``)
            browser_type: 'chromium', 'firefox' or 'webkit' (``ui.browser``)
            slow_mo: Delay in ms between Playwright actions (``ui.slow_mo``)
        """
        self.headless = get_config("ui.headless", True) if headless is None else headless
        self.browser_type = browser_type or get_config("ui.browser", "chromium")
        self.slow_mo = int(get_config("ui.slow_mo", 0) if slow_mo is None else slow_mo)

        if self.browser_type not in SUPPORTED_BROWSERS:
            raise ValueError(
                f"Unsupported browser '{self.browser_type}', "
                f"expected one of {SUPPORTED_BROWSERS}"
            )

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._contexts: List[BrowserContext] = []

    async def start(self) -> None:
        """Start Playwright and launch browser."""
        self._playwright = await async_playwright().start()
        browser_launcher = getattr(self._playwright, self.browser_type)

        try:
            self._browser = await browser_launcher.launch(
                headless=self.headless,
                slow_mo=self.slow_mo,
            )
        except Exception:
            await self._playwright.stop()
            self._playwright = None
            raise

        logger.debug(
            f"Browser started: {self.browser_type} "
            f"(headless={self.headless}, slow_mo={self.slow_mo})"
        )

    async def close(self) -> None:
        """Close all contexts and browser."""
        for context in self._contexts:
            try:
                await context.close()
            except Exception as e:
                logger.debug(f"Context already closed: {e}")
        self._contexts.clear()

        if self._browser:
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

        logger.debug("Browser closed")

    async def new_context(self, **options: Any) -> BrowserContext:
        """
        Create new browser context.

        Each context is isolated - separate cookies, localStorage, etc.

        Args:
            **options: Additional context options (e.g. viewport)
        """
        if not self._browser:
            raise RuntimeError("Browser not started. Call start() first.")

        context_options = {
            **self.DEFAULT_CONTEXT_OPTIONS,
            "viewport": {
                "width": int(get_config("ui.viewport.width", 1280)),
                "height": int(get_config("ui.viewport.height", 720)),
            },
            **options,
        }

        context = await self._browser.new_context(**context_options)
        context.set_default_timeout(int(get_config("ui.timeouts.element", 10000)))
        context.set_default_navigation_timeout(int(get_config("ui.timeouts.page_load", 30000)))
        self._contexts.append(context)
        return context


__all__ = [
    "BrowserManager",
    "SUPPORTED_BROWSERS",
]
