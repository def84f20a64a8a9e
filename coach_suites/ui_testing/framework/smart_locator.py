"""
================================================================================
Smart Locator with Selector Fallback Chains
================================================================================

Element location system for markup whose structure is not contractually
fixed between application versions:
    - Ordered fallback strategies per element, first match wins
    - Waiting lookups (scenario steps) and non-waiting lookups (validators)
    - Usage analytics so drifting primary selectors are easy to spot

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from loguru import logger
from playwright.async_api import Locator, Page

from coach_tools.common import CoachTestError


LocatorMap = Dict[str, str]


class ElementNotFoundError(CoachTestError):
    """Raised when all locator strategies fail to find element."""
    pass


@dataclass
class LocatorHealth:
    """
    Tracks locator health and usage statistics.

    Attributes:
        element_name: Human-readable element name
        primary_selector: The preferred selector
        used_fallback: Whether a fallback was used
        fallback_name: Name of fallback used (if any)
        fallback_selector: The fallback selector used (if any)
    """
    element_name: str
    primary_selector: str
    used_fallback: bool = False
    fallback_name: Optional[str] = None
    fallback_selector: Optional[str] = None


def as_locator_map(selectors: Sequence[str]) -> LocatorMap:
    """
    Turn an ordered selector list into a primary/fallback locator map.

    Example:
        >>> as_locator_map(["#a", ".b"])
        {'primary': '#a', 'fallback_1': '.b'}
    """
    locators: LocatorMap = {}
    for i, selector in enumerate(selectors):
        locators["primary" if i == 0 else f"fallback_{i}"] = selector
    return locators


class SmartLocator:
    """
    Element locator with prioritized fallback strategies.

    Locator Priority Order:
        1. data-testid (most stable, recommended)
        2. placeholder / role / visible text
        3. generic tag selectors (last resort)

    Usage:
        >>> smart = SmartLocator(page)
        >>> await smart.fill("query_input", "How do I decide?")
        >>> await smart.click("ask_button")
        >>> found = await smart.first_visible(["[data-testid='x']", "text=X"])

    Configuration:
        Locators are defined in the LOCATORS dictionary. Each element
        can have multiple fallback strategies.
    """

    LOCATORS: Dict[str, LocatorMap] = {
        "query_input": {
            "primary": "[data-testid='query-input']",
            "fallback_1": "textarea[placeholder*='Ask me anything']",
            "fallback_2": "input[type='text']",
            "fallback_3": "textarea",
            "fallback_4": "[contenteditable='true']",
        },
        "ask_button": {
            "primary": "[data-testid='ask-button']",
            "fallback_1": "button:has-text('Ask')",
            "fallback_2": "button:has-text('Submit')",
            "fallback_3": "button[type='submit']",
        },
        "loading_indicator": {
            "primary": "[class*='loading']",
            "fallback_1": "[class*='spinner']",
            "fallback_2": "[class*='loader']",
        },
        "response_container": {
            "primary": "[data-testid='response']",
            "fallback_1": "div:has-text('Strategic')",
            "fallback_2": "div:has-text('Story')",
            "fallback_3": "div:has-text('Reflection')",
            "fallback_4": "div:has-text('Concepts')",
        },
    }

    def __init__(self, page: Page):
        """
        Initialize SmartLocator with Playwright page.

        Args:
            page: Playwright Page object
        """
        self.page = page
        self._health_records: List[LocatorHealth] = []
        self._fallback_used: Dict[str, LocatorHealth] = {}

    def _resolve(
        self,
        target: Union[str, LocatorMap, Sequence[str]],
        element_name: Optional[str] = None,
    ) -> Tuple[LocatorMap, str]:
        """Resolve a target into (locator map, display name)."""
        if isinstance(target, dict):
            return target, element_name or "custom_element"
        if isinstance(target, str):
            return self.LOCATORS.get(target, {}), target
        return as_locator_map(list(target)), element_name or "custom_element"

    def _record(self, display_name: str, locators: LocatorMap, strategy_name: str, selector: str) -> None:
        health = LocatorHealth(
            element_name=display_name,
            primary_selector=locators.get("primary", selector),
            used_fallback=(strategy_name != "primary"),
            fallback_name=strategy_name if strategy_name != "primary" else None,
            fallback_selector=selector if strategy_name != "primary" else None,
        )
        self._health_records.append(health)

        if strategy_name != "primary":
            logger.warning(
                f"⚠️ Element '{display_name}' used fallback: "
                f"{strategy_name} -> {selector}"
            )
            self._fallback_used[display_name] = health
        else:
            logger.debug(f"✅ Element '{display_name}' found: {selector}")

    async def locate(
        self,
        target: Union[str, LocatorMap, Sequence[str]],
        timeout: int = 5000,
        element_name: Optional[str] = None,
    ) -> Locator:
        """
        Locate element using smart fallback strategy.

        Tries each locator strategy in order, waiting up to ``timeout``
        for each one to become visible.

        Args:
            target: Element key in `LOCATORS`, a locator map, or an ordered
                list of selectors
            timeout: Timeout in milliseconds for each attempt
            element_name: Human-readable name for logging when `target`
                is not a key

        Returns:
            Playwright Locator for the found element

        Raises:
            ElementNotFoundError: When all strategies fail
        """
        locators, display_name = self._resolve(target, element_name)

        if not locators:
            raise ElementNotFoundError(
                f"No locators defined for element: {display_name}"
            )

        errors = []

        for strategy_name, selector in locators.items():
            locator = self.page.locator(selector).first
            try:
                await locator.wait_for(state="visible", timeout=timeout)
            except Exception as e:
                errors.append(f"{strategy_name}: {selector} -> {str(e)[:50]}")
                continue

            self._record(display_name, locators, strategy_name, selector)
            return locator

        error_msg = (
            f"❌ All locators failed for '{display_name}':\n" +
            "\n".join(f"  - {err}" for err in errors)
        )
        logger.error(error_msg)
        raise ElementNotFoundError(error_msg)

    async def first_visible(
        self,
        target: Union[str, LocatorMap, Sequence[str]],
        element_name: Optional[str] = None,
    ) -> Optional[Tuple[str, Locator]]:
        """
        Return ``(selector, locator)`` for the first strategy that is
        visible right now, or None when none is.

        Unlike `locate`, this does not wait; validators use it to inspect
        an already-rendered page.
        """
        locators, display_name = self._resolve(target, element_name)

        for strategy_name, selector in locators.items():
            locator = self.page.locator(selector).first
            if await locator.is_visible():
                self._record(display_name, locators, strategy_name, selector)
                return selector, locator

        logger.debug(f"No visible match for '{display_name}'")
        return None

    async def click(
        self,
        target: Union[str, LocatorMap, Sequence[str]],
        timeout: int = 5000,
        element_name: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        """Click element using smart location."""
        locator = await self.locate(target, timeout=timeout, element_name=element_name)
        await locator.click(**kwargs)

    async def fill(
        self,
        target: Union[str, LocatorMap, Sequence[str]],
        value: str,
        timeout: int = 5000,
        element_name: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        """Fill input element using smart location."""
        locator = await self.locate(target, timeout=timeout, element_name=element_name)
        await locator.fill(value, **kwargs)

    async def is_visible(
        self,
        target: Union[str, LocatorMap, Sequence[str]],
        timeout: int = 2000,
        element_name: Optional[str] = None,
    ) -> bool:
        """
        Check if element is visible.

        Returns:
            True if element is visible, False otherwise
        """
        try:
            locator = await self.locate(target, timeout=timeout, element_name=element_name)
        except ElementNotFoundError:
            return False
        return await locator.is_visible()

    def get_health_report(self) -> str:
        """
        Generate locator health report.

        Identifies elements that required a fallback selector
        (maintenance candidates).
        """
        if not self._fallback_used:
            return "✅ All elements used primary locators. No maintenance needed."

        report_lines = [
            "⚠️ Locator Health Report - Fallbacks Used:",
            "",
            "The following elements used fallback locators.",
            "Consider updating the primary selectors:",
            "",
        ]

        for element_name, health in self._fallback_used.items():
            report_lines.extend([
                f"  [{element_name}]",
                f"    Failed primary: {health.primary_selector}",
                f"    Used: {health.fallback_name} -> {health.fallback_selector}",
                "",
            ])

        return "\n".join(report_lines)


__all__ = [
    "SmartLocator",
    "ElementNotFoundError",
    "LocatorHealth",
    "as_locator_map",
]
