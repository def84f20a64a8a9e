"""
================================================================================
Decision Coach Page Object (Async / Playwright)
================================================================================

The single-page Decision Coach UI: a query box, an Ask button and a
structured answer made of named sections with inline glossary tooltips.

Design goals:
  - Query input and Ask button resolved through SmartLocator fallbacks
  - Answer sections described as ordered selector chains
  - Helpers return plain data so scenarios own the assertions

================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import allure
from loguru import logger
from playwright.async_api import Locator

from coach_tools.common import get_config
from coach_suites.ui_testing.framework.page_base import BasePage


# Sections every rendered answer must show, as used by the response scenarios.
RESPONSE_SECTIONS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    (
        "Strategic Thinking Lens",
        ("div:has-text('Strategic Thinking Lens')", "div:has-text('Strategic')"),
    ),
    (
        "Story in Action",
        ("div:has-text('Story in Action')", "div:has-text('Story')"),
    ),
    (
        "Reflection Prompts",
        ("div:has-text('Reflection Prompts')", "div:has-text('Reflection')"),
    ),
    (
        "Concepts Section",
        ("div:has-text('Concepts')", "div:has-text('Key Concepts')"),
    ),
)

RESPONSE_READY_SELECTOR = (
    "div:has-text('Strategic'), div:has-text('Story'), "
    "div:has-text('Reflection'), div:has-text('Concepts')"
)


@dataclass
class ElementInventory:
    """Interactive elements found on the page (diagnostic scenario)."""
    title: str = ""
    inputs: List[Dict[str, Optional[str]]] = field(default_factory=list)
    buttons: List[Dict[str, Optional[str]]] = field(default_factory=list)
    textareas: List[Dict[str, Optional[str]]] = field(default_factory=list)
    test_ids: List[Dict[str, Optional[str]]] = field(default_factory=list)


class DecisionCoachPage(BasePage):
    """Decision Coach page object (async)."""

    URL_PATH = "/"
    PAGE_TITLE = "Decision Coach"

    @allure.step("Open Decision Coach")
    async def open(self) -> "DecisionCoachPage":
        """Navigate to the app and wait for the network to settle."""
        await self.navigate()
        await self.wait_for_page_load()
        return self

    async def query_input(self, timeout: Optional[int] = None) -> Locator:
        """Resolve the query input through its fallback chain."""
        return await self.smart.locate("query_input", timeout=timeout or 5000)

    async def ask_button(self, timeout: Optional[int] = None) -> Locator:
        """Resolve the Ask/Submit button through its fallback chain."""
        return await self.smart.locate("ask_button", timeout=timeout or 5000)

    @allure.step("Enter query: {query}")
    async def enter_query(self, query: str) -> None:
        """Replace the query box content with ``query``."""
        field_locator = await self.query_input()
        await field_locator.fill(query)
        logger.info(f"📝 Query entered: \"{query}\"")

    @allure.step("Submit query")
    async def submit(self, force: bool = False) -> None:
        """
        Click the Ask button.

        ``force`` skips Playwright's actionability checks, so a button the
        app disabled for an invalid query is still clicked.
        """
        button = await self.ask_button()
        await button.click(force=force)
        logger.info("🔘 Ask button clicked")

    async def ask(self, query: str) -> None:
        """Enter ``query`` and submit it."""
        await self.enter_query(query)
        await self.submit()

    @allure.step("Wait for response to render")
    async def wait_for_response(
        self,
        timeout: Optional[int] = None,
        settle_ms: int = 3000,
    ) -> None:
        """
        Wait until any answer section heading appears, then give the
        remaining sections ``settle_ms`` to finish rendering.
        """
        timeout = timeout or int(get_config("ui.timeouts.response", 30000))
        await self.page.wait_for_selector(RESPONSE_READY_SELECTOR, timeout=timeout)
        if settle_ms:
            await self.page.wait_for_timeout(settle_ms)

    async def section(self, selectors: Sequence[str], name: str) -> Optional[Locator]:
        """First visible locator for a section, or None."""
        found = await self.smart.first_visible(list(selectors), element_name=name)
        return found[1] if found else None

    async def section_text(self, selectors: Sequence[str], name: str) -> Optional[str]:
        """Rendered text of a section, or None when it is not visible."""
        locator = await self.section(selectors, name)
        if locator is None:
            return None
        return await locator.inner_text()

    async def body_text(self) -> str:
        """Whole-document text content."""
        return await self.page.locator("body").text_content() or ""

    async def input_is_usable(self) -> bool:
        """True when the query input is still visible and enabled."""
        field_locator = await self.query_input()
        return await field_locator.is_visible() and await field_locator.is_enabled()

    @allure.step("Inventory interactive elements")
    async def inventory(self) -> ElementInventory:
        """Collect attributes of inputs, buttons, textareas and test ids."""
        result = ElementInventory(title=await self.title())

        for element in await self.page.locator("input").all():
            result.inputs.append({
                "type": await element.get_attribute("type"),
                "placeholder": await element.get_attribute("placeholder"),
                "id": await element.get_attribute("id"),
                "data-testid": await element.get_attribute("data-testid"),
            })

        for element in await self.page.locator("button").all():
            text = await element.text_content()
            result.buttons.append({
                "text": (text or "").strip(),
                "id": await element.get_attribute("id"),
                "data-testid": await element.get_attribute("data-testid"),
            })

        for element in await self.page.locator("textarea").all():
            result.textareas.append({
                "placeholder": await element.get_attribute("placeholder"),
                "id": await element.get_attribute("id"),
                "data-testid": await element.get_attribute("data-testid"),
            })

        for element in await self.page.locator("[data-testid]").all():
            text = await element.text_content()
            result.test_ids.append({
                "tag": await element.evaluate("el => el.tagName.toLowerCase()"),
                "data-testid": await element.get_attribute("data-testid"),
                "text": (text or "")[:50].strip(),
            })

        logger.info(
            f"🔍 Inventory: {len(result.inputs)} inputs, {len(result.buttons)} buttons, "
            f"{len(result.textareas)} textareas, {len(result.test_ids)} test ids"
        )
        return result


__all__ = [
    "DecisionCoachPage",
    "ElementInventory",
    "RESPONSE_SECTIONS",
    "RESPONSE_READY_SELECTOR",
]
