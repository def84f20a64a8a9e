"""
Browser-free fixtures for the unit tests.

FakePage / FakeLocator implement just the slice of the Playwright async API
the framework touches (locator chains, visibility, text, attributes,
geometry, screenshots), backed by a ``{selector: [FakeElement, ...]}`` map.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from coach_tools.common import ConfigLoader


@dataclass
class FakeElement:
    text: str = ""
    attributes: Dict[str, str] = field(default_factory=dict)
    visible: bool = True
    enabled: bool = True
    box: Optional[Dict[str, float]] = None
    parent: Optional["FakeElement"] = None


class FakeLocator:
    def __init__(self, page: "FakePage", selector: str, elements: List[FakeElement]):
        self.page = page
        self.selector = selector
        self.elements = elements

    def _check(self) -> None:
        if self.page.closed:
            raise PlaywrightError("Target page, context or browser has been closed")

    def _head(self) -> FakeElement:
        self._check()
        if not self.elements:
            raise PlaywrightTimeoutError(f"waiting for locator('{self.selector}')")
        return self.elements[0]

    @property
    def first(self) -> "FakeLocator":
        return FakeLocator(self.page, self.selector, self.elements[:1])

    def nth(self, index: int) -> "FakeLocator":
        return FakeLocator(self.page, self.selector, self.elements[index:index + 1])

    def locator(self, selector: str) -> "FakeLocator":
        if selector == "..":
            parents = [e.parent for e in self.elements if e.parent is not None]
            return FakeLocator(self.page, f"{self.selector} >> ..", parents)
        return self.page.locator(selector)

    async def count(self) -> int:
        self._check()
        return len(self.elements)

    async def is_visible(self) -> bool:
        self._check()
        return bool(self.elements) and self.elements[0].visible

    async def is_enabled(self) -> bool:
        return self._head().enabled

    async def wait_for(self, state: str = "visible", timeout: Optional[float] = None) -> None:
        if not await self.is_visible():
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms waiting for '{self.selector}'")

    async def text_content(self) -> Optional[str]:
        return self._head().text

    async def inner_text(self) -> str:
        return self._head().text

    async def get_attribute(self, name: str) -> Optional[str]:
        return self._head().attributes.get(name)

    async def bounding_box(self) -> Optional[Dict[str, float]]:
        return self._head().box

    async def click(self, **kwargs) -> None:
        self._head()
        self.page.actions.append(("click", self.selector))

    async def fill(self, value: str, **kwargs) -> None:
        self._head().text = value
        self.page.actions.append(("fill", self.selector))


class FakePage:
    def __init__(
        self,
        dom: Optional[Dict[str, List[FakeElement]]] = None,
        viewport: Optional[Dict[str, int]] = None,
        screenshot_error: Optional[Exception] = None,
    ):
        self.dom = dom or {}
        self.viewport_size = viewport if viewport is not None else {"width": 1280, "height": 720}
        self.screenshot_error = screenshot_error
        self.screenshots: List[str] = []
        self.actions: List[tuple] = []
        self.closed = False

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, selector, list(self.dom.get(selector, [])))

    async def screenshot(self, path: Optional[str] = None, **kwargs) -> bytes:
        if self.screenshot_error is not None:
            raise self.screenshot_error
        self.screenshots.append(path)
        return b""


@pytest.fixture(autouse=True)
def _fresh_config():
    """Every unit test starts and ends with a freshly loaded ConfigLoader."""
    ConfigLoader.reset()
    yield
    ConfigLoader.reset()


@pytest.fixture
def make_page() -> Callable[..., FakePage]:
    return FakePage


@pytest.fixture
def element() -> Callable[..., FakeElement]:
    return FakeElement


@pytest.fixture
def sleep_calls(monkeypatch) -> List[float]:
    """Record asyncio.sleep delays instead of waiting them out."""
    calls: List[float] = []
    real_sleep = asyncio.sleep

    async def fake_sleep(delay, *args, **kwargs):
        calls.append(delay)
        await real_sleep(0)

    monkeypatch.setattr(asyncio, "sleep", fake_sleep)
    return calls
