"""
================================================================================
Layout Centering Validator
================================================================================

Measures whether the outermost layout wrapper is horizontally centered in
the viewport, across a fixed viewport sweep and before/after dynamic
content is rendered.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from loguru import logger
from playwright.async_api import Locator, Page

from coach_tools.common import CoachTestError, get_config

from .smart_locator import SmartLocator


class LayoutMeasurementError(CoachTestError):
    """Raised when the wrapper geometry or viewport size cannot be read."""
    pass


@dataclass(frozen=True)
class ViewportSize:
    """A simulated screen size for the layout sweep."""
    width: int
    height: int
    label: str

    def as_playwright(self) -> dict:
        return {"width": self.width, "height": self.height}


VIEWPORT_SIZES: Tuple[ViewportSize, ...] = (
    ViewportSize(1920, 1080, "Desktop HD"),
    ViewportSize(1366, 768, "Laptop"),
    ViewportSize(1024, 768, "Tablet Landscape"),
    ViewportSize(768, 1024, "Tablet Portrait"),
    ViewportSize(375, 667, "Mobile"),
    ViewportSize(320, 568, "Small Mobile"),
)

WRAPPER_SELECTORS: Tuple[str, ...] = (
    ".main-wrapper",
    ".main-container",
    ".app-wrapper",
    ".container",
    "main",
    "#root > div",
)

FALLBACK_WRAPPER_SELECTOR = "body"


@dataclass
class CenteringMeasurement:
    """Horizontal centering of the wrapper relative to the viewport."""
    wrapper_center_x: float
    viewport_center_x: float
    offset: float
    viewport_width: int = 0
    selector: str = FALLBACK_WRAPPER_SELECTOR


def centering_offset(box_x: float, box_width: float, viewport_width: float) -> float:
    """
    Absolute distance between wrapper center and viewport center.

    Example:
        >>> centering_offset(0, 1280, 1280)
        0.0
    """
    return abs((box_x + box_width / 2) - viewport_width / 2)


def max_centering_change(viewport_width: int) -> float:
    """
    Allowed change of the offset when content is injected.

    Narrow (mobile/tablet portrait) layouts reflow more than desktop ones.
    """
    breakpoint_px = int(get_config("layout.mobile_breakpoint", 768))
    if viewport_width <= breakpoint_px:
        return float(get_config("layout.mobile_max_change", 5))
    return float(get_config("layout.desktop_max_change", 2))


def default_tolerance() -> float:
    return float(get_config("layout.tolerance_px", 5))


async def find_wrapper(page: Page) -> Tuple[Locator, str]:
    """
    Resolve the layout wrapper through WRAPPER_SELECTORS.

    Returns:
        (locator, selector); falls back to ``body`` when nothing matches
    """
    found = await SmartLocator(page).first_visible(list(WRAPPER_SELECTORS), element_name="layout_wrapper")
    if found is not None:
        selector, locator = found
        logger.debug(f"✅ Found visible wrapper with selector: {selector}")
        return locator, selector

    logger.warning("⚠️ No specific wrapper found, using body element")
    return page.locator(FALLBACK_WRAPPER_SELECTOR), FALLBACK_WRAPPER_SELECTOR


async def measure_centering(
    page: Page,
    wrapper: Optional[Tuple[Locator, str]] = None,
) -> CenteringMeasurement:
    """
    Measure the wrapper's horizontal offset from the viewport center.

    Args:
        page: Playwright page
        wrapper: Previously resolved (locator, selector); resolved if None

    Raises:
        LayoutMeasurementError: Viewport size or bounding box unavailable
    """
    locator, selector = wrapper or await find_wrapper(page)

    viewport = page.viewport_size
    if not viewport:
        raise LayoutMeasurementError("Viewport size not available")

    box = await locator.bounding_box()
    if not box:
        raise LayoutMeasurementError(
            f"Wrapper bounding box not available (selector: {selector})"
        )

    width = viewport["width"]
    measurement = CenteringMeasurement(
        wrapper_center_x=box["x"] + box["width"] / 2,
        viewport_center_x=width / 2,
        offset=centering_offset(box["x"], box["width"], width),
        viewport_width=width,
        selector=selector,
    )

    logger.bind(selector=selector, viewport_width=width).info(
        f"📏 Wrapper center {measurement.wrapper_center_x:.2f}px, "
        f"viewport center {measurement.viewport_center_x:.2f}px, "
        f"offset {measurement.offset:.2f}px"
    )
    return measurement


def assert_centered(
    measurement: CenteringMeasurement,
    tolerance: Optional[float] = None,
    label: str = "default viewport",
) -> None:
    """Fail when the offset exceeds ``tolerance`` pixels, naming the viewport."""
    tolerance = default_tolerance() if tolerance is None else tolerance
    assert measurement.offset <= tolerance, (
        f"{label}: layout wrapper '{measurement.selector}' is off-center by "
        f"{measurement.offset:.2f}px (tolerance {tolerance}px, "
        f"viewport width {measurement.viewport_width}px)"
    )


def assert_stable_centering(
    before: CenteringMeasurement,
    after: CenteringMeasurement,
    tolerance: Optional[float] = None,
    label: str = "dynamic content",
) -> float:
    """
    Check centering after dynamic content loads.

    The post-load offset must be within ``tolerance`` and must not have
    moved more than max_centering_change() from the pre-load offset.

    Returns:
        The observed change in offset
    """
    assert_centered(after, tolerance, label=label)

    change = abs(after.offset - before.offset)
    allowed = max_centering_change(after.viewport_width)
    assert change <= allowed, (
        f"{label}: centering shifted by {change:.2f}px after content loaded "
        f"(allowed {allowed}px at {after.viewport_width}px width)"
    )
    return change


__all__ = [
    "LayoutMeasurementError",
    "ViewportSize",
    "VIEWPORT_SIZES",
    "WRAPPER_SELECTORS",
    "CenteringMeasurement",
    "centering_offset",
    "max_centering_change",
    "find_wrapper",
    "measure_centering",
    "assert_centered",
    "assert_stable_centering",
]
