"""
================================================================================
UI Testing Framework
================================================================================

Playwright-based building blocks for the Decision Coach UI suite.

Components:
    - smart_locator: Selector fallback chains
    - retry_helper: Exponential backoff with screenshot capture
    - readiness_checker: App readiness polling and interface checks
    - content_validators: Section and tooltip quality rules
    - layout_validator: Horizontal centering measurements
    - page_base: Base page object
    - browser_manager: Browser lifecycle management

Author: Automation Team
License: MIT
================================================================================
"""

from .smart_locator import SmartLocator, ElementNotFoundError
from .page_base import BasePage
from .browser_manager import BrowserManager
from .retry_helper import (
    RetryExhaustedError,
    RetryOptions,
    retry,
    retry_page_operation,
    retry_validation,
    scenario_timeout,
)
from .readiness_checker import (
    AppNotReadyError,
    ReadinessResult,
    check_readiness,
    validate_interface,
    wait_for_ready,
)
from .content_validators import (
    ValidationInfrastructureError,
    validate_all_sections,
    validate_section,
    validate_tooltips,
)
from .layout_validator import (
    LayoutMeasurementError,
    VIEWPORT_SIZES,
    measure_centering,
)

__all__ = [
    "SmartLocator",
    "ElementNotFoundError",
    "BasePage",
    "BrowserManager",
    "RetryExhaustedError",
    "RetryOptions",
    "retry",
    "retry_page_operation",
    "retry_validation",
    "scenario_timeout",
    "AppNotReadyError",
    "ReadinessResult",
    "check_readiness",
    "validate_interface",
    "wait_for_ready",
    "ValidationInfrastructureError",
    "validate_all_sections",
    "validate_section",
    "validate_tooltips",
    "LayoutMeasurementError",
    "VIEWPORT_SIZES",
    "measure_centering",
]
