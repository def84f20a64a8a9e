"""
================================================================================
Report Tools
================================================================================

Allure attachment helpers and result post-processing.

================================================================================
"""

from .allure_utils import (
    AllureReportProcessor,
    TestResultSummary,
    attach_html,
    attach_json,
    attach_png,
    attach_text,
    attach_validation_result,
)

__all__ = [
    "AllureReportProcessor",
    "TestResultSummary",
    "attach_html",
    "attach_json",
    "attach_png",
    "attach_text",
    "attach_validation_result",
]
