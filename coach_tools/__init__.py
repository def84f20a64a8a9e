"""
================================================================================
Coach Tools
================================================================================

Support utilities for the Decision Coach UI test infrastructure.

Modules:
    - common: Shared configuration, logging and artifact path utilities
    - report_tools: Allure attachments, result summaries and HTML reports

Example:
    from coach_tools.common import get_config, init_logger
    from coach_tools.report_tools import AllureReportProcessor

    init_logger()
    processor = AllureReportProcessor(Path("artifacts/allure-results"))
    processor.write_summary_json(Path("artifacts/summary.json"))

================================================================================
"""

__version__ = "1.0.0"

__all__ = [
    "common",
    "report_tools",
]
