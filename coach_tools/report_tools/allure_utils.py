"""
================================================================================
Allure Report Utilities
================================================================================

This module provides utilities for enhancing Allure test reports with
screenshots, page dumps and validator results, and for post-processing the
raw Allure results into a JSON summary and an HTML report.

Features:
- Attachment helpers (PNG / JSON / TEXT / HTML)
- Validator result attachments
- JSON summary generation
- HTML report generation via the Allure CLI

================================================================================
"""

import dataclasses
import json
import shutil
import subprocess
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import allure
from loguru import logger


# ================================================================================
# Attachment Helpers
# ================================================================================

def attach_json(data: Any, name: str = "Data"):
    """
    Attach JSON data to Allure report.

    Dataclass instances are converted with ``dataclasses.asdict``.
    """
    if dataclasses.is_dataclass(data) and not isinstance(data, type):
        data = dataclasses.asdict(data)
    json_str = json.dumps(data, indent=2, default=str)
    allure.attach(
        json_str,
        name=name,
        attachment_type=allure.attachment_type.JSON
    )


def attach_text(text: str, name: str = "Text"):
    """Attach text content to Allure report."""
    allure.attach(
        text,
        name=name,
        attachment_type=allure.attachment_type.TEXT
    )


def attach_html(html: str, name: str = "HTML"):
    """Attach HTML content to Allure report."""
    allure.attach(
        html,
        name=name,
        attachment_type=allure.attachment_type.HTML
    )


def attach_png(path: Path, name: Optional[str] = None):
    """
    Attach a PNG file from disk to Allure report.

    Args:
        path: Screenshot file path
        name: Attachment name (defaults to file stem)
    """
    allure.attach.file(
        str(path),
        name=name or Path(path).stem,
        attachment_type=allure.attachment_type.PNG
    )


def attach_validation_result(result: Any, name: str):
    """
    Attach a validator result object (section, tooltip, layout) as JSON.

    Args:
        result: Dataclass result returned by a validator
        name: Attachment name
    """
    with allure.step(f"Validation result: {name}"):
        attach_json(result, name=name)


# ================================================================================
# Report Processing
# ================================================================================

@dataclass
class TestResultSummary:
    """Summary of test execution results."""
    __test__ = False

    total: int = 0
    passed: int = 0
    failed: int = 0
    broken: int = 0
    skipped: int = 0
    unknown: int = 0
    duration_ms: int = 0
    failed_tests: List[str] = field(default_factory=list)
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def pass_rate(self) -> float:
        """Calculate pass rate percentage."""
        if self.total == 0:
            return 0.0
        return (self.passed / self.total) * 100

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "broken": self.broken,
            "skipped": self.skipped,
            "unknown": self.unknown,
            "pass_rate": f"{self.pass_rate:.2f}%",
            "duration_ms": self.duration_ms,
            "failed_tests": list(self.failed_tests),
            "timestamp": self.timestamp,
        }


class AllureReportProcessor:
    """
    Processes Allure results and generates reports.

    The raw ``*-result.json`` files written by allure-pytest are the
    structured JSON report; this class condenses them into ``summary.json``
    and renders the HTML report with the Allure CLI.
    """

    def __init__(
        self,
        results_dir: Path,
        report_dir: Optional[Path] = None,
    ):
        """
        Initialize processor.

        Args:
            results_dir: Allure results directory
            report_dir: Output HTML report directory
        """
        self.results_dir = Path(results_dir)
        self.report_dir = Path(report_dir or self.results_dir.parent / "allure-report")

    def parse_results(self) -> List[Dict[str, Any]]:
        """
        Parse Allure result files.

        Returns:
            List of test result dictionaries
        """
        results = []

        for result_file in sorted(self.results_dir.glob("*-result.json")):
            try:
                with open(result_file, encoding="utf-8") as f:
                    results.append(json.load(f))
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Failed to parse {result_file}: {e}")

        return results

    def generate_summary(self) -> TestResultSummary:
        """Generate summary from results."""
        results = self.parse_results()
        summary = TestResultSummary()
        summary.total = len(results)

        for result in results:
            status = result.get("status", "unknown")
            if status == "passed":
                summary.passed += 1
            elif status == "failed":
                summary.failed += 1
                summary.failed_tests.append(result.get("fullName") or result.get("name", "?"))
            elif status == "broken":
                summary.broken += 1
                summary.failed_tests.append(result.get("fullName") or result.get("name", "?"))
            elif status == "skipped":
                summary.skipped += 1
            else:
                summary.unknown += 1

            start = result.get("start", 0)
            stop = result.get("stop", 0)
            summary.duration_ms += (stop - start)

        return summary

    def write_summary_json(self, output_path: Optional[Path] = None) -> Path:
        """
        Write the condensed JSON summary.

        Args:
            output_path: Target file (defaults to ``<results parent>/summary.json``)

        Returns:
            Path written
        """
        output_path = Path(output_path or self.results_dir.parent / "summary.json")
        output_path.parent.mkdir(parents=True, exist_ok=True)
        summary = self.generate_summary()
        output_path.write_text(json.dumps(summary.to_dict(), indent=2), encoding="utf-8")
        logger.info(f"Summary written to {output_path}")
        return output_path

    def copy_history(self):
        """Copy history from previous report to results so trends survive."""
        history_source = self.report_dir / "history"
        history_dest = self.results_dir / "history"

        if history_source.exists():
            if history_dest.exists():
                shutil.rmtree(history_dest)
            shutil.copytree(history_source, history_dest)
            logger.info("Copied history from previous report")

    def generate_report(self) -> bool:
        """
        Generate Allure HTML report.

        Returns:
            True if successful
        """
        self.copy_history()

        cmd = [
            "allure", "generate",
            str(self.results_dir),
            "-o", str(self.report_dir),
            "--clean"
        ]

        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except FileNotFoundError:
            logger.error("Allure command not found. Install allure-commandline.")
            return False

        if result.returncode == 0:
            logger.info(f"Report generated at {self.report_dir}")
            return True

        logger.error(f"Report generation failed: {result.stderr}")
        return False

    def print_summary(self):
        """Print summary to console."""
        summary = self.generate_summary()

        print("\n" + "=" * 60)
        print("DECISION COACH UI TEST SUMMARY")
        print("=" * 60)
        print(f"Total Tests:    {summary.total}")
        print(f"Passed:         {summary.passed} ✅")
        print(f"Failed:         {summary.failed} ❌")
        print(f"Broken:         {summary.broken} ⚠️")
        print(f"Skipped:        {summary.skipped} ⏭️")
        print(f"Pass Rate:      {summary.pass_rate:.2f}%")
        print(f"Duration:       {summary.duration_ms / 1000:.2f}s")
        for name in summary.failed_tests:
            print(f"  ✗ {name}")
        print("=" * 60 + "\n")
