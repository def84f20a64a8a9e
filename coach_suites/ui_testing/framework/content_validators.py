"""
================================================================================
Content Validators
================================================================================

Structural and textual quality checks for a rendered Decision Coach answer.

Validators report the conditions they exist to detect (missing section,
too short, placeholder text, malformed tooltip) as result objects. Only
infrastructure problems, such as a closed page, raise
ValidationInfrastructureError.

Components:
    - validate_section: one section, first visible selector wins
    - validate_all_sections: the five named answer sections
    - validate_tooltips: inline glossary tooltips
    - format rules: markdown leftovers, trailing dashes, concept lines,
      reflection questions, overall response length

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

import allure
from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page

from coach_tools.common import CoachTestError, get_config

from .smart_locator import SmartLocator


class ValidationInfrastructureError(CoachTestError):
    """Raised when a validator cannot inspect the page at all."""
    pass


# Placeholder phrases that mean a section never received real content.
SECTION_PLACEHOLDERS: Tuple[str, ...] = (
    "No answer available",
    "No content available",
    "No strategy available",
    "No story available",
    "No tools available",
    "No prompts available",
    "No concepts available",
    "Loading...",
    "Please wait...",
    "Coming soon...",
    "Under construction",
)

TOOLTIP_PLACEHOLDERS: Tuple[str, ...] = (
    "No description available",
    "No tooltip available",
    "Click for more info",
    "Hover for details",
    "Loading...",
    "Please wait...",
)

# Tried in order; the first selector with at least one match is used.
TOOLTIP_SELECTORS: Tuple[str, ...] = (
    "span[class*='tooltip']",
    "[data-tooltip]",
    "[title]",
)

# Attribute priority for the tooltip payload.
TOOLTIP_ATTRIBUTES: Tuple[str, ...] = ("data-tooltip", "title", "aria-label")

REQUIRED_SECTIONS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    (
        "How to Strategize Your Decision",
        (
            "[data-testid='strategy-section']",
            "[data-testid='strategic-section']",
            "text=How to Strategize Your Decision",
            "text=Strategic Thinking",
            "text=Strategy",
        ),
    ),
    (
        "Story in Action",
        (
            "[data-testid='story-section']",
            "text=Story in Action",
            "text=Example",
            "text=Case Study",
        ),
    ),
    (
        "Analytical Tools",
        (
            "[data-testid='tools-section']",
            "[data-testid='analytical-section']",
            "text=Analytical Tools",
            "text=Tools",
            "text=Analysis",
        ),
    ),
    (
        "Reflection Prompts",
        (
            "[data-testid='prompts-section']",
            "[data-testid='reflection-section']",
            "text=Reflection Prompts",
            "text=Prompts",
            "text=Questions",
        ),
    ),
    (
        "Concepts/Tools/Practice Reference",
        (
            "[data-testid='concepts-section']",
            "[data-testid='reference-section']",
            "text=Concepts/Tools/Practice Reference",
            "text=Key Concepts",
            "text=Concepts",
        ),
    ),
)

QUESTION_PATTERN = re.compile(r"(How|What)\s+[^.!?]*[.!?]")
CONCEPT_LINE_PATTERN = re.compile(r"^.+:\s+.+")
TRAILING_DASHES_PATTERN = re.compile(r"\s*[-–—]+\s*$")


# =============================================================================
# Result Types
# =============================================================================

@dataclass
class SectionValidationResult:
    """Outcome of validating one answer section."""
    section_name: str
    valid: bool = False
    content: Optional[str] = None
    character_count: int = 0
    error: Optional[str] = None


@dataclass
class SectionsValidationResult:
    """Aggregate outcome of validate_all_sections."""
    valid: bool
    results: List[SectionValidationResult] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


@dataclass
class TooltipDetail:
    """Per-tooltip validation detail."""
    term: str
    tooltip_text: str
    valid: bool = False
    error: Optional[str] = None


@dataclass
class TooltipValidationResult:
    """Aggregate outcome of validate_tooltips."""
    valid: bool = False
    tooltip_count: int = 0
    valid_tooltip_count: int = 0
    errors: List[str] = field(default_factory=list)
    details: List[TooltipDetail] = field(default_factory=list)


# =============================================================================
# Text Rules
# =============================================================================

def find_placeholder(text: str, placeholders: Iterable[str]) -> Optional[str]:
    """Return the first placeholder phrase contained in ``text`` (case-insensitive)."""
    lowered = text.lower()
    for phrase in placeholders:
        if phrase.lower() in lowered:
            return phrase
    return None


def text_sample(text: str, limit: int = 100) -> str:
    """Short excerpt of offending text for failure messages."""
    text = text or ""
    return text if len(text) <= limit else f"{text[:limit]}..."


def find_markdown_artifacts(text: str) -> Optional[str]:
    """Return an error when unrendered bold/underline markdown remains."""
    if "**" in text or "__" in text:
        return f'bold syntax found in "{text_sample(text)}"'
    return None


def find_trailing_dashes(text: str) -> Optional[str]:
    """Return an error when the text ends with a dash separator."""
    if TRAILING_DASHES_PATTERN.search(text):
        return f'trailing dashes in "{text_sample(text)}"'
    return None


def validate_concepts_format(text: str) -> Optional[str]:
    """
    Every non-blank line must read ``Term: Definition``.

    Returns:
        None when valid, otherwise an error naming the offending line
    """
    lines = [line for line in text.split("\n") if line.strip()]
    if not lines:
        return "Concepts section is empty"

    for number, line in enumerate(lines, start=1):
        if not CONCEPT_LINE_PATTERN.match(line):
            return f'Concepts line {number} does not follow "Term: Definition" format: "{line}"'
        term, _, definition = line.partition(":")
        if not term.strip() or not definition.strip():
            return f'Concepts line {number} has empty term or definition: "{line}"'
    return None


def has_question_pattern(text: str) -> bool:
    """True if the text contains a question starting with How/What."""
    return bool(QUESTION_PATTERN.search(text or ""))


def validate_response_length(text: Optional[str], min_length: Optional[int] = None) -> Optional[str]:
    """Error when the whole response is shorter than ``min_length`` characters."""
    if min_length is None:
        min_length = int(get_config("validation.min_response_length", 500))
    length = len(text or "")
    if length < min_length:
        return f"Response too short ({length} chars, expected {min_length}+)"
    return None


def contains_expected_term(text: str, terms: Sequence[str]) -> bool:
    """True if any of ``terms`` appears in ``text`` (case-insensitive)."""
    lowered = (text or "").lower()
    return any(term.lower() in lowered for term in terms)


# =============================================================================
# Page Validators
# =============================================================================

async def validate_section(
    page: Page,
    section_name: str,
    selectors: Sequence[str],
    min_length: Optional[int] = None,
) -> SectionValidationResult:
    """
    Validate one answer section.

    The first visible selector wins. Text is read from the matched node's
    parent, because headings are often matched while the informative text
    sits next to them.

    Args:
        page: Playwright page
        section_name: Human-readable section name
        selectors: Candidate selectors in priority order
        min_length: Minimum character count (``validation.min_section_length``)

    Raises:
        ValidationInfrastructureError: When the page cannot be queried
    """
    if min_length is None:
        min_length = int(get_config("validation.min_section_length", 50))

    result = SectionValidationResult(section_name=section_name)
    smart = SmartLocator(page)

    try:
        found = await smart.first_visible(list(selectors), element_name=section_name)
        if found is None:
            result.error = "Section not found or not visible"
        else:
            _, section = found
            content = await section.locator("..").text_content()
            result.content = content or ""
            result.character_count = len(result.content)
    except PlaywrightError as e:
        raise ValidationInfrastructureError(
            f"Cannot inspect section '{section_name}': {e}"
        ) from e

    if result.error is None:
        placeholder = find_placeholder(result.content, SECTION_PLACEHOLDERS)
        if not result.content:
            result.error = "Section has no content"
        elif result.character_count < min_length:
            result.error = (
                f"Section too short ({result.character_count} chars, expected {min_length}+)"
            )
        elif placeholder:
            result.error = f'Section contains placeholder text "{placeholder}"'
        else:
            result.valid = True

    if result.valid:
        logger.info(f"✅ {section_name}: {result.character_count} characters")
    else:
        logger.warning(f"❌ {section_name}: {result.error}")

    return result


@allure.step("Validate all answer sections")
async def validate_all_sections(
    page: Page,
    min_length: Optional[int] = None,
) -> SectionsValidationResult:
    """Run validate_section for each of the five required answer sections."""
    results: List[SectionValidationResult] = []
    errors: List[str] = []

    for name, selectors in REQUIRED_SECTIONS:
        result = await validate_section(page, name, selectors, min_length=min_length)
        results.append(result)
        if not result.valid:
            errors.append(f"{name}: {result.error}")

    valid = all(r.valid for r in results)
    if valid:
        logger.info("✅ All sections validated successfully")
    else:
        logger.error(f"❌ Section validation failed: {len(errors)} errors")

    return SectionsValidationResult(valid=valid, results=results, errors=errors)


async def _locate_tooltips(page: Page) -> Tuple[Optional[Locator], int]:
    for selector in TOOLTIP_SELECTORS:
        locator = page.locator(selector)
        count = await locator.count()
        if count > 0:
            logger.debug(f"Tooltips located with {selector}")
            return locator, count
    return None, 0


async def _tooltip_payload(element: Locator) -> str:
    for attribute in TOOLTIP_ATTRIBUTES:
        value = await element.get_attribute(attribute)
        if value and value.strip():
            return value.strip()
    return ""


def check_tooltip(
    term: str,
    tooltip_text: str,
    min_term_length: int = 2,
    min_tooltip_length: int = 15,
) -> TooltipDetail:
    """Apply the tooltip rules to one (label, payload) pair."""
    detail = TooltipDetail(term=term.strip(), tooltip_text=tooltip_text.strip())

    if not detail.term:
        detail.error = "Missing term text"
    elif len(detail.term) < min_term_length:
        detail.error = f"Term too short (minimum {min_term_length} characters)"
    elif not detail.tooltip_text:
        detail.error = "Missing tooltip content"
    elif len(detail.tooltip_text) < min_tooltip_length:
        detail.error = (
            f"Tooltip too short ({len(detail.tooltip_text)} chars, "
            f"minimum {min_tooltip_length})"
        )
    elif find_placeholder(detail.tooltip_text, TOOLTIP_PLACEHOLDERS):
        detail.error = f'Tooltip contains placeholder text: "{detail.tooltip_text}"'
    else:
        detail.valid = True

    return detail


@allure.step("Validate tooltips")
async def validate_tooltips(page: Page) -> TooltipValidationResult:
    """
    Validate inline tooltips.

    Valid overall iff at least one tooltip is found and every tooltip
    passes its checks.

    Raises:
        ValidationInfrastructureError: When the page cannot be queried
    """
    result = TooltipValidationResult()
    min_term = int(get_config("validation.min_term_length", 2))
    min_tooltip = int(get_config("validation.min_tooltip_length", 15))

    try:
        tooltips, count = await _locate_tooltips(page)
        result.tooltip_count = count

        if tooltips is None:
            result.errors.append("No tooltips found in response")
            logger.warning("❌ No tooltips found in response")
            return result

        logger.debug(f"🔍 Found {count} tooltip elements")

        for i in range(count):
            element = tooltips.nth(i)
            term = await element.text_content() or ""
            payload = await _tooltip_payload(element)

            detail = check_tooltip(term, payload, min_term, min_tooltip)
            if detail.valid:
                result.valid_tooltip_count += 1
            else:
                result.errors.append(f"{detail.term}: {detail.error}")
            result.details.append(detail)
    except PlaywrightError as e:
        raise ValidationInfrastructureError(f"Cannot inspect tooltips: {e}") from e

    result.valid = (
        result.tooltip_count > 0
        and result.valid_tooltip_count == result.tooltip_count
        and not result.errors
    )

    if result.valid:
        logger.info(
            f"✅ Tooltip validation passed: "
            f"{result.valid_tooltip_count}/{result.tooltip_count} valid tooltips"
        )
    else:
        logger.warning(f"❌ Tooltip validation failed: {len(result.errors)} errors")
        for error in result.errors:
            logger.warning(f"  - {error}")

    return result


__all__ = [
    "ValidationInfrastructureError",
    "SECTION_PLACEHOLDERS",
    "TOOLTIP_PLACEHOLDERS",
    "TOOLTIP_SELECTORS",
    "REQUIRED_SECTIONS",
    "SectionValidationResult",
    "SectionsValidationResult",
    "TooltipDetail",
    "TooltipValidationResult",
    "find_placeholder",
    "text_sample",
    "find_markdown_artifacts",
    "find_trailing_dashes",
    "validate_concepts_format",
    "has_question_pattern",
    "validate_response_length",
    "contains_expected_term",
    "check_tooltip",
    "validate_section",
    "validate_all_sections",
    "validate_tooltips",
]
