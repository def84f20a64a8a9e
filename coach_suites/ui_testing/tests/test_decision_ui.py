"""
================================================================================
Decision Coach Answer UI Tests (Async / Playwright)
================================================================================

Live scenarios against a running Decision Coach frontend:
  - A query renders every structured section with meaningful content
  - Several query types each render the four answer sections
  - Empty and one-character queries leave the page usable

Transient rendering delays are absorbed by the retry helpers; content rules
are reported through the validators' result objects.

================================================================================
"""

import allure
import pytest

from coach_suites.ui_testing.framework.content_validators import (
    find_markdown_artifacts,
    find_trailing_dashes,
    has_question_pattern,
    validate_concepts_format,
    validate_response_length,
    validate_tooltips,
)
from coach_suites.ui_testing.framework.readiness_checker import validate_interface
from coach_suites.ui_testing.framework.retry_helper import (
    retry_page_operation,
    retry_validation,
    scenario_timeout,
)
from coach_suites.ui_testing.pages.coach_page import DecisionCoachPage, RESPONSE_SECTIONS


PRIMARY_QUERY = "How do I plan production under tariff uncertainty?"

QUERY_TYPES = [
    "How should I approach market entry strategy?",
    "What are the risks of expanding internationally?",
    "How do I optimize my supply chain under constraints?",
]


async def ask_and_wait(coach_page: DecisionCoachPage, query: str) -> None:
    """Fill, submit and wait for the answer, retrying each step."""
    page = coach_page.page
    await retry_page_operation(page, lambda: coach_page.enter_query(query), "Query input")
    await retry_page_operation(page, coach_page.submit, "Ask button click")
    await retry_page_operation(page, coach_page.wait_for_response, "Response rendering")


@allure.epic("UI Testing")
@allure.feature("Decision Coach Answer")
class TestDecisionCoachAnswer:
    """Decision Coach answer rendering suite (async)."""

    @allure.story("Structured Answer")
    @allure.title("Answer renders all structured sections with meaningful content")
    @allure.severity(allure.severity_level.BLOCKER)
    @pytest.mark.P0
    @pytest.mark.e2e
    @pytest.mark.live
    @pytest.mark.asyncio
    @scenario_timeout()
    async def test_renders_structured_sections(self, coach_page: DecisionCoachPage):
        """Submit a query and validate sections, tooltips, prompts and length."""
        page = coach_page.page

        with allure.step("Validate app interface"):
            errors = await validate_interface(page)
            assert not errors, f"App interface validation failed: {', '.join(errors)}"

        await ask_and_wait(coach_page, PRIMARY_QUERY)

        for name, selectors in RESPONSE_SECTIONS:
            with allure.step(f"Validate {name}"):
                text = await coach_page.section_text(selectors, name)
                assert text is not None, f"{name} section not found or not visible"

                markdown = find_markdown_artifacts(text)
                assert markdown is None, f"{name} contains markdown artifacts: {markdown}"

                dashes = find_trailing_dashes(text)
                assert dashes is None, f"{name} contains {dashes}"

                if name == "Concepts Section":
                    concepts_error = validate_concepts_format(text)
                    assert concepts_error is None, concepts_error

        tooltips = await retry_validation(lambda: validate_tooltips(page), "Tooltip validation")
        assert tooltips.valid, f"Tooltip validation failed: {', '.join(tooltips.errors)}"

        with allure.step("Validate reflection questions"):
            _, reflection_selectors = RESPONSE_SECTIONS[2]
            questions = await coach_page.section_text(reflection_selectors, "Reflection Prompts")
            if questions is not None:
                assert has_question_pattern(questions), (
                    'No questions starting with "How" or "What" found in Reflection Prompts'
                )

        with allure.step("Validate overall response length"):
            length_error = validate_response_length(await coach_page.body_text())
            assert length_error is None, length_error

        await coach_page.screenshot("test-success")

    @allure.story("Query Types")
    @allure.title("Different query types each render the answer sections")
    @allure.severity(allure.severity_level.CRITICAL)
    @pytest.mark.P1
    @pytest.mark.regression
    @pytest.mark.live
    @pytest.mark.asyncio
    @scenario_timeout()
    async def test_handles_query_types(self, coach_page: DecisionCoachPage):
        """Every query must render the four sections without markdown leftovers."""
        for query in QUERY_TYPES:
            with allure.step(f"Query: {query}"):
                await ask_and_wait(coach_page, query)

                for name, selectors in RESPONSE_SECTIONS:
                    text = await coach_page.section_text(selectors, name)
                    assert text is not None, f'{name} section not found for query: "{query}"'

                    markdown = find_markdown_artifacts(text)
                    assert markdown is None, (
                        f'{name} contains markdown artifacts for query "{query}": {markdown}'
                    )

    @allure.story("Error States")
    @allure.title("Empty and very short queries leave the page usable")
    @allure.severity(allure.severity_level.NORMAL)
    @pytest.mark.P1
    @pytest.mark.regression
    @pytest.mark.live
    @pytest.mark.asyncio
    @scenario_timeout()
    async def test_handles_error_states(self, coach_page: DecisionCoachPage):
        """The query input stays visible and enabled after invalid submissions."""
        with allure.step("Submit empty query"):
            await coach_page.submit(force=True)
            await coach_page.page.wait_for_timeout(2000)
            assert await coach_page.input_is_usable(), "Query input unusable after empty query"

        with allure.step("Submit one-character query"):
            await coach_page.enter_query("a")
            await coach_page.submit(force=True)
            await coach_page.page.wait_for_timeout(2000)
            assert await coach_page.input_is_usable(), "Query input unusable after short query"
