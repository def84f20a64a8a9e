"""
================================================================================
Readiness Checker
================================================================================

Determines whether the Decision Coach frontend is up before a scenario
touches it.

App-not-ready is an expected condition during startup races, so every
operation here returns an outcome instead of raising:
    - check_readiness: GET the base URL with a short fixed-delay retry loop
    - wait_for_ready: poll check_readiness until a deadline
    - validate_interface: confirm the query input and submit control render

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import List, Optional

import allure
import httpx
from loguru import logger
from playwright.async_api import Page

from coach_tools.common import CoachTestError, get_config

from .smart_locator import SmartLocator


class AppNotReadyError(CoachTestError):
    """Raised by scenarios when the application never became ready."""
    pass


@dataclass
class ReadinessResult:
    """
    Outcome of a readiness check.

    Attributes:
        ready: Whether the application answered with a 2xx status
        error: Description of the last failure, if any
        response_time: Duration of the last HTTP round trip, in seconds
    """
    ready: bool
    error: Optional[str] = None
    response_time: Optional[float] = None


async def check_readiness(
    target_url: Optional[str] = None,
    attempts: Optional[int] = None,
    retry_delay: Optional[float] = None,
    client: Optional[httpx.AsyncClient] = None,
    request_timeout: float = 10.0,
) -> ReadinessResult:
    """
    Check whether the application responds successfully.

    Performs an HTTP GET and retries non-2xx answers and network errors
    with a fixed delay. Never raises for those conditions.

    Args:
        target_url: URL to probe (defaults to ``ui.base_url``)
        attempts: Number of GET attempts (defaults to ``readiness.attempts``)
        retry_delay: Seconds between attempts (``readiness.retry_delay``)
        client: Optional pre-built AsyncClient (tests inject a MockTransport)
        request_timeout: Per-request timeout in seconds

    Returns:
        ReadinessResult for the last attempt
    """
    target_url = target_url or get_config("ui.base_url")
    attempts = int(attempts if attempts is not None else get_config("readiness.attempts", 3))
    retry_delay = float(
        retry_delay if retry_delay is not None else get_config("readiness.retry_delay", 1.0)
    )

    if not target_url or not str(target_url).strip():
        logger.error("❌ No base URL configured for the readiness check")
        return ReadinessResult(ready=False, error="No base URL configured (ui.base_url)")

    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(timeout=httpx.Timeout(request_timeout))

    result = ReadinessResult(
        ready=False,
        error="App failed to respond after all retry attempts",
    )

    try:
        for attempt in range(1, attempts + 1):
            log = logger.bind(operation="readiness", attempt=attempt, url=target_url)
            log.debug(f"🔍 Checking app readiness (attempt {attempt}/{attempts})...")

            start = time.monotonic()
            try:
                response = await client.get(target_url)
            except httpx.InvalidURL as e:
                # Retrying cannot fix a malformed URL.
                result = ReadinessResult(ready=False, error=f"Invalid URL {target_url!r}: {e}")
                log.bind(outcome="invalid_url").error(f"❌ {result.error}")
                break
            except httpx.HTTPError as e:
                result = ReadinessResult(ready=False, error=f"Connection failed: {e}")
                log.bind(outcome="unreachable").warning(f"⚠️ {result.error}")
            else:
                elapsed = time.monotonic() - start
                if response.is_success:
                    log.bind(outcome="ready").info(
                        f"✅ App is ready! Response time: {elapsed * 1000:.0f}ms"
                    )
                    return ReadinessResult(ready=True, response_time=elapsed)

                result = ReadinessResult(
                    ready=False,
                    error=f"App responded with status {response.status_code}",
                    response_time=elapsed,
                )
                log.bind(outcome="bad_status").warning(f"⚠️ {result.error}")

            if attempt < attempts:
                log.debug(f"⏳ Waiting {retry_delay}s before retry...")
                await asyncio.sleep(retry_delay)
    finally:
        if owns_client:
            await client.aclose()

    return result


async def wait_for_ready(
    target_url: Optional[str] = None,
    timeout: Optional[float] = None,
    poll_interval: Optional[float] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> bool:
    """
    Poll check_readiness until it succeeds or ``timeout`` seconds elapse.

    Returns:
        True if the application became ready in time
    """
    timeout = float(timeout if timeout is not None else get_config("readiness.timeout", 30.0))
    poll_interval = float(
        poll_interval if poll_interval is not None else get_config("readiness.poll_interval", 2.0)
    )

    logger.info(f"⏳ Waiting for app to be ready (timeout: {timeout}s)...")
    deadline = time.monotonic() + timeout

    while time.monotonic() < deadline:
        result = await check_readiness(target_url, client=client)
        if result.ready:
            return True

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            break
        await asyncio.sleep(min(poll_interval, remaining))

    logger.error(f"❌ App failed to be ready within {timeout}s")
    return False


@allure.step("Validate app interface")
async def validate_interface(page: Page) -> List[str]:
    """
    Check that the query input and the submit control are visible.

    Each control is looked up through its prioritized selector chain in
    SmartLocator.LOCATORS.

    Returns:
        Human-readable errors; an empty list means the interface is valid
    """
    errors: List[str] = []
    smart = SmartLocator(page)

    try:
        if await smart.first_visible("query_input") is None:
            errors.append("Query input field not found or not visible")

        if await smart.first_visible("ask_button") is None:
            errors.append("Ask/Submit button not found or not visible")

        loading_count = 0
        for selector in smart.LOCATORS["loading_indicator"].values():
            loading_count += await page.locator(selector).count()
        if loading_count > 0:
            logger.warning(
                f"⚠️ Found {loading_count} loading indicators - app may still be starting"
            )
    except Exception as e:
        errors.append(f"Error validating app interface: {e}")

    if errors:
        logger.error(f"❌ App interface validation failed: {len(errors)} errors")
    else:
        logger.info("✅ App interface validation passed")

    return errors


__all__ = [
    "AppNotReadyError",
    "ReadinessResult",
    "check_readiness",
    "wait_for_ready",
    "validate_interface",
]
