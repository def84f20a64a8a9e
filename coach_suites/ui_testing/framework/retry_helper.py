"""
================================================================================
Retry Helper
================================================================================

Exponential backoff for asynchronous UI operations against a page that
renders asynchronously.

Key Features:
  - Bounded exponential backoff: delay = min(base * multiplier^(n-1), max)
  - Structured per-attempt log records (operation, attempt, outcome)
  - Operation-name tagging of the final failure
  - Best-effort screenshot after every failed page operation
  - Whole-scenario time limit (scenario_timeout)

Usage:
    result = await retry_validation(lambda: validate_tooltips(page), "Tooltip validation")
    await retry_page_operation(page, lambda: coach.submit(), "Ask button click")

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import asyncio
import functools
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, TypeVar

import allure
from loguru import logger
from playwright.async_api import Page

from coach_tools.common import CoachTestError, artifact_path, get_config


T = TypeVar("T")

Operation = Callable[[], Awaitable[T]]
FailureHook = Callable[[int, BaseException], Awaitable[None]]
Scenario = Callable[..., Awaitable[Any]]


@dataclass(frozen=True)
class RetryOptions:
    """
    Configuration for retry behavior.

    Attributes:
        max_attempts: Total number of attempts (>= 1)
        base_delay: Delay after the first failed attempt, in seconds
        max_delay: Upper bound for any single delay, in seconds
        backoff_multiplier: Growth factor between consecutive delays (> 1)
    """
    max_attempts: int = 3
    base_delay: float = 0.5
    max_delay: float = 2.0
    backoff_multiplier: float = 2.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.backoff_multiplier <= 1:
            raise ValueError(
                f"backoff_multiplier must be > 1, got {self.backoff_multiplier}"
            )
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("delays must be non-negative")

    @classmethod
    def from_config(cls, **overrides) -> "RetryOptions":
        """Build options from the ``retry.*`` config section plus overrides."""
        values = {
            "max_attempts": int(get_config("retry.max_attempts", 3)),
            "base_delay": float(get_config("retry.base_delay", 0.5)),
            "max_delay": float(get_config("retry.max_delay", 2.0)),
            "backoff_multiplier": float(get_config("retry.backoff_multiplier", 2.0)),
        }
        values.update(overrides)
        return cls(**values)


DEFAULT_RETRY_OPTIONS = RetryOptions()


class RetryExhaustedError(CoachTestError):
    """
    Raised when every attempt of a named operation failed.

    Attributes:
        operation_name: Name of the retried operation
        attempts: Number of attempts made
        last_error: The exception raised by the final attempt
    """

    def __init__(self, operation_name: str, attempts: int, last_error: BaseException):
        self.operation_name = operation_name
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"{operation_name} failed after {attempts} attempt(s): "
            f"{type(last_error).__name__}: {last_error}"
        )


def compute_delay(attempt: int, options: RetryOptions = DEFAULT_RETRY_OPTIONS) -> float:
    """
    Delay to wait after failed attempt number ``attempt`` (1-based).

    Example:
        >>> compute_delay(1), compute_delay(2), compute_delay(3)
        (0.5, 1.0, 2.0)
    """
    if attempt < 1:
        raise ValueError(f"attempt is 1-based, got {attempt}")
    delay = options.base_delay * options.backoff_multiplier ** (attempt - 1)
    return min(delay, options.max_delay)


async def _run_with_retry(
    operation: Operation,
    operation_name: str,
    options: RetryOptions,
    on_failure: Optional[FailureHook] = None,
) -> T:
    """Shared attempt loop. Re-raises the final attempt's exception as-is."""
    for attempt in range(1, options.max_attempts + 1):
        log = logger.bind(
            operation=operation_name,
            attempt=attempt,
            max_attempts=options.max_attempts,
        )
        log.debug(f"🔍 {operation_name} (attempt {attempt}/{options.max_attempts})")

        try:
            result = await operation()
        except Exception as e:
            log.bind(outcome="failed").warning(
                f"❌ {operation_name} failed on attempt {attempt}: {e}"
            )
            if on_failure is not None:
                await on_failure(attempt, e)

            if attempt == options.max_attempts:
                log.bind(outcome="exhausted").error(
                    f"💥 {operation_name} failed after {options.max_attempts} attempts"
                )
                raise

            delay = compute_delay(attempt, options)
            log.bind(outcome="retrying", delay=delay).info(
                f"⏳ Retrying {operation_name} in {delay:.2f}s..."
            )
            await asyncio.sleep(delay)
            continue

        if attempt > 1:
            log.bind(outcome="recovered").info(
                f"✅ {operation_name} succeeded on attempt {attempt}"
            )
        return result

    # max_attempts >= 1 is enforced by RetryOptions
    raise AssertionError("unreachable")


async def retry(
    operation: Operation,
    options: Optional[RetryOptions] = None,
) -> T:
    """
    Retry an async operation with exponential backoff.

    The final failure is re-raised unchanged.

    Args:
        operation: Zero-argument callable returning an awaitable
        options: Retry configuration (defaults from config)

    Returns:
        The operation's result
    """
    options = options or RetryOptions.from_config()
    return await _run_with_retry(operation, "operation", options)


async def retry_validation(
    operation: Operation,
    operation_name: str,
    options: Optional[RetryOptions] = None,
) -> T:
    """
    Retry a validation step with per-attempt logging.

    Args:
        operation: Zero-argument callable returning an awaitable
        operation_name: Human-readable name used in logs and errors
        options: Retry configuration (defaults from config)

    Returns:
        The operation's result

    Raises:
        RetryExhaustedError: Wrapping the last attempt's exception
    """
    options = options or RetryOptions.from_config()
    with allure.step(f"Retry: {operation_name}"):
        try:
            return await _run_with_retry(operation, operation_name, options)
        except Exception as e:
            raise RetryExhaustedError(operation_name, options.max_attempts, e) from e


async def retry_page_operation(
    page: Page,
    operation: Operation,
    operation_name: str,
    options: Optional[RetryOptions] = None,
    screenshot_dir: Optional[Path] = None,
) -> T:
    """
    Retry a page interaction, capturing a screenshot after each failure.

    Screenshots are written to
    ``<artifacts>/<sanitized operation name>-attempt-<n>.png``.
    A screenshot failure is logged and never replaces the original error.

    Args:
        page: Playwright page used for screenshots
        operation: Zero-argument callable returning an awaitable
        operation_name: Human-readable name used in logs, errors and filenames
        options: Retry configuration (defaults from config)
        screenshot_dir: Override for the artifacts directory

    Raises:
        RetryExhaustedError: Wrapping the last attempt's exception
    """
    options = options or RetryOptions.from_config()

    async def capture(attempt: int, error: BaseException) -> None:
        try:
            path = artifact_path(
                f"{operation_name}-attempt-{attempt}", directory=screenshot_dir
            )
            await page.screenshot(path=str(path))
        except Exception as screenshot_error:
            logger.warning(f"⚠️ Failed to capture screenshot: {screenshot_error}")
            return
        logger.info(f"📸 Screenshot saved: {path}")

    with allure.step(f"Retry page operation: {operation_name}"):
        try:
            return await _run_with_retry(operation, operation_name, options, on_failure=capture)
        except Exception as e:
            raise RetryExhaustedError(operation_name, options.max_attempts, e) from e


def scenario_timeout(seconds: Optional[float] = None) -> Callable[[Scenario], Scenario]:
    """
    Bound a whole async scenario by ``seconds`` (defaults to ``ui.timeouts.test``).

    Usage:
        @pytest.mark.asyncio
        @scenario_timeout()
        async def test_answer(coach_page): ...

    Raises:
        TimeoutError: The scenario did not finish in time
    """
    def decorator(func: Scenario) -> Scenario:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            limit = float(seconds if seconds is not None else get_config("ui.timeouts.test", 60))
            try:
                return await asyncio.wait_for(func(*args, **kwargs), timeout=limit)
            except asyncio.TimeoutError as e:
                logger.error(f"⏰ {func.__name__} exceeded {limit:g}s")
                raise TimeoutError(
                    f"{func.__name__} did not finish within the {limit:g}s scenario timeout"
                ) from e

        return wrapper

    return decorator


__all__ = [
    "RetryOptions",
    "DEFAULT_RETRY_OPTIONS",
    "RetryExhaustedError",
    "compute_delay",
    "retry",
    "retry_validation",
    "retry_page_operation",
    "scenario_timeout",
]
