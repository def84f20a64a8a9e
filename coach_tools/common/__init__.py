"""
================================================================================
Coach Tools Common Utilities
================================================================================

This module provides shared utilities, configuration management, and logging
setup for the Decision Coach UI suite.

Exports:
    - ConfigLoader: Singleton configuration manager
    - get_config: Convenience function to get configuration values
    - init_logger: Function to initialize loguru logger with standard settings
    - artifacts_dir / artifact_path: Where screenshots and dumps are written
    - sanitize_name: Turn an operation/scenario name into a file-safe slug

Usage:
    from coach_tools.common import get_config, init_logger

    init_logger()
    base_url = get_config("ui.base_url")

================================================================================
"""

import os
import re
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from .config_loader import ConfigLoader, ConfigurationError, get_config, is_ci
from .errors import CoachTestError


# ============================================================
# Logging Setup
# ============================================================

_logger_initialized = False


def init_logger(
    level: str = None,
    format_string: str = None,
    log_file: str = None,
    force: bool = False,
) -> None:
    """
    Initializes the loguru logger with standard settings.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to config value.
        format_string: Log format string. Uses default if not provided.
        log_file: Optional file path to write logs to.
        force: Re-initialize even if already configured.

    Example:
        init_logger()  # Use defaults
        init_logger(level="DEBUG", log_file="artifacts/ui-tests.log")
    """
    global _logger_initialized

    if _logger_initialized and not force:
        return

    # Remove default handler
    logger.remove()

    level = (level or get_config("logging.level", "INFO")).upper()
    format_string = format_string or get_config("logging.format")

    # Add console handler
    logger.add(
        sys.stderr,
        format=format_string,
        level=level,
        colorize=True,
    )

    # Add file handler if specified
    log_file = log_file or get_config("logging.file")
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        logger.add(
            log_file,
            format=format_string,
            level=level,
            rotation=get_config("logging.rotation", "10 MB"),
            retention=get_config("logging.retention", "7 days"),
        )

    _logger_initialized = True
    logger.debug("Logger initialized successfully")


# ============================================================
# Artifact Helpers
# ============================================================

def ensure_directory(path) -> Path:
    """
    Ensures a directory exists, creating it if necessary.

    Returns:
        The path (for chaining)
    """
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def sanitize_name(name: str) -> str:
    """
    Convert an operation or scenario name into a file-safe slug.

    Example:
        >>> sanitize_name("Ask button click")
        'ask-button-click'
    """
    slug = re.sub(r"\s+", "-", name.strip().lower())
    slug = re.sub(r"[^a-z0-9._-]", "", slug)
    return slug or "unnamed"


def artifacts_dir() -> Path:
    """Return (and create) the artifacts directory from configuration."""
    return ensure_directory(get_config("artifacts.dir", "artifacts"))


def artifact_path(name: str, suffix: str = ".png", directory: Optional[Path] = None) -> Path:
    """Build an artifact file path from a human-readable name."""
    base = ensure_directory(directory) if directory else artifacts_dir()
    return base / f"{sanitize_name(name)}{suffix}"


# Export public API
__all__ = [
    "CoachTestError",
    "ConfigLoader",
    "ConfigurationError",
    "get_config",
    "is_ci",
    "init_logger",
    "ensure_directory",
    "sanitize_name",
    "artifacts_dir",
    "artifact_path",
]
