"""
================================================================================
Configuration Loader
================================================================================

YAML-based configuration management with environment variable override support.

Features:
    - Built-in defaults for every policy constant used by the validators
    - YAML overlay from config/config.yaml
    - Environment variable override (UI_BASE_URL overrides ui.base_url)
    - Dot notation path access with type coercion for env values

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from loguru import logger

from .errors import CoachTestError


# Default configuration file path
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "config.yaml"

# Values used when neither YAML nor environment provide a key.
DEFAULTS: Dict[str, Any] = {
    "ci": False,
    "ui": {
        "base_url": "http://localhost:3000",
        "browser": "chromium",
        "headless": True,
        "slow_mo": 0,
        "viewport": {"width": 1280, "height": 720},
        "timeouts": {
            "page_load": 30000,
            "element": 10000,
            "response": 30000,
            "test": 60,
        },
    },
    "retry": {
        "max_attempts": 3,
        "base_delay": 0.5,
        "max_delay": 2.0,
        "backoff_multiplier": 2.0,
    },
    "readiness": {
        "attempts": 3,
        "retry_delay": 1.0,
        "poll_interval": 2.0,
        "timeout": 30.0,
    },
    "validation": {
        "min_section_length": 50,
        "min_tooltip_length": 15,
        "min_term_length": 2,
        "min_response_length": 500,
    },
    "layout": {
        "tolerance_px": 5,
        "mobile_breakpoint": 768,
        "mobile_max_change": 5,
        "desktop_max_change": 2,
    },
    "artifacts": {"dir": "artifacts"},
    "logging": {
        "level": "INFO",
        "format": (
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        ),
        "file": None,
    },
    "ci_settings": {"reruns": 2, "workers": 1},
}


class ConfigurationError(CoachTestError):
    """Raised when configuration loading or access fails."""
    pass


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = copy.deepcopy(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class ConfigLoader:
    """
    Configuration loader with YAML and environment variable support.

    Configuration hierarchy (highest to lowest priority):
        1. Environment variables (UI_BASE_URL)
        2. YAML configuration file
        3. Built-in DEFAULTS
        4. Default passed to get()

    Usage:
        >>> config = ConfigLoader()
        >>> config.get("ui.base_url")
        'http://localhost:3000'

        >>> config.get("layout.tolerance_px")
        5

    Environment Variable Mapping:
        - ui.base_url -> UI_BASE_URL
        - retry.max_attempts -> RETRY_MAX_ATTEMPTS
        - ci -> CI
    """

    _instance: Optional["ConfigLoader"] = None
    _config: Dict[str, Any] = {}

    def __new__(cls, config_path: Optional[Path] = None) -> "ConfigLoader":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[Path] = None) -> None:
        """
        Initialize configuration loader.

        Args:
            config_path: Path to YAML configuration file.
                        Uses DEFAULT_CONFIG_PATH if not specified.
        """
        if getattr(self, "_initialized", False):
            return

        self._config_path = Path(config_path or DEFAULT_CONFIG_PATH)
        self._load_config()
        self._initialized = True

    def _load_config(self) -> None:
        """Load configuration from YAML file on top of DEFAULTS."""
        if not self._config_path.exists():
            logger.debug(
                f"Configuration file not found: {self._config_path}. "
                f"Using defaults and environment variables only."
            )
            self._config = copy.deepcopy(DEFAULTS)
            return

        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                file_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in configuration file: {e}"
            ) from e

        if not isinstance(file_config, dict):
            raise ConfigurationError(
                f"Configuration root must be a mapping: {self._config_path}"
            )

        self._config = _deep_merge(DEFAULTS, file_config)
        logger.debug(f"Loaded configuration from: {self._config_path}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation path.

        First checks environment variables, then YAML/defaults, then default.
        Environment values are coerced to the type of the configured value.

        Args:
            key: Dot-notation path (e.g., "ui.base_url")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        value: Any = self._config
        for part in key.split("."):
            if isinstance(value, dict):
                value = value.get(part)
            else:
                value = None

            if value is None:
                break

        if value is None:
            value = default

        env_key = key.upper().replace(".", "_")
        env_value = os.environ.get(env_key)
        if env_value is not None:
            return self._convert_type(env_value, value)

        return value

    def get_section(self, section: str) -> Dict[str, Any]:
        """Get entire configuration section (empty dict if absent)."""
        return copy.deepcopy(self._config.get(section, {}))

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value at runtime (e.g. from CLI options)."""
        parts = key.split(".")
        current = self._config
        for part in parts[:-1]:
            current = current.setdefault(part, {})
        current[parts[-1]] = value

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()
        logger.info(f"Configuration reloaded from: {self._config_path}")

    def _convert_type(self, value: str, reference: Any) -> Any:
        """
        Convert string value to match reference type.

        Used for environment variables which are always strings.
        """
        if reference is None:
            return value

        if isinstance(reference, bool):
            return value.lower() in ("true", "1", "yes", "on")
        if isinstance(reference, int):
            try:
                return int(value)
            except ValueError:
                return value
        if isinstance(reference, float):
            try:
                return float(value)
            except ValueError:
                return value

        return value

    @classmethod
    def reset(cls) -> None:
        """
        Reset singleton instance.

        Useful for testing when configuration needs to be reloaded
        with different settings.
        """
        cls._instance = None
        cls._config = {}


def get_config(key: str, default: Any = None) -> Any:
    """
    Convenience function to get a configuration value.

    Example:
        tolerance = get_config("layout.tolerance_px", 5)
    """
    return ConfigLoader().get(key, default)


def is_ci() -> bool:
    """Return True when running under a CI system (``CI`` env var)."""
    return bool(get_config("ci", False))


__all__ = [
    "ConfigLoader",
    "ConfigurationError",
    "DEFAULTS",
    "get_config",
    "is_ci",
]
