"""
================================================================================
Configuration Loader
================================================================================

YAML-based configuration management with environment variable override support.

Features:
    - Hierarchical YAML configuration loading
    - Environment variable override (UI_BASE_URL overrides ui.base_url)
    - Dot notation path access
    - Default value support
    - Typed FrameworkSettings for timeouts, polling and browser options

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from loguru import logger

from .flow import FlowTimeouts


# Default configuration file path
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "config.yaml"


class ConfigurationError(Exception):
    """Raised when configuration loading or access fails."""
    pass


class ConfigLoader:
    """
    Configuration loader with YAML and environment variable support.

    Configuration hierarchy (highest to lowest priority):
        1. Environment variables (UI_BASE_URL)
        2. YAML configuration file
        3. Default values

    Usage:
        >>> config = ConfigLoader()
        >>> config.get("ui.base_url", "http://localhost:3000")
        'https://my.shuttlers.co'

    Environment Variable Mapping:
        - ui.base_url -> UI_BASE_URL
        - ui.timeouts.gate -> UI_TIMEOUTS_GATE
        - browser.headless -> BROWSER_HEADLESS
    """

    _instance: Optional["ConfigLoader"] = None
    _config: Dict[str, Any] = {}

    def __new__(cls, config_path: Optional[Path] = None) -> "ConfigLoader":
        """Singleton: configuration is loaded once per process."""
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

        self._config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self._load_config()
        self._initialized = True

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        if not self._config_path.exists():
            logger.warning(
                f"Configuration file not found: {self._config_path}. "
                f"Using defaults and environment variables only."
            )
            self._config = {}
            return

        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                self._config = yaml.safe_load(f) or {}
            logger.debug(f"Loaded configuration from: {self._config_path}")
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in configuration file: {e}"
            ) from e

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation path.

        First checks environment variables, then YAML config, then default.

        Args:
            key: Dot-notation path (e.g., "ui.base_url")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        env_key = key.upper().replace(".", "_")
        env_value = os.environ.get(env_key)
        if env_value is not None:
            return self._convert_type(env_value, default)

        value = self._config
        for part in key.split("."):
            if isinstance(value, dict):
                value = value.get(part)
            else:
                value = None

            if value is None:
                return default

        return value

    def _convert_type(self, value: str, reference: Any) -> Any:
        """Convert an environment string to match the default's type."""
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
        if isinstance(reference, list):
            return [item.strip() for item in value.split(",") if item.strip()]

        return value

    @classmethod
    def reset(cls) -> None:
        """Reset singleton instance (tests reload with different settings)."""
        cls._instance = None
        cls._config = {}


@dataclass
class FrameworkSettings:
    """
    Typed view of the UI configuration.

    Attributes:
        base_url: Application base URL
        timeouts: Per-operation budgets for flows
        flow_timeout: Optional overall budget per flow (seconds)
        browser_type: 'chromium', 'firefox' or 'webkit'
        headless: Run the browser headless
        viewport: Viewport width/height
        permissions: Permissions granted to every new context
        geolocation: Optional fixed geolocation for every new context
    """
    base_url: str = "http://localhost:3000"
    timeouts: FlowTimeouts = field(default_factory=FlowTimeouts)
    flow_timeout: Optional[float] = None
    browser_type: str = "chromium"
    headless: bool = True
    viewport: Dict[str, int] = field(default_factory=lambda: {"width": 1920, "height": 1080})
    permissions: List[str] = field(default_factory=list)
    geolocation: Optional[Dict[str, float]] = None

    @classmethod
    def from_config(cls, config: Optional[ConfigLoader] = None) -> "FrameworkSettings":
        config = config or ConfigLoader()
        defaults = cls()
        flow_timeout = config.get("ui.timeouts.flow", 0.0)
        return cls(
            base_url=str(config.get("ui.base_url", defaults.base_url)).rstrip("/"),
            timeouts=FlowTimeouts(
                resolve=float(config.get("ui.timeouts.resolve", defaults.timeouts.resolve)),
                action=float(config.get("ui.timeouts.action", defaults.timeouts.action)),
                gate=float(config.get("ui.timeouts.gate", defaults.timeouts.gate)),
                interval=float(config.get("ui.timeouts.poll_interval", defaults.timeouts.interval)),
            ),
            flow_timeout=float(flow_timeout) or None,
            browser_type=config.get("browser.type", defaults.browser_type),
            headless=config.get("browser.headless", defaults.headless),
            viewport=config.get("browser.viewport", defaults.viewport),
            permissions=config.get("browser.permissions", defaults.permissions),
            geolocation=config.get("browser.geolocation", defaults.geolocation),
        )


__all__ = [
    "ConfigLoader",
    "ConfigurationError",
    "FrameworkSettings",
]
