"""
================================================================================
Browser Manager
================================================================================

Browser lifecycle management for UI automation.

Features:
    - Single browser instance for performance
    - One isolated browser context per Session (parallel-safe)
    - Permissions (e.g. geolocation) granted before a Session exists
    - Browser configuration from FrameworkSettings

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from loguru import logger
from playwright.async_api import (
    async_playwright,
    Browser,
    Playwright,
)

from .config_loader import FrameworkSettings
from .session import Session


class BrowserManager:
    """
    Launches one browser and hands out isolated Sessions.

    Usage:
        async with BrowserManager() as manager:
            session = await manager.new_session()
            await session.goto("https://example.com")
    """

    # Default browser launch options
    DEFAULT_LAUNCH_OPTIONS: Dict[str, Any] = {
        "args": [
            "--ignore-certificate-errors",
        ],
    }

    def __init__(self, settings: Optional[FrameworkSettings] = None):
        """
        Args:
            settings: Browser and timeout settings (loaded from config if omitted)
        """
        self.settings = settings or FrameworkSettings.from_config()

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._sessions: List[Session] = []

    async def __aenter__(self) -> "BrowserManager":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def start(self) -> None:
        """Start Playwright and launch the configured browser."""
        self._playwright = await async_playwright().start()

        if self.settings.browser_type == "firefox":
            browser_launcher = self._playwright.firefox
        elif self.settings.browser_type == "webkit":
            browser_launcher = self._playwright.webkit
        else:
            browser_launcher = self._playwright.chromium

        launch_options = {
            **self.DEFAULT_LAUNCH_OPTIONS,
            "headless": self.settings.headless,
        }

        self._browser = await browser_launcher.launch(**launch_options)
        logger.debug(
            f"Browser started: {self.settings.browser_type} "
            f"(headless={self.settings.headless})"
        )

    async def close(self) -> None:
        """Close every session, then the browser and Playwright."""
        for session in self._sessions:
            await session.close()
        self._sessions.clear()

        if self._browser:
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

        logger.debug("Browser closed")

    def context_options(self, **overrides: Any) -> Dict[str, Any]:
        """Context options derived from settings, with per-call overrides."""
        options: Dict[str, Any] = {
            "viewport": self.settings.viewport,
            "ignore_https_errors": True,
            "permissions": list(self.settings.permissions),
        }
        if self.settings.geolocation:
            options["geolocation"] = self.settings.geolocation
        options.update(overrides)
        return options

    async def new_session(self, name: Optional[str] = None, **context_options: Any) -> Session:
        """
        Create a Session backed by a fresh browser context.

        Each context is isolated - separate cookies, storage and permissions.

        Args:
            name: Optional session name for logs
            **context_options: Overrides for the browser context

        Returns:
            New Session owning its context
        """
        if not self._browser:
            raise RuntimeError("Browser not started. Call start() first.")

        context = await self._browser.new_context(**self.context_options(**context_options))
        page = await context.new_page()
        session = Session(page, context, name=name)
        self._sessions.append(session)
        logger.debug(f"New session: {session.name}")
        return session

    @property
    def browser(self) -> Optional[Browser]:
        return self._browser


__all__ = [
    "BrowserManager",
]
