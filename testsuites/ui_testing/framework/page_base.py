"""
================================================================================
Base Page Object
================================================================================

Foundation class for Page Object Model implementation.

Provides:
    - Navigation relative to the configured base URL
    - Flow execution (single or chained) with configured timeouts
    - Ad-hoc descriptor interactions for one-off elements
    - Screenshot and failure capture for Allure

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import allure
from loguru import logger
from playwright.async_api import Error as PlaywrightError

from .config_loader import FrameworkSettings
from .descriptors import ElementDescriptor
from .element_actions import Action, act
from .errors import FlowError
from .flow import BoundFlow, FlowStep, chain, run_flow
from .session import Session, SessionState
from .smart_locator import SmartLocator


# Default output directory for screenshots
SCREENSHOT_DIR = Path(__file__).parent.parent / "screenshots"


class BasePage:
    """
    Base class for all page objects.

    Business actions are declared as FlowStep data in the page module and run
    through ``run()``, which returns the page object for chaining.

    Usage:
        class LoginPage(BasePage):
            URL_PATH = "/login"

            async def login(self, email: str, password: str) -> "LoginPage":
                # Step parameters must not include the password
                with allure.step(f"Login (email={email})"):
                    return await self.run(LOGIN, email=email, password=password)
    """

    # Override in subclasses
    URL_PATH: str = "/"

    def __init__(
        self,
        session: Session,
        settings: Optional[FrameworkSettings] = None,
    ):
        """
        Initialize page object.

        Args:
            session: Session this page object drives
            settings: Framework settings (loaded from config if omitted)
        """
        self.session = session
        self.settings = settings or FrameworkSettings.from_config()
        self.base_url = self.settings.base_url.rstrip("/")
        self.smart = SmartLocator(
            session,
            timeout=self.settings.timeouts.resolve,
            interval=self.settings.timeouts.interval,
        )

    @property
    def page(self):
        return self.session.page

    @property
    def url(self) -> str:
        """Get full page URL."""
        return f"{self.base_url}{self.URL_PATH}"

    async def navigate(self, wait_for: str = "load") -> "BasePage":
        """Navigate to this page."""
        await self.session.goto(self.url, wait_until=wait_for)
        return self

    async def run(self, flow: FlowStep, **params: Any) -> "BasePage":
        """
        Run a flow on this page's session with configured timeouts.

        ``base_url`` is always available as a flow parameter.

        Raises:
            FlowError: A step failed (failure details attached to Allure)
        """
        params.setdefault("base_url", self.base_url)
        try:
            await run_flow(
                self.session,
                flow,
                params,
                timeouts=self.settings.timeouts,
                timeout=self.settings.flow_timeout,
            )
        except FlowError as e:
            await self.capture_failure(f"{flow.name}_step{e.step_index}")
            raise
        return self

    async def chain(self, *flows: BoundFlow) -> "BasePage":
        """
        Run bound flows left to right with the same budgets as ``run()``.

        Raises:
            FlowError: The first failing flow (failure details attached to Allure)
        """
        bound = [
            BoundFlow(item.flow, {"base_url": self.base_url, **item.params})
            for item in flows
        ]
        try:
            await chain(
                self.session,
                *bound,
                timeouts=self.settings.timeouts,
                timeout=self.settings.flow_timeout,
            )
        except FlowError as e:
            await self.capture_failure(f"{e.flow_name}_step{e.step_index}")
            raise
        return self

    # =========================================================================
    # Ad-hoc Element Interactions
    # =========================================================================

    async def click(self, descriptor: ElementDescriptor) -> None:
        """Click a one-off element outside any flow."""
        element = await self.smart.locate(descriptor)
        await act(element, Action.CLICK, timeout=self.settings.timeouts.action,
                  interval=self.settings.timeouts.interval)

    async def fill(self, descriptor: ElementDescriptor, value: str) -> None:
        """Fill a one-off input outside any flow."""
        element = await self.smart.locate(descriptor)
        await act(element, Action.FILL, value, timeout=self.settings.timeouts.action,
                  interval=self.settings.timeouts.interval)

    async def is_visible(self, descriptor: ElementDescriptor, timeout: float = 2.0) -> bool:
        return await self.smart.is_visible(descriptor, timeout)

    # =========================================================================
    # Screenshot and Debug Utilities
    # =========================================================================

    async def screenshot(
        self,
        name: str,
        full_page: bool = False,
        attach_to_allure: bool = True,
    ) -> Path:
        """
        Take screenshot and optionally attach to Allure.

        Returns:
            Path to saved screenshot
        """
        SCREENSHOT_DIR.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = SCREENSHOT_DIR / f"{name}_{timestamp}.png"

        await self.page.screenshot(path=str(filepath), full_page=full_page)

        if attach_to_allure:
            allure.attach.file(
                str(filepath),
                name=name,
                attachment_type=allure.attachment_type.PNG,
            )

        logger.debug(f"Screenshot saved: {filepath}")
        return filepath

    async def capture_failure(self, test_name: str) -> None:
        """
        Capture debugging information on flow failure.

        Attaches the current URL and the locator health report; adds a
        screenshot while the document context is still open.
        """
        with allure.step("Capture failure details"):
            allure.attach(
                self.session.url or "",
                name="Current URL",
                attachment_type=allure.attachment_type.TEXT,
            )
            allure.attach(
                self.get_locator_health_report(),
                name="Locator Health",
                attachment_type=allure.attachment_type.TEXT,
            )
            if self.session.state is SessionState.CLOSED:
                return
            try:
                await self.screenshot(f"failure_{test_name}")
            except PlaywrightError as e:
                # Keep the flow failure as the raised error
                logger.warning(f"Failed to capture screenshot on failure: {e}")

    def get_locator_health_report(self) -> str:
        """Get smart locator health report."""
        return self.smart.get_health_report()


__all__ = [
    "BasePage",
    "PageBase",
]

# Backward-compatible alias (many Page Objects prefer PageBase naming)
PageBase = BasePage
