"""
================================================================================
UI Testing Pytest Configuration
================================================================================

This module configures pytest for live UI tests, providing fixtures for
browser management, sessions, page objects and test data.

Key Features:
- One browser per test run, one isolated Session per test
- Page Object fixtures
- Fixture data with environment overrides (credentials never committed)
- Screenshot capture on failure

The browser lives on the session-scoped event loop, so every live test runs
with ``@pytest.mark.asyncio(loop_scope="session")``.

================================================================================
"""

import os
from typing import AsyncGenerator

import allure
import pytest
import pytest_asyncio
from loguru import logger
from playwright.async_api import Error as PlaywrightError

from testsuites.ui_testing.framework.browser_manager import BrowserManager
from testsuites.ui_testing.framework.config_loader import FrameworkSettings
from testsuites.ui_testing.framework.fixture_data import FixtureData, load_fixture_data
from testsuites.ui_testing.framework.session import Session, SessionState
from testsuites.ui_testing.pages.shuttler_page import ShuttlerPage


E2E_ENABLED = os.environ.get("SHUTTLER_E2E") == "1"


# ================================================================================
# Pytest Configuration
# ================================================================================

def pytest_collection_modifyitems(config, items):
    """Skip live browser tests unless SHUTTLER_E2E=1."""
    if E2E_ENABLED:
        return
    skip_live = pytest.mark.skip(reason="live UI tests need SHUTTLER_E2E=1")
    for item in items:
        if "ui_testing" in str(item.fspath):
            item.add_marker(skip_live)


# ================================================================================
# Browser Fixtures
# ================================================================================

@pytest.fixture(scope="session")
def settings() -> FrameworkSettings:
    """Framework settings loaded once from config.yaml + environment."""
    return FrameworkSettings.from_config()


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def browser_manager(settings: FrameworkSettings) -> AsyncGenerator[BrowserManager, None]:
    """
    Session-scoped browser manager fixture.

    Provides a single browser for all tests in the run, reducing browser
    launch overhead. Each test still gets its own isolated Session.
    """
    async with BrowserManager(settings) as manager:
        yield manager


@pytest_asyncio.fixture(loop_scope="session")
async def session(browser_manager: BrowserManager, request) -> AsyncGenerator[Session, None]:
    """
    Function-scoped Session fixture.

    Creates a fresh browser context per test, providing isolation. When the
    test failed and the page is still open, a screenshot is attached to the
    Allure report before the context is closed.
    """
    session = await browser_manager.new_session(name=request.node.name)
    yield session

    report = getattr(request.node, "rep_call", None)
    if report is not None and report.failed and session.state is not SessionState.CLOSED:
        await _attach_failure_screenshot(session)
    await session.close()


# ================================================================================
# Page Object Fixtures
# ================================================================================

@pytest.fixture
def shuttler_page(session: Session, settings: FrameworkSettings) -> ShuttlerPage:
    """Provides ShuttlerPage bound to this test's Session."""
    return ShuttlerPage(session, settings)


# ================================================================================
# Test Data Fixtures
# ================================================================================

@pytest.fixture(scope="session")
def test_data() -> FixtureData:
    """Named fixture records (user, route) from ui_testing/data/shuttler.yaml."""
    return load_fixture_data()


@pytest.fixture
def user(test_data: FixtureData):
    """Login credentials; skips when they are not provided via environment."""
    record = test_data["user"]
    if not record.get("email") or not record.get("password"):
        pytest.skip("Set SHUTTLER_USER_EMAIL and SHUTTLER_USER_PASSWORD")
    return record


@pytest.fixture
def route(test_data: FixtureData):
    return test_data["route"]


# ================================================================================
# Test Lifecycle Hooks
# ================================================================================

@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Keep each phase report on the item so fixtures can see the outcome."""
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)


async def _attach_failure_screenshot(session: Session) -> None:
    try:
        screenshot = await session.page.screenshot(full_page=True)
    except PlaywrightError as e:
        # Log but don't fail teardown if screenshot capture fails
        logger.warning(f"Failed to capture screenshot on failure: {e}")
        return
    allure.attach(
        screenshot,
        name="failure_screenshot",
        attachment_type=allure.attachment_type.PNG,
    )
