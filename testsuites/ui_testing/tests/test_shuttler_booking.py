"""
================================================================================
Shuttler Booking UI Tests (Async / Playwright)
================================================================================

Live end-to-end journey against the Shuttler web app:
  login -> route search -> trip booking -> payment options visible

Runs only with SHUTTLER_E2E=1. Credentials come from SHUTTLER_USER_EMAIL and
SHUTTLER_USER_PASSWORD; route and trip from ui_testing/data/shuttler.yaml.

================================================================================
"""

import asyncio

import allure
import pytest

from testsuites.ui_testing.framework.assertion_gate import ElementVisible, await_condition
from testsuites.ui_testing.framework.browser_manager import BrowserManager
from testsuites.ui_testing.framework.errors import FlowError, GateTimeoutError
from testsuites.ui_testing.pages.shuttler_page import PAYMENT_OPTION, ShuttlerPage


@allure.epic("UI Testing")
@allure.feature("Trip Booking")
class TestShuttlerBooking:
    """Shuttler booking UI test suite (async)."""

    @allure.story("Happy Path")
    @allure.title("Book a trip from Festac to Eko and reach payment")
    @allure.severity(allure.severity_level.BLOCKER)
    @pytest.mark.P0
    @pytest.mark.e2e
    @pytest.mark.asyncio(loop_scope="session")
    async def test_book_trip(self, shuttler_page: ShuttlerPage, user, route):
        """Verify a logged-in rider can search a route and open a trip for payment."""
        with allure.step("Login"):
            await shuttler_page.goto()
            await shuttler_page.login(user["email"], user["password"])
            assert "dashboard" in shuttler_page.session.url

        with allure.step("Search route"):
            await shuttler_page.search_route(
                pickup=route["pickup"],
                pickup_exact=route["pickup_exact"],
                destination=route["destination"],
                destination_exact=route["destination_exact"],
                date=route["date"],
            )

        with allure.step("Book trip"):
            await shuttler_page.book_trip(route["trip_id"])

        allure.attach(
            shuttler_page.get_locator_health_report(),
            name="Locator Health",
            attachment_type=allure.attachment_type.TEXT,
        )

    @allure.story("Happy Path")
    @allure.title("Booking journey as one chained call")
    @allure.severity(allure.severity_level.CRITICAL)
    @pytest.mark.P1
    @pytest.mark.e2e
    @pytest.mark.asyncio(loop_scope="session")
    async def test_book_journey_chain(self, shuttler_page: ShuttlerPage, user, route):
        await shuttler_page.book_journey(user, route)

        await await_condition(shuttler_page.session, ElementVisible(PAYMENT_OPTION), timeout=5)
        assert all(result.success for result in shuttler_page.session.history)

    @allure.story("Negative Path")
    @allure.title("Login with a wrong password never reaches the dashboard")
    @allure.severity(allure.severity_level.CRITICAL)
    @pytest.mark.P1
    @pytest.mark.regression
    @pytest.mark.asyncio(loop_scope="session")
    async def test_login_wrong_password(self, shuttler_page: ShuttlerPage, user):
        await shuttler_page.goto()

        with pytest.raises(FlowError) as exc_info:
            await shuttler_page.login(user["email"], user["password"] + "-wrong")

        assert isinstance(exc_info.value.cause, GateTimeoutError)
        assert "dashboard" not in shuttler_page.session.url

    @allure.story("Isolation")
    @allure.title("Concurrent sessions log in independently")
    @allure.severity(allure.severity_level.NORMAL)
    @pytest.mark.P2
    @pytest.mark.e2e
    @pytest.mark.asyncio(loop_scope="session")
    async def test_concurrent_sessions(self, browser_manager: BrowserManager, settings, user):
        """Two sessions run the same login flow at once without interference."""
        sessions = [await browser_manager.new_session(name=f"parallel-{i}") for i in range(2)]
        pages = [ShuttlerPage(session, settings) for session in sessions]

        try:
            await asyncio.gather(*(page.goto() for page in pages))
            await asyncio.gather(*(page.login(user["email"], user["password"]) for page in pages))

            for session in sessions:
                assert "dashboard" in session.url
                assert [r.flow_name for r in session.history] == ["goto", "login"]
        finally:
            for session in sessions:
                await session.close()
