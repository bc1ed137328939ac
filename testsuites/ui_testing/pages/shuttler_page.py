"""
================================================================================
Shuttler Page Object (Async / Playwright)
================================================================================

Login -> route search -> trip booking on the Shuttler web app.

Design goals:
  - Elements declared once as ElementDescriptors (primary + fallbacks)
  - Business actions declared as FlowStep data, shared by every session
  - Credentials, route and trip are injected parameters, never literals

================================================================================
"""

from __future__ import annotations

from typing import Mapping

import allure

from testsuites.ui_testing.framework.assertion_gate import ElementVisible, UrlMatches
from testsuites.ui_testing.framework.descriptors import ElementDescriptor
from testsuites.ui_testing.framework.element_actions import Action
from testsuites.ui_testing.framework.flow import (
    FlowStep,
    Interaction,
    Navigate,
)
from testsuites.ui_testing.framework.page_base import PageBase


# ================================================================================
# Elements
# ================================================================================

EMAIL_INPUT = ElementDescriptor.of(
    role="textbox",
    name="Email Address",
    css=["input[type='email']", "input[name='email']"],
    label="email_input",
)
PASSWORD_INPUT = ElementDescriptor.of(
    role="textbox",
    name="Password Login with OTP",
    css=["input[type='password']"],
    label="password_input",
)
LOGIN_BUTTON = ElementDescriptor.of(
    # The app marks this button with data-test, not data-testid
    css=["[data-test='login-button']", "button[type='submit']"],
    label="login_button",
)

PICKUP_INPUT = ElementDescriptor.of(
    role="textbox",
    name="Pick up location",
    label="pickup_input",
)
PICKUP_SUGGESTION = ElementDescriptor.of(
    text="{pickup_exact}",
    exact=True,
    label="pickup_suggestion",
)
DESTINATION_INPUT = ElementDescriptor.of(
    role="textbox",
    name="Search destination",
    label="destination_input",
)
DESTINATION_SUGGESTION = ElementDescriptor.of(
    text="{destination_exact}",
    exact=True,
    label="destination_suggestion",
)
DATE_PICKER_ICON = ElementDescriptor.of(
    role="img",
    parent="i",
    label="date_picker_icon",
)
DATE_OPTION = ElementDescriptor.of(
    text="{date}",
    exact=True,
    label="date_option",
)
FIND_TRIPS_BUTTON = ElementDescriptor.of(
    test_id="find-trips-btn",
    role="button",
    name="Find trips",
    label="find_trips_button",
)

TRIP_CARD = ElementDescriptor.of(
    text="{trip_id}",
    label="trip_card",
)
BOOK_TRIP_BUTTON = ElementDescriptor.of(
    role="button",
    name="Book Trip",
    label="book_trip_button",
)
PAYMENT_OPTION = ElementDescriptor.of(
    css=["label"],
    has_text="pay with",
    label="payment_option",
)


# ================================================================================
# Flows
# ================================================================================

GOTO_LOGIN = FlowStep(
    name="goto",
    steps=(Navigate("{base_url}/auth/login"),),
)

LOGIN = FlowStep(
    name="login",
    steps=(
        Interaction(EMAIL_INPUT, Action.FILL, "{email}"),
        Interaction(PASSWORD_INPUT, Action.FILL, "{password}"),
        Interaction(LOGIN_BUTTON, Action.CLICK),
    ),
    post_condition=UrlMatches(r".*dashboard.*"),
    post_condition_timeout=30.0,
)

SEARCH_ROUTE = FlowStep(
    name="search_route",
    steps=(
        Interaction(PICKUP_INPUT, Action.FILL, "{pickup}"),
        Interaction(PICKUP_SUGGESTION, Action.CLICK),
        Interaction(DESTINATION_INPUT, Action.FILL, "{destination}"),
        Interaction(DESTINATION_SUGGESTION, Action.CLICK),
        Interaction(DATE_PICKER_ICON, Action.CLICK),
        Interaction(DATE_OPTION, Action.CLICK),
        Interaction(FIND_TRIPS_BUTTON, Action.CLICK),
    ),
)

BOOK_TRIP = FlowStep(
    name="book_trip",
    steps=(
        Interaction(TRIP_CARD, Action.CLICK),
        Interaction(BOOK_TRIP_BUTTON, Action.CLICK),
    ),
    post_condition=ElementVisible(PAYMENT_OPTION),
)


class ShuttlerPage(PageBase):
    """Shuttler booking page object (async)."""

    URL_PATH = "/auth/login"

    @allure.step("Open login page")
    async def goto(self) -> "ShuttlerPage":
        await self.run(GOTO_LOGIN)
        return self

    async def login(self, email: str, password: str) -> "ShuttlerPage":
        """Log in and wait for the dashboard redirect."""
        # Step parameters must not include the password
        with allure.step(f"Login (email={email})"):
            await self.run(LOGIN, email=email, password=password)
        return self

    @allure.step("Search route {pickup} -> {destination}")
    async def search_route(
        self,
        pickup: str,
        pickup_exact: str,
        destination: str,
        destination_exact: str,
        date: str,
    ) -> "ShuttlerPage":
        """
        Search for a route.

        Args:
            pickup: Pickup location search text
            pickup_exact: Exact pickup suggestion to select
            destination: Destination search text
            destination_exact: Exact destination suggestion to select
            date: Day of month to select
        """
        await self.run(
            SEARCH_ROUTE,
            pickup=pickup,
            pickup_exact=pickup_exact,
            destination=destination,
            destination_exact=destination_exact,
            date=date,
        )
        return self

    @allure.step("Book trip {trip_id}")
    async def book_trip(self, trip_id: str) -> "ShuttlerPage":
        """Open a trip and proceed to payment."""
        await self.run(BOOK_TRIP, trip_id=trip_id)
        return self

    async def book_journey(self, user: Mapping[str, str], route: Mapping[str, str]) -> "ShuttlerPage":
        """
        goto |> login |> search_route |> book_trip as one chain.

        Args:
            user: Record with ``email`` and ``password``
            route: Record with the search_route fields plus ``trip_id``
        """
        search_params = {key: value for key, value in route.items() if key != "trip_id"}
        with allure.step(f"Booking journey (email={user['email']}, trip={route['trip_id']})"):
            await self.chain(
                GOTO_LOGIN.bind(),
                LOGIN.bind(email=user["email"], password=user["password"]),
                SEARCH_ROUTE.bind(**search_params),
                BOOK_TRIP.bind(trip_id=route["trip_id"]),
            )
        return self


__all__ = [
    "ShuttlerPage",
    "GOTO_LOGIN",
    "LOGIN",
    "SEARCH_ROUTE",
    "BOOK_TRIP",
]
