"""
In-memory stand-ins for the slice of the Playwright async API the framework
uses (Page.get_by_*, Locator.count/nth/filter/is_*/evaluate/click/fill).

Elements can appear late, stay hidden, animate, be disabled or be covered by
an overlay, so resolver and actionability timing can be tested without a
browser.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Set

from playwright.async_api import Error as PlaywrightError

from testsuites.ui_testing.framework.element_actions import HIT_TARGET_SCRIPT, STABLE_SCRIPT


def _now() -> float:
    return asyncio.get_running_loop().time()


def _text_matches(actual: Optional[str], expected: str, exact: bool) -> bool:
    if actual is None:
        return False
    if exact:
        return actual == expected
    return expected.lower() in actual.lower()


@dataclass
class FakeElement:
    tag: str = "div"
    role: Optional[str] = None
    name: Optional[str] = None
    text: str = ""
    test_id: Optional[str] = None
    css: Set[str] = field(default_factory=set)
    ancestors: Set[str] = field(default_factory=set)
    attached: bool = True
    visible: bool = True
    enabled: bool = True
    editable: bool = True
    obscured: bool = False
    # Seconds after page creation
    appear_after: float = 0.0
    moving_for: float = 0.0
    on_click: Optional[Callable[["FakePage"], None]] = None
    click_error: Optional[str] = None
    value: str = ""
    clicks: int = 0

    def present(self, page: "FakePage") -> bool:
        return self.attached and _now() >= page.t0 + self.appear_after

    def matches_css(self, selector: str) -> bool:
        return selector == self.tag or selector in self.css


class FakeLocator:
    def __init__(
        self,
        page: "FakePage",
        predicate: Callable[[FakeElement], bool],
        index: Optional[int] = None,
        scope: Optional[str] = None,
        css: Optional[str] = None,
    ):
        self.page = page
        self.predicate = predicate
        self.index = index
        self.scope = scope
        self.css = css

    # -- query -------------------------------------------------------------

    def _all(self) -> List[FakeElement]:
        return [
            e for e in self.page.elements
            if e.present(self.page)
            and self.predicate(e)
            and (self.scope is None or self.scope in e.ancestors)
        ]

    def _element(self) -> Optional[FakeElement]:
        matches = self._all()
        if self.index is None:
            return matches[0] if len(matches) == 1 else None
        try:
            return matches[self.index]
        except IndexError:
            return None

    def _require(self) -> FakeElement:
        element = self._element()
        if element is None:
            raise PlaywrightError("element is not attached to the DOM")
        return element

    async def count(self) -> int:
        self.page.queries += 1
        if self.index is None:
            return len(self._all())
        return 1 if self._element() is not None else 0

    def nth(self, index: int) -> "FakeLocator":
        return FakeLocator(self.page, self.predicate, index, self.scope, self.css)

    @property
    def first(self) -> "FakeLocator":
        return self.nth(0)

    def filter(self, has_text: Optional[str] = None) -> "FakeLocator":
        base = self.predicate

        def predicate(e: FakeElement) -> bool:
            return base(e) and (has_text is None or _text_matches(e.text, has_text, False))

        return FakeLocator(self.page, predicate, self.index, self.scope, self.css)

    # -- scoped queries (page.locator("i").get_by_role(...)) ---------------

    def get_by_role(self, role: str, name: Optional[str] = None, exact: bool = False) -> "FakeLocator":
        return self.page.get_by_role(role, name=name, exact=exact)._scoped(self.css)

    def get_by_text(self, text: str, exact: bool = False) -> "FakeLocator":
        return self.page.get_by_text(text, exact=exact)._scoped(self.css)

    def get_by_test_id(self, test_id: str) -> "FakeLocator":
        return self.page.get_by_test_id(test_id)._scoped(self.css)

    def locator(self, selector: str) -> "FakeLocator":
        return self.page.locator(selector)._scoped(self.css)

    def _scoped(self, scope: Optional[str]) -> "FakeLocator":
        return FakeLocator(self.page, self.predicate, self.index, scope, self.css)

    # -- state -------------------------------------------------------------

    async def is_visible(self) -> bool:
        element = self._element()
        return element is not None and element.visible

    async def is_enabled(self, timeout: Optional[float] = None) -> bool:
        return self._require().enabled

    async def is_editable(self, timeout: Optional[float] = None) -> bool:
        element = self._require()
        return element.enabled and element.editable

    async def evaluate(self, expression: str, arg=None, timeout: Optional[float] = None):
        element = self._require()
        if expression == STABLE_SCRIPT:
            return _now() >= self.page.t0 + element.appear_after + element.moving_for
        if expression == HIT_TARGET_SCRIPT:
            return not element.obscured
        raise NotImplementedError(expression)

    # -- actions -----------------------------------------------------------

    async def click(self, force: bool = False, timeout: Optional[float] = None) -> None:
        element = self._require()
        element.clicks += 1
        self.page.actions.append(("click", element))
        if element.click_error:
            raise PlaywrightError(element.click_error)
        if element.on_click:
            element.on_click(self.page)

    async def fill(self, value: str, force: bool = False, timeout: Optional[float] = None) -> None:
        element = self._require()
        element.value = value
        self.page.actions.append(("fill", element))


class FakePage:
    """Live document stand-in; create it inside a running event loop."""

    def __init__(self, url: str = "about:blank", elements: Optional[List[FakeElement]] = None):
        self.url = url
        self.elements: List[FakeElement] = list(elements or [])
        self.t0 = _now()
        self.actions: list = []
        self.visited: List[str] = []
        self.queries = 0
        self.closed = False

    def add(self, *elements: FakeElement) -> "FakePage":
        self.elements.extend(elements)
        return self

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, lambda e: e.matches_css(selector), css=selector)

    def get_by_test_id(self, test_id: str) -> FakeLocator:
        return FakeLocator(self, lambda e: e.test_id == test_id)

    def get_by_role(self, role: str, name: Optional[str] = None, exact: bool = False) -> FakeLocator:
        def predicate(e: FakeElement) -> bool:
            if e.role != role:
                return False
            return name is None or _text_matches(e.name, name, exact)

        return FakeLocator(self, predicate)

    def get_by_text(self, text: str, exact: bool = False) -> FakeLocator:
        return FakeLocator(self, lambda e: _text_matches(e.text, text, exact))

    async def goto(self, url: str, wait_until: str = "load", timeout: Optional[float] = None) -> None:
        self.url = url
        self.visited.append(url)

    async def screenshot(self, path: Optional[str] = None, full_page: bool = False) -> bytes:
        data = b"\x89PNG fake"
        if path:
            with open(path, "wb") as f:
                f.write(data)
        return data

    async def close(self) -> None:
        self.closed = True


# =============================================================================
# Shuttler document
# =============================================================================

BASE_URL = "https://shuttler.test"


def shuttler_page(email: str, password: str) -> FakePage:
    """
    A fake Shuttler app: logging in with the given credentials redirects to
    the dashboard; searching reveals the trip; booking reveals payment.
    """
    page = FakePage()

    email_input = FakeElement(tag="input", role="textbox", name="Email Address", css={"input[type='email']"})
    password_input = FakeElement(
        tag="input", role="textbox", name="Password Login with OTP", css={"input[type='password']"}
    )
    trip_card = FakeElement(text="FST20006:00 AM", attached=False)
    book_button = FakeElement(tag="button", role="button", name="Book Trip ₦4,500", attached=False)
    pay_label = FakeElement(tag="label", text="Pay with card", attached=False)

    def login(p: FakePage) -> None:
        if email_input.value == email and password_input.value == password:
            p.url = f"{BASE_URL}/dashboard"

    def reveal(element: FakeElement) -> Callable[[FakePage], None]:
        def _reveal(p: FakePage) -> None:
            element.attached = True
        return _reveal

    trip_card.on_click = reveal(book_button)
    book_button.on_click = reveal(pay_label)

    page.add(
        email_input,
        password_input,
        FakeElement(tag="button", test_id=None, css={"[data-test='login-button']"}, text="Login", on_click=login),
        FakeElement(tag="a", text="Login with OTP"),
        FakeElement(tag="input", role="textbox", name="Pick up location"),
        FakeElement(text="Festac Town, Lagos, Nigeria"),
        FakeElement(tag="input", role="textbox", name="Search destination"),
        FakeElement(text="Eko Hotel Roundabout, Lagos, Nigeria"),
        FakeElement(tag="svg", role="img", ancestors={"i"}),
        FakeElement(tag="svg", role="img", name="logo"),
        FakeElement(text="20"),
        FakeElement(tag="button", test_id="find-trips-btn", on_click=reveal(trip_card)),
        trip_card,
        book_button,
        pay_label,
    )
    return page
