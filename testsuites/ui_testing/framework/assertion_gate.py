"""
================================================================================
Assertion Gate
================================================================================

Blocking waits for observable post-conditions. Used after state-changing steps
(e.g. login -> dashboard redirect) so the next step never starts early.

Conditions:
    - UrlMatches: regex search against the page URL
    - ElementVisible: a descriptor resolves right now and is visible

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping, Pattern, Tuple, Union

import allure
from loguru import logger

from .descriptors import ElementDescriptor
from .errors import GateTimeoutError
from .session import Session
from .smart_locator import locate_now
from .wait_helpers import DEFAULT_POLL_INTERVAL, Deadline, poll_until


class Condition:
    """Base class for gate conditions."""

    async def observe(self, session: Session) -> Tuple[bool, Any]:
        """Return (satisfied, what was observed)."""
        raise NotImplementedError

    def bind(self, params: Mapping[str, Any]) -> "Condition":
        return self


@dataclass(frozen=True)
class UrlMatches(Condition):
    """The page URL contains a match for ``pattern`` (``re.search``)."""

    pattern: Union[str, Pattern[str]]

    @property
    def regex(self) -> Pattern[str]:
        return self.pattern if isinstance(self.pattern, re.Pattern) else re.compile(self.pattern)

    async def observe(self, session: Session) -> Tuple[bool, Any]:
        url = session.url
        return self.regex.search(url or "") is not None, url

    def __str__(self) -> str:
        return f"url ~ /{self.regex.pattern}/"


@dataclass(frozen=True)
class ElementVisible(Condition):
    """The described element exists and is visible."""

    descriptor: ElementDescriptor

    async def observe(self, session: Session) -> Tuple[bool, Any]:
        element = await locate_now(session, self.descriptor)
        if element is None:
            return False, "not found"
        visible = await element.locator.is_visible()
        return visible, "visible" if visible else "hidden"

    def bind(self, params: Mapping[str, Any]) -> "ElementVisible":
        return ElementVisible(self.descriptor.bind(params))

    def __str__(self) -> str:
        return f"visible({self.descriptor.display_name})"


async def await_condition(
    session: Session,
    condition: Condition,
    timeout: float,
    interval: float = DEFAULT_POLL_INTERVAL,
) -> None:
    """
    Block until ``condition`` holds on ``session``.

    Args:
        session: Session to observe
        condition: Post-condition to wait for
        timeout: Budget in seconds
        interval: Fixed poll interval in seconds

    Raises:
        GateTimeoutError: Condition never observed within the timeout
    """
    session.ensure_active()
    deadline = Deadline(timeout)

    async def check() -> Tuple[bool, Any]:
        return await condition.observe(session)

    with allure.step(f"Wait for {condition}"):
        satisfied, last_observed = await poll_until(check, deadline, interval, description=str(condition))
        if not satisfied:
            error = GateTimeoutError(condition, last_observed, timeout)
            logger.error(f"❌ [{session.name}] {error}")
            raise error
        logger.debug(f"✅ [{session.name}] {condition} satisfied ({last_observed!r})")


__all__ = [
    "Condition",
    "ElementVisible",
    "UrlMatches",
    "await_condition",
]
