"""
================================================================================
Smart Locator
================================================================================

Locator resolution with prioritised fallback strategies:
    - Strategies tried in fixed priority (testid -> role -> text -> css)
    - Every poll round re-queries the live document, so late-rendering
      elements are picked up as soon as they appear
    - The highest-priority strategy with a usable match wins
    - Fallback usage recorded per session for maintenance insights

Usage:
    >>> element = await resolve(session, ElementDescriptor.of(test_id="login-button"), timeout=5)
    >>> await element.locator.click()

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Tuple, Union

from loguru import logger
from playwright.async_api import Locator, Page

from .descriptors import ElementDescriptor, Strategy, StrategyKind
from .errors import ResolutionError, ResolutionErrorKind
from .session import Session
from .wait_helpers import DEFAULT_POLL_INTERVAL, Deadline, poll_until


@dataclass
class LocatorHealth:
    """
    Tracks locator health for one element.

    Attributes:
        element_name: Human-readable element name
        primary_selector: The preferred strategy
        used_fallback: Whether a fallback was used
        fallback_selector: The fallback strategy used (if any)
    """
    element_name: str
    primary_selector: str
    used_fallback: bool = False
    fallback_selector: Optional[str] = None


@dataclass
class ResolvedElement:
    """A live element handle plus the strategy that found it."""
    locator: Locator
    descriptor: ElementDescriptor
    strategy: Strategy
    match_count: int

    @property
    def name(self) -> str:
        return self.descriptor.display_name


@dataclass
class _Observation:
    """What one poll round saw."""
    tried: List[str]
    last_attempted: Optional[Strategy] = None
    any_match: bool = False
    ambiguous: bool = False


def build_locator(page: Page, descriptor: ElementDescriptor, strategy: Strategy) -> Locator:
    """Translate one strategy into a Playwright locator rooted at the descriptor scope."""
    root: Union[Page, Locator] = page.locator(descriptor.parent) if descriptor.parent else page

    if strategy.kind is StrategyKind.TEST_ID:
        locator = root.get_by_test_id(strategy.value)
    elif strategy.kind is StrategyKind.ROLE:
        locator = root.get_by_role(strategy.value, name=strategy.name, exact=descriptor.exact)
    elif strategy.kind is StrategyKind.TEXT:
        locator = root.get_by_text(strategy.value, exact=descriptor.exact)
    else:
        locator = root.locator(strategy.value)

    if descriptor.has_text:
        locator = locator.filter(has_text=descriptor.has_text)
    return locator


def _pick(locator: Locator, count: int, nth: Optional[int]) -> Optional[Locator]:
    """Apply the ordinal selector; None means the match is not usable yet."""
    if nth is None:
        return locator if count == 1 else None
    index = nth if nth >= 0 else count + nth
    if 0 <= index < count:
        return locator.nth(nth)
    return None


async def _observe(session: Session, descriptor: ElementDescriptor) -> Tuple[bool, Any]:
    """One poll round: query every strategy in priority order."""
    observation = _Observation(tried=[])
    for strategy in descriptor.ordered:
        observation.last_attempted = strategy
        locator = build_locator(session.page, descriptor, strategy)
        count = await locator.count()
        picked = _pick(locator, count, descriptor.nth) if count else None
        if picked is not None:
            return True, ResolvedElement(picked, descriptor, strategy, count)

        if count:
            observation.any_match = True
        if count > 1 and descriptor.nth is None:
            observation.ambiguous = True
            observation.tried.append(f"{strategy}: {count} matches (ambiguous)")
        elif count:
            observation.tried.append(f"{strategy}: {count} matches, no #{descriptor.nth}")
        else:
            observation.tried.append(f"{strategy}: 0 matches")
    return False, observation


async def locate_now(session: Session, descriptor: ElementDescriptor) -> Optional[ResolvedElement]:
    """Single non-waiting lookup; None when nothing usable matches right now."""
    session.ensure_active()
    found, result = await _observe(session, descriptor)
    return result if found else None


async def resolve(
    session: Session,
    descriptor: ElementDescriptor,
    timeout: float,
    interval: float = DEFAULT_POLL_INTERVAL,
) -> ResolvedElement:
    """
    Resolve a descriptor to a live element.

    Args:
        session: Session whose document is searched
        descriptor: Element description (at least one strategy)
        timeout: Shared budget for all strategies, in seconds
        interval: Delay between poll rounds, in seconds

    Returns:
        ResolvedElement for the highest-priority usable match

    Raises:
        ValueError: When timeout is not positive
        ResolutionError: NOT_FOUND, AMBIGUOUS or TIMEOUT once the budget is spent
    """
    session.ensure_active()
    deadline = Deadline(timeout)
    ever_matched = False

    async def attempt() -> Tuple[bool, Any]:
        nonlocal ever_matched
        found, result = await _observe(session, descriptor)
        if not found and result.any_match:
            ever_matched = True
        return found, result

    found, result = await poll_until(
        attempt, deadline, interval, description=f"resolve '{descriptor.display_name}'"
    )

    if found:
        _record_health(session, result)
        return result

    strategies = descriptor.ordered
    observation: _Observation = result or _Observation(tried=[str(s) for s in strategies])
    if observation.ambiguous:
        kind = ResolutionErrorKind.AMBIGUOUS
    elif ever_matched:
        kind = ResolutionErrorKind.TIMEOUT
    else:
        kind = ResolutionErrorKind.NOT_FOUND

    error = ResolutionError(
        kind,
        descriptor,
        observation.tried,
        last_attempted=observation.last_attempted or strategies[-1],
    )
    logger.error(f"❌ [{session.name}] {error}")
    raise error


def _record_health(session: Session, element: ResolvedElement) -> None:
    descriptor = element.descriptor
    name = descriptor.display_name
    primary = descriptor.primary

    if element.strategy == primary:
        logger.debug(f"✅ [{session.name}] Element '{name}' found: {element.strategy}")
        return

    logger.warning(
        f"⚠️ [{session.name}] Element '{name}' used fallback: "
        f"{primary} -> {element.strategy}"
    )
    session.locator_health[name] = LocatorHealth(
        element_name=name,
        primary_selector=str(primary),
        used_fallback=True,
        fallback_selector=str(element.strategy),
    )


def get_health_report(session: Session) -> str:
    """
    Generate a locator health report for one session.

    Elements that needed a fallback are maintenance candidates: their primary
    strategy no longer matches the application.
    """
    if not session.locator_health:
        return "✅ All elements used primary locators. No maintenance needed."

    report_lines = [
        "⚠️ Locator Health Report - Fallbacks Used:",
        "",
        "The following elements used fallback locators.",
        "Consider updating the primary selectors:",
        "",
    ]

    for element_name, health in session.locator_health.items():
        report_lines.extend([
            f"  [{element_name}]",
            f"    Failed primary: {health.primary_selector}",
            f"    Used: {health.fallback_selector}",
            "",
        ])

    return "\n".join(report_lines)


class SmartLocator:
    """
    Session-bound convenience facade used by page objects for ad-hoc lookups.

    Usage:
        >>> smart = SmartLocator(session)
        >>> element = await smart.locate(LOGIN_BUTTON)
        >>> await smart.is_visible(ERROR_TOAST)
    """

    def __init__(self, session: Session, timeout: float = 5.0, interval: float = DEFAULT_POLL_INTERVAL):
        self.session = session
        self.timeout = timeout
        self.interval = interval

    async def locate(self, descriptor: ElementDescriptor, timeout: Optional[float] = None) -> ResolvedElement:
        return await resolve(self.session, descriptor, timeout or self.timeout, self.interval)

    async def is_visible(self, descriptor: ElementDescriptor, timeout: float = 2.0) -> bool:
        """Check visibility without raising."""
        try:
            element = await resolve(self.session, descriptor, timeout, self.interval)
        except ResolutionError:
            return False
        return await element.locator.is_visible()

    def get_health_report(self) -> str:
        return get_health_report(self.session)


__all__ = [
    "LocatorHealth",
    "ResolvedElement",
    "SmartLocator",
    "build_locator",
    "get_health_report",
    "locate_now",
    "resolve",
]
