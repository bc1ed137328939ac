# ================================================================================
# Element Actions Module
# ================================================================================
#
# Applies a single user action to a resolved element once the element is
# actionable.
#
# Key Features:
#   - Actionability checks: attached, visible, stable, enabled, editable
#     (fill only), receives pointer events (no intercepting overlay)
#   - Checks re-polled at a fixed interval until they hold or time out
#   - The action itself is attempted exactly once
#   - Allure step integration, secrets masked in logs and reports
#
# Usage:
#   element = await resolve(session, EMAIL_INPUT, timeout=5)
#   await act(element, Action.FILL, "user@example.com", timeout=5)
#
# ================================================================================

from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple

import allure
from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator

from .errors import ActionError, ActionErrorKind
from .smart_locator import ResolvedElement
from .wait_helpers import DEFAULT_POLL_INTERVAL, Deadline, poll_until


# Minimum budget handed to Playwright for the action itself (milliseconds)
ACTION_MIN_TIMEOUT_MS = 500.0

# Bounding box must not move between two consecutive animation frames
STABLE_SCRIPT = """
(el) => new Promise((resolve) => {
  const first = el.getBoundingClientRect();
  requestAnimationFrame(() => {
    const second = el.getBoundingClientRect();
    resolve(
      first.x === second.x && first.y === second.y &&
      first.width === second.width && first.height === second.height
    );
  });
})
"""

# The element (or a descendant) must be the hit target at its centre point.
# Off-screen centres are accepted; Playwright scrolls before acting.
HIT_TARGET_SCRIPT = """
(el) => {
  const r = el.getBoundingClientRect();
  const x = r.left + r.width / 2;
  const y = r.top + r.height / 2;
  if (x < 0 || y < 0 || x > window.innerWidth || y > window.innerHeight) return true;
  const hit = el.ownerDocument.elementFromPoint(x, y);
  return hit !== null && (hit === el || el.contains(hit));
}
"""


class Action(str, Enum):
    """Supported user actions."""

    FILL = "fill"
    CLICK = "click"


def _playwright_timeout(deadline: Deadline) -> float:
    # Playwright treats 0 as "no timeout"
    return max(1.0, deadline.remaining_ms)


def mask_payload(target: str, payload: Optional[str]) -> str:
    """Hide secrets before they reach logs or reports."""
    if payload is None:
        return ""
    if "password" in target.lower():
        return "*" * len(payload)
    return payload


async def check_actionability(
    locator: Locator,
    action: Action,
    deadline: Deadline,
) -> Optional[str]:
    """
    Run the actionability checks once.

    Returns:
        None when every check passes, otherwise the first failing reason
    """
    if await locator.count() == 0:
        return "not attached"
    if not await locator.is_visible():
        return "not visible"
    if not await locator.evaluate(STABLE_SCRIPT, timeout=_playwright_timeout(deadline)):
        return "not stable"
    if not await locator.is_enabled(timeout=_playwright_timeout(deadline)):
        return "not enabled"
    if action is Action.FILL and not await locator.is_editable(timeout=_playwright_timeout(deadline)):
        return "not editable"
    if not await locator.evaluate(HIT_TARGET_SCRIPT, timeout=_playwright_timeout(deadline)):
        return "obscured by another element"
    return None


async def wait_for_actionable(
    element: ResolvedElement,
    action: Action,
    deadline: Deadline,
    interval: float = DEFAULT_POLL_INTERVAL,
) -> None:
    """
    Block until the element is actionable.

    Raises:
        ActionError: NOT_ACTIONABLE with the first failing check as reason
    """

    async def check() -> Tuple[bool, Optional[str]]:
        reason = await check_actionability(element.locator, action, deadline)
        return reason is None, reason

    ready, reason = await poll_until(
        check, deadline, interval, description=f"{element.name} actionable for {action.value}"
    )
    if not ready:
        raise ActionError(
            ActionErrorKind.NOT_ACTIONABLE,
            reason or "not attached",
            action=action.value,
            target=element.name,
            last_attempted=element.strategy,
        )


async def act(
    element: ResolvedElement,
    action: Action,
    payload: Optional[str] = None,
    timeout: float = 10.0,
    interval: float = DEFAULT_POLL_INTERVAL,
) -> None:
    """
    Apply one action to a resolved element.

    Args:
        element: Element returned by the resolver
        action: Action to perform
        payload: Text to fill (required for FILL)
        timeout: Budget for actionability plus the action, in seconds
        interval: Poll interval for the actionability checks, in seconds

    Raises:
        ValueError: FILL without payload, or non-positive timeout
        ActionError: NOT_ACTIONABLE when checks never pass, FAILED when the
            single attempt itself raised
    """
    if action is Action.FILL and payload is None:
        raise ValueError(f"{action.value} on '{element.name}' requires a payload")

    deadline = Deadline(timeout)
    shown = mask_payload(element.name, payload)
    title = f"{action.value.capitalize()}: {element.name}" + (f" = {shown}" if shown else "")

    with allure.step(title):
        logger.info(title)
        try:
            await wait_for_actionable(element, action, deadline, interval)
        except ActionError as e:
            logger.error(f"❌ {e}")
            raise

        action_timeout = max(_playwright_timeout(deadline), ACTION_MIN_TIMEOUT_MS)
        try:
            if action is Action.CLICK:
                await element.locator.click(force=True, timeout=action_timeout)
            else:
                await element.locator.fill(payload, force=True, timeout=action_timeout)
        except PlaywrightError as e:
            error = ActionError(
                ActionErrorKind.FAILED,
                str(e).splitlines()[0] if str(e) else type(e).__name__,
                action=action.value,
                target=element.name,
                last_attempted=element.strategy,
            )
            logger.error(f"❌ {error}")
            raise error from e

        logger.debug(f"Successfully performed {action.value} on: {element.name}")


__all__ = [
    "Action",
    "ACTION_MIN_TIMEOUT_MS",
    "HIT_TARGET_SCRIPT",
    "STABLE_SCRIPT",
    "act",
    "check_actionability",
    "mask_payload",
    "wait_for_actionable",
]
