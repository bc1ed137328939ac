# ================================================================================
# Wait Helpers Module
# ================================================================================
#
# Polling primitives shared by the locator resolver, the action executor and
# the assertion gate.
#
# Key Features:
#   - Fixed-interval polling against a shared deadline
#   - Every wait is an asyncio suspension point (never busy-spins)
#   - Transient Playwright errors (e.g. navigation in progress) are tolerated
#   - Cancellable from the outside via asyncio.wait_for / task.cancel()
#
# Usage:
#   deadline = Deadline(timeout=5.0)
#   ok, url = await poll_until(check_url, deadline, interval=0.1)
#
# ================================================================================

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, Tuple, TypeVar

from loguru import logger
from playwright.async_api import Error as PlaywrightError


T = TypeVar("T")

DEFAULT_POLL_INTERVAL = 0.1


def _now() -> float:
    return asyncio.get_running_loop().time()


@dataclass
class Deadline:
    """
    A timeout budget shared by consecutive waits.

    Attributes:
        timeout: Total budget in seconds (must be positive)
    """
    timeout: float
    started: float = field(default_factory=_now)

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")

    @property
    def elapsed(self) -> float:
        return _now() - self.started

    @property
    def remaining(self) -> float:
        return max(0.0, self.timeout - self.elapsed)

    @property
    def expired(self) -> bool:
        return self.remaining <= 0

    @property
    def remaining_ms(self) -> float:
        """Remaining budget in milliseconds, the unit Playwright expects."""
        return self.remaining * 1000


async def sleep_until_next_poll(deadline: Deadline, interval: float) -> None:
    """Yield to the event loop for one poll interval (bounded by the deadline)."""
    await asyncio.sleep(max(0.0, min(interval, deadline.remaining)))


async def poll_until(
    check_fn: Callable[[], Awaitable[Tuple[bool, T]]],
    deadline: Deadline,
    interval: float = DEFAULT_POLL_INTERVAL,
    description: str = "condition",
) -> Tuple[bool, Optional[T]]:
    """
    Poll an async check until it succeeds or the deadline expires.

    The check always runs at least once, even with an exhausted budget.

    Args:
        check_fn: Coroutine function returning (success, observation)
        deadline: Shared timeout budget
        interval: Fixed delay between attempts in seconds
        description: Human-readable description for logging

    Returns:
        (True, observation) on success, (False, last observation) on timeout
    """
    attempt = 0
    last_result: Optional[T] = None

    while True:
        attempt += 1
        try:
            success, last_result = await check_fn()
            if success:
                logger.debug(
                    f"Wait successful after {attempt} attempts "
                    f"({deadline.elapsed:.2f}s): {description}"
                )
                return True, last_result
        except PlaywrightError as e:
            logger.debug(f"Attempt {attempt} for {description} raised: {e}")

        if deadline.expired:
            logger.debug(
                f"Timeout after {deadline.elapsed:.2f}s waiting for: {description}. "
                f"Last result: {last_result}"
            )
            return False, last_result

        await sleep_until_next_poll(deadline, interval)


__all__ = [
    "DEFAULT_POLL_INTERVAL",
    "Deadline",
    "poll_until",
    "sleep_until_next_poll",
]
