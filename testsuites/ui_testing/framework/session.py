"""
================================================================================
Session
================================================================================

One isolated live document context driving a single test's interactions.

A Session owns exactly one Playwright page (and, when created by the
BrowserManager, its browser context). Sessions never share mutable state, so
many of them can run the same flows concurrently.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import itertools
from contextlib import asynccontextmanager
from enum import Enum
from typing import TYPE_CHECKING, AsyncIterator, Dict, List, Optional

import allure
from loguru import logger
from playwright.async_api import BrowserContext, Page

from .errors import SessionBusyError, SessionStateError

if TYPE_CHECKING:
    from .flow import ExecutionResult
    from .smart_locator import LocatorHealth


class SessionState(str, Enum):
    ACTIVE = "active"
    FAILED = "failed"
    CLOSED = "closed"


_session_ids = itertools.count(1)


class Session:
    """
    Single-owner wrapper around a live page.

    Invariant: at most one flow is in flight per Session. A second concurrent
    flow raises SessionBusyError instead of interleaving with the first.

    Usage:
        session = Session(page, context)
        await session.goto("https://example.com/login")
        ...
        await session.close()
    """

    def __init__(
        self,
        page: Page,
        context: Optional[BrowserContext] = None,
        name: Optional[str] = None,
    ):
        """
        Args:
            page: Playwright page this session drives
            context: Browser context owned by this session (closed with it)
            name: Optional name for logs; defaults to ``session-<n>``
        """
        self.page = page
        self.context = context
        self.name = name or f"session-{next(_session_ids)}"
        self.state = SessionState.ACTIVE
        self.history: List["ExecutionResult"] = []
        self.locator_health: Dict[str, "LocatorHealth"] = {}
        self._busy = False

    def __repr__(self) -> str:
        return f"<Session {self.name} state={self.state.value}>"

    @property
    def url(self) -> str:
        return self.page.url

    @property
    def is_active(self) -> bool:
        return self.state is SessionState.ACTIVE

    def ensure_active(self) -> None:
        if not self.is_active:
            raise SessionStateError(f"{self.name} is {self.state.value}")

    @asynccontextmanager
    async def exclusive(self) -> AsyncIterator["Session"]:
        """Hold the session for one flow; reject concurrent use."""
        self.ensure_active()
        if self._busy:
            raise SessionBusyError(f"{self.name} already has a flow in flight")
        self._busy = True
        try:
            yield self
        finally:
            self._busy = False

    async def goto(self, url: str, wait_until: str = "load", timeout: Optional[float] = None) -> None:
        """
        Navigate the session's page.

        Args:
            url: Absolute URL
            wait_until: Playwright load state to wait for
            timeout: Navigation timeout in milliseconds
        """
        self.ensure_active()
        with allure.step(f"Navigate to {url}"):
            await self.page.goto(url, wait_until=wait_until, timeout=timeout)
            logger.debug(f"[{self.name}] Navigated to: {url}")

    def mark_failed(self) -> None:
        if self.state is SessionState.ACTIVE:
            self.state = SessionState.FAILED
            logger.warning(f"⚠️ [{self.name}] marked as failed")

    async def close(self) -> None:
        """Release the document context. Safe to call more than once."""
        if self.state is SessionState.CLOSED:
            return
        self.state = SessionState.CLOSED
        if self.context is not None:
            await self.context.close()
        else:
            await self.page.close()
        logger.debug(f"[{self.name}] closed")

    async def __aenter__(self) -> "Session":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


__all__ = [
    "Session",
    "SessionState",
]
