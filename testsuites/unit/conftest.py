"""Shared fixtures for framework unit tests (no browser required)."""

from __future__ import annotations

import pytest

from testsuites.ui_testing.framework.flow import FlowTimeouts
from testsuites.ui_testing.framework.session import Session
from testsuites.unit.fakes import FakePage


@pytest.fixture
def fast_timeouts() -> FlowTimeouts:
    return FlowTimeouts(resolve=0.3, action=0.3, gate=0.3, interval=0.01)


@pytest.fixture
def make_session():
    """Factory: wrap a FakePage (or a fresh empty one) in a Session."""

    def _make(page: FakePage = None, name: str = None) -> Session:
        return Session(page if page is not None else FakePage(), name=name)

    return _make
