"""
Repository-level pytest configuration.

Why this exists:
  - Keep the repository root importable so `testsuites.*` resolves without install
  - Configure the shared loguru logger once per run
  - Keep behavior explicit and discoverable

Important:
  No credentials live in this repository. Live runs read them from
  SHUTTLER_USER_EMAIL / SHUTTLER_USER_PASSWORD (see ui_testing/data/shuttler.yaml).
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator

import pytest

from testsuites.ui_testing.framework.log_config import init_logger


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return Path(__file__).parent


@pytest.fixture(scope="session", autouse=True)
def _safe_env_defaults() -> Generator[None, None, None]:
    """
    Set safe environment defaults if not already provided by the user/CI.

    Live browser tests stay off unless explicitly enabled.
    """
    defaults = {
        "SHUTTLER_E2E": "0",
    }

    for k, v in defaults.items():
        os.environ.setdefault(k, v)

    init_logger()
    yield
