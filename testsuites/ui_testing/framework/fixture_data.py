"""
================================================================================
Fixture Data
================================================================================

Named test fixtures (credentials, route descriptors, trip identifiers) loaded
from YAML as plain key-value records. Values are opaque strings handed to flow
parameters.

Environment override follows the ConfigLoader rule with a prefix:
    user.email      -> SHUTTLER_USER_EMAIL
    route.trip_id   -> SHUTTLER_ROUTE_TRIP_ID

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Optional

import yaml
from loguru import logger

from .config_loader import ConfigurationError


DEFAULT_DATA_PATH = Path(__file__).parent.parent / "data" / "shuttler.yaml"

FixtureData = Dict[str, Dict[str, str]]


def load_fixture_data(
    path: Optional[Path] = None,
    env_prefix: str = "SHUTTLER",
) -> FixtureData:
    """
    Load fixture records and apply environment overrides.

    Args:
        path: YAML file with one mapping per record
        env_prefix: Prefix for override variable names

    Returns:
        {record_name: {field: value}}

    Raises:
        ConfigurationError: File missing, invalid YAML, or not a mapping of mappings
    """
    path = Path(path) if path else DEFAULT_DATA_PATH
    if not path.exists():
        raise ConfigurationError(f"Fixture data file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in fixture data: {e}") from e

    data: FixtureData = {}
    for record, fields in raw.items():
        if not isinstance(fields, dict):
            raise ConfigurationError(f"Fixture record '{record}' must be a mapping")
        data[record] = {}
        for key, value in fields.items():
            env_key = f"{env_prefix}_{record}_{key}".upper()
            override = os.environ.get(env_key)
            if override is not None:
                logger.debug(f"Fixture {record}.{key} overridden by {env_key}")
                value = override
            data[record][key] = "" if value is None else str(value)

    return data


__all__ = [
    "DEFAULT_DATA_PATH",
    "FixtureData",
    "load_fixture_data",
]
