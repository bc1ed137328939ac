"""
================================================================================
Logger Setup
================================================================================

Configures the shared loguru logger once per process from the ``logging``
config section:

    logging:
      level: INFO
      file: logs/ui.log
      rotation: 10 MB
      retention: 7 days

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from .config_loader import ConfigLoader


DEFAULT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

_logger_initialized = False


def init_logger(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    config: Optional[ConfigLoader] = None,
) -> None:
    """
    Initialize the loguru logger.

    Safe to call more than once; only the first call configures handlers.

    Args:
        level: Log level; defaults to ``logging.level`` (INFO)
        log_file: Optional log file; defaults to ``logging.file``
        config: Configuration source (the process singleton if omitted)

    Example:
        init_logger()
        init_logger(level="DEBUG", log_file="logs/ui.log")
    """
    global _logger_initialized

    if _logger_initialized:
        return

    config = config or ConfigLoader()
    level = (level or config.get("logging.level", "INFO")).upper()

    logger.remove()
    logger.add(sys.stderr, format=DEFAULT_FORMAT, level=level, colorize=True)

    log_file = log_file or config.get("logging.file")
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            format=DEFAULT_FORMAT,
            level=level,
            rotation=config.get("logging.rotation", "10 MB"),
            retention=config.get("logging.retention", "7 days"),
        )

    _logger_initialized = True
    logger.debug(f"Logger initialized with level: {level}")


__all__ = [
    "init_logger",
]
