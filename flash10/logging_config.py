"""Centralised loguru configuration.

Call :func:`configure_logging` once at start-up; modules import
``from loguru import logger`` directly.
"""

from __future__ import annotations

import os
import sys
from typing import Any, Optional, Union

from loguru import logger

HUMAN_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
    "<level>{message}</level>"
)


def configure_logging(
    level: Optional[str] = None,
    json_format: Optional[bool] = None,
    *,
    sink: Optional[Union[str, Any]] = None,
) -> None:
    """Install a single loguru handler.

    Args:
        level: Log level; falls back to ``LOG_LEVEL`` then ``INFO``.
        json_format: Serialise records as JSON; falls back to ``LOG_FORMAT=json``.
        sink: File path or writable object, stderr when omitted.
    """
    if json_format is None:
        json_format = os.environ.get("LOG_FORMAT", "").lower() == "json"
    if level is None:
        level = os.environ.get("LOG_LEVEL", "INFO")

    logger.remove()
    target = sink if sink is not None else sys.stderr
    if json_format:
        logger.add(target, level=level.upper(), serialize=True)
    else:
        logger.add(target, level=level.upper(), format=HUMAN_FORMAT, colorize=target is sys.stderr)


__all__ = ["configure_logging"]
