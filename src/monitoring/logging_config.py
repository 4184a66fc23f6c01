# src/monitoring/logging_config.py
"""
Central logging configuration for the navigator.

Call configure_logging() once from the entrypoint:

    from monitoring.logging_config import configure_logging
    configure_logging()

The CLI passes stream=sys.stderr because stdout carries the actuator
protocol.
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Optional, Union

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def resolve_level(level: Union[int, str]) -> int:
    """Accept logging.INFO or "info"/"INFO"; unknown names fall back to INFO."""
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).upper(), logging.INFO)


def configure_logging(
    level: Union[int, str] = logging.INFO,
    stream: Optional[IO[str]] = None,
) -> None:
    """
    Configure root logging if no handlers are attached yet.

    Args:
        level: default logging level (e.g., logging.INFO, "DEBUG")
        stream: target stream, stdout by default
    """
    root = logging.getLogger()

    # Don't duplicate handlers if someone already configured logging.
    if root.handlers:
        return

    handler = logging.StreamHandler(stream=stream if stream is not None else sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(resolve_level(level))
