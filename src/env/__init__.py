# env package
"""YAML-backed navigator configuration."""

from __future__ import annotations

from .loader import DEFAULT_CONFIG_PATH, load_navigator_profile
from .schema import LoggingConfig, NavigatorProfile

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "load_navigator_profile",
    "LoggingConfig",
    "NavigatorProfile",
]
