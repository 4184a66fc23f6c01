# bot_link package
# src/bot_link/__init__.py
"""
Everything outside the navigation core that talks to the actuator.

Exports:
    - BotLink / BotLinkError: transport contract and its failure type
    - LineBotLink: JSON-lines transport over text streams
    - NavigationDriver / DriverConfig / DriverResult: the polling loop
"""

from __future__ import annotations

from .client import BotLink, BotLinkError
from .line_client import LineBotLink
from .runtime import DriverConfig, DriverResult, NavigationDriver
from .tracing import ExchangeRecord, ExchangeTracer

__all__ = [
    "BotLink",
    "BotLinkError",
    "LineBotLink",
    "DriverConfig",
    "DriverResult",
    "NavigationDriver",
    "ExchangeRecord",
    "ExchangeTracer",
]
