# NavigatorProfile and LoggingConfig dataclasses
# src/env/schema.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from bot_link.runtime import DriverConfig
from navigation.fsm import NavigatorConfig


@dataclass
class LoggingConfig:
    """Process logging setup for the CLI."""
    level: str = "INFO"                 # logging level name
    events_path: Optional[str] = None   # JSONL event log; None disables it


@dataclass
class NavigatorProfile:
    """Resolved configuration for one active profile."""
    name: str
    navigator: NavigatorConfig = field(default_factory=NavigatorConfig)
    driver: DriverConfig = field(default_factory=DriverConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
