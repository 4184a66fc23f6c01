# path: src/monitoring/events.py
"""
Event schema for navigation monitoring.

This module defines:
- NavEventType enum
- MonitoringEvent (structured navigation events)

All events are JSON-serializable via `.to_dict()` and are intended for
use with monitoring.bus.EventBus and monitoring.logger.JsonFileLogger.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum, auto
from typing import Any, Dict, Optional


# ============================================================
# Event Types
# ============================================================

class NavEventType(Enum):
    """Typed monitoring events emitted by the navigator and its driver."""

    # NavigationStateMachine lifecycle
    NAV_STATE_CHANGE = auto()
    TARGET_SET = auto()
    NAV_FINISHED = auto()

    # Planning
    PATH_PLANNED = auto()
    PATH_NOT_FOUND = auto()

    # Feedback-driven updates
    STEP_RESULT = auto()
    OBSTACLE_DISCOVERED = auto()

    # Driver round trips
    REQUEST_SENT = auto()
    REPLY_RECEIVED = auto()

    # Generic log messages
    LOG = auto()


# ============================================================
# Monitoring Event Structure
# ============================================================

@dataclass
class MonitoringEvent:
    """
    Runtime event emitted by the navigation core or the driver loop.

    All fields must be JSON-safe.
    """

    ts: float                   # UNIX timestamp (seconds)
    module: str                 # Source module ("navigation.fsm", "bot_link.runtime", ...)
    event_type: NavEventType    # Enum describing the event class
    message: str                # Short human-readable description
    payload: Dict[str, Any]     # Structured data (positions, paths, outcomes)
    correlation_id: Optional[str] = None  # Groups events per navigation session

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-safe dict for loggers."""
        data = asdict(self)
        data["event_type"] = self.event_type.name  # store name, not enum
        return data
