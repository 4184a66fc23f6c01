# monitoring package
"""
Navigation monitoring: structured events, an in-process bus, a JSONL sink
and the process-wide logging setup.
"""

from __future__ import annotations

from .bus import EventBus
from .events import MonitoringEvent, NavEventType
from .logger import JsonFileLogger, log_event
from .logging_config import configure_logging

__all__ = [
    "EventBus",
    "MonitoringEvent",
    "NavEventType",
    "JsonFileLogger",
    "log_event",
    "configure_logging",
]
