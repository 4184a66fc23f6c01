# src/bot_link/tracing.py
"""
Round-trip tracing for the navigation driver.

Keeps a rolling buffer of request/reply exchanges and emits one
structured log line per exchange. It does NOT make control decisions.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Dict, List, Optional


@dataclass
class ExchangeRecord:
    """One request/reply round trip as seen by the driver."""

    timestamp: float           # wall-clock time (time.time())
    duration_s: float          # send + receive duration in seconds
    turn: int

    request: Dict[str, Any]
    reply: Dict[str, Any]

    state_before: str
    state_after: str
    position: Optional[List[int]]


class ExchangeTracer:
    """
    In-memory exchange tracer with logging.

    Responsibilities:
    - Keep a rolling buffer of recent ExchangeRecord entries.
    - Emit a single structured log line per exchange (debug level).
    """

    def __init__(
        self,
        *,
        logger: Optional[logging.Logger] = None,
        max_records: int = 10_000,
    ) -> None:
        self._logger = logger or logging.getLogger("bot_link.exchange")
        self._records: Deque[ExchangeRecord] = deque(maxlen=max_records)

    def record(
        self,
        *,
        turn: int,
        request: Dict[str, Any],
        reply: Dict[str, Any],
        state_before: str,
        state_after: str,
        position: Optional[List[int]],
        duration_s: float,
    ) -> ExchangeRecord:
        record = ExchangeRecord(
            timestamp=time.time(),
            duration_s=duration_s,
            turn=turn,
            request=dict(request),
            reply=dict(reply),
            state_before=state_before,
            state_after=state_after,
            position=position,
        )
        self._records.append(record)

        self._logger.debug(
            "exchange turn=%d action=%s state=%s->%s pos=%s duration=%.4fs",
            record.turn,
            record.request.get("action"),
            record.state_before,
            record.state_after,
            record.position,
            record.duration_s,
        )
        return record

    def get_records(self) -> List[ExchangeRecord]:
        """Snapshot of all currently buffered records."""
        return list(self._records)
