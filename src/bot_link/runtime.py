# polling driver: one request, one reply, repeat
# src/bot_link/runtime.py
"""
NavigationDriver: the loop that owns the actuator round trip.

Each turn:
    1. sleep(poll_interval_s) to pace requests
    2. request = machine.next_action()
    3. if a request was produced: link.send(request), reply = link.receive(),
       machine.handle_feedback(reply)

The loop stops when the machine is complete, when max_turns is hit, or
when the link raises BotLinkError (fatal for the session).
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from time import perf_counter
from typing import Callable, Optional

from monitoring.bus import EventBus
from monitoring.events import NavEventType
from monitoring.logger import log_event
from navigation import Cell, NavigationStateMachine

from .client import BotLink, BotLinkError
from .tracing import ExchangeTracer

log = logging.getLogger(__name__)

OUTCOME_TARGET_REACHED = "target_reached"
OUTCOME_GAVE_UP = "gave_up"
OUTCOME_TRANSPORT_ERROR = "transport_error"
OUTCOME_TURN_LIMIT = "turn_limit"


@dataclass
class DriverConfig:
    """Pacing and bounds for the driver loop. Defaults match navigator.yaml."""

    # Delay before each turn, so the actuator isn't flooded.
    poll_interval_s: float = 0.1

    # Optional cap on loop iterations (idle turns included). None disables it.
    max_turns: Optional[int] = None


@dataclass
class DriverResult:
    """How a driven navigation session ended."""

    outcome: str
    turns: int
    steps_taken: int
    target_reached: bool
    position: Optional[Cell]
    error: Optional[BotLinkError] = field(default=None, repr=False)

    @property
    def exit_code(self) -> int:
        if self.outcome == OUTCOME_TARGET_REACHED:
            return 0
        if self.outcome == OUTCOME_GAVE_UP:
            return 1
        return 2


class NavigationDriver:
    """
    Synchronous driver pairing a NavigationStateMachine with a BotLink.

    The machine must already have a target. The driver never inspects
    replies; it only forwards them.
    """

    def __init__(
        self,
        machine: NavigationStateMachine,
        link: BotLink,
        config: Optional[DriverConfig] = None,
        *,
        bus: Optional[EventBus] = None,
        tracer: Optional[ExchangeTracer] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._machine = machine
        self._link = link
        self._cfg = config if config is not None else DriverConfig()
        self._bus = bus
        self._tracer: ExchangeTracer = tracer or ExchangeTracer()
        self._sleep = sleep

    @property
    def tracer(self) -> ExchangeTracer:
        return self._tracer

    def run(self) -> DriverResult:
        """Run turns until the machine completes or the loop must stop."""
        machine = self._machine
        turns = 0
        log.info("Navigation driver starting (target=%s)", machine.target)

        while True:
            if self._cfg.max_turns is not None and turns >= self._cfg.max_turns:
                log.warning("Driver hit max_turns=%d", self._cfg.max_turns)
                return self._result(OUTCOME_TURN_LIMIT, turns)

            if self._cfg.poll_interval_s > 0:
                self._sleep(self._cfg.poll_interval_s)
            turns += 1

            state_before = machine.state.value
            request = machine.next_action()

            if request is None:
                if machine.is_complete():
                    outcome = (
                        OUTCOME_TARGET_REACHED if machine.target_reached else OUTCOME_GAVE_UP
                    )
                    return self._result(outcome, turns)
                continue

            start = perf_counter()
            try:
                self._link.send(request)
                self._emit(NavEventType.REQUEST_SENT, "Request sent", {"request": request})
                reply = self._link.receive()
            except BotLinkError as exc:
                log.error("Communication error on turn %d: %s", turns, exc)
                return self._result(OUTCOME_TRANSPORT_ERROR, turns, error=exc)
            duration = perf_counter() - start

            self._emit(NavEventType.REPLY_RECEIVED, "Reply received", {"reply": reply})
            machine.handle_feedback(reply)

            position = machine.current_position()
            self._tracer.record(
                turn=turns,
                request=request,
                reply=reply,
                state_before=state_before,
                state_after=machine.state.value,
                position=list(position) if position is not None else None,
                duration_s=duration,
            )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _result(
        self,
        outcome: str,
        turns: int,
        error: Optional[BotLinkError] = None,
    ) -> DriverResult:
        machine = self._machine
        result = DriverResult(
            outcome=outcome,
            turns=turns,
            steps_taken=machine.steps_taken,
            target_reached=machine.target_reached,
            position=machine.current_position(),
            error=error,
        )
        log.info(
            "Navigation driver finished: outcome=%s turns=%d steps=%d position=%s",
            result.outcome,
            result.turns,
            result.steps_taken,
            result.position,
        )
        return result

    def _emit(self, event_type: NavEventType, message: str, payload: dict) -> None:
        if self._bus is None:
            return
        log_event(
            bus=self._bus,
            module="bot_link.runtime",
            event_type=event_type,
            message=message,
            payload=payload,
            correlation_id=self._machine.session_id,
        )
