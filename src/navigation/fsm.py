# navigation state machine driving the turn-based actuator protocol
# src/navigation/fsm.py
"""
NavigationStateMachine: plan, follow and repair a path from feedback only.

Public surface:
    set_target(cell)               -> None
    next_action()                  -> request dict | None
    handle_feedback(reply)         -> None
    status()                       -> NavigationStatus

Protocol contract (synchronous, caller-driven):
- next_action() emits at most one request per turn.
- After a non-None request the caller performs the round trip and hands
  the reply to handle_feedback() before calling next_action() again.
- Replies that don't fit the current state are ignored without side
  effects.
- No I/O, no clocks, no threads. Calls into one instance must not
  overlap; overlapping calls raise NavigationBusyError.

States (NavState) and their handlers are listed in two tables,
_PRODUCERS and _CONSUMERS. Both are checked at import time to cover
every NavState, so a new state can't be added without handlers.

Termination:
- Every step reply (success or failure) counts against max_steps, so the
  machine always reaches FINISHED.
- FINISHED alone doesn't mean success; read `target_reached` /
  `finish_reason`.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from threading import Lock
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, Sequence

from monitoring.bus import EventBus
from monitoring.events import NavEventType
from monitoring.logger import log_event

from .follower import WaypointFollower
from .memory import ObstacleMemory, PositionTracker
from .messages import (
    block_at_request,
    parse_position_reply,
    parse_probe_reply,
    parse_step_reply,
    position_request,
    step_request,
)
from .pathfinder import DEFAULT_MAX_NODES, DEFAULT_TOLERANCE, find_path
from .probe import ObstacleProbe
from .types import Cell, Direction, Path, as_cell

log = logging.getLogger(__name__)

Request = Dict[str, Any]


# ---------------------------------------------------------------------------
# Config, states, errors
# ---------------------------------------------------------------------------


@dataclass
class NavigatorConfig:
    """
    Budgets and tolerances for one navigator.

    Defaults match config/navigator.yaml.
    """

    # Hard cap on step replies (successful + failed) per target.
    max_steps: int = 2000

    # A* expansion cap per search.
    max_search_nodes: int = DEFAULT_MAX_NODES

    # Arrival box half-width on x and z.
    arrival_tolerance: int = DEFAULT_TOLERANCE


class NavState(Enum):
    IDLE = "idle"
    AWAITING_INITIAL_POSITION = "awaiting_initial_position"
    AWAITING_REFRESHED_POSITION = "awaiting_refreshed_position"
    MOVING = "moving"
    PROBING_OBSTACLE = "probing_obstacle"
    FINISHED = "finished"


class FinishReason(Enum):
    TARGET_REACHED = "target_reached"
    STEP_BUDGET_EXHAUSTED = "step_budget_exhausted"
    NO_PATH = "no_path"


@dataclass
class NavigationBusyError(RuntimeError):
    """
    Raised when a call enters a NavigationStateMachine that is already
    handling another call. Callers must serialize access.
    """

    code: str
    details: dict[str, Any]

    def __str__(self) -> str:
        return f"NavigationBusyError(code={self.code!r}, details={self.details!r})"


@dataclass(frozen=True)
class NavigationStatus:
    """Read-only snapshot of a navigator, for callers and logging."""

    state: NavState
    position: Optional[Cell]
    target: Optional[Cell]
    target_reached: bool
    finish_reason: Optional[FinishReason]
    steps_taken: int
    steps_attempted: int
    path_length: int
    path_cursor: int
    known_obstacles: int
    replans: int = 0
    last_request: Optional[Request] = field(default=None, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "position": list(self.position) if self.position is not None else None,
            "target": list(self.target) if self.target is not None else None,
            "target_reached": self.target_reached,
            "finish_reason": self.finish_reason.value if self.finish_reason else None,
            "steps_taken": self.steps_taken,
            "steps_attempted": self.steps_attempted,
            "path_length": self.path_length,
            "path_cursor": self.path_cursor,
            "known_obstacles": self.known_obstacles,
            "replans": self.replans,
        }


# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------


class NavigationStateMachine:
    """
    Drive an agent to a target cell one protocol turn at a time.

    Owns all mutable navigation state: tracked position, obstacle
    memory, current path and cursor, probe sequence, counters and the
    active NavState. Nothing is shared between instances.
    """

    def __init__(
        self,
        config: Optional[NavigatorConfig] = None,
        *,
        bus: Optional[EventBus] = None,
        obstacles: Optional[ObstacleMemory] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._cfg = config if config is not None else NavigatorConfig()
        self._bus = bus
        self._log = logger or log

        self._tracker = PositionTracker()
        self._obstacles = obstacles if obstacles is not None else ObstacleMemory()
        self._follower = WaypointFollower()
        self._probe = ObstacleProbe()

        self._state = NavState.IDLE
        self._target: Optional[Cell] = None
        self._path = Path()
        self._needs_replan = False
        self._facing = Direction.EAST
        # Direction of the step request awaiting its reply, if any.
        self._pending_step: Optional[Direction] = None

        self._steps_taken = 0
        self._steps_attempted = 0
        self._replans = 0
        self._finish_reason: Optional[FinishReason] = None
        self._last_request: Optional[Request] = None
        self._session_id: Optional[str] = None

        self._busy = Lock()

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------

    @property
    def config(self) -> NavigatorConfig:
        return self._cfg

    @property
    def state(self) -> NavState:
        return self._state

    @property
    def target(self) -> Optional[Cell]:
        return self._target

    @property
    def path(self) -> Path:
        return self._path

    @property
    def obstacles(self) -> ObstacleMemory:
        return self._obstacles

    @property
    def steps_taken(self) -> int:
        return self._steps_taken

    @property
    def steps_attempted(self) -> int:
        return self._steps_attempted

    @property
    def finish_reason(self) -> Optional[FinishReason]:
        return self._finish_reason

    @property
    def session_id(self) -> Optional[str]:
        return self._session_id

    @property
    def is_finished(self) -> bool:
        return self._state is NavState.FINISHED

    @property
    def target_reached(self) -> bool:
        """True only if FINISHED because the agent was inside the arrival box."""
        return self._finish_reason is FinishReason.TARGET_REACHED

    def is_complete(self) -> bool:
        """Nothing left to do: no target yet, or finished."""
        return self._state in (NavState.IDLE, NavState.FINISHED)

    def current_position(self) -> Optional[Cell]:
        return self._tracker.position

    def within_tolerance(self) -> bool:
        """Live arrival check on the tracked position (y ignored)."""
        position = self._tracker.position
        if position is None or self._target is None:
            return False
        return position.within_box(self._target, self._cfg.arrival_tolerance)

    def distance_to_target(self) -> Optional[int]:
        position = self._tracker.position
        if position is None or self._target is None:
            return None
        return position.horizontal_distance(self._target)

    def status(self) -> NavigationStatus:
        return NavigationStatus(
            state=self._state,
            position=self._tracker.position,
            target=self._target,
            target_reached=self.target_reached,
            finish_reason=self._finish_reason,
            steps_taken=self._steps_taken,
            steps_attempted=self._steps_attempted,
            path_length=len(self._path),
            path_cursor=self._path.cursor,
            known_obstacles=len(self._obstacles),
            replans=self._replans,
            last_request=self._last_request,
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def set_target(self, target: Sequence[int] | Cell) -> None:
        """
        Start a navigation session toward `target`.

        Valid from any state. Counters, path and probe sequence are reset
        and the position is queried afresh; obstacle memory is kept.
        """
        try:
            cell = as_cell(target)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"target must be three integers, got {target!r}") from exc

        with self._exclusive("set_target"):
            self._target = cell
            self._path = Path()
            self._needs_replan = True
            self._pending_step = None
            self._steps_taken = 0
            self._steps_attempted = 0
            self._replans = 0
            self._finish_reason = None
            self._last_request = None
            self._session_id = uuid.uuid4().hex

            self._log.info("Navigation target set to (%d, %d, %d)", cell.x, cell.y, cell.z)
            self._emit(
                NavEventType.TARGET_SET,
                "Navigation target set",
                {"target": list(cell)},
            )
            self._transition(NavState.AWAITING_INITIAL_POSITION)

    def clear_obstacles(self) -> None:
        """Forget every discovered obstacle; the next plan ignores them."""
        with self._exclusive("clear_obstacles"):
            self._obstacles.clear()
            self._needs_replan = True

    def next_action(self) -> Optional[Request]:
        """
        Produce the next request for the actuator, or None for no action.

        May transition (e.g. MOVING -> FINISHED) while producing nothing.
        """
        with self._exclusive("next_action"):
            producer = self._PRODUCERS[self._state]
            request = producer(self)
            if request is not None:
                self._last_request = request
            return request

    def handle_feedback(self, msg: Mapping[str, Any] | Any) -> None:
        """
        Consume one reply from the actuator.

        Replies missing the fields the current state expects are ignored.
        """
        with self._exclusive("handle_feedback"):
            consumer = self._CONSUMERS[self._state]
            consumer(self, msg)

    # ------------------------------------------------------------------
    # Producers (one per state)
    # ------------------------------------------------------------------

    def _produce_idle(self) -> Optional[Request]:
        return None

    def _produce_position_query(self) -> Optional[Request]:
        return position_request()

    def _produce_moving(self) -> Optional[Request]:
        position = self._tracker.position
        if position is None or self._target is None:
            # Can't move blind; ask where we are.
            self._transition(NavState.AWAITING_INITIAL_POSITION)
            return position_request()

        if self.within_tolerance():
            self._finish(FinishReason.TARGET_REACHED)
            return None

        if self._steps_attempted >= self._cfg.max_steps:
            self._finish(FinishReason.STEP_BUDGET_EXHAUSTED)
            return None

        if self._needs_replan or not self._path.is_usable:
            self._plan()
            if not self._path:
                self._finish(FinishReason.NO_PATH)
                return None

        direction = self._follower.choose(self._path, position)
        if direction is None:
            # Standing on the final waypoint yet outside the arrival box.
            self._plan()
            direction = self._follower.choose(self._path, position)
            if direction is None:
                self._finish(FinishReason.NO_PATH)
                return None

        self._facing = direction
        self._pending_step = direction
        self._log.debug(
            "Step %s toward waypoint %d/%d (step %d)",
            direction.value,
            self._path.cursor,
            len(self._path) - 1,
            self._steps_attempted + 1,
        )
        return step_request(direction)

    def _produce_probe(self) -> Optional[Request]:
        cell = self._probe.current_cell()
        if cell is None:
            self._needs_replan = True
            self._transition(NavState.MOVING)
            return None

        self._log.debug(
            "Probing %s cell (%d, %d, %d)",
            self._probe.slot_name,
            cell.x,
            cell.y,
            cell.z,
        )
        return block_at_request(cell)

    def _produce_nothing(self) -> Optional[Request]:
        return None

    # ------------------------------------------------------------------
    # Consumers (one per state)
    # ------------------------------------------------------------------

    def _ignore(self, msg: Any) -> None:
        return None

    def _consume_initial_position(self, msg: Any) -> None:
        cell = parse_position_reply(msg)
        if cell is None:
            return

        self._tracker.confirm(cell)
        self._log.info(
            "Start position (%d, %d, %d), distance to target %s",
            cell.x,
            cell.y,
            cell.z,
            self.distance_to_target(),
        )
        self._plan()
        # An empty path is dealt with by the MOVING producer.
        self._transition(NavState.MOVING)

    def _consume_step(self, msg: Any) -> None:
        ok = parse_step_reply(msg)
        if ok is None or self._pending_step is None:
            return
        self._pending_step = None

        self._steps_attempted += 1

        if ok:
            self._steps_taken += 1
            position = self._tracker.apply_step(self._facing)
            self._emit(
                NavEventType.STEP_RESULT,
                "Step succeeded",
                {
                    "dir": self._facing.value,
                    "ok": True,
                    "position": list(position) if position is not None else None,
                    "steps_taken": self._steps_taken,
                },
            )
            return

        self._log.info("Step %s rejected; refreshing position", self._facing.value)
        self._emit(
            NavEventType.STEP_RESULT,
            "Step rejected",
            {"dir": self._facing.value, "ok": False, "steps_attempted": self._steps_attempted},
        )
        self._transition(NavState.AWAITING_REFRESHED_POSITION)

    def _consume_refreshed_position(self, msg: Any) -> None:
        cell = parse_position_reply(msg)
        if cell is None:
            return

        self._tracker.confirm(cell)
        self._probe.reset(cell, self._facing)
        self._transition(NavState.PROBING_OBSTACLE)

    def _consume_probe(self, msg: Any) -> None:
        reply = parse_probe_reply(msg)
        if reply is None:
            return

        cell = self._probe.current_cell()
        if cell is not None and reply.occupied:
            self._log.info(
                "Obstacle %r at (%d, %d, %d) (%s level)",
                reply.name,
                cell.x,
                cell.y,
                cell.z,
                self._probe.slot_name,
            )
            if self._obstacles.add(cell):
                self._emit(
                    NavEventType.OBSTACLE_DISCOVERED,
                    "Obstacle discovered",
                    {"cell": list(cell), "name": reply.name, "slot": self._probe.slot_name},
                )
            self._needs_replan = True

        if self._probe.advance():
            self._log.info("Obstacle check complete; replanning")
            self._plan()
            self._transition(NavState.MOVING)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _plan(self) -> None:
        """Replace the current path wholesale with a fresh A* result."""
        position = self._tracker.position
        if position is None or self._target is None:
            return

        result = find_path(
            position,
            self._target,
            self._obstacles.snapshot(),
            max_nodes=self._cfg.max_search_nodes,
            tolerance=self._cfg.arrival_tolerance,
        )
        self._path = result.to_path()
        self._needs_replan = False
        self._replans += 1

        if result.success:
            self._log.info(
                "Path planned with %d waypoints (%d nodes expanded)",
                len(self._path),
                result.nodes_expanded,
            )
            self._emit(
                NavEventType.PATH_PLANNED,
                "Path planned",
                {
                    "from": list(position),
                    "waypoints": [list(c) for c in self._path],
                    "nodes_expanded": result.nodes_expanded,
                },
            )
        else:
            self._log.warning(
                "No path from %s to %s (%s after %d nodes)",
                position,
                self._target,
                result.reason,
                result.nodes_expanded,
            )
            self._emit(
                NavEventType.PATH_NOT_FOUND,
                "No path found",
                {
                    "from": list(position),
                    "reason": result.reason,
                    "nodes_expanded": result.nodes_expanded,
                },
            )

    def _finish(self, reason: FinishReason) -> None:
        self._finish_reason = reason
        if reason is FinishReason.TARGET_REACHED:
            self._log.info("Target reached in %d steps", self._steps_taken)
        else:
            self._log.warning(
                "Navigation stopped (%s) after %d/%d steps",
                reason.value,
                self._steps_taken,
                self._steps_attempted,
            )
        self._transition(NavState.FINISHED)
        self._emit(
            NavEventType.NAV_FINISHED,
            "Navigation finished",
            self.status().to_dict(),
        )

    def _transition(self, new_state: NavState) -> None:
        old_state = self._state
        self._state = new_state
        if old_state is new_state:
            return
        self._log.debug("NavState %s -> %s", old_state.value, new_state.value)
        self._emit(
            NavEventType.NAV_STATE_CHANGE,
            f"{old_state.value} -> {new_state.value}",
            {"from": old_state.value, "to": new_state.value},
        )

    def _emit(self, event_type: NavEventType, message: str, payload: Dict[str, Any]) -> None:
        if self._bus is None:
            return
        log_event(
            bus=self._bus,
            module="navigation.fsm",
            event_type=event_type,
            message=message,
            payload=payload,
            correlation_id=self._session_id,
        )

    @contextmanager
    def _exclusive(self, entry: str) -> Iterator[None]:
        if not self._busy.acquire(blocking=False):
            raise NavigationBusyError(
                code="reentrant_call",
                details={"entry": entry, "state": self._state.value},
            )
        try:
            yield
        finally:
            self._busy.release()

    # ------------------------------------------------------------------
    # Dispatch tables
    # ------------------------------------------------------------------

    _PRODUCERS: Dict[NavState, Callable[["NavigationStateMachine"], Optional[Request]]] = {
        NavState.IDLE: _produce_idle,
        NavState.AWAITING_INITIAL_POSITION: _produce_position_query,
        NavState.AWAITING_REFRESHED_POSITION: _produce_position_query,
        NavState.MOVING: _produce_moving,
        NavState.PROBING_OBSTACLE: _produce_probe,
        NavState.FINISHED: _produce_nothing,
    }

    _CONSUMERS: Dict[NavState, Callable[["NavigationStateMachine", Any], None]] = {
        NavState.IDLE: _ignore,
        NavState.AWAITING_INITIAL_POSITION: _consume_initial_position,
        NavState.AWAITING_REFRESHED_POSITION: _consume_refreshed_position,
        NavState.MOVING: _consume_step,
        NavState.PROBING_OBSTACLE: _consume_probe,
        NavState.FINISHED: _ignore,
    }


def _require_exhaustive(table: Mapping[NavState, Any], name: str) -> None:
    missing = [s.name for s in NavState if s not in table]
    if missing:
        raise TypeError(f"{name} has no handler for: {', '.join(missing)}")


_require_exhaustive(NavigationStateMachine._PRODUCERS, "_PRODUCERS")
_require_exhaustive(NavigationStateMachine._CONSUMERS, "_CONSUMERS")
