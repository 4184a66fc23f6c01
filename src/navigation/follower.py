# src/navigation/follower.py
"""
WaypointFollower: turn a static Path into one cardinal step per turn.

Direction policy: move along the axis with the larger absolute offset to
the cursor waypoint; on a tie (including diagonal offsets) prefer the
x axis, i.e. east/west before north/south.
"""

from __future__ import annotations

import logging
from typing import Optional

from .types import Cell, Direction, Path

log = logging.getLogger(__name__)


def direction_towards(current: Cell, waypoint: Cell) -> Optional[Direction]:
    """Cardinal direction from current toward waypoint, or None if same column."""
    dx = waypoint.x - current.x
    dz = waypoint.z - current.z

    if dx == 0 and dz == 0:
        return None

    if abs(dx) >= abs(dz):
        return Direction.EAST if dx > 0 else Direction.WEST
    return Direction.SOUTH if dz > 0 else Direction.NORTH


class WaypointFollower:
    """Stateless helper; the Path carries the cursor."""

    def advance_if_reached(self, path: Path, current: Cell) -> bool:
        """
        Advance the cursor when standing on its waypoint (x/z match).

        Never advances past the last waypoint. Returns True if it moved.
        """
        waypoint = path.current
        if waypoint is None or not current.same_column(waypoint):
            return False
        if not path.advance():
            return False
        log.debug("Reached waypoint %d/%d", path.cursor, len(path) - 1)
        return True

    def next_direction(self, path: Path, current: Cell) -> Optional[Direction]:
        """
        Direction toward the cursor waypoint.

        None when the path is empty, the cursor is exhausted, or the agent
        already stands on the final waypoint. The caller must replan.
        """
        waypoint = path.current
        if waypoint is None:
            return None
        return direction_towards(current, waypoint)

    def choose(self, path: Path, current: Cell) -> Optional[Direction]:
        """advance_if_reached() followed by next_direction()."""
        self.advance_if_reached(path, current)
        return self.next_direction(path, current)
