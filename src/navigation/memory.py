# agent-side world memory: tracked position and discovered obstacles
# src/navigation/memory.py
"""
PositionTracker and ObstacleMemory.

Both are owned by a single NavigationStateMachine. They only change in
response to confirmed feedback:
- position replies (absolute) and successful step replies (unit delta)
- probe replies that identified a block in the queried cell
"""

from __future__ import annotations

import logging
from typing import FrozenSet, Iterable, Iterator, Optional, Set

from .types import Cell, Direction

log = logging.getLogger(__name__)


class PositionTracker:
    """Last confirmed agent position. None until the first position reply."""

    def __init__(self) -> None:
        self._position: Optional[Cell] = None

    @property
    def position(self) -> Optional[Cell]:
        return self._position

    @property
    def is_known(self) -> bool:
        return self._position is not None

    def confirm(self, cell: Cell) -> None:
        """Record a position reported by the actuator."""
        if self._position is not None and self._position != cell:
            log.debug("PositionTracker corrected %s -> %s", self._position, cell)
        self._position = cell

    def apply_step(self, direction: Direction) -> Optional[Cell]:
        """
        Apply a confirmed successful step.

        Does nothing while the position is still unknown; we never
        assume a starting point.
        """
        if self._position is None:
            return None
        self._position = self._position.step(direction)
        return self._position


class ObstacleMemory:
    """
    Append-only set of cells known to be impassable.

    Cells differing only in y are distinct entries; the planner only ever
    asks about cells on the start's y level.
    """

    def __init__(self, cells: Iterable[Cell] = ()) -> None:
        self._cells: Set[Cell] = set(cells)

    def __contains__(self, cell: object) -> bool:
        return cell in self._cells

    def __len__(self) -> int:
        return len(self._cells)

    def __iter__(self) -> Iterator[Cell]:
        return iter(self._cells)

    def add(self, cell: Cell) -> bool:
        """Record an obstacle. Returns False if it was already known."""
        if cell in self._cells:
            return False
        self._cells.add(cell)
        log.info("Obstacle recorded at (%d, %d, %d)", cell.x, cell.y, cell.z)
        return True

    def clear(self) -> None:
        self._cells.clear()

    def snapshot(self) -> FrozenSet[Cell]:
        """Immutable copy handed to the pathfinder."""
        return frozenset(self._cells)
