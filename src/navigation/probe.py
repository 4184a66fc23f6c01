# src/navigation/probe.py
"""
ObstacleProbe: which cells to inspect after a rejected step.

After a failed step the agent checks the cell directly ahead at ground
level (current y), then at head level (current y + 1). Either one being
occupied is enough to block a two-block-tall agent.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .types import Cell, Direction

GROUND = 0
HEAD = 1

SLOT_NAMES = ("ground", "head")


def front_cells(position: Cell, facing: Direction) -> Tuple[Cell, Cell]:
    """(ground, head) cells one step ahead of `position` in `facing`."""
    ahead = position.step(facing)
    return ahead, ahead.offset(dy=1)


@dataclass
class ObstacleProbe:
    """
    Two-slot probe sequence for one failed step.

    reset() must be called with the refreshed position before use.
    """

    position: Optional[Cell] = None
    facing: Direction = Direction.EAST
    slot: int = GROUND

    def reset(self, position: Cell, facing: Direction) -> None:
        self.position = position
        self.facing = facing
        self.slot = GROUND

    @property
    def done(self) -> bool:
        return self.position is None or self.slot > HEAD

    @property
    def slot_name(self) -> str:
        return SLOT_NAMES[min(self.slot, HEAD)]

    def current_cell(self) -> Optional[Cell]:
        """Cell for the next unprobed slot, or None once both are probed."""
        if self.position is None or self.slot > HEAD:
            return None
        return front_cells(self.position, self.facing)[self.slot]

    def advance(self) -> bool:
        """Mark the current slot probed. Returns True when both are done."""
        if not self.done:
            self.slot += 1
        return self.done
