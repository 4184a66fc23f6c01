# core navigation types: Cell, Direction, SearchNode, Path
# src/navigation/types.py
"""
Shared value types for the navigation core.

Everything here is plain data:
- Cell: integer (x, y, z) grid position, hashable and tuple-compatible
- Direction: the four cardinal step directions and their unit deltas
- SearchNode: one A* arena entry
- Path: ordered waypoints plus a forward-only cursor

No I/O, no logging, no protocol knowledge.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, NamedTuple, Optional, Sequence, Tuple


class Cell(NamedTuple):
    """Discrete (x, y, z) voxel position."""

    x: int
    y: int
    z: int

    def offset(self, dx: int = 0, dy: int = 0, dz: int = 0) -> "Cell":
        return Cell(self.x + dx, self.y + dy, self.z + dz)

    def step(self, direction: "Direction") -> "Cell":
        """Cell one unit away in `direction`; y is never changed."""
        dx, dy, dz = direction.delta
        return self.offset(dx, dy, dz)

    def horizontal_distance(self, other: "Cell") -> int:
        """Manhattan distance on the x-z plane."""
        return abs(self.x - other.x) + abs(self.z - other.z)

    def within_box(self, other: "Cell", tolerance: int) -> bool:
        """True iff both |dx| and |dz| are <= tolerance. y is ignored."""
        return abs(self.x - other.x) <= tolerance and abs(self.z - other.z) <= tolerance

    def same_column(self, other: "Cell") -> bool:
        return self.x == other.x and self.z == other.z


def as_cell(value: Sequence[int] | Cell) -> Cell:
    """Coerce a 3-item sequence into a Cell (int() on every component)."""
    if isinstance(value, Cell):
        return value
    x, y, z = value
    return Cell(int(x), int(y), int(z))


class Direction(Enum):
    """Cardinal step directions, valued by their wire names."""

    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"

    @property
    def delta(self) -> Tuple[int, int, int]:
        return _DELTAS[self]

    @classmethod
    def from_wire(cls, name: str) -> Optional["Direction"]:
        try:
            return cls(name)
        except ValueError:
            return None


_DELTAS = {
    Direction.EAST: (1, 0, 0),
    Direction.WEST: (-1, 0, 0),
    Direction.SOUTH: (0, 0, 1),
    Direction.NORTH: (0, 0, -1),
}


@dataclass
class SearchNode:
    """
    A* arena entry.

    Parents are Cells looked up in the arena (Dict[Cell, SearchNode]),
    never object references. f_cost is derived, so it can't drift from
    g_cost + h_cost.
    """

    cell: Cell
    g_cost: int
    h_cost: int
    parent: Optional[Cell] = None

    @property
    def f_cost(self) -> int:
        return self.g_cost + self.h_cost


@dataclass
class Path:
    """
    Planned waypoints from start to an accepted goal cell.

    `cursor` indexes the waypoint currently being pursued and only moves
    forward. An empty Path means "no path", never "already there".
    """

    waypoints: List[Cell] = field(default_factory=list)
    cursor: int = 0

    def __len__(self) -> int:
        return len(self.waypoints)

    def __iter__(self) -> Iterator[Cell]:
        return iter(self.waypoints)

    def __bool__(self) -> bool:
        return bool(self.waypoints)

    @property
    def is_usable(self) -> bool:
        """Non-empty and the cursor still points at a waypoint."""
        return 0 <= self.cursor < len(self.waypoints)

    @property
    def at_last(self) -> bool:
        return self.cursor >= len(self.waypoints) - 1

    @property
    def current(self) -> Optional[Cell]:
        if not self.is_usable:
            return None
        return self.waypoints[self.cursor]

    @property
    def step_count(self) -> int:
        """Number of moves the path encodes (waypoints - 1)."""
        return max(len(self.waypoints) - 1, 0)

    def advance(self) -> bool:
        """Move the cursor forward by one unless already on the last waypoint."""
        if self.at_last:
            return False
        self.cursor += 1
        return True
