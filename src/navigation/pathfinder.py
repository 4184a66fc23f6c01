# A* search over the x-z plane
# src/navigation/pathfinder.py
"""
A* pathfinding over an unbounded voxel grid.

- 4-directional neighbors on the x-z plane; y stays at the start's level.
- Uniform step cost 1, Manhattan (x, z) heuristic.
- A node is accepted as soon as it equals the goal or lies inside the
  arrival box (|dx| <= tolerance and |dz| <= tolerance).
- max_nodes guard: the search gives up after that many expansions, even
  if a path exists.

The search keeps an arena keyed by Cell; parent links are lookups into
that arena, and the whole structure is dropped when the call returns.
"""

from __future__ import annotations

import heapq
import itertools
import logging
from dataclasses import dataclass
from typing import AbstractSet, Dict, List, Set, Tuple

from .types import Cell, Path, SearchNode

log = logging.getLogger(__name__)

DEFAULT_MAX_NODES = 10_000
DEFAULT_TOLERANCE = 2

# (dx, dz) in the order neighbors are generated: east, west, south, north
_NEIGHBOR_OFFSETS: Tuple[Tuple[int, int], ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))


@dataclass
class PathfindingResult:
    """Structured result for a pathfinding attempt."""

    path: List[Cell]
    success: bool
    reason: str | None = None
    nodes_expanded: int = 0

    def to_path(self) -> Path:
        """Wrap the waypoints in a fresh Path (cursor 0)."""
        return Path(waypoints=list(self.path))


def heuristic(a: Cell, b: Cell) -> int:
    """Manhattan distance on x and z only."""
    return abs(a.x - b.x) + abs(a.z - b.z)


def accepts_goal(cell: Cell, goal: Cell, tolerance: int = DEFAULT_TOLERANCE) -> bool:
    """Goal test: exact match, or inside the arrival box around goal."""
    return cell == goal or cell.within_box(goal, tolerance)


def neighbors(cell: Cell, obstacles: AbstractSet[Cell]) -> List[Cell]:
    """Cardinal neighbors of `cell` on its own y level, minus known obstacles."""
    result: List[Cell] = []
    for dx, dz in _NEIGHBOR_OFFSETS:
        nxt = Cell(cell.x + dx, cell.y, cell.z + dz)
        if nxt in obstacles:
            continue
        result.append(nxt)
    return result


def find_path(
    start: Cell,
    goal: Cell,
    obstacles: AbstractSet[Cell] = frozenset(),
    *,
    max_nodes: int = DEFAULT_MAX_NODES,
    tolerance: int = DEFAULT_TOLERANCE,
) -> PathfindingResult:
    """
    A* search for a path from start to an accepted goal cell.

    Returns a PathfindingResult with:
      - path: start..accepted cell inclusive, or [] when no path
      - success: bool
      - reason: if not success, "max_nodes_exhausted" or "no_path_found"

    Pure function: no packets, no shared state.
    """
    arena: Dict[Cell, SearchNode] = {
        start: SearchNode(cell=start, g_cost=0, h_cost=heuristic(start, goal)),
    }
    closed: Set[Cell] = set()

    # Heap entries: (f_cost, h_cost, seq, cell). seq only keeps ordering total.
    seq = itertools.count()
    open_heap: List[Tuple[int, int, int, Cell]] = []
    root = arena[start]
    heapq.heappush(open_heap, (root.f_cost, root.h_cost, next(seq), start))

    expanded = 0

    while open_heap:
        if expanded >= max_nodes:
            log.debug(
                "find_path gave up after %d expansions (%s -> %s)",
                expanded,
                start,
                goal,
            )
            return PathfindingResult(
                path=[],
                success=False,
                reason="max_nodes_exhausted",
                nodes_expanded=expanded,
            )

        _, _, _, current = heapq.heappop(open_heap)
        if current in closed:
            continue

        closed.add(current)
        expanded += 1
        node = arena[current]

        if accepts_goal(current, goal, tolerance):
            path = _reconstruct_path(arena, current)
            log.debug(
                "find_path found %d-step path after %d expansions",
                len(path) - 1,
                expanded,
            )
            return PathfindingResult(path=path, success=True, nodes_expanded=expanded)

        tentative_g = node.g_cost + 1
        for nxt in neighbors(current, obstacles):
            if nxt in closed:
                continue

            known = arena.get(nxt)
            if known is not None and tentative_g >= known.g_cost:
                continue

            entry = SearchNode(
                cell=nxt,
                g_cost=tentative_g,
                h_cost=heuristic(nxt, goal),
                parent=current,
            )
            arena[nxt] = entry
            heapq.heappush(open_heap, (entry.f_cost, entry.h_cost, next(seq), nxt))

    # The open set only drains if obstacles enclose the start completely.
    return PathfindingResult(
        path=[],
        success=False,
        reason="no_path_found",
        nodes_expanded=expanded,
    )


def plan_path(
    start: Cell,
    goal: Cell,
    obstacles: AbstractSet[Cell] = frozenset(),
    *,
    max_nodes: int = DEFAULT_MAX_NODES,
    tolerance: int = DEFAULT_TOLERANCE,
) -> Path:
    """Convenience wrapper returning a Path (empty on failure)."""
    return find_path(
        start,
        goal,
        obstacles,
        max_nodes=max_nodes,
        tolerance=tolerance,
    ).to_path()


def _reconstruct_path(arena: Dict[Cell, SearchNode], current: Cell) -> List[Cell]:
    """Follow parent cells back to the start, then reverse."""
    path: List[Cell] = [current]
    node = arena[current]
    while node.parent is not None:
        path.append(node.parent)
        node = arena[node.parent]
    path.reverse()
    return path
