# navigation package
# src/navigation/__init__.py
"""
Navigation core for a feedback-driven voxel agent.

Provides:
- Cell / Direction / Path: value types
- PositionTracker / ObstacleMemory: confirmed world knowledge
- find_path / plan_path: bounded A* over the x-z plane
- WaypointFollower: one cardinal step per turn along a Path
- ObstacleProbe: ground/head cells to inspect after a failed step
- NavigationStateMachine: the turn-based protocol driver
"""

from __future__ import annotations

from .types import Cell, Direction, Path, SearchNode, as_cell
from .memory import ObstacleMemory, PositionTracker
from .pathfinder import PathfindingResult, accepts_goal, find_path, plan_path
from .follower import WaypointFollower, direction_towards
from .probe import ObstacleProbe, front_cells
from .fsm import (
    FinishReason,
    NavState,
    NavigationBusyError,
    NavigationStateMachine,
    NavigationStatus,
    NavigatorConfig,
)

__all__ = [
    "Cell",
    "Direction",
    "Path",
    "SearchNode",
    "as_cell",
    "ObstacleMemory",
    "PositionTracker",
    "PathfindingResult",
    "accepts_goal",
    "find_path",
    "plan_path",
    "WaypointFollower",
    "direction_towards",
    "ObstacleProbe",
    "front_cells",
    "FinishReason",
    "NavState",
    "NavigationBusyError",
    "NavigationStateMachine",
    "NavigationStatus",
    "NavigatorConfig",
]
