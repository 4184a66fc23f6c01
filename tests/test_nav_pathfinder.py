# tests/test_nav_pathfinder.py
"""
Unit tests for the A* pathfinder.

Tie-breaking among equal f-costs is not part of the contract, so these
tests check validity and length, not exact waypoint identity (except
where the shortest path is unique).
"""

from __future__ import annotations

from typing import List

import pytest

from navigation.pathfinder import accepts_goal, find_path, heuristic, neighbors, plan_path
from navigation.types import Cell


def assert_valid_path(path: List[Cell]) -> None:
    """Every hop changes exactly one of x/z by exactly 1; y never changes."""
    for a, b in zip(path, path[1:]):
        dx = abs(a.x - b.x)
        dz = abs(a.z - b.z)
        assert a.y == b.y
        assert (dx, dz) in ((1, 0), (0, 1)), f"bad hop {a} -> {b}"


def test_heuristic_ignores_y() -> None:
    assert heuristic(Cell(0, 0, 0), Cell(3, 50, -4)) == 7


def test_neighbors_skip_obstacles_and_keep_y() -> None:
    blocked = {Cell(1, 64, 0), Cell(0, 65, 1)}
    result = neighbors(Cell(0, 64, 0), blocked)

    assert Cell(1, 64, 0) not in result
    # (0, 65, 1) is on another y level, so (0, 64, 1) is still offered.
    assert Cell(0, 64, 1) in result
    assert len(result) == 3
    assert all(c.y == 64 for c in result)


@pytest.mark.parametrize(
    "cell, accepted",
    [
        (Cell(3, 100, 0), True),
        (Cell(1, 100, 0), True),
        (Cell(5, 100, 2), True),
        (Cell(5, 100, 3), False),
        (Cell(0, 100, 0), False),
        # x inside the box but z outside it
        (Cell(3, 100, -3), False),
        # y is ignored entirely
        (Cell(3, 0, 0), True),
    ],
)
def test_goal_acceptance_box(cell: Cell, accepted: bool) -> None:
    assert accepts_goal(cell, Cell(3, 100, 0), tolerance=2) is accepted


def test_start_inside_box_returns_single_waypoint() -> None:
    start = Cell(0, 100, 0)
    result = find_path(start, Cell(2, 100, -2))

    assert result.success
    assert result.path == [start]
    assert result.to_path().step_count == 0


def test_open_space_exact_goal_is_unique_straight_line() -> None:
    start = Cell(0, 100, 0)
    goal = Cell(3, 100, 0)

    result = find_path(start, goal, tolerance=0)

    assert result.success
    assert result.path == [
        Cell(0, 100, 0),
        Cell(1, 100, 0),
        Cell(2, 100, 0),
        Cell(3, 100, 0),
    ]


def test_open_space_stops_at_edge_of_arrival_box() -> None:
    start = Cell(0, 100, 0)
    goal = Cell(3, 100, 0)

    result = find_path(start, goal)

    assert result.success
    # (1, 100, 0) is already within +-2 of the goal on both axes.
    assert result.path == [Cell(0, 100, 0), Cell(1, 100, 0)]


@pytest.mark.parametrize(
    "start, goal",
    [
        (Cell(0, 64, 0), Cell(10, 64, 0)),
        (Cell(0, 64, 0), Cell(-7, 64, 9)),
        (Cell(5, 64, -5), Cell(-5, 64, 5)),
        (Cell(0, 64, 0), Cell(0, 64, -12)),
    ],
)
def test_obstacle_free_length_equals_manhattan_to_accepted_cell(start: Cell, goal: Cell) -> None:
    result = find_path(start, goal)

    assert result.success
    path = result.path
    assert path[0] == start
    assert accepts_goal(path[-1], goal)
    assert_valid_path(path)
    assert len(path) - 1 == heuristic(start, path[-1])


def test_detours_around_known_obstacle() -> None:
    start = Cell(0, 100, 0)
    goal = Cell(3, 100, 0)
    obstacle = Cell(1, 100, 0)

    result = find_path(start, goal, {obstacle}, tolerance=0)

    assert result.success
    assert obstacle not in result.path
    assert result.path[0] == start
    assert result.path[-1] == goal
    assert_valid_path(result.path)
    # One sidestep out and one back in.
    assert len(result.path) - 1 == 5


def test_detours_around_wall() -> None:
    start = Cell(0, 64, 0)
    goal = Cell(4, 64, 0)
    wall = {Cell(2, 64, z) for z in range(-3, 4)}

    result = find_path(start, goal, wall, tolerance=0)

    assert result.success
    assert not wall.intersection(result.path)
    assert_valid_path(result.path)
    assert result.path[-1] == goal


def test_replan_after_new_obstacle_avoids_it() -> None:
    start = Cell(0, 64, 0)
    goal = Cell(6, 64, 0)
    first = find_path(start, goal, tolerance=0)
    assert first.success

    blocked = first.path[3]
    second = find_path(start, goal, {blocked}, tolerance=0)

    assert second.success
    assert blocked not in second.path
    assert_valid_path(second.path)


def test_obstacle_on_other_y_level_is_not_planned_around() -> None:
    # Known coarseness: planning is 2-D, head-level obstacles don't block.
    start = Cell(0, 64, 0)
    goal = Cell(3, 64, 0)
    head_level = Cell(1, 65, 0)

    result = find_path(start, goal, {head_level}, tolerance=0)

    assert result.success
    assert Cell(1, 64, 0) in result.path


def test_enclosed_start_reports_no_path() -> None:
    start = Cell(0, 64, 0)
    ring = {Cell(1, 64, 0), Cell(-1, 64, 0), Cell(0, 64, 1), Cell(0, 64, -1)}

    result = find_path(start, Cell(10, 64, 10), ring)

    assert not result.success
    assert result.reason == "no_path_found"
    assert result.path == []
    assert result.nodes_expanded == 1


def test_node_budget_exhaustion_reports_no_path() -> None:
    start = Cell(0, 64, 0)
    goal = Cell(500, 64, 500)

    result = find_path(start, goal, max_nodes=10)

    assert not result.success
    assert result.reason == "max_nodes_exhausted"
    assert result.path == []
    assert result.nodes_expanded == 10


def test_enclosed_goal_exhausts_node_budget() -> None:
    goal = Cell(0, 64, 0)
    ring = {Cell(x, 64, z) for x in range(-3, 4) for z in range(-3, 4) if max(abs(x), abs(z)) == 3}

    path = plan_path(Cell(10, 64, 0), goal, ring, max_nodes=300)

    assert not path
    assert path.step_count == 0
