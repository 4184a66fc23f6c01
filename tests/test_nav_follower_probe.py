# tests/test_nav_follower_probe.py
"""
Unit tests for WaypointFollower and ObstacleProbe.
"""

from __future__ import annotations

import pytest

from navigation.follower import WaypointFollower, direction_towards
from navigation.probe import ObstacleProbe, front_cells
from navigation.types import Cell, Direction, Path


def straight_path() -> Path:
    return Path(waypoints=[Cell(0, 64, 0), Cell(1, 64, 0), Cell(2, 64, 0)])


@pytest.mark.parametrize(
    "target, expected",
    [
        (Cell(3, 64, 0), Direction.EAST),
        (Cell(-3, 64, 1), Direction.WEST),
        (Cell(1, 64, 4), Direction.SOUTH),
        (Cell(0, 64, -2), Direction.NORTH),
        # Ties go to the x axis.
        (Cell(2, 64, 2), Direction.EAST),
        (Cell(-1, 64, -1), Direction.WEST),
        # y offset alone is not a horizontal move.
        (Cell(0, 70, 0), None),
    ],
)
def test_direction_towards(target: Cell, expected: Direction | None) -> None:
    assert direction_towards(Cell(0, 64, 0), target) is expected


def test_cursor_advances_when_standing_on_waypoint() -> None:
    follower = WaypointFollower()
    path = straight_path()

    assert follower.advance_if_reached(path, Cell(0, 64, 0))
    assert path.cursor == 1
    assert follower.next_direction(path, Cell(0, 64, 0)) is Direction.EAST


def test_cursor_ignores_y_when_matching_waypoint() -> None:
    follower = WaypointFollower()
    path = straight_path()

    assert follower.advance_if_reached(path, Cell(0, 63, 0))
    assert path.cursor == 1


def test_cursor_stays_when_off_waypoint() -> None:
    follower = WaypointFollower()
    path = straight_path()

    assert not follower.advance_if_reached(path, Cell(0, 64, 1))
    assert path.cursor == 0
    # Pulled back onto the waypoint along z.
    assert follower.next_direction(path, Cell(0, 64, 1)) is Direction.NORTH


def test_cursor_never_passes_last_waypoint() -> None:
    follower = WaypointFollower()
    path = straight_path()
    path.cursor = 2

    assert not follower.advance_if_reached(path, Cell(2, 64, 0))
    assert path.cursor == 2
    assert follower.next_direction(path, Cell(2, 64, 0)) is None


def test_cursor_only_moves_forward_along_path() -> None:
    follower = WaypointFollower()
    path = straight_path()
    seen = []
    position = Cell(0, 64, 0)

    for _ in range(3):
        direction = follower.choose(path, position)
        seen.append(path.cursor)
        if direction is None:
            break
        position = position.step(direction)

    assert seen == sorted(seen)
    assert position == Cell(2, 64, 0)


def test_empty_path_yields_no_direction() -> None:
    follower = WaypointFollower()
    assert follower.choose(Path(), Cell(0, 64, 0)) is None


def test_front_cells_per_direction() -> None:
    origin = Cell(0, 64, 0)

    assert front_cells(origin, Direction.EAST) == (Cell(1, 64, 0), Cell(1, 65, 0))
    assert front_cells(origin, Direction.WEST) == (Cell(-1, 64, 0), Cell(-1, 65, 0))
    assert front_cells(origin, Direction.SOUTH) == (Cell(0, 64, 1), Cell(0, 65, 1))
    assert front_cells(origin, Direction.NORTH) == (Cell(0, 64, -1), Cell(0, 65, -1))


def test_probe_walks_ground_then_head() -> None:
    probe = ObstacleProbe()
    assert probe.done
    assert probe.current_cell() is None

    probe.reset(Cell(5, 70, 5), Direction.NORTH)
    assert probe.slot_name == "ground"
    assert probe.current_cell() == Cell(5, 70, 4)

    assert probe.advance() is False
    assert probe.slot_name == "head"
    assert probe.current_cell() == Cell(5, 71, 4)

    assert probe.advance() is True
    assert probe.done
    assert probe.current_cell() is None

    # Reset starts over from the ground slot.
    probe.reset(Cell(0, 64, 0), Direction.EAST)
    assert probe.current_cell() == Cell(1, 64, 0)
