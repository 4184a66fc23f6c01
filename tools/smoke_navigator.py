#!/usr/bin/env python3
"""
tools/smoke_navigator.py

Minimal harness to sanity-check the navigator end to end.

- Builds a FakeVoxelWorld (no real actuator) with an optional wall
- Runs NavigationDriver + NavigationStateMachine to the target
- Prints every request/reply exchange, discovered obstacles and the result
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# ---------------------------------------------------------------------------
# Ensure src/ is on sys.path when running as a script
# ---------------------------------------------------------------------------

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# ---------------------------------------------------------------------------
# Imports from the project
# ---------------------------------------------------------------------------

from bot_link import DriverConfig, NavigationDriver  # type: ignore[import]
from bot_link.testing.fakes import FakeBotLink, FakeVoxelWorld  # type: ignore[import]
from monitoring.logging_config import configure_logging  # type: ignore[import]
from navigation import Cell, NavigationStateMachine, NavigatorConfig  # type: ignore[import]


def _print_header(title: str) -> None:
    print("\n" + "=" * 80)
    print(title)
    print("=" * 80)


def run(target: Cell, wall_x: int | None, tolerance: int) -> int:
    start = Cell(0, 64, 0)
    world = FakeVoxelWorld(start)
    if wall_x is not None:
        world.add_wall(Cell(wall_x, 64, z) for z in range(-2, 3))

    _print_header(f"Navigating {tuple(start)} -> {tuple(target)} (wall_x={wall_x})")

    machine = NavigationStateMachine(NavigatorConfig(arrival_tolerance=tolerance))
    machine.set_target(target)
    driver = NavigationDriver(machine, FakeBotLink(world), DriverConfig(poll_interval_s=0.0))
    result = driver.run()

    _print_header("Exchanges")
    for rec in driver.tracer.get_records():
        print(f"  [{rec.turn:4d}] {rec.request} -> {rec.reply}  ({rec.state_before} -> {rec.state_after})")

    _print_header("Result")
    print("outcome:        ", result.outcome)
    print("turns:          ", result.turns)
    print("steps taken:    ", result.steps_taken)
    print("final position: ", world.agent)
    print("obstacles:      ", sorted(machine.obstacles))
    return result.exit_code


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Smoke test harness for the navigator")
    parser.add_argument("--target", nargs=3, type=int, default=[6, 64, 0], metavar=("X", "Y", "Z"))
    parser.add_argument("--wall-x", type=int, default=None, help="x of a 5-wide wall (default 3)")
    parser.add_argument("--no-wall", action="store_true", help="Navigate an empty world")
    parser.add_argument("--tolerance", type=int, default=0)
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args(argv)

    configure_logging(args.log_level, stream=sys.stderr)
    if args.no_wall:
        wall_x = None
    else:
        wall_x = args.wall_x if args.wall_x is not None else 3
    return run(Cell(*args.target), wall_x, args.tolerance)


if __name__ == "__main__":
    sys.exit(main())
