# src/cli/run_navigator.py
"""
Drive the navigator against an actuator speaking JSON lines on stdio.

The actuator process writes replies to our stdin and reads requests from
our stdout, so stdout carries nothing but protocol lines. Logs go to
stderr.

Exit codes:
    0  target reached
    1  navigator gave up (step budget or no path)
    2  transport error or driver turn limit
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import IO, List, Optional

from bot_link import LineBotLink, NavigationDriver
from env import NavigatorProfile, load_navigator_profile
from monitoring.bus import EventBus
from monitoring.logger import JsonFileLogger
from monitoring.logging_config import configure_logging
from navigation import Cell, NavigationStateMachine

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Navigate a voxel agent to a target over a JSON-lines actuator link.",
    )
    parser.add_argument(
        "--target",
        required=True,
        nargs=3,
        type=int,
        metavar=("X", "Y", "Z"),
        help="Target cell coordinates",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to navigator.yaml (defaults are used when omitted)",
    )
    parser.add_argument(
        "--profile",
        default=None,
        help="Profile name inside the config file (overrides its 'profile' key)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (DEBUG, INFO, WARNING, ERROR); overrides the profile",
    )
    parser.add_argument(
        "--events",
        default=None,
        help="Write structured navigation events as JSONL to this path",
    )
    return parser


def resolve_profile(args: argparse.Namespace) -> NavigatorProfile:
    if args.config is None and args.profile is None:
        return NavigatorProfile(name="builtin")
    return load_navigator_profile(args.config, profile=args.profile)


def main(
    argv: Optional[List[str]] = None,
    *,
    stdin: Optional[IO[str]] = None,
    stdout: Optional[IO[str]] = None,
) -> int:
    args = build_parser().parse_args(argv)

    profile = resolve_profile(args)
    level = args.log_level or profile.logging.level
    configure_logging(level, stream=sys.stderr)

    bus = EventBus()
    events_path = args.events or profile.logging.events_path
    sink = JsonFileLogger(Path(events_path), bus) if events_path else None

    machine = NavigationStateMachine(profile.navigator, bus=bus)
    machine.set_target(Cell(*args.target))

    link = LineBotLink(stdin or sys.stdin, stdout or sys.stdout)
    driver = NavigationDriver(machine, link, profile.driver, bus=bus)

    log.info("Starting navigation with profile %r", profile.name)
    try:
        result = driver.run()
    finally:
        if sink is not None:
            sink.close()

    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
