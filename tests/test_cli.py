# tests/test_cli.py
"""
CLI tests for cli.run_navigator, with the actuator simulated through
in-memory streams.
"""

from __future__ import annotations

import io
import json
from pathlib import Path

import pytest
import yaml

from cli.run_navigator import build_parser, main, resolve_profile


def fast_config(tmp_path: Path, **navigator) -> Path:
    path = tmp_path / "navigator.yaml"
    data = {
        "profile": "test",
        "profiles": {
            "test": {
                "navigator": navigator,
                "driver": {"poll_interval_s": 0.0},
            }
        },
    }
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


def test_reaches_target_over_stdio() -> None:
    stdin = io.StringIO(
        '{"type":"position","x":0,"y":64,"z":0}\n'
        '{"action":"step","ok":true}\n'
    )
    stdout = io.StringIO()

    code = main(["--target", "3", "64", "0"], stdin=stdin, stdout=stdout)

    assert code == 0
    assert [json.loads(line) for line in stdout.getvalue().splitlines()] == [
        {"action": "position"},
        {"action": "step", "dir": "east"},
    ]


def test_step_budget_exit_code(tmp_path: Path) -> None:
    config = fast_config(tmp_path, max_steps=1, arrival_tolerance=0)
    stdin = io.StringIO(
        '{"type":"position","x":0,"y":64,"z":0}\n'
        '{"action":"step","ok":true}\n'
    )
    stdout = io.StringIO()

    code = main(
        ["--target", "5", "64", "0", "--config", str(config)],
        stdin=stdin,
        stdout=stdout,
    )

    assert code == 1
    assert len(stdout.getvalue().splitlines()) == 2


def test_actuator_hangs_up(tmp_path: Path) -> None:
    config = fast_config(tmp_path)

    code = main(
        ["--target", "5", "64", "0", "--config", str(config)],
        stdin=io.StringIO(""),
        stdout=io.StringIO(),
    )

    assert code == 2


def test_events_file_written(tmp_path: Path) -> None:
    config = fast_config(tmp_path)
    events = tmp_path / "out" / "events.log"
    stdin = io.StringIO('{"status":"ok","x":1,"y":64,"z":1}\n')

    code = main(
        ["--target", "0", "64", "0", "--config", str(config), "--events", str(events)],
        stdin=stdin,
        stdout=io.StringIO(),
    )

    assert code == 0
    kinds = [json.loads(line)["event_type"] for line in events.read_text(encoding="utf-8").splitlines()]
    assert kinds[0] == "TARGET_SET"
    assert "NAV_FINISHED" in kinds


def test_builtin_profile_without_config() -> None:
    args = build_parser().parse_args(["--target", "1", "2", "3"])

    profile = resolve_profile(args)

    assert profile.name == "builtin"
    assert profile.navigator.arrival_tolerance == 2


def test_target_requires_three_integers() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--target", "1", "2"])
